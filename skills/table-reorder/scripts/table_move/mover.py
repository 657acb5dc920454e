"""Table mover composed from focused mixins."""

from typing import Optional

from .common import MoveValidationResult, TableSchema, verbose_from_env
from .document import TableDocument
from .filled_matrix import FilledMatrixMixin
from .merge_analysis import MergeAnalysisMixin
from .move_actions import MoveExecutionMixin
from .move_validation import MoveValidationMixin


class TableMover(FilledMatrixMixin, MergeAnalysisMixin, MoveValidationMixin, MoveExecutionMixin):
    """
    Span-aware row/column reordering over a host TableDocument.

    Nothing is cached between calls: every query rebuilds the filled
    matrix from the current tree, since any edit invalidates span geometry.

    Args:
        document: Host document owning the table tree
        verbose: Print progress lines (default: TABLE_REORDER_VERBOSE env)
        schema: Tag/attribute names (default: the document's schema)
    """

    def __init__(self, document: TableDocument, verbose: Optional[bool] = None,
                 schema: Optional[TableSchema] = None):
        self.document = document
        self.schema = schema or document.schema
        self.verbose = verbose_from_env() if verbose is None else verbose

        # Validation result of the most recent move_row()/move_column() call
        self.last_result: Optional[MoveValidationResult] = None
