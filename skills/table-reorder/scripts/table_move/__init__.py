"""
ABOUTME: Span-aware row/column reordering for table document trees
"""

from typing import List, Optional

from .common import (
    AXIS_COLUMN,
    AXIS_ROW,
    BLOCKED_EXTERNAL_MERGE,
    BLOCKED_HEADER,
    BLOCKED_MERGE_CONFLICT,
    BLOCKED_OUT_OF_BOUNDS,
    BLOCKED_SAME_POSITION,
    CellContext,
    FilledMatrix,
    MatrixCell,
    MergeInfo,
    MoveIntent,
    MoveValidationResult,
    TableSchema,
)
from .document import EditBatch, EditOperation, TableDocument, clamp_span_attributes
from .drag_session import DragSession
from .mover import TableMover


def can_move_row(document: TableDocument, row_index: int, at=None,
                 to: Optional[int] = None) -> MoveValidationResult:
    return TableMover(document).can_move_row(row_index, at=at, to=to)


def can_move_column(document: TableDocument, column_index: int, at=None,
                    to: Optional[int] = None) -> MoveValidationResult:
    return TableMover(document).can_move_column(column_index, at=at, to=to)


def move_row(document: TableDocument, from_index: int, to_index: int, at=None) -> bool:
    return TableMover(document).move_row(from_index, to_index, at=at)


def move_column(document: TableDocument, from_index: int, to_index: int, at=None) -> bool:
    return TableMover(document).move_column(from_index, to_index, at=at)


def get_valid_row_drop_positions(document: TableDocument, source_index: int, at=None) -> List[int]:
    return TableMover(document).get_valid_row_drop_positions(source_index, at=at)


def get_valid_column_drop_positions(document: TableDocument, source_index: int, at=None) -> List[int]:
    return TableMover(document).get_valid_column_drop_positions(source_index, at=at)


__all__ = [
    'AXIS_COLUMN',
    'AXIS_ROW',
    'BLOCKED_EXTERNAL_MERGE',
    'BLOCKED_HEADER',
    'BLOCKED_MERGE_CONFLICT',
    'BLOCKED_OUT_OF_BOUNDS',
    'BLOCKED_SAME_POSITION',
    'CellContext',
    'DragSession',
    'EditBatch',
    'EditOperation',
    'FilledMatrix',
    'MatrixCell',
    'MergeInfo',
    'MoveIntent',
    'MoveValidationResult',
    'TableDocument',
    'TableMover',
    'TableSchema',
    'can_move_column',
    'can_move_row',
    'clamp_span_attributes',
    'get_valid_column_drop_positions',
    'get_valid_row_drop_positions',
    'move_column',
    'move_row',
]
