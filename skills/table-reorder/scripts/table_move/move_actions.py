"""
Row and column move execution.

Each move is validated first and then applied as one document transaction
(remove + reinsert), so no intermediate tree state reaches normalizers or
listeners.
"""

from typing import List, Optional, Tuple

from .common import MatrixCell, Path


class MoveExecutionMixin:
    def move_row(self, from_index: int, to_index: int, at: Optional[Path] = None) -> bool:
        """
        Move row ``from_index`` to ``to_index``.

        Returns False, leaving the tree untouched, when validation fails;
        the reason is kept in ``self.last_result``.
        """
        validation = self.validate_row_move(from_index, to_index, at)
        self.last_result = validation
        if not validation.can_move:
            if self.verbose:
                print(f"  [Row move] Rejected {from_index} -> {to_index}: {validation.reason}")
            return False
        return self._execute_row_move(from_index, to_index, at)

    def move_column(self, from_index: int, to_index: int, at: Optional[Path] = None) -> bool:
        """Move grid column ``from_index`` to ``to_index``; same contract as move_row."""
        validation = self.validate_column_move(from_index, to_index, at)
        self.last_result = validation
        if not validation.can_move:
            if self.verbose:
                print(f"  [Column move] Rejected {from_index} -> {to_index}: {validation.reason}")
            return False
        return self._execute_column_move(from_index, to_index, at)

    def _execute_row_move(self, from_index: int, to_index: int, at: Optional[Path] = None) -> bool:
        """Apply a validated row move (no re-validation)."""
        table = self._table_entry(at)
        if table is None:
            return False
        table_elem, table_path = table

        rows = self._table_rows(table_elem, table_path)
        if from_index >= len(rows) or to_index >= len(rows):
            return False

        document = self.document
        with document.transaction():
            source_row, source_path = rows[from_index]
            document.remove_node(source_path)

            remaining = self._table_rows(table_elem, table_path)
            if not remaining:
                insert_path = source_path
            elif to_index >= len(remaining):
                insert_path = document.next_path(remaining[-1][1])
            else:
                adjusted = to_index - 1 if from_index < to_index else to_index
                insert_path = remaining[adjusted][1]

            document.insert_node(source_row, insert_path)

        if self.verbose:
            print(f"  [Row move] Moved row {from_index} -> {to_index} (inserted at {insert_path})")
        return True

    def _insertion_anchor(self, row: List[Optional[MatrixCell]], source: MatrixCell,
                          to_index: int) -> Optional[MatrixCell]:
        """
        First cell rooted in this row at grid column ``to_index`` or later.

        Only origin positions count: a shadow of a rowspan from above has
        no node in this row to insert before.
        """
        for col in range(to_index, len(row)):
            slot = row[col]
            if slot is None or not slot.is_origin:
                continue
            if slot.element is source.element:
                continue
            return slot
        return None

    def _execute_column_move(self, from_index: int, to_index: int, at: Optional[Path] = None) -> bool:
        """
        Apply a validated column move (no re-validation).

        Works row by row on the pre-move filled matrix. Positions at
        ``from_index`` that are shadows (ltr > 1 or ttb > 1) are skipped:
        their cell node lives in another column or row and is moved, if at
        all, when its origin is visited.
        """
        if self._table_entry(at) is None:
            return False

        matrix = self.filled_matrix(at)
        if not matrix or from_index >= matrix.width or to_index >= matrix.width:
            return False

        append = from_index < to_index and to_index >= matrix.width - 1
        document = self.document
        moved: List[Tuple[int, Path]] = []

        with document.transaction():
            for row_index, row in enumerate(matrix):
                source = row[from_index]
                if source is None:
                    continue
                context = source.context
                if context.ltr > 1 or context.ttb > 1:
                    continue

                row_path = document.parent_path(source.path)
                source_position = source.path[-1]
                anchor = None if append else self._insertion_anchor(row, source, to_index)

                cell_elem = document.remove_node(source.path)
                if anchor is None:
                    insert_path = row_path + (document.child_count(row_path),)
                else:
                    anchor_position = anchor.path[-1]
                    if anchor_position > source_position:
                        anchor_position -= 1
                    insert_path = row_path + (anchor_position,)
                document.insert_node(cell_elem, insert_path)
                moved.append((row_index, insert_path))

        if self.verbose:
            print(f"  [Column move] Moved column {from_index} -> {to_index} "
                  f"({len(moved)} cell(s) relocated in {len(matrix)} row(s))")
        return True
