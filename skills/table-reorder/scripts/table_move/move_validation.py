"""Row/column move validation returning structured results instead of raising."""

from typing import List, Optional

from .common import (
    AXIS_COLUMN,
    AXIS_ROW,
    BLOCKED_EXTERNAL_MERGE,
    BLOCKED_HEADER,
    BLOCKED_MERGE_CONFLICT,
    BLOCKED_OUT_OF_BOUNDS,
    BLOCKED_SAME_POSITION,
    MoveValidationResult,
    Path,
    allowed,
    blocked,
)


class MoveValidationMixin:
    def _check_bounds(self, indices, size: int, axis: str) -> Optional[MoveValidationResult]:
        for index in indices:
            if index < 0 or index >= size:
                return blocked(
                    BLOCKED_OUT_OF_BOUNDS,
                    f"{axis.capitalize()} index {index} is out of bounds (table has {size} {axis}s)")
        return None

    def validate_row_move(self, from_index: int, to_index: int,
                          at: Optional[Path] = None) -> MoveValidationResult:
        """
        Decide whether row ``from_index`` may move to ``to_index``.

        Checks run in order and the first failure wins: bounds, same
        position, header source, header destination, source external merge,
        destination external merge, merge conflict along the path.
        """
        matrix = self.filled_matrix(at)
        out_of_bounds = self._check_bounds((from_index, to_index), len(matrix), AXIS_ROW)
        if out_of_bounds is not None:
            return out_of_bounds

        if from_index == to_index:
            return blocked(BLOCKED_SAME_POSITION, "Source and destination positions are the same")

        if self.is_header_row(from_index, at):
            return blocked(BLOCKED_HEADER, "Header rows cannot be moved")

        if self.is_header_row(to_index, at):
            return blocked(BLOCKED_HEADER, "Cannot move row to header section")

        if self.row_merge_info(from_index, at, matrix=matrix).has_external_merges:
            return blocked(BLOCKED_EXTERNAL_MERGE,
                           "Source row has external merged cells that prevent movement")

        if self.row_merge_info(to_index, at, matrix=matrix).has_external_merges:
            return blocked(BLOCKED_EXTERNAL_MERGE,
                           "Destination position has external merged cells that prevent movement")

        if not self.can_move_around_merged_cells(from_index, to_index, AXIS_ROW, at, matrix=matrix):
            return blocked(BLOCKED_MERGE_CONFLICT, "Move path conflicts with merged cells")

        return allowed()

    def validate_column_move(self, from_index: int, to_index: int,
                             at: Optional[Path] = None) -> MoveValidationResult:
        """Same decision sequence as validate_row_move, without header checks."""
        matrix = self.filled_matrix(at)
        out_of_bounds = self._check_bounds((from_index, to_index), matrix.width, AXIS_COLUMN)
        if out_of_bounds is not None:
            return out_of_bounds

        if from_index == to_index:
            return blocked(BLOCKED_SAME_POSITION, "Source and destination positions are the same")

        if self.column_merge_info(from_index, at, matrix=matrix).has_external_merges:
            return blocked(BLOCKED_EXTERNAL_MERGE,
                           "Source column has external merged cells that prevent movement")

        if self.column_merge_info(to_index, at, matrix=matrix).has_external_merges:
            return blocked(BLOCKED_EXTERNAL_MERGE,
                           "Destination position has external merged cells that prevent movement")

        if not self.can_move_around_merged_cells(from_index, to_index, AXIS_COLUMN, at, matrix=matrix):
            return blocked(BLOCKED_MERGE_CONFLICT, "Move path conflicts with merged cells")

        return allowed()

    def can_move_row(self, row_index: int, at: Optional[Path] = None,
                     to: Optional[int] = None) -> MoveValidationResult:
        """
        Check whether a row can be dragged at all, or to ``to`` when given.

        Without a destination only the unconditional checks run: bounds,
        header membership and external merges on the row itself.
        """
        if to is not None:
            return self.validate_row_move(row_index, to, at)

        matrix = self.filled_matrix(at)
        out_of_bounds = self._check_bounds((row_index,), len(matrix), AXIS_ROW)
        if out_of_bounds is not None:
            return out_of_bounds

        if self.is_header_row(row_index, at):
            return blocked(BLOCKED_HEADER, "Header rows cannot be moved")

        if self.row_merge_info(row_index, at, matrix=matrix).has_external_merges:
            return blocked(BLOCKED_EXTERNAL_MERGE,
                           "Row has external merged cells that prevent movement")

        return allowed()

    def can_move_column(self, column_index: int, at: Optional[Path] = None,
                        to: Optional[int] = None) -> MoveValidationResult:
        if to is not None:
            return self.validate_column_move(column_index, to, at)

        matrix = self.filled_matrix(at)
        out_of_bounds = self._check_bounds((column_index,), matrix.width, AXIS_COLUMN)
        if out_of_bounds is not None:
            return out_of_bounds

        if self.column_merge_info(column_index, at, matrix=matrix).has_external_merges:
            return blocked(BLOCKED_EXTERNAL_MERGE,
                           "Column has external merged cells that prevent movement")

        return allowed()

    def get_valid_row_drop_positions(self, source_index: int,
                                     at: Optional[Path] = None) -> List[int]:
        if not self.can_move_row(source_index, at):
            return []
        row_total = len(self.filled_matrix(at))
        return [i for i in range(row_total)
                if i != source_index and self.validate_row_move(source_index, i, at).can_move]

    def get_valid_column_drop_positions(self, source_index: int,
                                        at: Optional[Path] = None) -> List[int]:
        if not self.can_move_column(source_index, at):
            return []
        column_total = self.filled_matrix(at).width
        return [i for i in range(column_total)
                if i != source_index and self.validate_column_move(source_index, i, at).can_move]

    def validate_move(self, axis: str, from_index: int, to_index: int,
                      at: Optional[Path] = None) -> MoveValidationResult:
        if axis == AXIS_ROW:
            return self.validate_row_move(from_index, to_index, at)
        if axis == AXIS_COLUMN:
            return self.validate_column_move(from_index, to_index, at)
        raise ValueError(f"Unknown axis: {axis!r} (expected 'row' or 'column')")
