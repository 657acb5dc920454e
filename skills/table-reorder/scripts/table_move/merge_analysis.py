"""Merge classification per row/column and the movability predicates built on it."""

from typing import List, Optional

from .common import (
    AXIS_ROW,
    SECTION_HEAD,
    FilledMatrix,
    MergeInfo,
    Path,
)


class MergeAnalysisMixin:
    def row_merge_info(self, row_index: int, at: Optional[Path] = None,
                       matrix: Optional[FilledMatrix] = None) -> MergeInfo:
        """
        Classify the merged cells touching one row.

        A rowspan that starts in this row (ttb == 1) is internal; a rowspan
        reaching this row from above is external and blocks every other row
        it covers. A colspan never crosses rows, so it is always internal.

        Args:
            row_index: Grid row to analyze
            at: Location of the table
            matrix: Prebuilt filled matrix (built from ``at`` when omitted)
        """
        if matrix is None:
            matrix = self.filled_matrix(at)
        info = MergeInfo()
        if row_index < 0 or row_index >= len(matrix):
            return info

        seen = set()
        blocked = set()
        for slot in matrix[row_index]:
            if slot is None:
                continue
            ctx = slot.context
            rows_spanned = ctx.ttb + ctx.btt - 1
            cols_spanned = ctx.ltr + ctx.rtl - 1

            if rows_spanned > 1:
                if ctx.ttb == 1:
                    info.has_internal_merges = True
                else:
                    info.has_external_merges = True
                    blocked.update(range(row_index - ctx.ttb + 1, row_index + ctx.btt))
            if cols_spanned > 1:
                info.has_internal_merges = True

            if (rows_spanned > 1 or cols_spanned > 1) and id(slot.element) not in seen:
                seen.add(id(slot.element))
                info.merged_cells.append(slot)

        blocked.discard(row_index)
        info.blocked_indices = sorted(blocked)
        return info

    def column_merge_info(self, column_index: int, at: Optional[Path] = None,
                          matrix: Optional[FilledMatrix] = None) -> MergeInfo:
        """Mirror of row_merge_info: colspans classified by ltr, rowspans always internal."""
        if matrix is None:
            matrix = self.filled_matrix(at)
        info = MergeInfo()
        if column_index < 0 or column_index >= matrix.width:
            return info

        seen = set()
        blocked = set()
        for row in matrix:
            slot = row[column_index]
            if slot is None:
                continue
            ctx = slot.context
            rows_spanned = ctx.ttb + ctx.btt - 1
            cols_spanned = ctx.ltr + ctx.rtl - 1

            if cols_spanned > 1:
                if ctx.ltr == 1:
                    info.has_internal_merges = True
                else:
                    info.has_external_merges = True
                    blocked.update(range(column_index - ctx.ltr + 1, column_index + ctx.rtl))
            if rows_spanned > 1:
                info.has_internal_merges = True

            if (rows_spanned > 1 or cols_spanned > 1) and id(slot.element) not in seen:
                seen.add(id(slot.element))
                info.merged_cells.append(slot)

        blocked.discard(column_index)
        info.blocked_indices = sorted(blocked)
        return info

    def is_header_row(self, row_index: int, at: Optional[Path] = None) -> bool:
        rows = self.table_rows(at)
        if row_index < 0 or row_index >= len(rows):
            return False
        _, row_path = rows[row_index]
        return self.document.section_of(row_path) == SECTION_HEAD

    def is_row_movable(self, row_index: int, at: Optional[Path] = None,
                       matrix: Optional[FilledMatrix] = None) -> bool:
        if self.is_header_row(row_index, at):
            return False
        return not self.row_merge_info(row_index, at, matrix=matrix).has_external_merges

    def is_column_movable(self, column_index: int, at: Optional[Path] = None,
                          matrix: Optional[FilledMatrix] = None) -> bool:
        return not self.column_merge_info(column_index, at, matrix=matrix).has_external_merges

    def can_move_around_merged_cells(self, from_index: int, to_index: int, axis: str,
                                     at: Optional[Path] = None,
                                     matrix: Optional[FilledMatrix] = None) -> bool:
        """
        Check that no merge on the move path would be severed from its origin.

        Every index between ``from_index`` and ``to_index`` (``to_index``
        included, ``from_index`` excluded) is analyzed; an external merge
        there whose blocked indices contain either end rejects the move.
        """
        if matrix is None:
            matrix = self.filled_matrix(at)
        merge_info = self.row_merge_info if axis == AXIS_ROW else self.column_merge_info

        for index in range(min(from_index, to_index), max(from_index, to_index) + 1):
            if index == from_index:
                continue
            info = merge_info(index, at, matrix=matrix)
            if info.has_external_merges and (
                    from_index in info.blocked_indices or to_index in info.blocked_indices):
                return False
        return True

    def get_movable_rows(self, at: Optional[Path] = None) -> List[int]:
        matrix = self.filled_matrix(at)
        return [i for i in range(len(matrix)) if self.is_row_movable(i, at, matrix=matrix)]

    def get_movable_columns(self, at: Optional[Path] = None) -> List[int]:
        matrix = self.filled_matrix(at)
        return [i for i in range(matrix.width) if self.is_column_movable(i, at, matrix=matrix)]
