"""Span-aware occupancy grid ("filled matrix") built from the row/cell tree."""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .common import (
    CellContext,
    FilledMatrix,
    MatrixCell,
    Path,
    local_tag,
    parse_span,
)


@dataclass
class _CarriedSpan:
    """Pending vertical span occupying one column of the rows below its origin"""
    element: object
    path: Path
    ttb: int        # ttb of the next row this span reaches
    rowspan: int
    ltr: int
    rtl: int

    def context(self) -> CellContext:
        return CellContext(ttb=self.ttb, btt=self.rowspan - self.ttb + 1,
                           ltr=self.ltr, rtl=self.rtl)


class FilledMatrixMixin:
    def _table_entry(self, at: Optional[Path] = None) -> Optional[Tuple[object, Path]]:
        """
        Locate the table addressed by ``at``.

        ``at`` inside a table resolves to the nearest enclosing table;
        otherwise the first table at or below ``at`` is used. A path that
        addresses no node yields None.
        """
        table_kinds = (self.schema.table,)
        try:
            if at is not None:
                enclosing = self.document.closest(at, table_kinds)
                if enclosing is not None:
                    return enclosing
            for entry in self.document.nodes(table_kinds, at=at):
                return entry
        except IndexError:
            if self.verbose:
                print(f"  [Warning] No node at location {tuple(at)}")
        return None

    def _table_rows(self, table_elem, table_path: Path) -> List[Tuple[object, Path]]:
        """
        Rows of a table in document order, across head/body/foot sections.

        Rows of nested tables are not included.
        """
        schema = self.schema
        sections = schema.sections
        rows = []
        for index, child in enumerate(table_elem):
            tag = local_tag(child)
            child_path = table_path + (index,)
            if tag == schema.row:
                rows.append((child, child_path))
            elif tag in sections:
                for row_index, row in enumerate(child):
                    if local_tag(row) == schema.row:
                        rows.append((row, child_path + (row_index,)))
        return rows

    def _row_cells(self, row_elem, row_path: Path) -> List[Tuple[object, Path]]:
        cell_tags = self.schema.cells
        return [(cell, row_path + (index,))
                for index, cell in enumerate(row_elem)
                if local_tag(cell) in cell_tags]

    def _cell_spans(self, cell_elem) -> Tuple[int, int]:
        """(rowspan, colspan) of a cell, degenerate values clamped to 1"""
        return (parse_span(cell_elem.get(self.schema.rowspan)),
                parse_span(cell_elem.get(self.schema.colspan)))

    def table_rows(self, at: Optional[Path] = None) -> List[Tuple[object, Path]]:
        table = self._table_entry(at)
        if table is None:
            return []
        return self._table_rows(*table)

    def filled_matrix(self, at: Optional[Path] = None) -> FilledMatrix:
        """
        Expand the table at ``at`` into a rectangular occupancy grid.

        Every position holds the MatrixCell of the cell covering it; a cell
        spanning several rows/columns appears at each covered position with
        its own CellContext. Positions that no cell covers are None and are
        listed in ``FilledMatrix.missing``.

        Returns an empty matrix when no table is found.
        """
        table = self._table_entry(at)
        if table is None:
            return FilledMatrix()

        rows = self._table_rows(*table)
        total_rows = len(rows)
        carry: Dict[int, _CarriedSpan] = {}
        row_slots: List[Dict[int, MatrixCell]] = []

        for row_index, (row_elem, row_path) in enumerate(rows):
            cells = self._row_cells(row_elem, row_path)
            slots: Dict[int, MatrixCell] = {}
            new_carry: Dict[int, _CarriedSpan] = {}
            next_cell = 0
            col = 0

            while next_cell < len(cells) or any(c >= col for c in carry):
                pending = carry.get(col)
                if pending is not None:
                    slots[col] = MatrixCell(pending.element, pending.path, pending.context())
                    col += 1
                    continue
                if col in slots or next_cell >= len(cells):
                    # claimed by a wider cell of this row, or a gap before
                    # a trailing carried span
                    col += 1
                    continue

                cell_elem, cell_path = cells[next_cell]
                next_cell += 1
                rowspan, colspan = self._cell_spans(cell_elem)
                rowspan = min(rowspan, total_rows - row_index)

                for offset in range(colspan):
                    target = col + offset
                    # a span carried from above keeps its slot
                    if target in carry or target in slots:
                        continue
                    slots[target] = MatrixCell(cell_elem, cell_path, CellContext(
                        ttb=1, btt=rowspan, ltr=offset + 1, rtl=colspan - offset))
                    if rowspan > 1:
                        new_carry[target] = _CarriedSpan(
                            cell_elem, cell_path, ttb=2, rowspan=rowspan,
                            ltr=offset + 1, rtl=colspan - offset)
                col += 1

            for c in list(carry):
                carry[c].ttb += 1
                if carry[c].ttb > carry[c].rowspan:
                    del carry[c]
            carry.update(new_carry)
            row_slots.append(slots)

        width = max((max(slots) + 1 for slots in row_slots if slots), default=0)
        matrix = FilledMatrix(width=width)
        for row_index, slots in enumerate(row_slots):
            row = []
            for col in range(width):
                slot = slots.get(col)
                if slot is None:
                    matrix.missing.append((row_index, col))
                row.append(slot)
            matrix.append(row)

        if matrix.missing and self.verbose:
            preview = ', '.join(f"({r},{c})" for r, c in matrix.missing[:5])
            more = '...' if len(matrix.missing) > 5 else ''
            print(f"  [Warning] Table grid has {len(matrix.missing)} uncovered position(s): {preview}{more}")

        return matrix

    def row_count(self, at: Optional[Path] = None) -> int:
        return len(self.filled_matrix(at))

    def column_count(self, at: Optional[Path] = None) -> int:
        return self.filled_matrix(at).width
