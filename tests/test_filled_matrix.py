#!/usr/bin/env python3
"""
Tests for the filled matrix builder

Tests include:
- Occupancy contexts of plain, row-spanned and column-spanned cells
- Degenerate span clamping and overrunning rowspans
- Uncovered positions reported instead of invented
- Table lookup by location (nested tables, multiple tables, bad paths)
"""

from _table_move_helpers import (
    TableDocument,
    TableMover,
    build_mover,
    contexts,
    grid_texts,
)


class TestPlainTables:
    def test_plain_grid_contexts(self):
        mover = build_mover([['A1', 'B1', 'C1'], ['A2', 'B2', 'C2']])
        matrix = mover.filled_matrix()

        assert len(matrix) == 2
        assert matrix.width == 3
        assert matrix.is_complete
        for row_index in range(2):
            assert contexts(matrix, row_index) == [(1, 1, 1, 1)] * 3
        assert all(slot.is_origin for row in matrix for slot in row)

    def test_paths_address_tree_nodes(self):
        """doc > table(0) > tbody(0) > tr(1) > td(2)"""
        mover = build_mover([['A1', 'B1', 'C1'], ['A2', 'B2', 'C2']])
        slot = mover.filled_matrix()[1][2]

        assert slot.element.text == 'C2'
        assert slot.path == (0, 0, 1, 2)
        assert mover.document.node(slot.path) is slot.element

    def test_row_and_column_count(self):
        mover = build_mover([['A1', 'B1'], ['A2', 'B2'], ['A3', 'B3']])
        assert mover.row_count() == 3
        assert mover.column_count() == 2


class TestSpans:
    def test_rowspan_shadow_below_origin(self):
        mover = build_mover([[('A', 2, 1), 'B1', 'C1'], ['B2', 'C2']])
        matrix = mover.filled_matrix()

        assert grid_texts(mover.document) == [['A', 'B1', 'C1'], ['A', 'B2', 'C2']]
        assert contexts(matrix, 0)[0] == (1, 2, 1, 1)
        assert contexts(matrix, 1)[0] == (2, 1, 1, 1)
        assert matrix[0][0].element is matrix[1][0].element
        assert not matrix[1][0].is_origin

    def test_colspan_shadow_right_of_origin(self):
        mover = build_mover([[('AB', 1, 2), 'C1'], ['A2', 'B2', 'C2']])
        matrix = mover.filled_matrix()

        assert matrix.width == 3
        assert grid_texts(mover.document)[0] == ['AB', 'AB', 'C1']
        assert contexts(matrix, 0) == [(1, 1, 1, 2), (1, 1, 2, 1), (1, 1, 1, 1)]
        assert matrix[0][1].path == matrix[0][0].path

    def test_block_span_covers_rectangle(self):
        mover = build_mover([[('X', 2, 2), 'C1'], ['C2']])
        matrix = mover.filled_matrix()

        assert grid_texts(mover.document) == [['X', 'X', 'C1'], ['X', 'X', 'C2']]
        assert contexts(matrix, 0)[:2] == [(1, 2, 1, 2), (1, 2, 2, 1)]
        assert contexts(matrix, 1)[:2] == [(2, 1, 1, 2), (2, 1, 2, 1)]
        assert matrix.is_complete

    def test_rowspan_in_middle_column(self):
        mover = build_mover([['A1', ('B', 3, 1), 'C1'], ['A2', 'C2'], ['A3', 'C3']])
        assert grid_texts(mover.document) == [
            ['A1', 'B', 'C1'],
            ['A2', 'B', 'C2'],
            ['A3', 'B', 'C3'],
        ]
        matrix = mover.filled_matrix()
        assert [matrix[r][1].context.ttb for r in range(3)] == [1, 2, 3]
        assert [matrix[r][1].context.btt for r in range(3)] == [3, 2, 1]

    def test_rowspan_across_sections(self):
        mover = build_mover(head=[[('H', 2, 1), 'H1']], body=[['B2'], ['A3', 'B3']])
        assert grid_texts(mover.document) == [['H', 'H1'], ['H', 'B2'], ['A3', 'B3']]


class TestMalformedGeometry:
    def test_non_positive_and_invalid_spans_clamp_to_one(self):
        document = TableDocument.from_string(
            '<doc><table><tbody>'
            '<tr><td rowspan="0">A1</td><td colspan="-2">B1</td></tr>'
            '<tr><td colspan="abc">A2</td><td rowspan="">B2</td></tr>'
            '</tbody></table></doc>'
        )
        matrix = TableMover(document, verbose=False).filled_matrix()

        assert matrix.width == 2
        assert matrix.is_complete
        assert grid_texts(document) == [['A1', 'B1'], ['A2', 'B2']]

    def test_rowspan_past_last_row_is_clamped(self):
        mover = build_mover([[('A', 5, 1), 'B1'], ['B2']])
        matrix = mover.filled_matrix()

        assert len(matrix) == 2
        assert contexts(matrix, 0)[0] == (1, 2, 1, 1)
        assert contexts(matrix, 1)[0] == (2, 1, 1, 1)

    def test_short_row_reports_missing_positions(self, capsys):
        mover = build_mover([['A1', 'B1', 'C1'], ['A2']], verbose=True)
        matrix = mover.filled_matrix()

        assert matrix.width == 3
        assert all(len(row) == 3 for row in matrix)
        assert matrix[1][1] is None and matrix[1][2] is None
        assert matrix.missing == [(1, 1), (1, 2)]
        assert not matrix.is_complete
        assert "uncovered position" in capsys.readouterr().out

    def test_gap_before_trailing_carried_span(self):
        document = TableDocument.from_string(
            '<doc><table><tbody>'
            '<tr><td>A1</td><td rowspan="2">B</td></tr>'
            '<tr></tr>'
            '</tbody></table></doc>'
        )
        matrix = TableMover(document, verbose=False).filled_matrix()

        assert matrix.missing == [(1, 0)]
        assert matrix[1][1].element.text == 'B'
        assert matrix[1][1].context.ttb == 2


class TestTableLookup:
    def _two_tables(self):
        return TableDocument.from_string(
            '<doc>'
            '<table><tbody><tr><td>T0</td></tr></tbody></table>'
            '<table><tbody><tr><td>T1-A</td><td>T1-B</td></tr></tbody></table>'
            '</doc>'
        )

    def test_first_table_by_default(self):
        mover = TableMover(self._two_tables(), verbose=False)
        assert grid_texts(mover.document, at=None) == [['T0']]

    def test_location_selects_table(self):
        document = self._two_tables()
        assert grid_texts(document, at=(1,)) == [['T1-A', 'T1-B']]

    def test_location_inside_table_resolves_enclosing_table(self):
        document = self._two_tables()
        # doc > table(1) > tbody(0) > tr(0) > td(1)
        assert grid_texts(document, at=(1, 0, 0, 1)) == [['T1-A', 'T1-B']]

    def test_nested_table_rows_are_not_outer_rows(self):
        document = TableDocument.from_string(
            '<doc><table><tbody>'
            '<tr><td>A1<table><tbody><tr><td>inner</td></tr></tbody></table></td><td>B1</td></tr>'
            '<tr><td>A2</td><td>B2</td></tr>'
            '</tbody></table></doc>'
        )
        mover = TableMover(document, verbose=False)
        matrix = mover.filled_matrix()

        assert len(matrix) == 2
        assert matrix.width == 2
        # location inside the nested table resolves to the nested table
        inner = mover.filled_matrix(at=(0, 0, 0, 0, 0))
        assert len(inner) == 1
        assert inner[0][0].element.text == 'inner'

    def test_no_table_gives_empty_matrix(self):
        document = TableDocument.from_string('<doc><p>no table here</p></doc>')
        matrix = TableMover(document, verbose=False).filled_matrix()
        assert matrix == []
        assert matrix.width == 0

    def test_location_without_node_gives_empty_matrix(self):
        mover = TableMover(self._two_tables(), verbose=False)
        assert mover.filled_matrix(at=(7, 3)) == []

    def test_rows_directly_under_table(self):
        document = TableDocument.from_string(
            '<doc><table><tr><td>A1</td></tr><tr><td>A2</td></tr></table></doc>'
        )
        assert grid_texts(document) == [['A1'], ['A2']]
