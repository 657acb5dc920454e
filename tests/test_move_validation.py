#!/usr/bin/env python3
"""
Tests for row/column move validation

Each rejected move must carry the blocked_by tag of the first failing
check, and validation must never touch the document.
"""

import pytest

from _table_move_helpers import build_mover

from table_move import (
    BLOCKED_EXTERNAL_MERGE,
    BLOCKED_HEADER,
    BLOCKED_MERGE_CONFLICT,
    BLOCKED_OUT_OF_BOUNDS,
    BLOCKED_SAME_POSITION,
    MoveValidationResult,
)

PLAIN_TABLE = [['A0', 'B0'], ['A1', 'B1'], ['A2', 'B2']]
ROWSPAN_TABLE = [[('A', 2, 1), 'B1'], ['B2'], ['A3', 'B3']]
SHADOW_ROW_TABLE = [['A0', 'X0'], [('B', 2, 1), 'X1'], ['X2'], ['A3', 'X3']]
COLSPAN_TABLE = [[('AB', 1, 2), 'C1'], ['A2', 'B2', 'C2']]
OFFSET_COLSPAN_TABLE = [['X', ('AB', 1, 2), 'C1'], ['X2', 'A2', 'B2', 'C2']]


class TestRowValidation:
    def test_valid_move(self):
        result = build_mover(PLAIN_TABLE).validate_row_move(0, 2)
        assert result.can_move
        assert result.reason is None
        assert result.blocked_by is None

    def test_same_position(self):
        result = build_mover(PLAIN_TABLE).validate_row_move(1, 1)
        assert not result.can_move
        assert result.blocked_by == BLOCKED_SAME_POSITION

    @pytest.mark.parametrize("from_index,to_index", [(3, 0), (0, 3), (-1, 0), (0, -1), (10, 10)])
    def test_out_of_bounds(self, from_index, to_index):
        result = build_mover(PLAIN_TABLE).validate_row_move(from_index, to_index)
        assert not result.can_move
        assert result.blocked_by == BLOCKED_OUT_OF_BOUNDS

    def test_header_source(self):
        mover = build_mover(head=[['H1', 'H2']], body=[['A1', 'B1']])
        result = mover.validate_row_move(0, 1)
        assert result.blocked_by == BLOCKED_HEADER
        assert result.reason == "Header rows cannot be moved"

    def test_header_destination(self):
        mover = build_mover(head=[['H1', 'H2']], body=[['A1', 'B1'], ['A2', 'B2']])
        result = mover.validate_row_move(2, 0)
        assert result.blocked_by == BLOCKED_HEADER
        assert result.reason == "Cannot move row to header section"

    def test_header_check_precedes_merge_checks(self):
        mover = build_mover(head=[[('H', 2, 1), 'H1'], ['H2']], body=[['A', 'B']])
        # row 1 is both a header row and a rowspan shadow
        assert mover.validate_row_move(1, 2).blocked_by == BLOCKED_HEADER

    def test_source_external_merge(self):
        result = build_mover(ROWSPAN_TABLE).validate_row_move(1, 2)
        assert result.blocked_by == BLOCKED_EXTERNAL_MERGE
        assert result.reason.startswith("Source row")

    def test_destination_external_merge(self):
        result = build_mover(SHADOW_ROW_TABLE).validate_row_move(0, 2)
        assert result.blocked_by == BLOCKED_EXTERNAL_MERGE
        assert result.reason.startswith("Destination position")

    def test_merge_conflict_on_path(self):
        result = build_mover(SHADOW_ROW_TABLE).validate_row_move(3, 1)
        assert result.blocked_by == BLOCKED_MERGE_CONFLICT

    def test_rowspan_origin_cannot_jump_over_its_shadow(self):
        result = build_mover(ROWSPAN_TABLE).validate_row_move(0, 2)
        assert result.blocked_by == BLOCKED_MERGE_CONFLICT

    def test_validation_does_not_mutate(self):
        mover = build_mover(SHADOW_ROW_TABLE)
        before = mover.document.to_string()
        for from_index in range(4):
            for to_index in range(4):
                mover.validate_row_move(from_index, to_index)
        assert mover.document.to_string() == before


class TestColumnValidation:
    def test_valid_move(self):
        assert build_mover(PLAIN_TABLE).validate_column_move(0, 1).can_move

    def test_same_position(self):
        result = build_mover(PLAIN_TABLE).validate_column_move(0, 0)
        assert result.blocked_by == BLOCKED_SAME_POSITION

    def test_out_of_bounds(self):
        result = build_mover(PLAIN_TABLE).validate_column_move(0, 2)
        assert result.blocked_by == BLOCKED_OUT_OF_BOUNDS

    def test_no_header_concept_for_columns(self):
        mover = build_mover(head=[['H1', 'H2']], body=[['A1', 'B1']])
        assert mover.validate_column_move(0, 1).can_move

    def test_shadow_column_source(self):
        result = build_mover(COLSPAN_TABLE).validate_column_move(1, 2)
        assert result.blocked_by == BLOCKED_EXTERNAL_MERGE
        assert result.reason.startswith("Source column")

    def test_shadow_column_destination(self):
        result = build_mover([[('AB', 1, 2)], ['A2', 'B2']]).validate_column_move(0, 1)
        assert result.blocked_by == BLOCKED_EXTERNAL_MERGE
        assert result.reason.startswith("Destination position")

    def test_merge_conflict_on_path(self):
        result = build_mover(OFFSET_COLSPAN_TABLE).validate_column_move(3, 1)
        assert result.blocked_by == BLOCKED_MERGE_CONFLICT


class TestCanMove:
    def test_can_move_row_without_destination(self):
        mover = build_mover(head=[['H', 'H']], body=ROWSPAN_TABLE)

        assert mover.can_move_row(0).blocked_by == BLOCKED_HEADER
        assert mover.can_move_row(1).can_move
        assert mover.can_move_row(2).blocked_by == BLOCKED_EXTERNAL_MERGE
        assert mover.can_move_row(9).blocked_by == BLOCKED_OUT_OF_BOUNDS

    def test_can_move_row_with_destination(self):
        mover = build_mover(PLAIN_TABLE)
        assert mover.can_move_row(0, to=2).can_move
        assert mover.can_move_row(0, to=0).blocked_by == BLOCKED_SAME_POSITION

    def test_can_move_column(self):
        mover = build_mover(COLSPAN_TABLE)

        assert mover.can_move_column(0).can_move
        assert mover.can_move_column(1).blocked_by == BLOCKED_EXTERNAL_MERGE
        assert mover.can_move_column(1, to=2).blocked_by == BLOCKED_EXTERNAL_MERGE

    def test_result_truthiness_and_dict(self):
        mover = build_mover(PLAIN_TABLE)
        ok = mover.can_move_row(0)
        rejected = mover.can_move_row(0, to=0)

        assert ok and not rejected
        assert ok.to_dict() == {'canMove': True}
        assert rejected.to_dict() == {
            'canMove': False,
            'reason': "Source and destination positions are the same",
            'blockedBy': BLOCKED_SAME_POSITION,
        }

    def test_validate_move_dispatch(self):
        mover = build_mover(PLAIN_TABLE)
        assert isinstance(mover.validate_move('row', 0, 1), MoveValidationResult)
        with pytest.raises(ValueError):
            mover.validate_move('diagonal', 0, 1)


class TestDropPositions:
    def test_plain_rows(self):
        assert build_mover(PLAIN_TABLE).get_valid_row_drop_positions(0) == [1, 2]

    def test_rows_exclude_header(self):
        mover = build_mover(head=[['H']], body=[['R1'], ['R2'], ['R3']])
        assert mover.get_valid_row_drop_positions(1) == [2, 3]
        assert mover.get_valid_row_drop_positions(0) == []

    def test_rows_around_merge(self):
        mover = build_mover(SHADOW_ROW_TABLE)
        assert mover.get_valid_row_drop_positions(0) == [1, 3]
        assert mover.get_valid_row_drop_positions(3) == [0]
        assert mover.get_valid_row_drop_positions(2) == []

    def test_columns_around_merge(self):
        mover = build_mover(OFFSET_COLSPAN_TABLE)
        assert mover.get_valid_column_drop_positions(0) == [1, 3]
        assert mover.get_valid_column_drop_positions(3) == [0]
        assert mover.get_valid_column_drop_positions(2) == []
