"""Headless drag state for row/column moves: source, hovered target and shifted indices."""

from typing import Callable, List, Optional

from .common import AXIS_COLUMN, AXIS_ROW, MoveIntent


class DragSession:
    """
    Tracks one drag gesture from start to drop.

    The session only holds transient intent; validation and execution are
    delegated to the TableMover, so the document is touched at most once,
    on drop.

    Args:
        mover: TableMover bound to the document being edited
        at: Location of the table
        on_move_start: Called as (axis, source_index) when a drag starts
        on_move: Called as (axis, from_index, to_index) after a successful move
        on_move_end: Called with the drop outcome (bool)
    """

    def __init__(self, mover, at=None,
                 on_move_start: Optional[Callable[[str, int], None]] = None,
                 on_move: Optional[Callable[[str, int, int], None]] = None,
                 on_move_end: Optional[Callable[[bool], None]] = None):
        self.mover = mover
        self.at = at
        self.on_move_start = on_move_start
        self.on_move = on_move
        self.on_move_end = on_move_end
        self._reset()

    def _reset(self):
        self.intent: Optional[MoveIntent] = None
        self.is_valid_target = False
        self.affected_indices: List[int] = []

    @property
    def is_dragging(self) -> bool:
        return self.intent is not None

    def start(self, axis: str, source_index: int) -> bool:
        """
        Begin dragging a row or column.

        Returns False (and starts nothing) when the source cannot move at all.
        """
        if axis not in (AXIS_ROW, AXIS_COLUMN):
            raise ValueError(f"Unknown axis: {axis!r} (expected 'row' or 'column')")

        check = self.mover.can_move_row if axis == AXIS_ROW else self.mover.can_move_column
        if not check(source_index, at=self.at):
            return False

        self._reset()
        self.intent = MoveIntent(axis=axis, source_index=source_index)
        if self.on_move_start:
            self.on_move_start(axis, source_index)
        return True

    def update_target(self, target_index: int) -> bool:
        """Hover over ``target_index``; returns whether dropping there is legal"""
        if self.intent is None:
            return False

        intent = self.intent
        intent.target_index = target_index
        result = self.mover.validate_move(intent.axis, intent.source_index, target_index, self.at)
        self.is_valid_target = result.can_move

        source = intent.source_index
        if not self.is_valid_target:
            self.affected_indices = []
        elif source < target_index:
            # moving down/right: everything after the source up to the target shifts back
            self.affected_indices = list(range(source + 1, target_index + 1))
        else:
            self.affected_indices = list(range(target_index, source))
        return self.is_valid_target

    def drop(self) -> bool:
        """Execute the pending move if the current target is legal; always ends the drag"""
        intent = self.intent
        if intent is None or intent.target_index is None or not self.is_valid_target:
            self._reset()
            if intent is not None and self.on_move_end:
                self.on_move_end(False)
            return False

        if intent.axis == AXIS_ROW:
            success = self.mover.move_row(intent.source_index, intent.target_index, at=self.at)
        else:
            success = self.mover.move_column(intent.source_index, intent.target_index, at=self.at)

        if success and self.on_move:
            self.on_move(intent.axis, intent.source_index, intent.target_index)

        self._reset()
        if self.on_move_end:
            self.on_move_end(success)
        return success

    def cancel(self):
        self._reset()
