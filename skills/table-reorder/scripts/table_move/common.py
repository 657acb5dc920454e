#!/usr/bin/env python3
"""
ABOUTME: Shared constants and data classes for span-aware table reordering
ABOUTME: Occupancy context, filled matrix, merge info and validation results
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


# ============================================================
# Constants
# ============================================================

Path = Tuple[int, ...]

AXIS_ROW = 'row'
AXIS_COLUMN = 'column'

SECTION_HEAD = 'head'
SECTION_BODY = 'body'
SECTION_FOOT = 'foot'

# blocked_by tags for MoveValidationResult
BLOCKED_HEADER = 'header'
BLOCKED_EXTERNAL_MERGE = 'external-merge'
BLOCKED_MERGE_CONFLICT = 'merge-conflict'
BLOCKED_SAME_POSITION = 'same-position'
BLOCKED_OUT_OF_BOUNDS = 'out-of-bounds'

BLOCKED_REASONS = (
    BLOCKED_HEADER,
    BLOCKED_EXTERNAL_MERGE,
    BLOCKED_MERGE_CONFLICT,
    BLOCKED_SAME_POSITION,
    BLOCKED_OUT_OF_BOUNDS,
)

VERBOSE_ENV = 'TABLE_REORDER_VERBOSE'


# ============================================================
# Data Classes
# ============================================================

@dataclass(frozen=True)
class TableSchema:
    """Tag and attribute names of the table markup"""
    table: str = 'table'
    head: str = 'thead'
    body: str = 'tbody'
    foot: str = 'tfoot'
    row: str = 'tr'
    cells: Tuple[str, ...] = ('td', 'th')
    rowspan: str = 'rowspan'
    colspan: str = 'colspan'

    @property
    def sections(self) -> Dict[str, str]:
        """Map section tag -> section kind"""
        return {self.head: SECTION_HEAD, self.body: SECTION_BODY, self.foot: SECTION_FOOT}


DEFAULT_SCHEMA = TableSchema()


@dataclass(frozen=True)
class CellContext:
    """
    Occupancy counters of one grid position.

    ttb: 1 on the cell's first row, counting up downward
    btt: rows still covered from here down, this one included
    ltr: 1 on the cell's own column, counting up rightward
    rtl: columns still covered from here right, this one included
    """
    ttb: int = 1
    btt: int = 1
    ltr: int = 1
    rtl: int = 1

    @property
    def is_origin(self) -> bool:
        return self.ttb == 1 and self.ltr == 1


@dataclass
class MatrixCell:
    """One grid position: the owning cell node, its path and its context"""
    element: object
    path: Path
    context: CellContext

    @property
    def is_origin(self) -> bool:
        return self.context.is_origin


class FilledMatrix(list):
    """
    Rectangular occupancy grid: list of rows of MatrixCell (or None).

    None marks a position no cell covers; every such position is listed
    in ``missing`` as (row, col).
    """

    def __init__(self, rows=(), width: int = 0, missing: Optional[List[Tuple[int, int]]] = None):
        super().__init__(rows)
        self.width = width
        self.missing = missing if missing is not None else []

    @property
    def is_complete(self) -> bool:
        return not self.missing


@dataclass
class MergeInfo:
    """Merge classification of a single row or column"""
    has_internal_merges: bool = False
    has_external_merges: bool = False
    merged_cells: List[MatrixCell] = field(default_factory=list)
    blocked_indices: List[int] = field(default_factory=list)


@dataclass
class MoveValidationResult:
    """Result of a move validation; blocked_by is one of BLOCKED_REASONS"""
    can_move: bool
    reason: Optional[str] = None
    blocked_by: Optional[str] = None

    def __bool__(self) -> bool:
        return self.can_move

    def to_dict(self) -> Dict:
        data = {'canMove': self.can_move}
        if self.reason is not None:
            data['reason'] = self.reason
        if self.blocked_by is not None:
            data['blockedBy'] = self.blocked_by
        return data


@dataclass
class MoveIntent:
    """Transient move request owned by a drag session"""
    axis: str                      # row | column
    source_index: int
    target_index: Optional[int] = None


# ============================================================
# Helper Functions
# ============================================================

def allowed() -> MoveValidationResult:
    return MoveValidationResult(can_move=True)


def blocked(blocked_by: str, reason: str) -> MoveValidationResult:
    """Build a rejected validation result"""
    return MoveValidationResult(can_move=False, reason=reason, blocked_by=blocked_by)


def parse_span(value) -> int:
    """
    Read a rowspan/colspan attribute value.

    Missing, non-numeric and non-positive values all read as 1.
    """
    if value is None:
        return 1
    try:
        span = int(str(value).strip())
    except (ValueError, TypeError):
        return 1
    return span if span > 0 else 1


def verbose_from_env(default: bool = False) -> bool:
    """Resolve the verbose flag from TABLE_REORDER_VERBOSE"""
    value = os.getenv(VERBOSE_ENV)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def local_tag(elem) -> str:
    """Tag name without namespace (comments and PIs yield '')"""
    tag = elem.tag
    if not isinstance(tag, str):
        return ''
    return tag.split('}')[-1]
