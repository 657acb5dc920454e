#!/usr/bin/env python3
"""
ABOUTME: Reorders rows/columns of a table document while keeping merged cells intact
ABOUTME: Reads .xml/.html table markup or .docx tables and writes the edited document
"""

import argparse
import json
import sys
from pathlib import Path

from docx_table_loader import load_docx_tables
from table_move import (
    AXIS_COLUMN,
    AXIS_ROW,
    TableDocument,
    TableMover,
)
from table_move.common import verbose_from_env


DOCX_SUFFIX = '.docx'


# ============================================================
# Helper Functions
# ============================================================

def load_document(input_path: Path) -> TableDocument:
    """Load a table document; .docx tables are converted to HTML markup"""
    if input_path.suffix.lower() == DOCX_SUFFIX:
        return load_docx_tables(input_path)
    return TableDocument.from_file(input_path)


def default_output_path(input_path: Path) -> Path:
    suffix = '.html' if input_path.suffix.lower() == DOCX_SUFFIX else input_path.suffix
    return input_path.with_name(f"{input_path.stem}_reordered{suffix}")


def table_location(document: TableDocument, table_index: int):
    """Path of the N-th table in document order (outermost tables only)"""
    tables = [path for _elem, path in document.nodes((document.schema.table,))]
    outermost = [p for p in tables
                 if not any(p[:len(other)] == other for other in tables if other != p)]
    if table_index < 0 or table_index >= len(outermost):
        raise ValueError(f"Table {table_index} not found (document has {len(outermost)} table(s))")
    return outermost[table_index]


def print_result(label: str, result):
    print(f"{label}: {json.dumps(result.to_dict(), ensure_ascii=False)}")


# ============================================================
# Main Function
# ============================================================

def main() -> int:
    parser = argparse.ArgumentParser(
        description="Move table rows/columns without breaking merged cells"
    )
    parser.add_argument('input_file', help='Table document (.xml, .html or .docx)')
    parser.add_argument('-o', '--output', help='Output file path')
    parser.add_argument('--table', type=int, default=0,
                        help='Index of the table to edit (default: 0)')

    action = parser.add_mutually_exclusive_group(required=True)
    action.add_argument('--move-row', nargs=2, type=int, metavar=('FROM', 'TO'),
                        help='Move row FROM to position TO')
    action.add_argument('--move-column', nargs=2, type=int, metavar=('FROM', 'TO'),
                        help='Move column FROM to position TO')
    action.add_argument('--check-row', type=int, metavar='INDEX',
                        help='Report whether a row can be moved')
    action.add_argument('--check-column', type=int, metavar='INDEX',
                        help='Report whether a column can be moved')
    action.add_argument('--drops', nargs=2, metavar=('AXIS', 'INDEX'),
                        help='List valid drop positions for a row/column')

    parser.add_argument('--dry-run', action='store_true',
                        help='Validate only, do not save')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose output')

    args = parser.parse_args()

    try:
        input_path = Path(args.input_file)
        document = load_document(input_path)
        at = table_location(document, args.table)
        mover = TableMover(document, verbose=args.verbose or verbose_from_env())

        if args.verbose:
            matrix = mover.filled_matrix(at)
            print(f"Source file: {input_path}")
            print(f"Table {args.table}: {len(matrix)} rows x {matrix.width} columns")
            print("-" * 50)

        if args.check_row is not None:
            print_result(f"Row {args.check_row}", mover.can_move_row(args.check_row, at=at))
            return 0
        if args.check_column is not None:
            print_result(f"Column {args.check_column}", mover.can_move_column(args.check_column, at=at))
            return 0
        if args.drops is not None:
            axis, index = args.drops[0], int(args.drops[1])
            if axis == AXIS_ROW:
                positions = mover.get_valid_row_drop_positions(index, at=at)
            elif axis == AXIS_COLUMN:
                positions = mover.get_valid_column_drop_positions(index, at=at)
            else:
                raise ValueError(f"Unknown axis: {axis!r} (expected 'row' or 'column')")
            print(f"Valid {axis} drop positions for {index}: {positions}")
            return 0

        if args.move_row is not None:
            from_index, to_index = args.move_row
            success = mover.move_row(from_index, to_index, at=at)
            label = f"Row {from_index} -> {to_index}"
        else:
            from_index, to_index = args.move_column
            success = mover.move_column(from_index, to_index, at=at)
            label = f"Column {from_index} -> {to_index}"

        if not success:
            result = mover.last_result
            reason = (result.reason if result is not None else None) or 'table not found'
            blocked_by = f" [{result.blocked_by}]" if result is not None and result.blocked_by else ''
            print(f"{label}: rejected{blocked_by}: {reason}")
            return 1

        print(f"{label}: moved")
        if args.dry_run:
            print("Dry run: document not saved")
            return 0

        output_path = Path(args.output) if args.output else default_output_path(input_path)
        document.save(output_path)
        print(f"Output to: {output_path}")
        return 0

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
