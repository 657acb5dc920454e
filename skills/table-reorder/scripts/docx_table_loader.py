#!/usr/bin/env python3
"""
ABOUTME: Converts Word (DOCX) tables into span-aware HTML-like table trees
ABOUTME: Horizontally merged cells (w:gridSpan) become colspan on a single cell
ABOUTME: Vertically merged cells (w:vMerge) become rowspan on the restart cell
ABOUTME: Leading rows flagged with w:tblHeader go to thead
"""

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from docx import Document
from docx.oxml.ns import qn
from docx.table import Table
from lxml import etree

from table_move import TableDocument


def get_cell_merge_properties(tcPr) -> Tuple[int, Optional[str]]:
    """
    Get cell merge properties (gridSpan and vMerge).

    Args:
        tcPr: Cell properties element (w:tcPr) or None

    Returns:
        Tuple of (grid_span, vmerge_type)
        - grid_span: Number of columns this cell spans (default 1)
        - vmerge_type: 'restart' | 'continue' | None
    """
    grid_span = 1
    vmerge_type = None

    if tcPr is None:
        return grid_span, vmerge_type

    gs = tcPr.find(qn('w:gridSpan'))
    if gs is not None:
        try:
            grid_span = int(gs.get(qn('w:val')))
        except (ValueError, TypeError):
            grid_span = 1
        if grid_span < 1:
            grid_span = 1

    vmerge_elem = tcPr.find(qn('w:vMerge'))
    if vmerge_elem is not None:
        # None or 'continue' both mean continue
        vmerge_type = 'restart' if vmerge_elem.get(qn('w:val')) == 'restart' else 'continue'

    return grid_span, vmerge_type


def paragraph_text(para_elem) -> str:
    """Plain text of a w:p element: text runs, tabs and soft line breaks"""
    text = ''
    for run in para_elem.iter(qn('w:r')):
        for child in run:
            tag = child.tag.split('}')[-1]
            if tag == 't' and child.text:
                text += child.text
            elif tag == 'tab':
                text += '\t'
            elif tag == 'br' and child.get(qn('w:type')) in (None, 'textWrapping'):
                text += '\n'
    return text


def is_header_row(tr) -> bool:
    trPr = tr.find(qn('w:trPr'))
    return trPr is not None and trPr.find(qn('w:tblHeader')) is not None


def docx_table_to_element(table: Table):
    """
    Convert a python-docx Table into a ``table`` element.

    Structure of the result:
      table > thead? > tr > th (leading w:tblHeader rows)
      table > tbody  > tr > td (every other row)

    Each physical w:tc becomes one cell except vMerge continuations, which
    extend the rowspan of the restart cell above them. A continuation with
    no restart above it is kept as an ordinary cell.

    Args:
        table: python-docx Table object

    Returns:
        lxml element rooted at ``table``
    """
    tbl = table._tbl
    table_elem = etree.Element('table')
    thead = None
    tbody = None
    in_header = True

    # Open vertical merges by grid column: {col: restart cell element}
    vmerge_origins: Dict[int, object] = {}

    for tr in tbl.findall(qn('w:tr')):
        header = in_header and is_header_row(tr)
        if header:
            if thead is None:
                thead = etree.SubElement(table_elem, 'thead')
            section = thead
        else:
            in_header = False
            if tbody is None:
                tbody = etree.SubElement(table_elem, 'tbody')
            section = tbody

        row_elem = etree.SubElement(section, 'tr')
        grid_col = 0

        for tc in tr.findall(qn('w:tc')):
            grid_span, vmerge_type = get_cell_merge_properties(tc.find(qn('w:tcPr')))

            if vmerge_type == 'continue' and grid_col in vmerge_origins:
                origin = vmerge_origins[grid_col]
                origin.set('rowspan', str(int(origin.get('rowspan', '1')) + 1))
                grid_col += grid_span
                continue

            cell = etree.SubElement(row_elem, 'th' if header else 'td')
            if grid_span > 1:
                cell.set('colspan', str(grid_span))
            for para_elem in tc.findall(qn('w:p')):
                para = etree.SubElement(cell, 'p')
                para.text = paragraph_text(para_elem).replace('\x07', '')

            if vmerge_type == 'restart':
                vmerge_origins[grid_col] = cell
            else:
                vmerge_origins.pop(grid_col, None)

            grid_col += grid_span

    return table_elem


def docx_tables_to_document(tables: List[Table]) -> TableDocument:
    """Wrap converted tables in an html > body document, in input order"""
    root = etree.Element('html')
    body = etree.SubElement(root, 'body')
    for table in tables:
        body.append(docx_table_to_element(table))
    return TableDocument(root, is_html=True)


def load_docx_tables(path) -> TableDocument:
    """Load every top-level table of a .docx file into one TableDocument"""
    doc = Document(str(Path(path)))
    return docx_tables_to_document(list(doc.tables))
