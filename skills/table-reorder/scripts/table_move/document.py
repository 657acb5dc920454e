"""
Host document tree for table reordering.

Wraps an lxml element tree and exposes the structural operations the
reordering core needs: path addressing, node queries in document order,
index-splicing removal/insertion, section classification and batched
("without normalizing") transactional edits.

A path is a tuple of child indices starting at the root element, so the
root itself is ``()`` and ``(0, 2)`` is the third child of its first child.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path as FilePath
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from lxml import etree
from lxml import html as lxml_html

from .common import (
    DEFAULT_SCHEMA,
    SECTION_BODY,
    Path,
    TableSchema,
    local_tag,
    parse_span,
)


OP_REMOVE = 'remove'
OP_INSERT = 'insert'

HTML_SUFFIXES = ('.html', '.htm')


# ============================================================
# Edit operations
# ============================================================

@dataclass
class EditOperation:
    """A single structural edit: remove or insert ``element`` at ``path``"""
    kind: str
    path: Path
    element: object

    def inverse(self) -> 'EditOperation':
        kind = OP_INSERT if self.kind == OP_REMOVE else OP_REMOVE
        return EditOperation(kind, self.path, self.element)


@dataclass
class EditBatch:
    """
    Composite command grouping the operations of one atomic edit.

    Listeners are notified once per batch, after every operation in it
    has been applied.
    """
    operations: List[EditOperation] = field(default_factory=list)
    committed: bool = False

    def __len__(self) -> int:
        return len(self.operations)

    def __iter__(self) -> Iterator[EditOperation]:
        return iter(self.operations)

    def inverse(self) -> 'EditBatch':
        return EditBatch([op.inverse() for op in reversed(self.operations)])


# ============================================================
# Normalizers
# ============================================================

def clamp_span_attributes(document: 'TableDocument'):
    """
    Rewrite degenerate rowspan/colspan attributes.

    Values that are not positive integers are replaced by their clamped
    value; spans clamped to 1 drop the attribute entirely.
    """
    schema = document.schema
    for elem, _path in document.nodes(schema.cells):
        for attr in (schema.rowspan, schema.colspan):
            raw = elem.get(attr)
            if raw is None:
                continue
            span = parse_span(raw)
            if span == 1:
                if raw.strip() != '1':
                    del elem.attrib[attr]
            elif raw != str(span):
                elem.set(attr, str(span))


# ============================================================
# Document
# ============================================================

class TableDocument:
    """
    Mutable document tree owned by the host editor.

    Args:
        root: lxml root element
        schema: Tag and attribute names of the table markup
        is_html: Serialize with the HTML method in to_string()/save()
    """

    def __init__(self, root, schema: Optional[TableSchema] = None, is_html: bool = False):
        if root is None:
            raise ValueError("Document root element is required")
        self.root = root
        self.schema = schema or DEFAULT_SCHEMA
        self.is_html = is_html

        # Callables run after each edit outside a batch (or once per batch)
        self.normalizers: List[Callable[['TableDocument'], None]] = []
        # Callables receiving every committed EditBatch
        self.listeners: List[Callable[[EditBatch], None]] = []

        self._normalize_depth = 0
        self._dirty = False
        self._batch: Optional[EditBatch] = None

    # ------------------------------------------------------------
    # Loading / saving
    # ------------------------------------------------------------

    @classmethod
    def from_string(cls, text, html: bool = False, schema: Optional[TableSchema] = None) -> 'TableDocument':
        if html:
            root = lxml_html.fromstring(text)
        else:
            if isinstance(text, str):
                text = text.encode('utf-8')
            root = etree.fromstring(text)
        return cls(root, schema=schema, is_html=html)

    @classmethod
    def from_file(cls, path, schema: Optional[TableSchema] = None) -> 'TableDocument':
        path = FilePath(path)
        if path.suffix.lower() in HTML_SUFFIXES:
            root = lxml_html.parse(str(path)).getroot()
            return cls(root, schema=schema, is_html=True)
        root = etree.parse(str(path)).getroot()
        return cls(root, schema=schema)

    def to_string(self, pretty_print: bool = False) -> str:
        method = 'html' if self.is_html else 'xml'
        return etree.tostring(self.root, encoding='unicode', method=method,
                              pretty_print=pretty_print)

    def save(self, path, pretty_print: bool = False):
        FilePath(path).write_text(self.to_string(pretty_print=pretty_print), encoding='utf-8')

    # ------------------------------------------------------------
    # Path arithmetic
    # ------------------------------------------------------------

    def node(self, path: Path):
        """Return the element at ``path``; raises IndexError if none"""
        elem = self.root
        for depth, index in enumerate(path):
            if index < 0 or index >= len(elem):
                raise IndexError(f"No node at path {tuple(path[:depth + 1])}")
            elem = elem[index]
        return elem

    def has_node(self, path: Path) -> bool:
        try:
            self.node(path)
        except IndexError:
            return False
        return True

    def path_of(self, elem) -> Path:
        """Return the path of an element attached to this document"""
        indices = []
        current = elem
        while current is not self.root:
            parent = current.getparent()
            if parent is None:
                raise ValueError("Element is not part of this document")
            indices.append(parent.index(current))
            current = parent
        return tuple(reversed(indices))

    @staticmethod
    def parent_path(path: Path) -> Path:
        if not path:
            raise ValueError("The root path has no parent")
        return tuple(path[:-1])

    @staticmethod
    def next_path(path: Path) -> Path:
        if not path:
            raise ValueError("The root path has no next sibling")
        return tuple(path[:-1]) + (path[-1] + 1,)

    @staticmethod
    def previous_path(path: Path) -> Path:
        if not path or path[-1] <= 0:
            raise ValueError(f"Path {tuple(path)} has no previous sibling")
        return tuple(path[:-1]) + (path[-1] - 1,)

    def child_count(self, path: Path) -> int:
        return len(self.node(path))

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    def nodes(self, kinds: Iterable[str], at: Optional[Path] = None) -> Iterator[Tuple[object, Path]]:
        """
        Yield (element, path) for nodes whose tag is in ``kinds``.

        Order: ancestors of ``at`` (outermost first), the node at ``at``,
        then its descendants in document order.
        """
        kinds = set(kinds)
        at = tuple(at) if at is not None else ()
        start = self.node(at)

        elem = self.root
        for depth in range(len(at)):
            if local_tag(elem) in kinds:
                yield elem, tuple(at[:depth])
            elem = elem[at[depth]]

        yield from self._walk(start, at, kinds)

    def _walk(self, elem, path: Path, kinds) -> Iterator[Tuple[object, Path]]:
        if local_tag(elem) in kinds:
            yield elem, path
        for index, child in enumerate(elem):
            yield from self._walk(child, path + (index,), kinds)

    def children(self, path: Path, kinds: Iterable[str]) -> List[Tuple[object, Path]]:
        """Direct children of the node at ``path`` whose tag is in ``kinds``"""
        kinds = set(kinds)
        parent = self.node(path)
        return [(child, tuple(path) + (index,))
                for index, child in enumerate(parent)
                if local_tag(child) in kinds]

    def closest(self, path: Path, kinds: Iterable[str]) -> Optional[Tuple[object, Path]]:
        """Nearest ancestor-or-self of ``path`` whose tag is in ``kinds``"""
        kinds = set(kinds)
        path = tuple(path)
        elem = self.node(path)
        while True:
            if local_tag(elem) in kinds:
                return elem, path
            if not path:
                return None
            path = path[:-1]
            elem = elem.getparent()

    def section_of(self, path: Path) -> Optional[str]:
        """
        Classify a row or cell path as 'head', 'body' or 'foot'.

        Rows placed directly under the table count as body rows.
        Returns None when the path is not inside a table.
        """
        sections = self.schema.sections
        found = self.closest(path, list(sections) + [self.schema.table])
        if found is None:
            return None
        elem, _ = found
        tag = local_tag(elem)
        if tag == self.schema.table:
            return SECTION_BODY if tuple(path) != found[1] else None
        return sections[tag]

    # ------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------

    def remove_node(self, path: Path):
        """Detach and return the node at ``path``"""
        path = tuple(path)
        if not path:
            raise ValueError("Cannot remove the document root")
        parent = self.node(path[:-1])
        index = path[-1]
        if index < 0 or index >= len(parent):
            raise IndexError(f"No node at path {path}")
        elem = parent[index]
        parent.remove(elem)
        self._record(EditOperation(OP_REMOVE, path, elem))
        return elem

    def insert_node(self, elem, path: Path):
        """Insert a detached node so that it ends up at ``path``"""
        path = tuple(path)
        if not path:
            raise ValueError("Cannot insert at the document root")
        if elem.getparent() is not None:
            raise ValueError("Node is still attached; remove it first")
        parent = self.node(path[:-1])
        index = path[-1]
        if index < 0 or index > len(parent):
            raise IndexError(f"Cannot insert at path {path}")
        parent.insert(index, elem)
        self._record(EditOperation(OP_INSERT, path, elem))

    def apply(self, batch: EditBatch) -> EditBatch:
        """Replay a prebuilt batch as one transaction"""
        with self.transaction() as applied:
            for op in batch:
                if op.kind == OP_REMOVE:
                    self.remove_node(op.path)
                else:
                    self.insert_node(op.element, op.path)
        return applied

    # ------------------------------------------------------------
    # Batching
    # ------------------------------------------------------------

    @contextmanager
    def without_normalizing(self):
        """Defer normalizers until the outermost block exits"""
        self._normalize_depth += 1
        try:
            yield self
        finally:
            self._normalize_depth -= 1
            if self._normalize_depth == 0 and self._dirty:
                self.normalize()

    @contextmanager
    def transaction(self):
        """
        Group edits into one EditBatch.

        Nested transactions join the outer batch. If an exception escapes,
        the batch is rolled back before it propagates.
        """
        if self._batch is not None:
            yield self._batch
            return

        batch = EditBatch()
        self._batch = batch
        try:
            with self.without_normalizing():
                try:
                    yield batch
                except BaseException:
                    self._rollback(batch)
                    raise
        finally:
            self._batch = None

        batch.committed = True
        if batch.operations:
            self._notify(batch)

    def normalize(self):
        self._dirty = False
        for normalizer in list(self.normalizers):
            normalizer(self)

    def _rollback(self, batch: EditBatch):
        for op in reversed(batch.operations):
            if op.kind == OP_REMOVE:
                parent = self.node(op.path[:-1])
                parent.insert(op.path[-1], op.element)
            else:
                parent = op.element.getparent()
                if parent is not None:
                    parent.remove(op.element)
        batch.operations.clear()

    def _record(self, op: EditOperation):
        self._dirty = True
        if self._batch is not None:
            self._batch.operations.append(op)
            return
        self._notify(EditBatch([op], committed=True))
        if self._normalize_depth == 0:
            self.normalize()

    def _notify(self, batch: EditBatch):
        for listener in list(self.listeners):
            listener(batch)
