from __future__ import annotations

"""
Line-oriented graph description format.

One line per node, in graph order:

    label (n) -> dest(edge_label, weight), dest(edge_label, weight),

`n` is the number of listed edges. A node without edges is written as
`label (0)`; `label (0) ->` and a missing count are accepted when reading.
Node labels are single whitespace-free tokens without parentheses. Edge
labels may contain inner spaces but no commas, no parentheses and no
leading or trailing whitespace. Edges are matched to nodes by label, so
ids are reassigned on every load.
"""

import os
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from ..config import TextFormatSettings, get_settings
from ..ids import IdAllocator
from ..log import getLogger
from .core import Graph

logger = getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

_NODE_LABEL = re.compile(r"^[^\s(),]+$")
_EDGE_LABEL = re.compile(r"^(?:[^\s(),](?:[^(),\n]*[^\s(),])?)?$")

_EDGE = re.compile(
    r"\s*(?P<dest>[^\s(),]+)\s*"
    r"\((?P<label>[^(),\n]*),\s*(?P<weight>[+-]?\d+)\s*\)"
    r"\s*(?:,|$)"
)


class GraphFormatError(ValueError):
    """A graph description line could not be parsed or written."""

    def __init__(self, message: str, line_no: Optional[int] = None) -> None:
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)
        self.line_no = line_no


@dataclass(slots=True)
class _ParsedLine:
    line_no: int
    label: str
    edges: List[Tuple[str, str, int]]  # (dest_label, edge_label, weight)


def _header_pattern(separator: str) -> re.Pattern[str]:
    return re.compile(
        r"^(?P<label>[^\s(),]+)"
        r"(?:\s*\((?P<count>\d+)\))?"
        r"\s*(?:" + re.escape(separator) + r"(?P<rest>.*))?$"
    )


def _parse_line(line_no: int, line: str, header: re.Pattern[str]) -> _ParsedLine:
    match = header.match(line.strip())
    if match is None:
        raise GraphFormatError(f"malformed node header: {line.strip()!r}", line_no)

    rest = (match.group("rest") or "").strip()
    edges: List[Tuple[str, str, int]] = []
    pos = 0
    while pos < len(rest):
        em = _EDGE.match(rest, pos)
        if em is None or em.end() == pos:
            raise GraphFormatError(f"malformed edge near {rest[pos:]!r}", line_no)
        edges.append((em.group("dest"), em.group("label").strip(), int(em.group("weight"))))
        pos = em.end()

    count = match.group("count")
    if count is not None and int(count) != len(edges):
        raise GraphFormatError(
            f"node {match.group('label')!r} declares {count} edges, found {len(edges)}",
            line_no,
        )
    return _ParsedLine(line_no, match.group("label"), edges)


def loads(
    text: str,
    allocator: Optional[IdAllocator] = None,
    *,
    settings: Optional[TextFormatSettings] = None,
) -> Graph:
    """
    Build a graph from its textual description.

    Nodes are created in line order first, then edges are resolved by
    destination label, so an edge may reference a node defined further down.
    With duplicate labels the first node wins. The text is fully parsed
    before any id is allocated.
    """
    settings = settings or get_settings().text
    header = _header_pattern(settings.separator)

    parsed = [
        _parse_line(line_no, line, header)
        for line_no, line in enumerate(text.splitlines(), start=1)
        if line.strip()
    ]

    known = {p.label for p in parsed}
    for p in parsed:
        for dest, _label, _weight in p.edges:
            if dest not in known:
                raise GraphFormatError(f"edge to unknown node {dest!r}", p.line_no)

    graph = Graph(allocator)
    nodes = [graph.create_node(p.label) for p in parsed]
    for node, p in zip(nodes, parsed):
        for dest, label, weight in p.edges:
            target = graph.find_by_label(dest)
            graph.create_edge(node.id, target, weight=weight, label=label)  # type: ignore[arg-type]

    logger.debug("Loaded graph: %d nodes, %d edges", len(graph), graph.edge_count())
    return graph


def dumps(graph: Graph, *, settings: Optional[TextFormatSettings] = None) -> str:
    """
    Serialize a graph, one line per node.

    Edges pointing outside the graph cannot be described by label and are
    left out (and not counted).
    """
    settings = settings or get_settings().text
    labels = {node.id: node.label for node in graph}

    lines: List[str] = []
    for node in graph:
        if not _NODE_LABEL.match(node.label):
            raise GraphFormatError(f"node label {node.label!r} cannot be written")

        parts: List[str] = []
        for edge in node.edges:
            dest = labels.get(edge.target)
            if dest is None:
                continue
            if not _EDGE_LABEL.match(edge.label):
                raise GraphFormatError(f"edge label {edge.label!r} cannot be written")
            parts.append(f"{dest}({edge.label}, {edge.weight}), ")

        if parts:
            lines.append(f"{node.label} ({len(parts)}) {settings.separator} {''.join(parts)}".rstrip())
        else:
            lines.append(f"{node.label} (0)")
    return "\n".join(lines) + ("\n" if lines else "")


def save_graph(
    graph: Graph,
    path: PathLike,
    *,
    settings: Optional[TextFormatSettings] = None,
) -> None:
    settings = settings or get_settings().text
    with open(path, "w", encoding=settings.encoding) as fh:
        fh.write(dumps(graph, settings=settings))


def load_graph(
    path: PathLike,
    allocator: Optional[IdAllocator] = None,
    *,
    settings: Optional[TextFormatSettings] = None,
) -> Graph:
    settings = settings or get_settings().text
    with open(path, "r", encoding=settings.encoding) as fh:
        return loads(fh.read(), allocator, settings=settings)
