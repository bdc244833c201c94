"""GraphViz rendering of variable liveness over the control-flow graph."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .facts import AllFacts
from .intern import InternerTables

PathLike = Union[str, "os.PathLike[str]"]

_log = logging.getLogger(__name__)

_DIGRAPH_HEADER = 'digraph g {\n  graph [\n  rankdir = "TD"\n];\n'

_COLOUR_PALETTE = (
    "#C6CDF7", "#899DA4", "#F98400", "#C7B19C", "#D67236", "#0F0D0E", "#FAEFD1", "#ECCBAE",
    "#E1AF00", "#74A089", "#DD8D29", "#85D4E3", "#1C1718", "#F8AFA8", "#CB2314", "#35274A",
    "#E1BD6D", "#FDDDA0", "#FD6467", "#ABDDDE", "#F2300F", "#D8B70A", "#EAD3BF", "#1E1E1E",
    "#273046", "#9C964A", "#046C9A", "#D9D0D3", "#FDD262", "#0B775E", "#4E2A1E", "#EABE94",
    "#D69C4E", "#E58601", "#F2AD00", "#CCC591", "#E1BD6D", "#35274A", "#FAD510", "#9B110E",
    "#81A88D", "#CEAB07", "#A42820", "#78B7C5", "#3F5151", "#B40F20", "#354823", "#F2300F",
    "#5B1A18", "#F3DF6C", "#DC863B", "#02401B", "#FAD77B", "#F1BB7B", "#7294D4", "#EABE94",
    "#39312F", "#550307", "#EBCC2A", "#972D15", "#A2A475", "#C27D38", "#24281A", "#0C1707",
    "#0B775E", "#D3DDDC", "#00A08A", "#F21A00", "#3B9AB2", "#E6A0C4", "#CDC08C", "#FF0000",
    "#9986A5", "#D5D5D3", "#79402E", "#D8A499", "#9A8822", "#46ACC8", "#CCBA72", "#E2D200",
    "#AA9486", "#F4B5BD", "#446455", "#8D8680", "#5BBCD6", "#798E87", "#5F5647", "#C93312",
    "#29211F", "#B6854D", "#e1f7d5", "#ffbdbd", "#c9c9ff", "#f1cbff",
)

_DEFINED = "\u2620"
_DROPPED = "\U0001f4a7"
_USED = "\U0001f527"


@dataclass
class Liveness:
    """Liveness data of one or more merged control-flow points."""

    use_live_vars: set = field(default_factory=set)
    drop_live_vars: set = field(default_factory=set)
    cfg_points: list = field(default_factory=list)
    point_facts: list = field(default_factory=list)

    def extend(self, other: Liveness) -> None:
        """Absorb the data of another node into this one."""
        self.use_live_vars |= other.use_live_vars
        self.drop_live_vars |= other.drop_live_vars
        self.cfg_points.extend(other.cfg_points)
        self.point_facts.extend(other.point_facts)

    @classmethod
    def at_point(
        cls,
        all_facts: AllFacts,
        var_live_on_entry: Mapping[int, Iterable[int]],
        var_drop_live_on_entry: Mapping[int, Iterable[int]],
        location: int,
    ) -> Liveness:
        """Collect the liveness data and variable facts of a single point."""
        point_facts = []
        for label, relation in (
            (_DEFINED, all_facts.var_defined_at),
            (_DROPPED, all_facts.var_dropped_at),
            (_USED, all_facts.var_used_at),
        ):
            point_facts.extend(
                (label, var, point) for var, point in relation if point == location
            )
        return cls(
            use_live_vars=set(var_live_on_entry.get(location, ())),
            drop_live_vars=set(var_drop_live_on_entry.get(location, ())),
            cfg_points=[location],
            point_facts=point_facts,
        )


def edge_live_vars(source: Liveness, target: Liveness) -> set:
    """Variables live, by use or by drop, at both ends of an edge."""
    return (source.use_live_vars & target.use_live_vars) | (
        source.drop_live_vars & target.drop_live_vars
    )


def render_cfg_label(node: Liveness, tables: InternerTables) -> str:
    """Render a node's points and variable facts as a GraphViz record label."""

    def point_name(point: int) -> str:
        return tables.points.untern(point).replace('"', "")

    if len(node.cfg_points) <= 3:
        head = ", ".join(point_name(point) for point in node.cfg_points)
    else:
        ordered = sorted(node.cfg_points)
        head = f"{point_name(ordered[0])}\u2013{point_name(ordered[-1])}"

    fragments = [head + "\\l"]
    fragments.extend(
        f"{label}({tables.variables.untern(var).replace(chr(34), '')}, {point_name(point)})."
        for label, var, point in node.point_facts
    )
    return "\\l".join(fragments)


class _StableGraph:
    """A directed multigraph whose indices survive removals; freed edge slots are reused."""

    def __init__(self) -> None:
        self.nodes: list[Optional[Liveness]] = []
        self.edges: list[Optional[tuple[int, int]]] = []
        self._out: list[list[int]] = []
        self._in: list[list[int]] = []
        self._free_edges: list[int] = []

    def add_node(self, data: Liveness) -> int:
        self.nodes.append(data)
        self._out.append([])
        self._in.append([])
        return len(self.nodes) - 1

    def add_edge(self, source: int, target: int) -> int:
        if self._free_edges:
            index = self._free_edges.pop()
            self.edges[index] = (source, target)
        else:
            index = len(self.edges)
            self.edges.append((source, target))
        self._out[source].append(index)
        self._in[target].append(index)
        return index

    def _remove_edge(self, index: int) -> None:
        edge = self.edges[index]
        if edge is None:
            return
        source, target = edge
        self._out[source].remove(index)
        self._in[target].remove(index)
        self.edges[index] = None
        self._free_edges.append(index)

    def remove_node(self, node: int) -> Liveness:
        data = self.nodes[node]
        if data is None:
            raise KeyError(f"node {node} was already removed")
        for adjacency in (self._out, self._in):
            while adjacency[node]:
                self._remove_edge(adjacency[node][-1])
        self.nodes[node] = None
        return data

    def successors(self, node: int) -> Iterator[int]:
        for index in reversed(self._out[node]):
            yield self.edges[index][1]

    def predecessors(self, node: int) -> Iterator[int]:
        for index in reversed(self._in[node]):
            yield self.edges[index][0]

    def out_degree(self, node: int) -> int:
        return len(self._out[node])

    def in_degree(self, node: int) -> int:
        return len(self._in[node])

    def node_items(self) -> Iterator[tuple[int, Liveness]]:
        for index, data in enumerate(self.nodes):
            if data is not None:
                yield index, data

    def edge_items(self) -> Iterator[tuple[int, int]]:
        for edge in self.edges:
            if edge is not None:
                yield edge


def _dfs(graph: _StableGraph, start: int) -> Iterator[int]:
    discovered: set[int] = set()
    stack = [start]
    while stack:
        node = stack.pop()
        if node in discovered or graph.nodes[node] is None:
            continue
        discovered.add(node)
        stack.extend(s for s in graph.successors(node) if s not in discovered)
        yield node


def _reduce(graph: _StableGraph, first: int) -> None:
    for node in _dfs(graph, first):
        if graph.out_degree(node) != 1 or graph.in_degree(node) != 1:
            continue
        previous = next(graph.predecessors(node))
        following = next(graph.successors(node))
        if node in (previous, following):
            continue
        before = edge_live_vars(graph.nodes[previous], graph.nodes[node])
        after = edge_live_vars(graph.nodes[node], graph.nodes[following])
        if before == after:
            data = graph.remove_node(node)
            graph.nodes[following].extend(data)
            graph.add_edge(previous, following)


def liveness_graph(
    all_facts: AllFacts,
    var_live_on_entry: Mapping[int, Iterable[int]],
    var_drop_live_on_entry: Mapping[int, Iterable[int]],
    output_file: PathLike,
    tables: InternerTables,
) -> None:
    """Write a GraphViz file showing which variables are live along each edge.

    Chains of points whose live variables do not change are merged into
    one node before rendering.
    """
    _log.info("Generating liveness graph")
    graph = _StableGraph()
    point_to_node: dict[int, int] = {}

    def node_for(point: int) -> int:
        if point not in point_to_node:
            point_to_node[point] = graph.add_node(
                Liveness.at_point(all_facts, var_live_on_entry, var_drop_live_on_entry, point)
            )
        return point_to_node[point]

    for point1, point2 in all_facts.cfg_edge:
        node1 = node_for(point1)
        node2 = node_for(point2)
        graph.add_edge(node1, node2)

    _log.info("Reducing the liveness graph...")
    if all_facts.cfg_edge:
        _reduce(graph, point_to_node[all_facts.cfg_edge[0][0]])

    nodes = "\n".join(
        f'{index} [shape="record" label="{render_cfg_label(data, tables)}"]'
        for index, data in graph.node_items()
    )

    edge_fragments = []
    for source, target in graph.edge_items():
        source_data = graph.nodes[source]
        live = edge_live_vars(source_data, graph.nodes[target])
        for var in sorted(live):
            status = ("U" if var in source_data.use_live_vars else "") + (
                "D" if var in source_data.drop_live_vars else ""
            )
            name = tables.variables.untern(var).replace('"', "")
            colour = _COLOUR_PALETTE[var % len(_COLOUR_PALETTE)]
            edge_fragments.append(
                f'{target} -> {source} [label=" {name} {status}", color="{colour}", '
                f"penwidth = 2 arrowhead = none]"
            )
        edge_fragments.append(f"{source} -> {target} [penwidth = 2]")

    text = _DIGRAPH_HEADER + nodes + "\n\n" + "\n".join(edge_fragments) + "\n}"
    Path(output_file).write_bytes(text.encode("utf-8"))