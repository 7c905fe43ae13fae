"""Compressed adjacency graphs and their block distribution over ranks."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Iterable, Iterator


@dataclass(frozen=True)
class Edge:
    """A directed half-edge stored under its source vertex."""

    tail: int
    weight: float = 1.0


@dataclass
class Comm:
    """Size and total degree of a community."""

    size: int = 0
    degree: float = 0.0


@dataclass
class CommInfo:
    """A community record as exchanged between ranks."""

    community: int
    size: int = 0
    degree: float = 0.0


EdgeTriple = tuple[int, int, float]


@dataclass(frozen=True)
class Graph:
    """A graph in compressed sparse row form.

    ``offsets`` has one entry more than there are vertices; the edges of
    vertex ``v`` are ``edges[offsets[v]:offsets[v + 1]]``.  Edge tails are
    kept as given, so a local graph of a distributed graph holds global
    tail identifiers.
    """

    offsets: tuple[int, ...] = (0,)
    edges: tuple[Edge, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.offsets or self.offsets[0] != 0:
            raise ValueError("offsets must start with 0")
        if any(a > b for a, b in zip(self.offsets, self.offsets[1:])):
            raise ValueError("offsets must be non-decreasing")
        if self.offsets[-1] != len(self.edges):
            raise ValueError("last offset must equal the number of edges")

    @classmethod
    def from_edges(cls, num_vertices: int, edges: Iterable[EdgeTriple]) -> "Graph":
        """Build a graph from ``(source, tail, weight)`` half-edges.

        Edges are stored as given (no symmetrisation); within a vertex they
        keep their input order.
        """
        if num_vertices < 0:
            raise ValueError("number of vertices must not be negative")
        rows: list[list[Edge]] = [[] for _ in range(num_vertices)]
        for source, tail, weight in edges:
            if not 0 <= source < num_vertices:
                raise ValueError(f"source vertex {source} out of range")
            if not 0 <= tail < num_vertices:
                raise ValueError(f"tail vertex {tail} out of range")
            rows[source].append(Edge(int(tail), float(weight)))
        return cls._from_rows(rows)

    @classmethod
    def _from_rows(cls, rows: Iterable[Iterable[Edge]]) -> "Graph":
        offsets = [0]
        flat: list[Edge] = []
        for row in rows:
            flat.extend(row)
            offsets.append(len(flat))
        return cls(tuple(offsets), tuple(flat))

    def num_vertices(self) -> int:
        """Number of vertices."""
        return len(self.offsets) - 1

    def num_edges(self) -> int:
        """Number of stored half-edges."""
        return len(self.edges)

    def edge_range(self, vertex: int) -> tuple[int, int]:
        """Half-open index range of the edges of ``vertex``."""
        if not 0 <= vertex < self.num_vertices():
            raise IndexError(f"vertex {vertex} out of range")
        return self.offsets[vertex], self.offsets[vertex + 1]

    def edges_of(self, vertex: int) -> tuple[Edge, ...]:
        """The edges leaving ``vertex``."""
        start, stop = self.edge_range(vertex)
        return self.edges[start:stop]

    def __iter__(self) -> Iterator[tuple[int, Edge]]:
        for vertex in range(self.num_vertices()):
            for edge in self.edges_of(vertex):
                yield vertex, edge


class DistGraph:
    """A graph whose vertices are split into contiguous blocks, one per rank.

    Rank ``r`` owns the global vertices ``base(r) <= v < bound(r)``; its
    local graph numbers those vertices from zero but keeps global tails.
    """

    def __init__(self, offsets: Iterable[int], local_graphs: Iterable[Graph]) -> None:
        self._offsets = tuple(offsets)
        self._locals = tuple(local_graphs)
        if len(self._offsets) != len(self._locals) + 1 or not self._locals:
            raise ValueError("need one local graph per rank and one offset more")
        for rank, graph in enumerate(self._locals):
            if graph.num_vertices() != self._offsets[rank + 1] - self._offsets[rank]:
                raise ValueError(f"local graph of rank {rank} has the wrong size")

    @classmethod
    def from_edges(
        cls, num_vertices: int, edges: Iterable[EdgeTriple], nprocs: int
    ) -> "DistGraph":
        """Distribute a graph given by half-edges over ``nprocs`` ranks.

        The vertices are split into blocks whose sizes differ by at most one,
        the larger blocks going to the lower ranks.
        """
        if nprocs < 1:
            raise ValueError("there must be at least one rank")
        whole = Graph.from_edges(num_vertices, edges)
        share, extra = divmod(num_vertices, nprocs)
        offsets = [0]
        for rank in range(nprocs):
            offsets.append(offsets[-1] + share + (1 if rank < extra else 0))
        local_graphs = [
            Graph._from_rows(whole.edges_of(v) for v in range(lo, hi))
            for lo, hi in zip(offsets, offsets[1:])
        ]
        return cls(offsets, local_graphs)

    def _check_rank(self, rank: int) -> None:
        if not 0 <= rank < self.nprocs():
            raise IndexError(f"rank {rank} out of range")

    def base(self, rank: int) -> int:
        """First global vertex owned by ``rank``."""
        self._check_rank(rank)
        return self._offsets[rank]

    def bound(self, rank: int) -> int:
        """One past the last global vertex owned by ``rank``."""
        self._check_rank(rank)
        return self._offsets[rank + 1]

    def owner(self, vertex: int) -> int:
        """Rank that owns the global ``vertex``."""
        if not 0 <= vertex < self.total_vertices():
            raise IndexError(f"vertex {vertex} out of range")
        return bisect_right(self._offsets, vertex) - 1

    def local_graph(self, rank: int) -> Graph:
        """The part of the graph held by ``rank``."""
        self._check_rank(rank)
        return self._locals[rank]

    def total_vertices(self) -> int:
        """Number of vertices over all ranks."""
        return self._offsets[-1]

    def nprocs(self) -> int:
        """Number of ranks."""
        return len(self._locals)