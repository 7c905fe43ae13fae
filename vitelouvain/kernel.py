"""Per-rank Louvain state and the local steps of one Louvain sweep."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from vitelouvain.graph import Comm, DistGraph, Graph


def sum_vertex_degree(graph: Graph) -> list[float]:
    """Weighted degree of every vertex of ``graph``."""
    return [
        sum(edge.weight for edge in graph.edges_of(vertex))
        for vertex in range(graph.num_vertices())
    ]


def constant_for_second_term(degree_lists: Iterable[Sequence[float]]) -> float:
    """Reciprocal of twice the total edge weight, summed over all ranks."""
    total = sum(sum(degrees) for degrees in degree_lists)
    if total == 0:
        raise ValueError("graph has no edge weight")
    return 1.0 / float(total)


@dataclass
class RankState:
    """Everything one rank keeps between the steps of a Louvain sweep."""

    dg: DistGraph
    rank: int
    constant: float
    graph: Graph = field(init=False)
    base: int = field(init=False)
    bound: int = field(init=False)
    vertex_degree: list[float] = field(init=False)
    past_comm: list[int] = field(init=False)
    curr_comm: list[int] = field(init=False)
    target_comm: list[int] = field(init=False)
    cluster_weight: list[float] = field(init=False)
    local_cinfo: list[Comm] = field(init=False)
    local_cupdate: list[Comm] = field(init=False)
    remote_comm: dict[int, int] = field(init=False, default_factory=dict)
    remote_cinfo: dict[int, Comm] = field(init=False, default_factory=dict)
    remote_cupdate: dict[int, Comm] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self.graph = self.dg.local_graph(self.rank)
        self.base = self.dg.base(self.rank)
        self.bound = self.dg.bound(self.rank)
        nv = self.graph.num_vertices()
        self.vertex_degree = sum_vertex_degree(self.graph)
        self.past_comm = list(range(self.base, self.base + nv))
        self.curr_comm = list(self.past_comm)
        self.target_comm = [0] * nv
        self.cluster_weight = [0.0] * nv
        self.local_cinfo = [Comm(1, degree) for degree in self.vertex_degree]
        self.local_cupdate = [Comm() for _ in range(nv)]

    @property
    def num_vertices(self) -> int:
        return self.graph.num_vertices()

    def is_local(self, item: int) -> bool:
        """Whether the global vertex or community ``item`` is owned here."""
        return self.base <= item < self.bound

    def community_info(self, comm: int) -> Comm:
        """Current size and degree of community ``comm``."""
        if self.is_local(comm):
            return self.local_cinfo[comm - self.base]
        return self.remote_cinfo[comm]

    def community_of(self, vertex: int) -> int:
        """Current community of the global ``vertex``."""
        if self.is_local(vertex):
            return self.curr_comm[vertex - self.base]
        return self.remote_comm[vertex]

    def clean(self) -> None:
        """Zero the cluster weights and the pending local updates."""
        self.cluster_weight = [0.0] * self.num_vertices
        for update in self.local_cupdate:
            update.size = 0
            update.degree = 0.0

    def apply_local_updates(self) -> None:
        """Fold the pending local updates into the community info and reset them."""
        for info, update in zip(self.local_cinfo, self.local_cupdate):
            info.size += update.size
            info.degree += update.degree
            update.size = 0
            update.degree = 0.0

    def rotate_communities(self) -> None:
        """Make the targets current, the current ones past, and reuse the past list."""
        self.past_comm, self.curr_comm, self.target_comm = (
            self.curr_comm,
            self.target_comm,
            self.past_comm,
        )


def build_local_map_counter(
    state: RankState, vertex: int
) -> tuple[dict[int, int], list[float], float]:
    """Weights from local ``vertex`` to each neighbouring community.

    Returns a map from community to slot, the weight per slot (slot 0 is
    the vertex's own community) and the weight of its self-loops.
    """
    cc = state.curr_comm[vertex]
    clmap: dict[int, int] = {cc: 0}
    counter: list[float] = [0.0]
    self_loop = 0.0
    own = vertex + state.base
    for edge in state.graph.edges_of(vertex):
        if edge.tail == own:
            self_loop += edge.weight
        tcomm = state.community_of(edge.tail)
        slot = clmap.get(tcomm)
        if slot is None:
            clmap[tcomm] = len(counter)
            counter.append(edge.weight)
        else:
            counter[slot] += edge.weight
    return clmap, counter, self_loop


def get_max_index(
    state: RankState,
    clmap: dict[int, int],
    counter: Sequence[float],
    self_loop: float,
    vertex_degree: float,
    curr_size: int,
    curr_degree: float,
    curr_comm: int,
) -> int:
    """The community with the largest modularity gain for a vertex."""
    max_index = curr_comm
    max_gain = 0.0
    max_size = curr_size
    eix = counter[0] - self_loop
    ax = curr_degree - vertex_degree
    for comm, slot in clmap.items():
        if comm == curr_comm:
            continue
        info = state.community_info(comm)
        eiy = counter[slot]
        gain = 2.0 * (eiy - eix) - 2.0 * vertex_degree * (info.degree - ax) * state.constant
        if gain > max_gain or (gain == max_gain and gain != 0.0 and comm < max_index):
            max_gain = gain
            max_index = comm
            max_size = info.size
    if max_size == 1 and curr_size == 1 and max_index > curr_comm:
        max_index = curr_comm
    return max_index


def _adjust(state: RankState, comm: int, size: int, degree: float) -> None:
    if state.is_local(comm):
        update = state.local_cupdate[comm - state.base]
    else:
        update = state.remote_cupdate[comm]
    update.size += size
    update.degree += degree


def execute_louvain_iteration(state: RankState, vertex: int) -> int:
    """Choose a target community for local ``vertex`` and record the move.

    Sets the vertex's target, adds to its cluster weight and records the
    change in community size and degree; returns the target.
    """
    cc = state.curr_comm[vertex]
    info = state.community_info(cc)
    cc_size, cc_degree = info.size, info.degree
    if state.graph.edges_of(vertex):
        clmap, counter, self_loop = build_local_map_counter(state, vertex)
        state.cluster_weight[vertex] += counter[0]
        target = get_max_index(
            state,
            clmap,
            counter,
            self_loop,
            state.vertex_degree[vertex],
            cc_size,
            cc_degree,
            cc,
        )
    else:
        target = cc
    if target != cc:
        degree = state.vertex_degree[vertex]
        _adjust(state, target, 1, degree)
        _adjust(state, cc, -1, -degree)
    state.target_comm[vertex] = target
    return target


def compute_modularity(states: Sequence[RankState]) -> float:
    """Modularity summed over all ranks' cluster weights and community degrees."""
    if not states:
        raise ValueError("need at least one rank state")
    e_xx = sum(sum(state.cluster_weight) for state in states)
    a2_x = sum(info.degree * info.degree for state in states for info in state.local_cinfo)
    constant = states[0].constant
    return e_xx * constant - a2_x * constant * constant