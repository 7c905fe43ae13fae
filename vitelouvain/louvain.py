"""The distributed Louvain method, with optional early termination of settled vertices."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from vitelouvain.exchange import (
    VertexRequests,
    exchange_vertex_requests,
    fill_remote_communities,
    update_remote_communities,
)
from vitelouvain.graph import DistGraph
from vitelouvain.kernel import (
    RankState,
    compute_modularity,
    constant_for_second_term,
    execute_louvain_iteration,
    sum_vertex_degree,
)

# Number of frozen vertices, over all ranks, at which a sweep stops early.
ET_CUTOFF = 90
# Probability at or below which a vertex is frozen.
P_CUTOFF = 0.02


class EarlyTermination(Enum):
    """How vertices that stopped moving are taken out of later sweeps."""

    NONE = "none"
    FROZEN = "frozen"
    PROBABILISTIC = "probabilistic"


@dataclass(frozen=True)
class LouvainResult:
    """Outcome of one Louvain phase.

    ``communities`` gives the community of every global vertex, in vertex
    order over all ranks.
    """

    modularity: float
    communities: tuple[int, ...]
    iterations: int


def _setup(dg: DistGraph) -> tuple[list[RankState], VertexRequests]:
    degrees = [sum_vertex_degree(dg.local_graph(rank)) for rank in range(dg.nprocs())]
    constant = constant_for_second_term(degrees)
    states = [RankState(dg, rank, constant) for rank in range(dg.nprocs())]
    return states, exchange_vertex_requests(dg)


def _swap_vertex(state: RankState, vertex: int) -> None:
    past = state.past_comm[vertex]
    state.past_comm[vertex] = state.curr_comm[vertex]
    state.curr_comm[vertex] = state.target_comm[vertex]
    state.target_comm[vertex] = past


def _result(states: list[RankState], modularity: float, iterations: int) -> LouvainResult:
    communities = tuple(comm for state in states for comm in state.past_comm)
    return LouvainResult(modularity, communities, iterations)


class _Freezer:
    """Tracks which vertices still take part in the sweeps."""

    def __init__(self, states: list[RankState], mode: EarlyTermination, et_delta: float):
        self.mode = mode
        self.one_minus_delta = 1.0 - et_delta
        self.active = [[True] * state.num_vertices for state in states]
        self.frozen_weight = [[0.0] * state.num_vertices for state in states]
        self.p_curr = [[0.0] * state.num_vertices for state in states]
        self.p_prev = [[1.0] * state.num_vertices for state in states]

    def visit(self, rank: int, state: RankState, vertex: int) -> bool:
        """Process one vertex; return True when it was frozen."""
        if not self.active[rank][vertex]:
            state.cluster_weight[vertex] = self.frozen_weight[rank][vertex]
            return True
        execute_louvain_iteration(state, vertex)
        self.frozen_weight[rank][vertex] = state.cluster_weight[vertex]
        return False

    def rotate(self, states: list[RankState], iterations: int) -> None:
        if self.mode is EarlyTermination.NONE:
            for state in states:
                state.rotate_communities()
        elif self.mode is EarlyTermination.FROZEN:
            for state, active in zip(states, self.active):
                for vertex in range(state.num_vertices):
                    # The settled test compares the past community with the
                    # truth value of "target equals current".
                    settled = state.past_comm[vertex] == int(
                        state.target_comm[vertex] == state.curr_comm[vertex]
                    )
                    if iterations > 2 and settled:
                        active[vertex] = False
                    else:
                        _swap_vertex(state, vertex)
        else:
            for state, active, p_curr, p_prev in zip(
                states, self.active, self.p_curr, self.p_prev
            ):
                for vertex in range(state.num_vertices):
                    if not active[vertex]:
                        continue
                    if iterations > 2 and state.curr_comm[vertex] == state.past_comm[vertex]:
                        p_curr[vertex] = p_prev[vertex] * self.one_minus_delta
                        if p_curr[vertex] <= P_CUTOFF:
                            active[vertex] = False
                    if active[vertex]:
                        _swap_vertex(state, vertex)
            self.p_curr, self.p_prev = self.p_prev, self.p_curr


def run_louvain(
    dg: DistGraph,
    lower: float = -1.0,
    thresh: float = 1.0e-6,
    mode: EarlyTermination | str = EarlyTermination.NONE,
    et_delta: float = 0.25,
    et_local: bool = False,
) -> LouvainResult:
    """Run Louvain sweeps over all ranks until modularity stops improving.

    ``lower`` is the starting and minimum recorded modularity, ``thresh``
    the least gain that allows another sweep.  With early termination,
    vertices that stopped moving are frozen; unless ``et_local`` is set, the
    phase ends once the number of frozen vertices over all ranks reaches
    ``ET_CUTOFF``.  ``et_delta`` is the decay of a vertex's probability of
    staying active in probabilistic mode.
    """
    mode = EarlyTermination(mode)
    states, requests = _setup(dg)
    freezer = _Freezer(states, mode, et_delta)
    prev_mod = lower
    iterations = 0

    while True:
        iterations += 1
        fill_remote_communities(dg, states, requests)

        frozen_count = 0
        for rank, state in enumerate(states):
            state.clean()
            for vertex in range(state.num_vertices):
                if freezer.visit(rank, state, vertex):
                    frozen_count += 1

        if mode is not EarlyTermination.NONE and not et_local and frozen_count >= ET_CUTOFF:
            break

        for state in states:
            state.apply_local_updates()
        update_remote_communities(dg, states)

        curr_mod = compute_modularity(states)
        if curr_mod - prev_mod < thresh:
            break
        prev_mod = max(curr_mod, lower)

        freezer.rotate(states, iterations)

    return _result(states, prev_mod, iterations)