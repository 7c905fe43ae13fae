"""Exchange of vertex and community data between the ranks of a distributed graph.

All ranks live in one process, so each collective step is carried out for
every rank at once from the ranks' current state.
"""

from __future__ import annotations

from typing import Sequence

from vitelouvain.graph import Comm, DistGraph
from vitelouvain.kernel import RankState

VertexRequests = list[dict[int, tuple[int, ...]]]


def exchange_vertex_requests(dg: DistGraph) -> VertexRequests:
    """Find which remote vertices every rank needs to know about.

    Returns one mapping per rank from an owning rank to the sorted global
    vertices the rank reaches over an edge and that the owner holds.  Only
    ranks with at least one such vertex appear as keys.
    """
    requests: VertexRequests = []
    for rank in range(dg.nprocs()):
        graph = dg.local_graph(rank)
        needed: dict[int, set[int]] = {}
        for _, edge in graph:
            owner = dg.owner(edge.tail)
            if owner != rank:
                needed.setdefault(owner, set()).add(edge.tail)
        requests.append(
            {owner: tuple(sorted(vertices)) for owner, vertices in sorted(needed.items())}
        )
    return requests


def _check_states(dg: DistGraph, states: Sequence[RankState]) -> None:
    if len(states) != dg.nprocs():
        raise ValueError("need exactly one rank state per rank")
    for rank, state in enumerate(states):
        if state.rank != rank:
            raise ValueError(f"state at position {rank} belongs to rank {state.rank}")


def fill_remote_communities(
    dg: DistGraph, states: Sequence[RankState], requests: VertexRequests
) -> None:
    """Refresh every rank's view of remote vertices and communities.

    Each rank learns the current community of the remote vertices it
    requested, a copy of the size and degree of every remote community it
    touches (through those vertices or its own), and a zeroed update slot
    for each of them.
    """
    _check_states(dg, states)
    if len(requests) != dg.nprocs():
        raise ValueError("need exactly one request mapping per rank")

    views: list[tuple[dict[int, int], dict[int, Comm]]] = []
    for rank, state in enumerate(states):
        remote_comm: dict[int, int] = {}
        for owner, vertices in requests[rank].items():
            if owner == rank:
                raise ValueError(f"rank {rank} cannot request its own vertices")
            holder = states[owner]
            for vertex in vertices:
                if not holder.is_local(vertex):
                    raise ValueError(f"vertex {vertex} is not owned by rank {owner}")
                remote_comm[vertex] = holder.curr_comm[vertex - holder.base]

        touched = {
            comm
            for comm in (*remote_comm.values(), *state.curr_comm)
            if dg.owner(comm) != rank
        }
        remote_cinfo: dict[int, Comm] = {}
        for comm in sorted(touched):
            holder = states[dg.owner(comm)]
            info = holder.local_cinfo[comm - holder.base]
            remote_cinfo[comm] = Comm(info.size, info.degree)
        views.append((remote_comm, remote_cinfo))

    for state, (remote_comm, remote_cinfo) in zip(states, views):
        state.remote_comm = remote_comm
        state.remote_cinfo = remote_cinfo
        state.remote_cupdate = {comm: Comm() for comm in remote_cinfo}


def update_remote_communities(dg: DistGraph, states: Sequence[RankState]) -> None:
    """Send every rank's pending remote updates to the communities' owners.

    The owners add the received size and degree changes to their local
    community info, in rank order and then in community order.
    """
    _check_states(dg, states)
    for rank, state in enumerate(states):
        for comm, update in sorted(state.remote_cupdate.items()):
            owner = dg.owner(comm)
            if owner == rank:
                raise ValueError(f"community {comm} is local to rank {rank}")
            holder = states[owner]
            info = holder.local_cinfo[comm - holder.base]
            info.size += update.size
            info.degree += update.degree