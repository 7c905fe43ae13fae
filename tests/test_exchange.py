import pytest

from vitelouvain.exchange import (
    exchange_vertex_requests,
    fill_remote_communities,
    update_remote_communities,
)
from vitelouvain.graph import Comm, DistGraph
from vitelouvain.kernel import (
    RankState,
    constant_for_second_term,
    execute_louvain_iteration,
    sum_vertex_degree,
)


def _undirected(pairs):
    for a, b in pairs:
        yield (a, b, 1.0)
        yield (b, a, 1.0)


def _path(nprocs):
    return DistGraph.from_edges(4, list(_undirected([(0, 1), (1, 2), (2, 3)])), nprocs)


def _states(dg):
    constant = constant_for_second_term(
        sum_vertex_degree(dg.local_graph(r)) for r in range(dg.nprocs())
    )
    return [RankState(dg, r, constant) for r in range(dg.nprocs())]


def test_requests_on_path_split_in_two():
    dg = _path(2)
    assert exchange_vertex_requests(dg) == [{1: (2,)}, {0: (1,)}]


def test_single_rank_needs_nothing():
    dg = _path(1)
    assert exchange_vertex_requests(dg) == [{}]


def test_requests_are_owned_by_the_keyed_rank():
    pairs = [(0, 5), (1, 4), (2, 3), (0, 3), (5, 1)]
    dg = DistGraph.from_edges(6, list(_undirected(pairs)), 3)
    for rank, needed in enumerate(exchange_vertex_requests(dg)):
        for owner, vertices in needed.items():
            assert owner != rank
            assert list(vertices) == sorted(set(vertices))
            assert all(dg.owner(v) == owner for v in vertices)


def test_fill_sets_remote_views():
    dg = _path(2)
    states = _states(dg)
    fill_remote_communities(dg, states, exchange_vertex_requests(dg))
    assert states[0].remote_comm == {2: 2}
    assert states[1].remote_comm == {1: 1}
    assert states[0].remote_cinfo == {2: states[1].local_cinfo[0]}
    assert states[1].remote_cinfo == {1: states[0].local_cinfo[1]}
    assert states[0].remote_cupdate == {2: Comm()}


def test_fill_copies_community_info():
    dg = _path(2)
    states = _states(dg)
    fill_remote_communities(dg, states, exchange_vertex_requests(dg))
    states[0].remote_cinfo[2].size += 5
    assert states[1].local_cinfo[0].size == 1


def test_fill_includes_remote_community_of_own_vertex():
    dg = _path(2)
    states = _states(dg)
    states[0].curr_comm[1] = 3
    fill_remote_communities(dg, states, exchange_vertex_requests(dg))
    assert set(states[0].remote_cinfo) == {2, 3}
    assert set(states[0].remote_cupdate) == {2, 3}


def test_fill_rejects_wrong_request_count():
    dg = _path(2)
    states = _states(dg)
    with pytest.raises(ValueError):
        fill_remote_communities(dg, states, [{}])


def test_fill_rejects_wrong_state_count():
    dg = _path(2)
    states = _states(dg)
    with pytest.raises(ValueError):
        fill_remote_communities(dg, states[:1], exchange_vertex_requests(dg))


def test_update_adds_to_owner():
    dg = _path(2)
    states = _states(dg)
    fill_remote_communities(dg, states, exchange_vertex_requests(dg))
    before = Comm(states[1].local_cinfo[0].size, states[1].local_cinfo[0].degree)
    states[0].remote_cupdate[2] = Comm(1, 1.5)
    update_remote_communities(dg, states)
    assert states[1].local_cinfo[0] == Comm(before.size + 1, before.degree + 1.5)


def test_update_rejects_local_community():
    dg = _path(2)
    states = _states(dg)
    states[0].remote_cupdate = {0: Comm(1, 1.0)}
    with pytest.raises(ValueError):
        update_remote_communities(dg, states)


def test_sweep_conserves_sizes_and_degrees():
    pairs = [(0, 1), (1, 2), (2, 0), (3, 4), (4, 5), (5, 3), (2, 3)]
    dg = DistGraph.from_edges(6, list(_undirected(pairs)), 3)
    states = _states(dg)
    fill_remote_communities(dg, states, exchange_vertex_requests(dg))
    total_degree = sum(i.degree for s in states for i in s.local_cinfo)
    for state in states:
        state.clean()
        for v in range(state.num_vertices):
            execute_louvain_iteration(state, v)
    for state in states:
        state.apply_local_updates()
    update_remote_communities(dg, states)
    assert sum(i.size for s in states for i in s.local_cinfo) == 6
    assert sum(i.degree for s in states for i in s.local_cinfo) == pytest.approx(total_degree)