import pytest

from vitelouvain.colored import color_order, run_louvain_colored, run_louvain_vertex_order
from vitelouvain.graph import DistGraph
from vitelouvain.louvain import EarlyTermination, run_louvain

RUNNERS = [run_louvain_colored, run_louvain_vertex_order]


def _undirected(pairs):
    edges = []
    for u, v in pairs:
        edges.append((u, v, 1.0))
        edges.append((v, u, 1.0))
    return edges


def _two_edges(nprocs=1):
    return DistGraph.from_edges(4, _undirected([(0, 1), (2, 3)]), nprocs)


def _two_triangles(nprocs=1):
    pairs = [(0, 1), (1, 2), (0, 2), (3, 4), (4, 5), (3, 5), (2, 3)]
    return DistGraph.from_edges(6, _undirected(pairs), nprocs)


def test_color_order_negative_goes_to_last_class():
    order = color_order([0, 1, 0, -1], 3)
    assert order[2] == (3,)


def test_color_order_partitions_vertices_in_ascending_order():
    colors = [2, 0, 1, 0, 2, -1, 1]
    order = color_order(colors, 3)
    assert len(order) == 3
    flat = [v for group in order for v in group]
    assert sorted(flat) == list(range(len(colors)))
    for group in order:
        assert list(group) == sorted(group)
    for color, group in enumerate(order):
        for vertex in group:
            assert colors[vertex] == color or (colors[vertex] < 0 and color == 2)


def test_color_order_rejects_out_of_range_colour():
    with pytest.raises(ValueError):
        color_order([0, 3], 3)


def test_color_order_rejects_no_colours():
    with pytest.raises(ValueError):
        color_order([0], 0)


@pytest.mark.parametrize("runner", RUNNERS)
def test_two_disjoint_edges(runner):
    result = runner(_two_edges(), [0, 1, 0, 1], 2)
    assert result.communities == (0, 0, 2, 2)
    assert result.modularity == pytest.approx(0.5)
    assert result.iterations >= 2


@pytest.mark.parametrize("runner", RUNNERS)
def test_result_independent_of_rank_count_for_separate_components(runner):
    one = runner(_two_edges(1), [0, 1, 0, 1], 2)
    two = runner(_two_edges(2), [0, 1, 0, 1], 2)
    assert one == two


@pytest.mark.parametrize("runner", RUNNERS)
@pytest.mark.parametrize("mode", list(EarlyTermination))
def test_modes_agree_on_small_graph(runner, mode):
    plain = runner(_two_edges(), [0, 1, 0, 1], 2)
    with_mode = runner(_two_edges(), [0, 1, 0, 1], 2, mode=mode, et_local=True)
    assert with_mode == plain


@pytest.mark.parametrize("runner", RUNNERS)
def test_single_colour_falls_back_to_plain(runner):
    dg = _two_triangles(2)
    expected = run_louvain(dg)
    assert runner(dg, [0] * 6, 1, mode="probabilistic") == expected


@pytest.mark.parametrize("runner", RUNNERS)
@pytest.mark.parametrize("nprocs", [1, 2, 3])
def test_invariants_on_two_triangles(runner, nprocs):
    dg = _two_triangles(nprocs)
    colors = [0, 1, 2, 0, 1, 2]
    result = runner(dg, colors, 3)
    assert len(result.communities) == 6
    assert all(0 <= comm < 6 for comm in result.communities)
    assert result.modularity >= -1.0
    assert result.iterations >= 1
    assert runner(dg, colors, 3) == result


@pytest.mark.parametrize("runner", RUNNERS)
def test_lower_bound_is_respected(runner):
    result = runner(_two_triangles(), [0, 1, 2, 0, 1, 2], 3, lower=0.9)
    assert result.modularity >= 0.9


@pytest.mark.parametrize("runner", RUNNERS)
def test_wrong_number_of_colours_raises(runner):
    with pytest.raises(ValueError):
        runner(_two_edges(), [0, 1, 0], 2)


@pytest.mark.parametrize("runner", RUNNERS)
def test_colour_out_of_range_raises(runner):
    with pytest.raises(ValueError):
        runner(_two_edges(), [0, 1, 5, 1], 2)


@pytest.mark.parametrize("runner", RUNNERS)
def test_unknown_mode_raises(runner):
    with pytest.raises(ValueError):
        runner(_two_edges(), [0, 1, 0, 1], 2, mode="sometimes")