"""Louvain sweeps that visit the vertices of each rank one colour class at a time."""

from __future__ import annotations

import logging
from typing import Sequence

from vitelouvain.exchange import fill_remote_communities, update_remote_communities
from vitelouvain.graph import DistGraph
from vitelouvain.kernel import RankState, compute_modularity
from vitelouvain.louvain import (
    ET_CUTOFF,
    EarlyTermination,
    LouvainResult,
    _Freezer,
    _result,
    _setup,
    run_louvain,
)

logger = logging.getLogger(__name__)

ColorOrder = tuple[tuple[int, ...], ...]


def color_order(colors: Sequence[int], num_colors: int) -> ColorOrder:
    """Group vertex indices by colour.

    Returns one tuple per colour holding the indices of the vertices of
    that colour in ascending order.  Vertices with a negative colour are
    put in the last colour class.
    """
    if num_colors < 1:
        raise ValueError("there must be at least one colour")
    groups: list[list[int]] = [[] for _ in range(num_colors)]
    for vertex, color in enumerate(colors):
        if color >= num_colors:
            raise ValueError(f"colour {color} of vertex {vertex} is out of range")
        groups[num_colors - 1 if color < 0 else color].append(vertex)
    return tuple(tuple(group) for group in groups)


def _rank_orders(dg: DistGraph, colors: Sequence[int], num_colors: int) -> list[ColorOrder]:
    if len(colors) != dg.total_vertices():
        raise ValueError("need exactly one colour per vertex")
    return [
        color_order(colors[dg.base(rank):dg.bound(rank)], num_colors)
        for rank in range(dg.nprocs())
    ]


def _visit_color(
    states: list[RankState], freezer: _Freezer, orders: list[ColorOrder], color: int
) -> int:
    frozen = 0
    for rank, (state, order) in enumerate(zip(states, orders)):
        for vertex in order[color]:
            if freezer.visit(rank, state, vertex):
                frozen += 1
    return frozen


def _apply_updates(dg: DistGraph, states: list[RankState]) -> None:
    for state in states:
        state.apply_local_updates()
    update_remote_communities(dg, states)


def _run(
    dg: DistGraph,
    colors: Sequence[int],
    num_colors: int,
    lower: float,
    thresh: float,
    mode: EarlyTermination | str,
    et_delta: float,
    et_local: bool,
    exchange_per_color: bool,
) -> LouvainResult:
    mode = EarlyTermination(mode)
    if num_colors == 1:
        logger.info("No color specified, executing non-color Louvain...")
        return run_louvain(dg, lower, thresh)

    orders = _rank_orders(dg, colors, num_colors)
    states, requests = _setup(dg)
    freezer = _Freezer(states, mode, et_delta)
    prev_mod = lower
    iterations = 0

    while True:
        iterations += 1
        for state in states:
            state.clean()

        frozen_count = 0
        if exchange_per_color:
            for color in range(num_colors):
                fill_remote_communities(dg, states, requests)
                frozen_count += _visit_color(states, freezer, orders, color)
                _apply_updates(dg, states)
        else:
            fill_remote_communities(dg, states, requests)
            for color in range(num_colors):
                frozen_count += _visit_color(states, freezer, orders, color)

        if mode is not EarlyTermination.NONE and not et_local and frozen_count >= ET_CUTOFF:
            break

        if not exchange_per_color:
            _apply_updates(dg, states)

        curr_mod = compute_modularity(states)
        if curr_mod - prev_mod < thresh:
            break
        prev_mod = max(curr_mod, lower)

        freezer.rotate(states, iterations)

    return _result(states, prev_mod, iterations)


def run_louvain_colored(
    dg: DistGraph,
    colors: Sequence[int],
    num_colors: int,
    lower: float = -1.0,
    thresh: float = 1.0e-6,
    mode: EarlyTermination | str = EarlyTermination.NONE,
    et_delta: float = 0.25,
    et_local: bool = False,
) -> LouvainResult:
    """Louvain sweeps in which every colour class is a separate step.

    Before each colour class the ranks refresh their view of remote
    communities, and after it the community changes are applied everywhere.
    ``colors`` holds one colour per global vertex.  With a single colour the
    plain method is run and the early-termination settings are ignored.
    """
    return _run(dg, colors, num_colors, lower, thresh, mode, et_delta, et_local, True)


def run_louvain_vertex_order(
    dg: DistGraph,
    colors: Sequence[int],
    num_colors: int,
    lower: float = -1.0,
    thresh: float = 1.0e-6,
    mode: EarlyTermination | str = EarlyTermination.NONE,
    et_delta: float = 0.25,
    et_local: bool = False,
) -> LouvainResult:
    """Louvain sweeps that only order the vertices by colour.

    Communication happens once per sweep, exactly as in the plain method;
    the colours decide only the order in which each rank visits its
    vertices.  With a single colour the plain method is run.
    """
    return _run(dg, colors, num_colors, lower, thresh, mode, et_delta, et_local, False)