# vitelouvain

Louvain community detection for weighted graphs. The package organises the
work the way a distributed-memory implementation does. The vertex set is
split into contiguous blocks, one per rank. Each rank keeps the communities
it owns and cached copies of the remote communities it touches. All ranks
live in one Python process, so every exchange step is plain data movement
between the ranks' states.

The package has no third-party dependencies.

## Modules

- `vitelouvain.graph`
  - `Graph` is a compressed-row graph.
  - `DistGraph` splits a graph into per-rank blocks. Block sizes differ by at
    most one, and the lower ranks get the larger blocks. It provides `base`,
    `bound`, `owner`, `local_graph`, `total_vertices` and `nprocs`.
  - `Edge`, `Comm` and `CommInfo` are small records.
- `vitelouvain.kernel`
  - `RankState` holds the per-rank Louvain state.
  - It also has the local steps of a sweep: `sum_vertex_degree`,
    `constant_for_second_term`, `build_local_map_counter`, `get_max_index`,
    `execute_louvain_iteration` and `compute_modularity`.
- `vitelouvain.exchange` moves data between ranks:
  - `exchange_vertex_requests` works out which remote vertices each rank
    needs.
  - `fill_remote_communities` refreshes each rank's view of remote vertices
    and communities.
  - `update_remote_communities` sends pending community changes to the
    owning ranks.
- `vitelouvain.louvain`
  - `run_louvain` runs Louvain sweeps until modularity stops improving.
  - `EarlyTermination` is the early-termination mode.
  - `LouvainResult` holds the outcome.
- `vitelouvain.colored`
  - `color_order` groups vertex indices by colour. Negative colours go into
    the last class.
  - `run_louvain_colored` and `run_louvain_vertex_order` are the colour-driven
    sweeps.
- `vitelouvain.groundtruth`
  - `load_ground_truth_file` reads `vertex community` lines.
  - `gather_all_communities` joins per-rank community lists in rank order.

## Usage

`Graph.from_edges` and `DistGraph.from_edges` store the half-edges exactly as
given. For an undirected graph, list both directions.

```python
from vitelouvain.graph import DistGraph
from vitelouvain.louvain import EarlyTermination, run_louvain

# two triangles joined by a single edge
pairs = [(0, 1), (1, 2), (0, 2), (3, 4), (4, 5), (3, 5), (2, 3)]
edges = [(u, v, 1.0) for u, v in pairs] + [(v, u, 1.0) for u, v in pairs]
dg = DistGraph.from_edges(6, edges, nprocs=2)

result = run_louvain(dg, lower=-1.0, thresh=1.0e-6, mode=EarlyTermination.NONE)
print(result.modularity, result.iterations)
print(result.communities)  # one community id per global vertex
```

### Parameters of `run_louvain`

- `lower` is the starting modularity and also the least modularity that is
  recorded. The default is `-1.0`.
- `thresh` is the smallest gain that allows another sweep. The default is
  `1.0e-6`.
- `mode` is an `EarlyTermination` member or its string value: `"none"`,
  `"frozen"` or `"probabilistic"`.
  - In the frozen and probabilistic modes, vertices that stop moving after the
    second sweep are frozen. Frozen vertices keep the cluster weight they last
    had.
  - In probabilistic mode, a vertex's probability of staying active is
    multiplied by `1 - et_delta` (`et_delta` defaults to `0.25`) on each sweep
    in which it stays put. The vertex is frozen once that probability falls to
    `P_CUTOFF` (0.02) or below.
- `et_local` changes when early termination ends the phase.
  - When `et_local` is false, the phase stops as soon as the number of frozen
    vertices over all ranks reaches `ET_CUTOFF` (90).
  - In that case the reported modularity is the one from the previous sweep.

### Colour-driven sweeps

The colour-driven sweeps take one colour per global vertex:

```python
from vitelouvain.colored import run_louvain_colored, run_louvain_vertex_order

colors = [0, 1, 2, 0, 1, 2]
result = run_louvain_colored(dg, colors, 3)
result = run_louvain_vertex_order(dg, colors, 3)
```

- `run_louvain_colored` treats every colour class as its own step. Remote
  information is refreshed before each class, and the changes are applied
  after it.
- `run_louvain_vertex_order` exchanges data once per sweep. The colours only
  decide the order in which each rank visits its vertices.
- With `num_colors == 1`, both functions run the plain `run_louvain` and
  ignore the early-termination settings. They log a message when they do so.

### Ground-truth files

`load_ground_truth_file(path, zero_based=True)` returns the community ids in
line order. When `zero_based` is false, the ids are lowered by one.

## What the package does not do

- It has no command-line program.
- It does not read or write graph files.
- It does not generate graphs or compute vertex colourings.
- It never runs work in separate processes or on separate machines. The
  "ranks" are partitions kept side by side in memory.
- It runs a single Louvain phase. It does not collapse communities into a new
  graph for further phases.

## Testing

The tests live in `tests/` and use pytest, which the `test` extra installs.