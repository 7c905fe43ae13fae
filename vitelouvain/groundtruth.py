"""Reading ground-truth community files and gathering community lists."""

from __future__ import annotations

import logging
import os
import re
from typing import Iterable, Sequence

logger = logging.getLogger(__name__)

_INTEGER = re.compile(r"\s*([+-]?\d+)")


def _parse_line(line: str) -> int:
    """Community id on one ``vertex community`` line, before any rebasing.

    A line with no leading vertex id yields -1; a line whose community id
    is missing or malformed yields 0.
    """
    first = _INTEGER.match(line)
    if first is None:
        return -1
    second = _INTEGER.match(line, first.end())
    if second is None:
        return 0
    return int(second.group(1))


def load_ground_truth_file(
    path: str | os.PathLike[str], zero_based: bool = True
) -> list[int]:
    """Load the community of every vertex from a ground-truth file.

    Each line holds a vertex id and a community id separated by
    whitespace; the community ids are returned in line order.  When
    ``zero_based`` is false the ids are taken as one-based and lowered by
    one.
    """
    communities: list[int] = []
    with open(path, encoding="utf-8") as handle:
        for raw in handle:
            comm = _parse_line(raw.rstrip("\n"))
            if not zero_based:
                comm -= 1
            communities.append(comm)
    logger.info(
        "Loaded ground-truth file: %s, containing community information for %d vertices.",
        os.fspath(path),
        len(communities),
    )
    return communities


def gather_all_communities(local_communities: Iterable[Sequence[int]]) -> list[int]:
    """Join the per-rank community lists, in rank order, into one list."""
    return [comm for part in local_communities for comm in part]