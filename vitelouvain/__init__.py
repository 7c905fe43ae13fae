"""Louvain community detection over block-partitioned graphs held in one process."""

__version__ = "0.1.0"

__all__ = ["graph", "kernel", "exchange", "louvain", "colored", "groundtruth"]