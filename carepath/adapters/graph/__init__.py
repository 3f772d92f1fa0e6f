"""Graph store adapters for CarePath.

This module contains the Dgraph adapter implementing HistoryStorePort and the
N-Quad fact construction it relies on.
"""

from carepath.adapters.graph.dgraph_adapter import DgraphHistoryAdapter

__all__ = ["DgraphHistoryAdapter"]
