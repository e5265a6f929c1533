"""Hypothesis strategies for property-based tests.

Re-exports commonly used strategies for convenience:
    from tests.strategies import connected_dags, STANDARD_SETTINGS
"""

from tests.strategies.dags import connected_dags, cyclic_connections, disjoint_dag_pairs
from tests.strategies.ids import stage_names
from tests.strategies.settings import QUICK_SETTINGS, STANDARD_SETTINGS

__all__ = [
    "QUICK_SETTINGS",
    "STANDARD_SETTINGS",
    "connected_dags",
    "cyclic_connections",
    "disjoint_dag_pairs",
    "stage_names",
]
