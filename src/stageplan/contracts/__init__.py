"""Shared contracts for values that cross the graph boundary.

This package is a LEAF MODULE with no outbound dependencies to core.
Settings classes are NOT re-exported here - import them from
stageplan.core.config.

Import patterns:
    from stageplan.contracts import Connection, StageName, TieBreak
"""

from stageplan.contracts.connection import Connection
from stageplan.contracts.enums import TieBreak
from stageplan.contracts.types import StageName

__all__ = [
    "Connection",
    "StageName",
    "TieBreak",
]
