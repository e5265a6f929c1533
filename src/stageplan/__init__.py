"""
stageplan: Stage graph validation and ordering for data-pipeline planners.

Builds a directed acyclic graph from stage-to-stage connections, rejects
cycles and disconnected islands, and hands the planner deterministic
linear orders and reachable sub-graphs.
"""

__version__ = "0.1.0"
