"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing accidental misuse of semantically different string values.
"""

from typing import NewType

StageName = NewType("StageName", str)
"""Unique stage identifier in a pipeline graph (e.g., 'csv_reader', 'dedupe')"""
