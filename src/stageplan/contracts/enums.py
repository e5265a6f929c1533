"""Policies and modes shared between the graph and its callers."""

from enum import StrEnum


class TieBreak(StrEnum):
    """Rule for choosing one stage among several equally eligible stages.

    Applies wherever the graph has to pick "a" source or sink: linearization,
    remove_source()/remove_sink(), cycle diagnostics and island seeding.
    Either policy makes every result reproducible across runs.
    """

    LEXICOGRAPHIC = "lexicographic"
    INSERTION = "insertion"
