# tests/conftest.py
"""Shared test fixtures and Hypothesis configuration.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os

import pytest
from hypothesis import Phase, Verbosity, settings

from stageplan.core.dag import StageGraph

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Graph Fixtures
# =============================================================================

DIAMOND = [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d")]
"""a fans out to b and c, which join again at d."""


@pytest.fixture
def diamond() -> StageGraph:
    return StageGraph.from_connections(DIAMOND)


@pytest.fixture
def chain() -> StageGraph:
    """a -> b -> c -> d"""
    return StageGraph.from_connections([("a", "b"), ("b", "c"), ("c", "d")])
