"""Strategies for stage names used in pipeline graphs."""

from hypothesis import strategies as st

# Stage names (lowercase with underscores and digits, leading letter)
stage_names = st.text(
    min_size=1,
    max_size=12,
    alphabet="abcdefghijklmnopqrstuvwxyz_0123456789",
).filter(lambda s: s[0].isalpha())
