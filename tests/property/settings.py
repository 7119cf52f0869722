# tests/property/settings.py
"""Standardized Hypothesis settings profiles for property tests.

Usage:
    from tests.property.settings import STANDARD_SETTINGS

    @given(history=histories())
    @STANDARD_SETTINGS
    def test_something(history):
        ...

Tiers:
- DETERMINISM_SETTINGS: 500 examples - repeat-run equality checks
- STATE_MACHINE_SETTINGS: 200 examples - stateful tests
- STANDARD_SETTINGS: 100 examples - regular property tests
- QUICK_SETTINGS: 20 examples - fast validation tests
"""

from hypothesis import settings

DETERMINISM_SETTINGS = settings(max_examples=500)

STATE_MACHINE_SETTINGS = settings(max_examples=200, stateful_step_count=40)

STANDARD_SETTINGS = settings(max_examples=100)

QUICK_SETTINGS = settings(max_examples=20)
