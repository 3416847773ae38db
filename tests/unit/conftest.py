# SPDX-License-Identifier: MIT
# Copyright (c) 2025 OmniNode Team
"""Shared pytest configuration for all unit tests.

This conftest.py automatically applies the `unit` marker to all tests
in the tests/unit/ directory hierarchy, providing consistent test
categorization without requiring individual files to set pytestmark.

NOTE: pytestmark at module-level in conftest.py does NOT automatically
apply to tests in other files. We use pytest_collection_modifyitems hook
instead to dynamically mark all tests in the unit directory.

This enables selective test execution:
    # Run only unit tests
    pytest -m unit

    # Run all except unit tests
    pytest -m "not unit"
"""

import pytest


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Dynamically add unit marker to all tests in the unit directory.

    Args:
        config: Pytest configuration object.
        items: List of collected test items.
    """
    unit_marker = pytest.mark.unit

    for item in items:
        if "tests/unit" in str(item.path):
            if not any(marker.name == "unit" for marker in item.iter_markers()):
                item.add_marker(unit_marker)
