"""Shared fixtures."""

import pytest


# rough outline of Germany, closed
GERMANY = [
    (10.5, 45.9),
    (13.0, 45.9),
    (14.0, 49.0),
    (12.0, 50.0),
    (15.0, 51.0),
    (15.0, 54.0),
    (13.5, 54.5),
    (11.0, 54.0),
    (10.0, 55.0),
    (8.5, 55.0),
    (9.0, 54.0),
    (7.0, 53.5),
    (6.0, 52.0),
    (6.1, 50.0),
    (8.0, 49.0),
    (7.5, 47.5),
    (10.5, 45.9),
]


@pytest.fixture
def germany():
    """Polygon approximating the border of Germany."""
    return list(GERMANY)
