"""
Exceptions raised by the NDS tile scheme.

All errors derive from ValueError so callers that already guard tile
arithmetic with ``except ValueError`` keep working.
"""


class NdsError(ValueError):
    """Base class for all NDS tile scheme errors."""


class InvalidLevelError(NdsError):
    """Tile level outside [0, 15]."""


class InvalidTileNumberError(NdsError):
    """Tile number out of range for its level."""


class InvalidTileIdError(NdsError):
    """Packed tile ID without a decodable level marker."""


class InvalidQuadkeyError(NdsError):
    """Quadkey containing a digit outside 0..3."""


class InvalidPolygonError(NdsError):
    """Polygon too degenerate to rasterize or enclose."""


class UnresolvableMasterTileError(NdsError):
    """
    No common tile exists for a set of points, not even on level 0.

    This happens when the points lie on both sides of the prime meridian,
    which separates the two level-0 tiles.
    """
