from .visibility import FogTileState, VisibilityMap, compute_visibility
from .los import chebyshev_distance, has_line_of_sight

__all__ = ["FogTileState", "VisibilityMap", "chebyshev_distance", "compute_visibility", "has_line_of_sight"]
