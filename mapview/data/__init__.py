"""
File readers for mapview.

Example:
    >>> from mapview.data import open_raster, open_vector
    >>> from mapview import map_view
    >>>
    >>> map_view(open_raster("dem.tif"))
    >>> map_view(open_vector("rivers.gpkg"))
"""

from .readers import open_raster, open_vector

__all__ = ["open_raster", "open_vector"]
