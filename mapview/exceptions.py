"""
Custom exceptions for the mapview package.

This module defines exception classes for better error handling and messaging
across the package, particularly in the dispatch API, projection handling and
the slide comparison widget.
"""


class MapviewError(Exception):
    """Base exception class for all mapview errors."""
    pass


class InvalidParameterError(MapviewError):
    """
    Raised for invalid user inputs.

    This exception is used for parameter validation failures such as
    unknown basemap providers, missing attribute columns, empty layers or
    out-of-range opacities.
    """
    pass


class UnsupportedTypeError(MapviewError):
    """
    Raised when no viewer exists for the supplied object.

    This occurs for objects that are neither xarray rasters nor geopandas
    vector layers, or for vector layers mixing points, lines and polygons.
    """
    pass


class ProjectionError(MapviewError):
    """
    Raised when a coordinate reference system cannot be read or applied.

    This typically occurs for malformed CRS definitions or when rasterio /
    geopandas fail to reproject the data to geographic coordinates.
    """
    pass


class RenderError(MapviewError):
    """
    Raised when a layer cannot be added to the map.

    This can occur due to invalid geometries, non-finite coordinates, or
    folium/matplotlib errors while building the widget.
    """
    pass


class SlideViewError(MapviewError):
    """
    Raised when the slide comparison widget cannot be built.

    This typically occurs when the PNG images cannot be read or written, or
    the two inputs are not of the same kind.
    """
    pass
