"""
mapview - Interactive web maps of rasters and vector layers.

This package turns in-memory spatial objects (xarray rasters, geopandas
layers) into Leaflet maps via folium, with basemaps, colored layers, popups,
legends and a layers control, plus a slider widget to compare two images.

Quick Start:
    >>> from mapview import map_view
    >>> from mapview.data import open_raster, open_vector
    >>>
    >>> # Draw a raster
    >>> mv = map_view(open_raster("dem.tif"))
    >>> mv.save("dem.html")

    >>> # One layer per attribute column, added to the same map
    >>> mv = map_view(open_vector("meuse.gpkg"), zcol=["zinc", "lead"], map=mv)

    >>> # Compare two images
    >>> from mapview import slide_view
    >>> slide_view("before.png", "after.png").save("compare.html")

Advanced Usage:
    >>> from mapview import Config, mapview_palette
    >>>
    >>> config = Config(map_types=("CartoDB.Positron",), layer_opacity=1.0)
    >>> mv = map_view(dem, config=config, color=mapview_palette(12))
"""

__version__ = "0.1.0"

# Initialize logging with default settings
from .logging_config import setup_logging
setup_logging()

# Core constants and configuration
from .constants import MAP_PROVIDERS
from .config import Config

# Result type
from .result import MapView

# Palettes
from .palette import color_factor, color_numeric, mapview_palette

# User-facing API
from .api import map_view, mapview

# Slide comparison
from .slideview import SlideView, slide_view

# Exceptions
from .exceptions import (
    MapviewError,
    InvalidParameterError,
    UnsupportedTypeError,
    ProjectionError,
    RenderError,
    SlideViewError
)

__all__ = [
    # Version info
    "__version__",

    # Constants and config
    "MAP_PROVIDERS",
    "Config",

    # Result and palettes
    "MapView",
    "mapview_palette",
    "color_numeric",
    "color_factor",

    # User-facing API
    "map_view",
    "mapview",
    "slide_view",
    "SlideView",

    # Exceptions
    "MapviewError",
    "InvalidParameterError",
    "UnsupportedTypeError",
    "ProjectionError",
    "RenderError",
    "SlideViewError",
]
