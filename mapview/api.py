"""
Main API module for mapview.

``map_view()`` (alias ``mapview``) is the single user-facing entry point. It
looks at the type of the object passed in and hands it to the matching
viewer in ``mapview.rendering``:

    =====================================  ===========================
    Object                                 Viewer
    =====================================  ===========================
    2-D xarray.DataArray                   view_raster_layer
    3-D xarray.DataArray                   view_raster_stack
    xarray.Dataset                         view_raster_dataset
    GeoDataFrame with attribute columns    view_points / view_lines / view_polygons
    GeoSeries or bare GeoDataFrame         view_*_plain
    None                                   view_empty
    =====================================  ===========================

Example:
    >>> import geopandas as gpd
    >>> from mapview import map_view
    >>>
    >>> gdf = gpd.read_file("meuse.gpkg")
    >>> mv = map_view(gdf, zcol="zinc")
    >>> mv.save("meuse.html")

    >>> # Add a raster to the same map
    >>> mv = map_view(dem, map=mv)
"""

import logging
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple, Union

import folium
import geopandas as gpd
import xarray as xr

from .config import Config, resolve
from .constants import EASTER_EGG_LOCATION
from .exceptions import InvalidParameterError, MapviewError, RenderError, UnsupportedTypeError
from .rendering.basemap import as_folium_map, get_group, init_base_maps, layers_control
from .rendering.raster import view_raster_dataset, view_raster_layer, view_raster_stack
from .rendering.vector import VIEWERS, attribute_columns, geometry_kind
from .result import MapView

logger = logging.getLogger(__name__)

_RASTER_OPTIONS = frozenset({
    "maxpixels", "color", "na_color", "use_layer_names", "values", "map_types",
    "layer_opacity", "legend", "legend_opacity", "trim", "verbose", "layer_name",
    "config",
})
_PLAIN_OPTIONS = frozenset({"color", "map_types", "verbose", "layer_name", "config"})
_DATA_OPTIONS = _PLAIN_OPTIONS | {"zcol", "burst", "na_color", "legend", "legend_opacity"}

# Options understood by at least one viewer. Any of these that the selected
# viewer does not take are dropped; all other keyword arguments go to folium.
VIEWER_OPTIONS: Dict[str, FrozenSet[str]] = {
    "raster": _RASTER_OPTIONS,
    "stack": _RASTER_OPTIONS,
    "dataset": _RASTER_OPTIONS | {"zcol"},
    "points": _DATA_OPTIONS | {"radius"},
    "points_plain": _PLAIN_OPTIONS | {"radius"},
    "lines": _DATA_OPTIONS | {"weight"},
    "lines_plain": _PLAIN_OPTIONS | {"weight"},
    "polygons": _DATA_OPTIONS | {"weight"},
    "polygons_plain": _PLAIN_OPTIONS | {"weight"},
    "empty": frozenset({"map_types", "easter_egg", "config"}),
}
MAPVIEW_OPTIONS = frozenset().union(*VIEWER_OPTIONS.values())


def view_empty(
    map: Optional[Union[folium.Map, MapView]] = None,
    map_types: Optional[Sequence[str]] = None,
    easter_egg: bool = False,
    config: Optional[Config] = None
) -> MapView:
    """
    Create a map without any data layer.

    Args:
        map: Existing map to return as-is (with its layers control)
        map_types: Basemap provider names
        easter_egg: Well, you might find out
        config: Defaults for unset arguments (view, size, basemaps)

    Returns:
        MapView with ``object=None``
    """
    cfg = config if config is not None else Config()
    map_types = resolve(cfg, "map_types", map_types)

    if map is not None:
        m = as_folium_map(map)
        layers_control(m, map_types)
        return MapView(None, m)

    if easter_egg:
        location = [EASTER_EGG_LOCATION["lat"], EASTER_EGG_LOCATION["lon"]]
        m = init_base_maps(map_types, width=cfg.width, height=cfg.height,
                           location=location, zoom_start=cfg.default_zoom)
        group = get_group(m, "envinMR")
        popup = folium.Popup(
            "<center><b>mapview</b><br> was created at<br>"
            '<a target="_blank" href="http://environmentalinformatics-marburg.de/">'
            "Environmental Informatics Marburg</a></center>",
            max_width=300,
            show=True,
        )
        folium.Circle(
            location=location,
            radius=10,
            color="black",
            weight=6,
            opacity=0.8,
            fill=True,
            fill_color="white",
            fill_opacity=0.5,
            popup=popup,
        ).add_to(group)
        layers_control(m, map_types, "envinMR")
        return MapView(None, m)

    m = init_base_maps(
        map_types,
        width=cfg.width,
        height=cfg.height,
        location=[cfg.default_lat, cfg.default_lon],
        zoom_start=cfg.default_zoom,
    )
    layers_control(m, map_types, position="bottomleft")
    return MapView(None, m)


def _classify(x: Any) -> Tuple[str, Callable[..., MapView]]:
    """Find the viewer for ``x``.

    Raises:
        UnsupportedTypeError: If no viewer handles objects of this type
        InvalidParameterError: If a vector layer has no geometries
    """
    if x is None:
        return "empty", view_empty

    if isinstance(x, xr.DataArray):
        if x.ndim == 2:
            return "raster", view_raster_layer
        if x.ndim == 3:
            return "stack", view_raster_stack
        raise UnsupportedTypeError(
            f"Rasters must have 2 or 3 dimensions, got dims={list(x.dims)}"
        )

    if isinstance(x, xr.Dataset):
        return "dataset", view_raster_dataset

    if isinstance(x, (gpd.GeoDataFrame, gpd.GeoSeries)):
        kind = geometry_kind(x)
        has_data = bool(attribute_columns(x))
        name = kind if has_data else f"{kind}_plain"
        return name, VIEWERS[(kind, has_data)]

    raise UnsupportedTypeError(
        f"mapview does not support objects of type {type(x).__name__}. "
        "Supported: xarray.DataArray, xarray.Dataset, geopandas.GeoDataFrame, "
        "geopandas.GeoSeries or None"
    )


def _filter_options(name: str, kwargs: Dict[str, Any]) -> Dict[str, Any]:
    accepted = VIEWER_OPTIONS[name]
    dropped: List[str] = [k for k in kwargs if k in MAPVIEW_OPTIONS and k not in accepted]
    if dropped:
        logger.debug(f"Ignoring options {sorted(dropped)} for {name} layers")
    if name == "empty":
        return {k: v for k, v in kwargs.items() if k in accepted}
    return {k: v for k, v in kwargs.items() if k not in dropped}


def map_view(
    x: Any = None,
    map: Optional[Union[folium.Map, MapView]] = None,
    **kwargs
) -> MapView:
    """
    Draw a spatial object on an interactive map.

    Args:
        x: 2-D/3-D xarray.DataArray, xarray.Dataset, GeoDataFrame, GeoSeries,
            or None for an empty map
        map: Existing folium.Map or MapView to add the layer(s) to
        **kwargs: Viewer options (``zcol``, ``burst``, ``color``, ``na_color``,
            ``map_types``, ``layer_opacity``, ``legend``, ``legend_opacity``,
            ``maxpixels``, ``trim``, ``radius``, ``weight``, ``values``,
            ``use_layer_names``, ``layer_name``, ``verbose``, ``easter_egg``,
            ``config``); anything else is passed on to the folium layer

    Returns:
        MapView pairing the (projection-adjusted) object with the map

    Raises:
        UnsupportedTypeError: If ``x`` is of an unsupported type or mixes
            geometry kinds
        InvalidParameterError: If arguments are invalid or the layer is empty
        ProjectionError: If the layer cannot be projected to lon/lat
        RenderError: If drawing the layer fails

    Example:
        >>> mv = map_view(points, zcol=["cadmium", "lead"], legend=True)
        >>> mv.layer_names
        ['cadmium', 'lead']
    """
    name, viewer = _classify(x)
    options = _filter_options(name, kwargs)
    config = options.get("config")
    if config is not None:
        try:
            config.validate()
        except ValueError as e:
            raise InvalidParameterError(f"Invalid configuration: {e}") from e

    logger.debug(f"Dispatching {type(x).__name__} to {viewer.__name__}")
    try:
        if x is None:
            return viewer(map=map, **options)
        return viewer(x, map=map, **options)
    except MapviewError:
        raise
    except Exception as e:
        raise RenderError(f"Failed to draw {type(x).__name__} with {viewer.__name__}: {e}") from e


mapview = map_view
