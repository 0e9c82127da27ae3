"""
Vector viewers for point, line and polygon layers.

Every feature becomes one folium path (``CircleMarker``, ``PolyLine`` or
``Polygon``); multi-part geometries are drawn part by part with the colour
and popup of their feature.

Layers with attribute columns are drawn in one of two ways:

- burst: one layer group per column, colored by that column, with a legend
  per column. Only the first group is shown initially.
- otherwise: a single layer group in one color, with popups listing all
  attributes.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import folium
import geopandas as gpd
import numpy as np
from geopandas.array import GeometryDtype
import pandas as pd
from pandas.api import types as ptypes

from ..config import Config, resolve
from ..constants import LEAFLET_DEFAULT_COLOR, POPUP_COORD_DIGITS, RADIUS_RANGE
from ..exceptions import InvalidParameterError, UnsupportedTypeError
from ..palette import color_factor, color_numeric, format_value, mapview_palette
from ..projection import sp_check_adjust_projection
from ..result import MapView
from .basemap import (
    fit_layer_bounds,
    get_group,
    get_layer_names_from_map,
    hide_groups,
    init_map,
    layers_control,
    layers_to_be_hidden,
    new_layer_name,
)
from .legend import add_legend

logger = logging.getLogger("mapview.rendering.vector")

VectorLayer = Union[gpd.GeoDataFrame, gpd.GeoSeries]

GEOMETRY_KINDS = {
    "Point": "points",
    "MultiPoint": "points",
    "LineString": "lines",
    "MultiLineString": "lines",
    "LinearRing": "lines",
    "Polygon": "polygons",
    "MultiPolygon": "polygons",
}


# ============================================================================
# Layer inspection
# ============================================================================

def geometry_kind(x: VectorLayer) -> str:
    """
    Classify a vector layer as "points", "lines" or "polygons".

    Raises:
        InvalidParameterError: If the layer has no geometries or no active
            geometry column
        UnsupportedTypeError: If geometry types are mixed or unknown
    """
    if isinstance(x, gpd.GeoSeries):
        geoms = x
    else:
        try:
            geoms = x.geometry
        except AttributeError as e:
            raise InvalidParameterError(
                "GeoDataFrame has no active geometry column; use set_geometry() first"
            ) from e
    types = set(geoms[~(geoms.isna() | geoms.is_empty)].geom_type)
    if not types:
        raise InvalidParameterError("Vector layer contains no geometries")

    unknown = types - set(GEOMETRY_KINDS)
    if unknown:
        raise UnsupportedTypeError(f"Unsupported geometry types: {sorted(unknown)}")

    kinds = {GEOMETRY_KINDS[t] for t in types}
    if len(kinds) > 1:
        raise UnsupportedTypeError(
            f"Vector layer mixes geometry kinds {sorted(kinds)}; split it by geometry type first"
        )
    return kinds.pop()


def attribute_columns(x: VectorLayer) -> List[str]:
    """Non-geometry columns of a vector layer."""
    if isinstance(x, gpd.GeoSeries):
        return []
    return [
        col for col in x.columns
        if col != x.geometry.name and not isinstance(x[col].dtype, GeometryDtype)
    ]


def select_columns(x: gpd.GeoDataFrame, zcol: Union[str, Sequence[str]]) -> gpd.GeoDataFrame:
    """Keep only the ``zcol`` attribute columns (plus geometry)."""
    zcol = [zcol] if isinstance(zcol, str) else list(zcol)
    missing = [col for col in zcol if col not in attribute_columns(x)]
    if missing:
        raise InvalidParameterError(
            f"Columns {missing} not found. Available: {attribute_columns(x)}"
        )
    return x[zcol + [x.geometry.name]]


def _is_factor_column(series: pd.Series) -> bool:
    return (
        isinstance(series.dtype, pd.CategoricalDtype)
        or ptypes.is_bool_dtype(series)
        or ptypes.is_object_dtype(series)
        or ptypes.is_string_dtype(series)
    )


def column_palette(
    series: pd.Series,
    colors: Sequence[Any],
    na_color: str
) -> Tuple[List[Any], Any]:
    """
    Build the color scale for one attribute column.

    Datetime columns are shown as text. Text, boolean and categorical columns
    get a categorical scale (levels in order of appearance, or the category
    order of a pandas Categorical); everything else a numeric scale.

    Returns:
        Tuple of (values with missing entries as None or NaN, palette)
    """
    if ptypes.is_datetime64_any_dtype(series):
        series = series.dt.strftime("%Y-%m-%d %H:%M:%S").where(series.notna(), None)

    values = series.astype(object).where(series.notna(), None).tolist()

    if _is_factor_column(series):
        if isinstance(series.dtype, pd.CategoricalDtype):
            levels = list(series.cat.categories)
        else:
            levels = list(dict.fromkeys(v for v in values if v is not None))
        return values, color_factor(colors, levels, na_color=na_color)

    numeric = pd.to_numeric(series, errors="coerce").to_numpy(dtype="float64")
    values = numeric.tolist()
    return values, color_numeric(colors, numeric, na_color=na_color)


def circle_radius(x: VectorLayer, radius: Union[float, str]) -> np.ndarray:
    """
    Per-feature circle marker radius.

    A column name rescales that (numeric) column to radii between 3 and 15
    pixels; a number is used for every feature.
    """
    if isinstance(radius, str):
        if radius not in attribute_columns(x):
            raise InvalidParameterError(f"Radius column '{radius}' not found")
        values = pd.to_numeric(x[radius], errors="coerce").to_numpy(dtype="float64")
        lo_r, hi_r = RADIUS_RANGE
        finite = values[np.isfinite(values)]
        if finite.size == 0 or finite.max() == finite.min():
            return np.full(len(x), (lo_r + hi_r) / 2.0)
        scaled = lo_r + (values - finite.min()) / (finite.max() - finite.min()) * (hi_r - lo_r)
        return np.where(np.isfinite(scaled), scaled, lo_r)

    return np.full(len(x), float(radius))


# ============================================================================
# Geometry helpers
# ============================================================================

def _parts(geom) -> list:
    if geom is None or geom.is_empty:
        return []
    if hasattr(geom, "geoms"):
        return [g for g in geom.geoms if not g.is_empty]
    return [geom]


def _latlon(coords) -> List[Tuple[float, float]]:
    return [(float(c[1]), float(c[0])) for c in coords]


def _fmt_coord(value: float) -> str:
    return format_value(round(float(value), POPUP_COORD_DIGITS))


def _layer_bounds(x: VectorLayer) -> List[List[float]]:
    minx, miny, maxx, maxy = (x if isinstance(x, gpd.GeoSeries) else x.geometry).total_bounds
    return [[float(miny), float(minx)], [float(maxy), float(maxx)]]


def _single_color(color: Optional[Union[str, Sequence[str]]], default: str) -> str:
    """Single-color layers use the last color of a palette."""
    if color is None:
        return default
    if isinstance(color, str):
        return color
    return list(color)[-1]


def _popup(text: Optional[str]) -> Optional[folium.Popup]:
    if text is None:
        return None
    return folium.Popup(text, max_width=300)


def _add_point(group, pt, radius: float, color: str, popup: Optional[str], style: Dict[str, Any]) -> None:
    options = {"fill": True, "fill_color": color, "fill_opacity": 0.2, "weight": 5, "opacity": 0.5}
    options.update(style)
    folium.CircleMarker(
        location=[float(pt.y), float(pt.x)],
        radius=float(radius),
        color=color,
        popup=_popup(popup),
        **options
    ).add_to(group)


def _add_line(group, line, color: str, popup: Optional[str], style: Dict[str, Any]) -> None:
    folium.PolyLine(
        locations=_latlon(line.coords),
        color=color,
        popup=_popup(popup),
        **style
    ).add_to(group)


def _add_polygon(group, polygon, color: str, popup: Optional[str], style: Dict[str, Any]) -> None:
    options = {"fill": True, "fill_color": color, "fill_opacity": 0.2}
    options.update(style)
    rings = [_latlon(polygon.exterior.coords)]
    rings.extend(_latlon(interior.coords) for interior in polygon.interiors)
    folium.Polygon(
        locations=rings if len(rings) > 1 else rings[0],
        color=color,
        popup=_popup(popup),
        **options
    ).add_to(group)


def _draw_paths(
    kind: str,
    group: folium.FeatureGroup,
    geoms: gpd.GeoSeries,
    colors: Sequence[str],
    popups: Sequence[Optional[str]],
    style: Dict[str, Any]
) -> int:
    add = _add_line if kind == "lines" else _add_polygon
    n = 0
    for geom, color, popup in zip(geoms, colors, popups):
        for part in _parts(geom):
            add(group, part, color, popup, style)
            n += 1
    return n


# ============================================================================
# Points
# ============================================================================

def view_points(
    x: gpd.GeoDataFrame,
    zcol: Optional[Union[str, Sequence[str]]] = None,
    map: Optional[Union[folium.Map, MapView]] = None,
    burst: bool = False,
    color: Optional[Sequence[Any]] = None,
    na_color: Optional[str] = None,
    radius: Optional[Union[float, str]] = None,
    map_types: Optional[Sequence[str]] = None,
    legend: Optional[bool] = None,
    legend_opacity: Optional[float] = None,
    verbose: bool = False,
    layer_name: Optional[str] = None,
    config: Optional[Config] = None,
    **kwargs
) -> MapView:
    """
    Draw a point layer with attribute columns.

    Args:
        x: GeoDataFrame of (Multi)Point geometries
        zcol: Column(s) to show; implies ``burst=True``
        map: Existing map (folium.Map or MapView) to add to
        burst: One layer group per attribute column
        color: Palette colors (default: ``mapview_palette(7)``)
        na_color: Color for missing values
        radius: Marker radius in pixels, or a numeric column name
        map_types: Basemap provider names
        legend: Whether to add legends (burst mode)
        legend_opacity: Opacity of the legend swatches
        verbose: Log projection handling at INFO level
        layer_name: Group name when not bursting
        config: Defaults for all unset arguments
        **kwargs: Passed on to ``folium.CircleMarker``

    Returns:
        MapView of the projection-adjusted layer and the map
    """
    cfg = config if config is not None else Config()
    color = color if color is not None else mapview_palette(cfg.palette_size)
    na_color = resolve(cfg, "na_color", na_color)
    radius = resolve(cfg, "radius", radius)
    map_types = resolve(cfg, "map_types", map_types)
    legend = resolve(cfg, "legend", legend)
    legend_opacity = resolve(cfg, "legend_opacity", legend_opacity)

    radii = circle_radius(x, radius)
    if zcol is not None:
        x = select_columns(x, zcol)
        burst = True

    x = sp_check_adjust_projection(x, verbose)
    m = init_map(map, map_types, x.crs, width=cfg.width, height=cfg.height)
    geoms = x.geometry

    if burst:
        for col in attribute_columns(x):
            values, pal = column_palette(x[col], color, na_color)
            colors = pal(values)
            group = get_group(m, col)
            for geom, value, colour, r in zip(geoms, values, colors, radii):
                for pt in _parts(geom):
                    popup = "<br/>".join([
                        f"{col}: {format_value(value)}",
                        f"x: {_fmt_coord(pt.x)}",
                        f"y: {_fmt_coord(pt.y)}",
                    ])
                    _add_point(group, pt, r, colour, popup, kwargs)

            if legend:
                add_legend(m, pal.legend_entries(), title=col, opacity=legend_opacity, layer_id=col)
            layers_control(m, map_types, col)

        if len(get_layer_names_from_map(m)) > 1:
            hide_groups(m, layers_to_be_hidden(m))
    else:
        cols = attribute_columns(x)
        grp = layer_name or new_layer_name(m)
        group = get_group(m, grp)
        colour = _single_color(color, LEAFLET_DEFAULT_COLOR)
        records = x[cols].astype(object).where(x[cols].notna(), None).to_numpy()
        for geom, row, r in zip(geoms, records, radii):
            for pt in _parts(geom):
                lines = [f"{col}: {format_value(v)}" for col, v in zip(cols, row)]
                lines += [f"x: {_fmt_coord(pt.x)}", f"y: {_fmt_coord(pt.y)}"]
                _add_point(group, pt, r, colour, " <br/> ".join(lines), kwargs)
        layers_control(m, map_types, grp)

    fit_layer_bounds(m, _layer_bounds(x))
    logger.debug(f"Added {len(x)} point features")
    return MapView(x, m)


def view_points_plain(
    x: VectorLayer,
    map: Optional[Union[folium.Map, MapView]] = None,
    color: Optional[str] = None,
    radius: Optional[float] = None,
    map_types: Optional[Sequence[str]] = None,
    verbose: bool = False,
    layer_name: Optional[str] = None,
    config: Optional[Config] = None,
    **kwargs
) -> MapView:
    """Draw points without attributes; popups show the coordinates."""
    cfg = config if config is not None else Config()
    radius = resolve(cfg, "radius", radius)
    map_types = resolve(cfg, "map_types", map_types)
    colour = _single_color(color, LEAFLET_DEFAULT_COLOR)

    x = sp_check_adjust_projection(x, verbose)
    m = init_map(map, map_types, x.crs, width=cfg.width, height=cfg.height)

    grp = layer_name or new_layer_name(m)
    group = get_group(m, grp)
    geoms = x if isinstance(x, gpd.GeoSeries) else x.geometry
    for geom in geoms:
        for pt in _parts(geom):
            popup = f"x: {_fmt_coord(pt.x)}<br/>y: {_fmt_coord(pt.y)}"
            _add_point(group, pt, radius, colour, popup, kwargs)

    layers_control(m, map_types, grp)
    fit_layer_bounds(m, _layer_bounds(x))
    return MapView(x, m)


# ============================================================================
# Lines and polygons
# ============================================================================

def _view_paths(
    kind: str,
    x: gpd.GeoDataFrame,
    zcol: Optional[Union[str, Sequence[str]]] = None,
    map: Optional[Union[folium.Map, MapView]] = None,
    burst: bool = False,
    color: Optional[Sequence[Any]] = None,
    na_color: Optional[str] = None,
    map_types: Optional[Sequence[str]] = None,
    legend: Optional[bool] = None,
    legend_opacity: Optional[float] = None,
    weight: Optional[float] = None,
    verbose: bool = False,
    layer_name: Optional[str] = None,
    config: Optional[Config] = None,
    **kwargs
) -> MapView:
    cfg = config if config is not None else Config()
    color = color if color is not None else mapview_palette(cfg.palette_size)
    na_color = resolve(cfg, "na_color", na_color)
    map_types = resolve(cfg, "map_types", map_types)
    legend = resolve(cfg, "legend", legend)
    legend_opacity = resolve(cfg, "legend_opacity", legend_opacity)
    weight = resolve(cfg, "weight", weight)

    if zcol is not None:
        x = select_columns(x, zcol)
        burst = True

    x = sp_check_adjust_projection(x, verbose)
    m = init_map(map, map_types, x.crs, width=cfg.width, height=cfg.height)
    style = {"weight": weight}
    style.update(kwargs)

    if burst:
        for col in attribute_columns(x):
            values, pal = column_palette(x[col], color, na_color)
            popups = [f"{col}: {format_value(v)}" for v in values]
            group = get_group(m, col)
            _draw_paths(kind, group, x.geometry, pal(values), popups, style)

            if legend:
                add_legend(m, pal.legend_entries(), title=col, opacity=legend_opacity, layer_id=col)
            layers_control(m, map_types, col)

        if len(get_layer_names_from_map(m)) > 1:
            hide_groups(m, layers_to_be_hidden(m))
    else:
        cols = attribute_columns(x)
        grp = layer_name or new_layer_name(m)
        group = get_group(m, grp)
        colour = _single_color(color, LEAFLET_DEFAULT_COLOR)
        records = x[cols].astype(object).where(x[cols].notna(), None).to_numpy()
        popups = [
            " <br> ".join(f"{col}: {format_value(v)}" for col, v in zip(cols, row))
            for row in records
        ]
        _draw_paths(kind, group, x.geometry, [colour] * len(x), popups, style)
        layers_control(m, map_types, grp)

    fit_layer_bounds(m, _layer_bounds(x))
    logger.debug(f"Added {len(x)} {kind} features")
    return MapView(x, m)


def _view_paths_plain(
    kind: str,
    x: VectorLayer,
    map: Optional[Union[folium.Map, MapView]] = None,
    color: Optional[str] = None,
    map_types: Optional[Sequence[str]] = None,
    weight: Optional[float] = None,
    verbose: bool = False,
    layer_name: Optional[str] = None,
    config: Optional[Config] = None,
    **kwargs
) -> MapView:
    cfg = config if config is not None else Config()
    map_types = resolve(cfg, "map_types", map_types)
    weight = resolve(cfg, "weight", weight)
    colour = _single_color(color, LEAFLET_DEFAULT_COLOR)

    x = sp_check_adjust_projection(x, verbose)
    m = init_map(map, map_types, x.crs, width=cfg.width, height=cfg.height)
    style = {"weight": weight}
    style.update(kwargs)

    grp = layer_name or new_layer_name(m)
    group = get_group(m, grp)
    geoms = x if isinstance(x, gpd.GeoSeries) else x.geometry
    _draw_paths(kind, group, geoms, [colour] * len(geoms), [None] * len(geoms), style)

    layers_control(m, map_types, grp)
    fit_layer_bounds(m, _layer_bounds(x))
    return MapView(x, m)


def view_lines(x: gpd.GeoDataFrame, **kwargs) -> MapView:
    """Draw a line layer with attribute columns (see ``view_points`` for arguments)."""
    return _view_paths("lines", x, **kwargs)


def view_polygons(x: gpd.GeoDataFrame, **kwargs) -> MapView:
    """Draw a polygon layer with attribute columns (see ``view_points`` for arguments)."""
    return _view_paths("polygons", x, **kwargs)


def view_lines_plain(x: VectorLayer, **kwargs) -> MapView:
    """Draw lines without attributes in the default color."""
    return _view_paths_plain("lines", x, **kwargs)


def view_polygons_plain(x: VectorLayer, **kwargs) -> MapView:
    """Draw polygons without attributes in the default color."""
    return _view_paths_plain("polygons", x, **kwargs)


VIEWERS: Dict[Tuple[str, bool], Callable[..., MapView]] = {
    ("points", True): view_points,
    ("points", False): view_points_plain,
    ("lines", True): view_lines,
    ("lines", False): view_lines_plain,
    ("polygons", True): view_polygons,
    ("polygons", False): view_polygons_plain,
}
