"""
Raster viewers: single layers, band stacks and datasets.

Rasters are colored with a ``mapview.palette`` scale, converted to RGBA images
and handed to ``folium.raster_layers.ImageOverlay``. Stacks and datasets are
drawn layer by layer onto the same map; all but the first layer group are
switched off initially.
"""

import logging
from typing import Any, List, Optional, Sequence, Union

import folium
import numpy as np
import xarray as xr
from folium.utilities import mercator_transform

from ..config import Config, resolve
from ..exceptions import InvalidParameterError
from ..palette import color_factor, color_numeric, legend_levels, legend_values, mapview_palette
from ..projection import (
    get_raster_crs,
    is_lonlat,
    raster_bounds,
    raster_check_adjust_projection,
    trim_raster,
)
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
from .images import band_dim, raster_to_rgba
from .legend import add_legend

logger = logging.getLogger("mapview.rendering.raster")


def is_factor(da: xr.DataArray) -> bool:
    """A raster is categorical when it carries CF ``flag_values`` or ``categorical=True``."""
    return "flag_values" in da.attrs or bool(da.attrs.get("categorical", False))


def factor_levels(da: xr.DataArray) -> List[Any]:
    """Class values of a categorical raster."""
    if "flag_values" in da.attrs:
        return [v.item() if isinstance(v, np.generic) else v
                for v in np.atleast_1d(da.attrs["flag_values"])]
    values = np.asarray(da.values, dtype="float64")
    return [v.item() for v in np.unique(values[np.isfinite(values)])]


def view_raster_layer(
    x: xr.DataArray,
    map: Optional[Union[folium.Map, MapView]] = None,
    maxpixels: Optional[int] = None,
    color: Optional[Sequence[Any]] = None,
    na_color: Optional[str] = None,
    use_layer_names: Optional[bool] = None,
    values: Optional[Sequence[Any]] = None,
    map_types: Optional[Sequence[str]] = None,
    layer_opacity: Optional[float] = None,
    legend: Optional[bool] = None,
    legend_opacity: Optional[float] = None,
    trim: Optional[bool] = None,
    verbose: bool = False,
    layer_name: Optional[str] = None,
    config: Optional[Config] = None,
    **kwargs
) -> MapView:
    """
    Draw a single 2-D raster on an interactive map.

    Args:
        x: 2-D raster with x/y (or lon/lat) dimensions
        map: Existing map (folium.Map or MapView) to add to
        maxpixels: Maximum number of cells drawn
        color: Palette colors (default: ``mapview_palette(7)``)
        na_color: Color for missing values
        use_layer_names: Name the layer group after the raster
        values: Legend values / color domain; derived from the data if None
        map_types: Basemap provider names
        layer_opacity: Opacity of the image overlay
        legend: Whether to add a legend
        legend_opacity: Opacity of the legend swatches
        trim: Drop all-NA edge rows and columns
        verbose: Log projection handling at INFO level
        layer_name: Explicit layer group name
        config: Defaults for all unset arguments
        **kwargs: Passed on to ``folium.raster_layers.ImageOverlay``

    Returns:
        MapView of the projection-adjusted raster and the map
    """
    cfg = config if config is not None else Config()
    maxpixels = resolve(cfg, "maxpixels", maxpixels)
    color = color if color is not None else mapview_palette(cfg.palette_size)
    na_color = resolve(cfg, "na_color", na_color)
    use_layer_names = resolve(cfg, "use_layer_names", use_layer_names)
    map_types = resolve(cfg, "map_types", map_types)
    layer_opacity = resolve(cfg, "layer_opacity", layer_opacity)
    legend = resolve(cfg, "legend", legend)
    legend_opacity = resolve(cfg, "legend_opacity", legend_opacity)
    trim = resolve(cfg, "trim", trim)

    if x.ndim != 2:
        raise InvalidParameterError(f"Expected a 2-D raster layer, got dims={list(x.dims)}")

    categorical = is_factor(x)
    levels = factor_levels(x) if categorical else None

    x = raster_check_adjust_projection(x, maxpixels=maxpixels, categorical=categorical, verbose=verbose)
    crs = get_raster_crs(x)

    m = init_map(map, map_types, crs, width=cfg.width, height=cfg.height)

    if trim:
        x = trim_raster(x)

    if categorical:
        values = legend_levels(values) if values is not None else levels
        pal = color_factor(color, values, na_color=na_color)
    else:
        values = legend_values(x.values, values)
        pal = color_numeric(color, values, na_color=na_color)

    if layer_name is not None:
        grp = layer_name
    elif use_layer_names and x.name is not None:
        grp = str(x.name)
    else:
        grp = new_layer_name(m)

    west, south, east, north = raster_bounds(x)
    bounds = [[south, west], [north, east]]

    image = raster_to_rgba(x, pal)
    if is_lonlat(crs):
        image = mercator_transform(image, (south, north))
    image = np.clip(np.round(image * 255.0), 0, 255).astype("uint8")

    group = get_group(m, grp)
    folium.raster_layers.ImageOverlay(
        image=image,
        bounds=bounds,
        opacity=layer_opacity,
        name=grp,
        control=False,
        **kwargs
    ).add_to(group)
    logger.debug(f"Added raster '{grp}' ({image.shape[1]}x{image.shape[0]} px)")

    if legend:
        add_legend(m, pal.legend_entries(values), title=grp, opacity=legend_opacity)

    layers_control(m, map_types, grp)
    fit_layer_bounds(m, bounds)

    return MapView(x, m)


def _band_layer_names(x: xr.DataArray, bdim: str) -> List[str]:
    if bdim in x.coords:
        labels = [str(v) for v in np.atleast_1d(x[bdim].values)]
        if x[bdim].dtype.kind in "OUS":
            return labels
        return [f"{bdim}_{label}" for label in labels]
    return [f"{bdim}_{i + 1}" for i in range(x.sizes[bdim])]


def view_layers(
    layers: List[xr.DataArray],
    obj: Any,
    map: Optional[Union[folium.Map, MapView]] = None,
    **kwargs
) -> MapView:
    """Draw several 2-D layers onto one map, showing only the first group.

    Each layer is grouped under its own name (band label or variable name).
    """
    if not layers:
        raise InvalidParameterError("No raster layers to draw")
    kwargs.pop("layer_name", None)

    mv = None
    for layer in layers:
        name = str(layer.name) if layer.name is not None else None
        mv = view_raster_layer(layer, map=map if mv is None else mv.map, layer_name=name, **kwargs)

    if len(layers) > 1 and len(get_layer_names_from_map(mv.map)) > 1:
        hide_groups(mv.map, layers_to_be_hidden(mv.map))

    return MapView(obj, mv.map)


def view_raster_stack(
    x: xr.DataArray,
    map: Optional[Union[folium.Map, MapView]] = None,
    **kwargs
) -> MapView:
    """
    Draw each band of a 3-D raster stack as its own layer group.

    Band layer names come from the band coordinate. A single-band stack is
    drawn as a plain layer.
    """
    bdim = band_dim(x)
    names = _band_layer_names(x, bdim)
    layers = [x.isel({bdim: i}, drop=True).rename(name) for i, name in enumerate(names)]

    if len(layers) == 1:
        kwargs.setdefault("layer_name", names[0])
        mv = view_raster_layer(layers[0], map=map, **kwargs)
        return MapView(mv.object, mv.map)

    return view_layers(layers, x, map=map, **kwargs)


def view_raster_dataset(
    x: xr.Dataset,
    zcol: Optional[Union[str, Sequence[str]]] = None,
    map: Optional[Union[folium.Map, MapView]] = None,
    **kwargs
) -> MapView:
    """
    Draw the 2-D variables of a dataset as separate layer groups.

    Args:
        x: Dataset of 2-D variables sharing x/y dimensions
        zcol: Variable name(s) to draw; all 2-D variables if None
        map: Existing map to add to
        **kwargs: Passed on to ``view_raster_layer``
    """
    if zcol is not None:
        zcol = [zcol] if isinstance(zcol, str) else list(zcol)
        missing = [name for name in zcol if name not in x.data_vars]
        if missing:
            raise InvalidParameterError(
                f"Variables {missing} not in dataset. Available: {list(x.data_vars)}"
            )
        names = zcol
    else:
        names = [name for name in x.data_vars if x[name].ndim == 2]

    layers = []
    for name in names:
        layer = x[name]
        if "crs" not in layer.attrs and "crs" in x.attrs:
            layer = layer.assign_attrs(crs=x.attrs["crs"])
        layers.append(layer)

    return view_layers(layers, x, map=map, **kwargs)
