"""
Rendering subsystem for mapview.

This module turns spatial objects into folium layers. It handles the
basemaps and layer groups of a map, colored raster overlays, vector
features with popups, legends, and the RGBA images shared with the slide
view.

Layers are always added to named ``folium.FeatureGroup`` objects so that the
layers control can toggle them; stacks and burst vector layers show only
their first group initially.

Main Functions:
    init_base_maps: Map with one tile layer per basemap provider
    view_raster_layer / view_raster_stack / view_raster_dataset: Raster viewers
    view_points / view_lines / view_polygons (and ``*_plain``): Vector viewers
    add_legend: Legend control for a layer group

Example:
    >>> from mapview.rendering import init_base_maps, view_points
    >>>
    >>> m = init_base_maps(["CartoDB.Positron"])
    >>> mv = view_points(gdf, map=m, zcol="zinc")
    >>> mv.save("zinc.html")
"""

from .basemap import (
    fit_layer_bounds,
    get_group,
    get_layer_names_from_map,
    hide_groups,
    init_base_maps,
    init_map,
    layers_control,
    layers_to_be_hidden,
)
from .legend import Legend, add_legend
from .images import raster_to_png, rgb_stack_to_png, read_png, write_png
from .raster import view_raster_dataset, view_raster_layer, view_raster_stack
from .vector import (
    circle_radius,
    view_lines,
    view_lines_plain,
    view_points,
    view_points_plain,
    view_polygons,
    view_polygons_plain,
)

__all__ = [
    "init_base_maps",
    "init_map",
    "layers_control",
    "get_group",
    "get_layer_names_from_map",
    "layers_to_be_hidden",
    "hide_groups",
    "fit_layer_bounds",
    "Legend",
    "add_legend",
    "raster_to_png",
    "rgb_stack_to_png",
    "read_png",
    "write_png",
    "view_raster_layer",
    "view_raster_stack",
    "view_raster_dataset",
    "circle_radius",
    "view_points",
    "view_points_plain",
    "view_lines",
    "view_lines_plain",
    "view_polygons",
    "view_polygons_plain",
]
