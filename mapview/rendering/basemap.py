"""
Basemap and layer-group management for folium maps.

This module provides the folium side of every map: tile layers for the
requested basemap providers, named overlay groups that layers are added to,
the layers control listing them, and the shared view bounds.

Layers are always added to a named ``folium.FeatureGroup``. Adding to a map
that already holds a group with the same name reuses that group, so several
calls can contribute to one entry of the layers control.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Union

import folium
from folium.map import FitBounds

from ..constants import MAP_PROVIDERS, DEFAULT_MAP_TYPES
from ..exceptions import InvalidParameterError
from ..result import MapView

logger = logging.getLogger("mapview.rendering")

Bounds = Sequence[Sequence[float]]


def validate_map_types(map_types: Iterable[str]) -> List[str]:
    """
    Check that all basemap names are known providers.

    Args:
        map_types: Provider names (e.g. "OpenStreetMap", "Esri.WorldImagery")

    Returns:
        The provider names as a list

    Raises:
        InvalidParameterError: If a provider is unknown
    """
    if isinstance(map_types, str):
        map_types = [map_types]
    map_types = list(map_types)
    unknown = [name for name in map_types if name not in MAP_PROVIDERS]
    if unknown:
        raise InvalidParameterError(
            f"Unknown map types {unknown}. "
            f"Available map types: {list(MAP_PROVIDERS.keys())}"
        )
    return map_types


def as_folium_map(m: Union[folium.Map, MapView]) -> folium.Map:
    """Return the folium map behind ``m``."""
    if isinstance(m, MapView):
        return m.map
    if isinstance(m, folium.Map):
        return m
    raise InvalidParameterError(
        f"map must be a folium.Map or MapView, got {type(m).__name__}"
    )


def init_base_maps(
    map_types: Sequence[str] = DEFAULT_MAP_TYPES,
    width: str = "100%",
    height: str = "100%",
    location: Optional[Sequence[float]] = None,
    zoom_start: Optional[int] = None
) -> folium.Map:
    """
    Create a folium map with one tile layer per basemap provider.

    The first provider is the one displayed; the others can be switched to
    through the layers control. ``location`` (lat, lon) and ``zoom_start``
    set an initial view.

    Example:
        >>> m = init_base_maps(["OpenStreetMap", "Esri.WorldImagery"])
    """
    map_types = validate_map_types(map_types)

    view = {}
    if location is not None:
        view["location"] = [float(location[0]), float(location[1])]
    if zoom_start is not None:
        view["zoom_start"] = int(zoom_start)

    m = folium.Map(tiles=None, width=width, height=height, control_scale=True, **view)
    for i, name in enumerate(map_types):
        provider = MAP_PROVIDERS[name]
        folium.TileLayer(
            tiles=provider["tiles"],
            attr=provider["attr"],
            name=name,
            max_zoom=provider["max_zoom"],
            overlay=False,
            control=True,
            show=(i == 0)
        ).add_to(m)

    logger.debug(f"Created base map with tiles {map_types}")
    return m


def init_map(
    m: Optional[Union[folium.Map, MapView]],
    map_types: Sequence[str],
    crs=None,
    width: str = "100%",
    height: str = "100%"
) -> folium.Map:
    """
    Return the map to draw on.

    An existing map is reused. Otherwise layers with a CRS get basemaps and
    layers without one get a bare map, since their rescaled coordinates have
    no relation to real-world tiles.
    """
    if m is not None:
        return as_folium_map(m)

    if crs is None:
        logger.debug("No CRS: creating map without basemaps")
        return folium.Map(tiles=None, width=width, height=height, control_scale=True)

    return init_base_maps(map_types, width=width, height=height)


def get_group(m: folium.Map, name: str) -> folium.FeatureGroup:
    """Find the overlay group called ``name`` on ``m`` or create it."""
    for child in m._children.values():
        if isinstance(child, folium.FeatureGroup) and child.layer_name == name:
            return child

    group = folium.FeatureGroup(name=name, overlay=True, control=True)
    group.add_to(m)
    logger.debug(f"Created layer group '{name}'")
    return group


def get_layer_names_from_map(m: folium.Map) -> List[str]:
    """Names of all overlay groups on ``m`` in the order they were added."""
    return [
        child.layer_name
        for child in m._children.values()
        if isinstance(child, folium.FeatureGroup) and child.overlay
    ]


def new_layer_name(m: folium.Map, prefix: str = "layer") -> str:
    """Generate a group name not yet used on ``m`` (layer_1, layer_2, ...)."""
    existing = set(get_layer_names_from_map(m))
    i = len(existing) + 1
    while f"{prefix}_{i}" in existing:
        i += 1
    return f"{prefix}_{i}"


def layers_to_be_hidden(m: folium.Map) -> List[str]:
    """Every overlay group except the first one."""
    return get_layer_names_from_map(m)[1:]


def hide_groups(m: folium.Map, names: Iterable[str]) -> folium.Map:
    """Switch the given overlay groups off initially."""
    names = set(names)
    for child in m._children.values():
        if isinstance(child, folium.FeatureGroup) and child.layer_name in names:
            child.show = False
    logger.debug(f"Hidden layer groups: {sorted(names)}")
    return m


def layers_control(
    m: folium.Map,
    map_types: Sequence[str] = (),
    names: Union[str, Sequence[str]] = (),
    position: str = "topleft"
) -> folium.Map:
    """
    Make sure ``m`` has a single layers control listing basemaps and groups.

    folium collects the entries when the map is rendered, so the control only
    has to exist once. It is moved behind the most recently added layers so
    that its script runs after every layer it references is defined.
    """
    if isinstance(names, str):
        names = [names]
    existing = get_layer_names_from_map(m)
    missing = [name for name in names if name not in existing]
    if missing:
        raise InvalidParameterError(f"Layer groups {missing} are not on the map")

    control = None
    for key, child in list(m._children.items()):
        if isinstance(child, folium.LayerControl):
            control = child
            del m._children[key]

    if control is None:
        control = folium.LayerControl(position=position, collapsed=True)
    control.add_to(m)

    logger.debug(f"Layers control: base={list(map_types)} overlays={get_layer_names_from_map(m)}")
    return m


def union_bounds(a: Optional[Bounds], b: Bounds) -> List[List[float]]:
    """Union of two ``[[south, west], [north, east]]`` boxes."""
    (s2, w2), (n2, e2) = b
    if a is None:
        return [[float(s2), float(w2)], [float(n2), float(e2)]]
    (s1, w1), (n1, e1) = a
    return [
        [float(min(s1, s2)), float(min(w1, w2))],
        [float(max(n1, n2)), float(max(e1, e2))],
    ]


def fit_layer_bounds(m: folium.Map, bounds: Bounds) -> folium.Map:
    """Fit the view to the union of all layer bounds added so far."""
    for child in m._children.values():
        if isinstance(child, FitBounds):
            child.bounds = union_bounds(child.bounds, bounds)
            return m

    FitBounds(union_bounds(None, bounds)).add_to(m)
    return m
