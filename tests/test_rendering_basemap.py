"""
Basemap and legend tests - tile layers, layer groups, layers control,
bounds and legend controls on folium maps.
"""

import folium
import pytest
from folium.map import FitBounds

from mapview.exceptions import InvalidParameterError
from mapview.rendering.basemap import (
    as_folium_map,
    fit_layer_bounds,
    get_group,
    get_layer_names_from_map,
    hide_groups,
    init_base_maps,
    init_map,
    layers_control,
    layers_to_be_hidden,
    new_layer_name,
    union_bounds,
)
from mapview.rendering.legend import Legend, add_legend
from mapview.result import MapView


def _children(m, cls):
    return [child for child in m._children.values() if isinstance(child, cls)]


class TestBaseMaps:
    """Test creating maps with basemap tiles."""

    def test_one_tile_layer_per_provider(self):
        m = init_base_maps(["OpenStreetMap", "Esri.WorldImagery", "CartoDB.Positron"])
        tiles = _children(m, folium.TileLayer)
        assert [t.layer_name for t in tiles] == ["OpenStreetMap", "Esri.WorldImagery", "CartoDB.Positron"]
        assert [t.show for t in tiles] == [True, False, False]
        assert not any(t.overlay for t in tiles)

    def test_unknown_provider(self):
        with pytest.raises(InvalidParameterError, match="Unknown map types"):
            init_base_maps(["NoSuchTiles"])

    def test_initial_view(self):
        m = init_base_maps(["OpenStreetMap"], location=(50.0, 8.0), zoom_start=12)
        assert list(m.location) == [50.0, 8.0]

    def test_init_map_reuses_map(self):
        m = init_base_maps(["OpenStreetMap"])
        assert init_map(m, ["OpenStreetMap"], crs="EPSG:4326") is m
        assert init_map(MapView(None, m), ["OpenStreetMap"]) is m

    def test_init_map_without_crs_has_no_tiles(self):
        m = init_map(None, ["OpenStreetMap"], crs=None)
        assert _children(m, folium.TileLayer) == []

    def test_as_folium_map_rejects_other_types(self):
        with pytest.raises(InvalidParameterError):
            as_folium_map("map")


class TestLayerGroups:
    """Test overlay groups, hiding and the layers control."""

    def test_get_group_reuses_by_name(self):
        m = init_base_maps(["OpenStreetMap"])
        first = get_group(m, "zinc")
        assert get_group(m, "zinc") is first
        assert get_layer_names_from_map(m) == ["zinc"]

    def test_new_layer_name(self):
        m = init_base_maps(["OpenStreetMap"])
        assert new_layer_name(m) == "layer_1"
        get_group(m, "layer_1")
        get_group(m, "other")
        assert new_layer_name(m) == "layer_3"

    def test_hide_all_but_first(self):
        m = init_base_maps(["OpenStreetMap"])
        for name in ("a", "b", "c"):
            get_group(m, name)
        assert layers_to_be_hidden(m) == ["b", "c"]
        hide_groups(m, layers_to_be_hidden(m))
        assert [g.show for g in _children(m, folium.FeatureGroup)] == [True, False, False]

    def test_single_layers_control_kept_last(self):
        m = init_base_maps(["OpenStreetMap"])
        get_group(m, "a")
        layers_control(m, ["OpenStreetMap"], "a")
        get_group(m, "b")
        layers_control(m, ["OpenStreetMap"], "b")

        controls = _children(m, folium.LayerControl)
        assert len(controls) == 1
        assert list(m._children.values())[-1] is controls[0]

    def test_layers_control_position(self):
        m = init_base_maps(["OpenStreetMap"])
        layers_control(m, ["OpenStreetMap"], position="bottomleft")
        assert _children(m, folium.LayerControl)[0].options["position"] == "bottomleft"

    def test_layers_control_unknown_group(self):
        m = init_base_maps(["OpenStreetMap"])
        with pytest.raises(InvalidParameterError, match="not on the map"):
            layers_control(m, ["OpenStreetMap"], "missing")


class TestBounds:
    """Test the shared view bounds."""

    def test_union_bounds(self):
        assert union_bounds([[0, 0], [1, 1]], [[-1, 0.5], [0.5, 2]]) == [[-1.0, 0.0], [1.0, 2.0]]

    def test_fit_layer_bounds_accumulates(self):
        m = init_base_maps(["OpenStreetMap"])
        fit_layer_bounds(m, [[50.0, 8.0], [51.0, 9.0]])
        fit_layer_bounds(m, [[49.0, 8.5], [50.5, 10.0]])
        fits = _children(m, FitBounds)
        assert len(fits) == 1
        assert fits[0].bounds == [[49.0, 8.0], [51.0, 10.0]]


class TestLegend:
    """Test legend controls."""

    def test_html_lists_entries(self):
        legend = Legend([("1", "#ff0000"), ("<2>", "#0000ff")], title="zinc", opacity=0.5)
        assert "<strong>zinc</strong>" in legend.html
        assert "background:#ff0000;opacity:0.5" in legend.html
        assert "&lt;2&gt;" in legend.html

    def test_invalid_position(self):
        with pytest.raises(ValueError, match="position"):
            Legend([], position="middle")

    def test_replaces_legend_with_same_layer_id(self):
        m = init_base_maps(["OpenStreetMap"])
        add_legend(m, [("a", "#000000")], title="zinc")
        add_legend(m, [("b", "#ffffff")], title="zinc")
        add_legend(m, [("c", "#ffffff")], title="lead")
        legends = _children(m, Legend)
        assert [lg.layer_id for lg in legends] == ["zinc", "lead"]
        assert legends[0].entries == [("b", "#ffffff")]

    def test_rendered_in_map_html(self):
        m = init_base_maps(["OpenStreetMap"])
        add_legend(m, [("a", "#123456")], title="zinc", position="bottomright")
        html = m.get_root().render()
        assert "mapview-legend" in html
        assert '"bottomright"' in html
