"""
API tests - type dispatch of map_view(), option filtering, empty maps and
error wrapping.
"""

import folium
import geopandas as gpd
import pytest
from shapely.geometry import LineString, Point

import mapview
from mapview import Config, MapView, map_view
from mapview.api import MAPVIEW_OPTIONS, VIEWER_OPTIONS, view_empty
from mapview.exceptions import InvalidParameterError, RenderError, UnsupportedTypeError
from mapview.rendering.basemap import get_layer_names_from_map


def _tile_names(m):
    return [c.layer_name for c in m._children.values() if isinstance(c, folium.TileLayer)]


class TestDispatch:
    """Test that each object type reaches its viewer."""

    def test_raster_layer(self, lonlat_raster):
        mv = map_view(lonlat_raster)
        assert isinstance(mv, MapView)
        assert mv.layer_names == ["elevation"]

    def test_raster_stack(self, raster_stack):
        assert map_view(raster_stack).layer_names == ["red", "green", "blue"]

    def test_dataset_zcol(self, raster_dataset):
        assert map_view(raster_dataset, zcol="temperature").layer_names == ["temperature"]

    def test_points_with_data(self, points_gdf):
        assert map_view(points_gdf, zcol="zinc").layer_names == ["zinc"]

    def test_points_without_data(self, plain_points):
        mv = map_view(plain_points)
        assert mv.layer_names == ["layer_1"]

    def test_lines_and_polygons(self, lines_gdf, polygons_gdf):
        mv = map_view(lines_gdf, burst=True)
        mv = map_view(polygons_gdf, map=mv, zcol="district")
        assert mv.layer_names == ["river", "length_km", "district"]

    def test_bare_geodataframe_is_plain(self, polygons_gdf):
        bare = gpd.GeoDataFrame(geometry=polygons_gdf.geometry)
        assert map_view(bare).layer_names == ["layer_1"]

    def test_alias(self, lonlat_raster):
        assert mapview.mapview is map_view


class TestOptions:
    """Test filtering of viewer options."""

    def test_every_viewer_accepts_config(self):
        assert all("config" in accepted for accepted in VIEWER_OPTIONS.values())

    def test_raster_only_options_dropped_for_points(self, points_gdf):
        mv = map_view(points_gdf, maxpixels=10, trim=False, layer_opacity=0.5, values=[1, 2])
        assert mv.layer_names == ["layer_1"]

    def test_vector_only_options_dropped_for_rasters(self, lonlat_raster):
        mv = map_view(lonlat_raster, zcol="a", burst=True, radius=3, weight=9)
        assert mv.layer_names == ["elevation"]

    def test_other_options_reach_folium(self, plain_points):
        mv = map_view(plain_points, fill_opacity=0.9)
        group = next(c for c in mv.map._children.values() if isinstance(c, folium.FeatureGroup))
        marker = next(c for c in group._children.values() if isinstance(c, folium.CircleMarker))
        assert 0.9 in marker.options.values()

    def test_known_options(self):
        assert {"zcol", "burst", "maxpixels", "easter_egg", "radius", "weight"} <= MAPVIEW_OPTIONS

    def test_config_defaults(self, points_gdf):
        config = Config(map_types=("CartoDB.Positron",))
        mv = map_view(points_gdf, config=config)
        assert _tile_names(mv.map) == ["CartoDB.Positron"]

    def test_invalid_config(self, points_gdf):
        with pytest.raises(InvalidParameterError, match="Invalid configuration"):
            map_view(points_gdf, config=Config(maxpixels=0))


class TestEmptyMap:
    """Test maps without an object."""

    def test_default_view(self):
        mv = map_view()
        assert mv.object is None
        assert list(mv.map.location) == [50.814772, 8.770862]
        assert _tile_names(mv.map) == ["OpenStreetMap", "Esri.WorldImagery"]
        control = next(c for c in mv.map._children.values() if isinstance(c, folium.LayerControl))
        assert control.options["position"] == "bottomleft"

    def test_map_types(self):
        mv = map_view(None, map_types=["OpenTopoMap"])
        assert _tile_names(mv.map) == ["OpenTopoMap"]

    def test_easter_egg(self):
        mv = view_empty(easter_egg=True)
        assert list(mv.map.location) == [50.814891, 8.771676]
        assert mv.layer_names == ["envinMR"]
        assert "Environmental Informatics Marburg" in mv.to_html()

    def test_existing_map_is_returned(self, points_gdf):
        first = map_view(points_gdf)
        assert map_view(None, map=first).map is first.map


class TestErrors:
    """Test errors raised by the dispatcher."""

    def test_unsupported_type(self):
        with pytest.raises(UnsupportedTypeError, match="does not support"):
            map_view([1, 2, 3])

    def test_mixed_geometries(self):
        mixed = gpd.GeoDataFrame(
            {"a": [1, 2]},
            geometry=[Point(8.0, 50.0), LineString([(8.0, 50.0), (8.1, 50.1)])],
            crs="EPSG:4326",
        )
        with pytest.raises(UnsupportedTypeError):
            map_view(mixed)

    def test_empty_vector(self):
        with pytest.raises(InvalidParameterError):
            map_view(gpd.GeoDataFrame({"a": []}, geometry=[], crs="EPSG:4326"))

    def test_four_dimensional_raster(self, raster_stack):
        with pytest.raises(UnsupportedTypeError):
            map_view(raster_stack.expand_dims(time=2))

    def test_no_active_geometry(self):
        gdf = gpd.GeoDataFrame({"zinc": [1, 2]})
        with pytest.raises(InvalidParameterError, match="active geometry"):
            map_view(gdf)

    def test_library_errors_are_wrapped(self, monkeypatch, lonlat_raster):
        def broken(*args, **kwargs):
            raise ValueError("tile server exploded")

        monkeypatch.setattr("mapview.api.view_raster_layer", broken)
        with pytest.raises(RenderError, match="tile server exploded") as excinfo:
            map_view(lonlat_raster)
        assert isinstance(excinfo.value.__cause__, ValueError)


class TestResult:
    """Test the MapView result object."""

    def test_save(self, tmp_path, points_gdf):
        path = map_view(points_gdf).save(tmp_path / "out" / "map.html")
        assert path.exists()
        assert "leaflet" in path.read_text(encoding="utf-8").lower()

    def test_repr(self, points_gdf):
        assert repr(map_view(points_gdf, zcol="zinc")) == "MapView(object=GeoDataFrame, layers=['zinc'])"

    def test_frozen(self, points_gdf):
        mv = map_view(points_gdf)
        with pytest.raises(AttributeError):
            mv.object = None

    def test_layer_names_follow_map(self, points_gdf, lonlat_raster):
        mv = map_view(points_gdf, zcol="zinc")
        mv = map_view(lonlat_raster, map=mv)
        assert mv.layer_names == get_layer_names_from_map(mv.map) == ["zinc", "elevation"]
