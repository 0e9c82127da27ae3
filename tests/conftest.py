"""
Shared fixtures: small in-memory rasters and vector layers.

All fixtures are built in memory so that no test needs network access or
data files.
"""

import geopandas as gpd
import numpy as np
import pytest
import xarray as xr
from shapely.geometry import LineString, MultiLineString, MultiPoint, MultiPolygon, Point, Polygon


# ---------------------------------------------------------------------------
# Rasters
# ---------------------------------------------------------------------------

@pytest.fixture
def lonlat_raster():
    """8x10 raster in EPSG:4326 around Marburg with one NA cell."""
    lon = np.linspace(8.70, 8.79, 10)
    lat = np.linspace(50.85, 50.78, 8)
    values = np.arange(80, dtype="float64").reshape(8, 10)
    values[0, 0] = np.nan
    return xr.DataArray(
        values,
        dims=("y", "x"),
        coords={"y": lat, "x": lon},
        name="elevation",
        attrs={"crs": "EPSG:4326"},
    )


@pytest.fixture
def utm_raster():
    """6x5 raster in UTM zone 32N with 100 m cells."""
    x = 480000.0 + 50.0 + 100.0 * np.arange(5)
    y = 5630000.0 - 50.0 - 100.0 * np.arange(6)
    values = np.linspace(100.0, 400.0, 30).reshape(6, 5)
    return xr.DataArray(
        values,
        dims=("y", "x"),
        coords={"y": y, "x": x},
        name="dem",
        attrs={"crs": "EPSG:32632"},
    )


@pytest.fixture
def nocrs_raster():
    """4x8 raster without CRS, x spanning 0..80 and y 0..40."""
    x = 5.0 + 10.0 * np.arange(8)
    y = 35.0 - 10.0 * np.arange(4)
    values = np.arange(32, dtype="float64").reshape(4, 8)
    return xr.DataArray(values, dims=("y", "x"), coords={"y": y, "x": x}, name="plain")


@pytest.fixture
def categorical_raster(lonlat_raster):
    """Land-cover style raster with classes 1, 2 and 3."""
    values = np.tile(np.array([1.0, 2.0, 3.0, 1.0, 2.0]), (8, 2))
    return lonlat_raster.copy(data=values).rename("landcover").assign_attrs(
        flag_values=[1, 2, 3]
    )


@pytest.fixture
def raster_stack(lonlat_raster):
    """3-band stack with band labels red/green/blue."""
    bands = [lonlat_raster * factor for factor in (1.0, 2.0, 3.0)]
    stack = xr.concat(bands, dim="band").assign_coords(band=["red", "green", "blue"])
    return stack.rename("rgb").assign_attrs(crs="EPSG:4326")


@pytest.fixture
def raster_dataset(lonlat_raster):
    """Dataset with two 2-D variables sharing the grid."""
    return xr.Dataset(
        {
            "temperature": (("y", "x"), lonlat_raster.values),
            "humidity": (("y", "x"), lonlat_raster.values * 0.5),
        },
        coords={"y": lonlat_raster.y.values, "x": lonlat_raster.x.values},
        attrs={"crs": "EPSG:4326"},
    )


# ---------------------------------------------------------------------------
# Vector layers
# ---------------------------------------------------------------------------

@pytest.fixture
def points_gdf():
    """Five points with numeric, text and boolean attributes."""
    return gpd.GeoDataFrame(
        {
            "zinc": [100.0, 250.0, np.nan, 800.0, 1500.0],
            "landuse": ["forest", "field", "forest", "urban", "field"],
            "flooded": [True, False, False, True, False],
        },
        geometry=[
            Point(8.76, 50.81),
            Point(8.77, 50.82),
            Point(8.78, 50.80),
            Point(8.75, 50.83),
            Point(8.79, 50.81),
        ],
        crs="EPSG:4326",
    )


@pytest.fixture
def points_utm(points_gdf):
    """The same points in UTM zone 32N."""
    return points_gdf.to_crs("EPSG:32632")


@pytest.fixture
def multipoints_gdf():
    """One MultiPoint feature with three parts."""
    return gpd.GeoDataFrame(
        {"site": ["a"]},
        geometry=[MultiPoint([(8.70, 50.80), (8.71, 50.81), (8.72, 50.82)])],
        crs="EPSG:4326",
    )


@pytest.fixture
def plain_points():
    """Points without attributes."""
    return gpd.GeoSeries([Point(8.76, 50.81), Point(8.77, 50.82)], crs="EPSG:4326")


@pytest.fixture
def lines_gdf():
    """Two lines and one two-part multiline."""
    return gpd.GeoDataFrame(
        {
            "river": ["Lahn", "Ohm", "Wetschaft"],
            "length_km": [245.6, 59.7, 23.0],
        },
        geometry=[
            LineString([(8.70, 50.80), (8.75, 50.82), (8.80, 50.81)]),
            LineString([(8.90, 50.78), (8.95, 50.80)]),
            MultiLineString([
                [(8.60, 50.90), (8.65, 50.92)],
                [(8.66, 50.93), (8.70, 50.95)],
            ]),
        ],
        crs="EPSG:4326",
    )


@pytest.fixture
def polygons_gdf():
    """A polygon with a hole, a plain polygon and a two-part multipolygon."""
    shell = [(8.70, 50.80), (8.80, 50.80), (8.80, 50.90), (8.70, 50.90)]
    hole = [(8.74, 50.84), (8.76, 50.84), (8.76, 50.86), (8.74, 50.86)]
    return gpd.GeoDataFrame(
        {
            "district": ["north", "south", "islands"],
            "population": [12000, 8500, 300],
        },
        geometry=[
            Polygon(shell, [hole]),
            Polygon([(8.70, 50.70), (8.80, 50.70), (8.80, 50.78), (8.70, 50.78)]),
            MultiPolygon([
                Polygon([(8.90, 50.70), (8.92, 50.70), (8.92, 50.72)]),
                Polygon([(8.95, 50.75), (8.97, 50.75), (8.97, 50.77)]),
            ]),
        ],
        crs="EPSG:4326",
    )
