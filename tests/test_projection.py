"""
Projection tests - CRS detection, subsampling, trimming, reprojection and
coordinate rescaling for layers without CRS.
"""

import numpy as np
import pytest
import xarray as xr
import geopandas as gpd
from shapely.geometry import Point

from mapview.exceptions import InvalidParameterError, ProjectionError
from mapview.projection import (
    get_raster_crs,
    is_lonlat,
    raster_bounds,
    raster_check_adjust_projection,
    sample_regular,
    scale_coordinates,
    sp_check_adjust_projection,
    trim_raster,
)


class TestRasterCrs:
    """Test reading the CRS of a raster."""

    def test_attrs_crs(self, utm_raster):
        assert get_raster_crs(utm_raster).to_epsg() == 32632

    def test_epsg_integer(self, utm_raster):
        assert get_raster_crs(utm_raster.assign_attrs(crs=4326)).to_epsg() == 4326

    def test_spatial_ref_coordinate(self, nocrs_raster):
        from rasterio.crs import CRS
        da = nocrs_raster.assign_coords(spatial_ref=0)
        da.coords["spatial_ref"].attrs["crs_wkt"] = CRS.from_epsg(3857).to_wkt()
        assert get_raster_crs(da).to_epsg() == 3857

    def test_lon_lat_dims_are_geographic(self):
        da = xr.DataArray(
            np.zeros((2, 3)),
            dims=("lat", "lon"),
            coords={"lat": [50.0, 49.0], "lon": [8.0, 9.0, 10.0]},
        )
        assert is_lonlat(get_raster_crs(da))

    def test_missing_crs(self, nocrs_raster):
        assert get_raster_crs(nocrs_raster) is None

    def test_invalid_crs(self, nocrs_raster):
        with pytest.raises(ProjectionError, match="Cannot parse"):
            get_raster_crs(nocrs_raster.assign_attrs(crs="not a crs"))

    def test_is_lonlat_none(self):
        assert not is_lonlat(None)


class TestRasterAdjustments:
    """Test subsampling, trimming and bounds."""

    def test_bounds_are_cell_edges(self, utm_raster):
        west, south, east, north = raster_bounds(utm_raster)
        assert west == pytest.approx(480000.0)
        assert east == pytest.approx(480500.0)
        assert north == pytest.approx(5630000.0)
        assert south == pytest.approx(5629400.0)

    def test_sample_regular_noop(self, lonlat_raster):
        assert sample_regular(lonlat_raster, 500000) is lonlat_raster

    def test_sample_regular_limits_cells(self, lonlat_raster):
        sampled = sample_regular(lonlat_raster, 20)
        assert sampled.size <= 20
        # Stride 2 in both directions for 80 cells -> 20 cells
        assert sampled.sizes["x"] == 5
        assert sampled.sizes["y"] == 4

    def test_trim_removes_na_edges(self, nocrs_raster):
        values = nocrs_raster.values.copy()
        values[0, :] = np.nan
        values[:, -2:] = np.nan
        trimmed = trim_raster(nocrs_raster.copy(data=values))
        assert trimmed.shape == (3, 6)

    def test_trim_all_na(self, nocrs_raster):
        empty = nocrs_raster.copy(data=np.full(nocrs_raster.shape, np.nan))
        assert trim_raster(empty).shape == nocrs_raster.shape

    def test_missing_xy_dims(self):
        with pytest.raises(InvalidParameterError, match="x/y"):
            raster_bounds(xr.DataArray(np.zeros((2, 2)), dims=("a", "b")))


class TestRasterCheckAdjustProjection:
    """Test preparing rasters for the web map."""

    def test_lonlat_unchanged(self, lonlat_raster):
        out = raster_check_adjust_projection(lonlat_raster, maxpixels=500000)
        assert out is lonlat_raster

    def test_reprojects_to_lonlat(self, utm_raster):
        out = raster_check_adjust_projection(utm_raster, maxpixels=500000)
        assert out.attrs["crs"] == "EPSG:4326"
        assert out.dims == ("y", "x")
        # Zone 32N at x=480 km lies just west of the 9E central meridian
        assert 8.6 < float(out.x.min()) < 9.0
        assert 50.7 < float(out.y.min()) < 50.9
        assert np.isfinite(out.values).any()

    def test_categorical_keeps_classes(self, utm_raster):
        classes = utm_raster.copy(data=np.tile([1.0, 2.0, 3.0, 1.0, 2.0], (6, 1)))
        out = raster_check_adjust_projection(classes, maxpixels=500000, categorical=True)
        values = out.values[np.isfinite(out.values)]
        assert set(np.unique(values)) <= {1.0, 2.0, 3.0}

    def test_without_crs_rescales(self, nocrs_raster):
        out = raster_check_adjust_projection(nocrs_raster, maxpixels=500000)
        west, south, east, north = raster_bounds(out)
        assert west == pytest.approx(0.0)
        assert east == pytest.approx(1.0)
        assert south == pytest.approx(0.0)
        assert north == pytest.approx(0.5)


class TestScaleCoordinates:
    """Test coordinate rescaling for layers without CRS."""

    def test_x_to_unit_interval(self):
        xy = scale_coordinates([10.0, 20.0, 30.0], [0.0, 5.0, 10.0])
        np.testing.assert_allclose(xy[:, 0], [0.0, 0.5, 1.0])
        np.testing.assert_allclose(xy[:, 1], [0.0, 0.25, 0.5])

    def test_single_coordinate(self):
        np.testing.assert_allclose(scale_coordinates([7.0], [3.0]), [[0.0, 0.0]])

    def test_length_mismatch(self):
        with pytest.raises(InvalidParameterError):
            scale_coordinates([1.0, 2.0], [1.0])


class TestSpCheckAdjustProjection:
    """Test preparing vector layers for the web map."""

    def test_lonlat_unchanged(self, points_gdf):
        assert sp_check_adjust_projection(points_gdf) is points_gdf

    def test_reprojects(self, points_utm, points_gdf):
        out = sp_check_adjust_projection(points_utm)
        assert out.crs.to_epsg() == 4326
        np.testing.assert_allclose(out.geometry.x, points_gdf.geometry.x, atol=1e-6)

    def test_without_crs_rescales(self):
        gs = gpd.GeoSeries([Point(100.0, 200.0), Point(300.0, 250.0)])
        out = sp_check_adjust_projection(gs)
        np.testing.assert_allclose(out.x, [0.0, 1.0])
        np.testing.assert_allclose(out.y, [0.0, 0.25])

    def test_single_point_without_crs(self):
        out = sp_check_adjust_projection(gpd.GeoSeries([Point(5.0, 5.0)]))
        assert (out.x.iloc[0], out.y.iloc[0]) == (0.0, 0.0)
