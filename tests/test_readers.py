"""
Reader tests - GeoTIFF and vector files into DataArrays and GeoDataFrames.
"""

import numpy as np
import pytest
import rasterio
from rasterio.transform import from_origin

from mapview.data import open_raster, open_vector
from mapview.exceptions import InvalidParameterError


def _write_tif(path, data, descriptions=None, crs="EPSG:32632", nodata=-9999.0):
    count = data.shape[0]
    with rasterio.open(
        path, "w", driver="GTiff",
        height=data.shape[1], width=data.shape[2], count=count,
        dtype="float32", crs=crs, nodata=nodata,
        transform=from_origin(480000.0, 5630000.0, 100.0, 100.0),
    ) as dst:
        dst.write(data.astype("float32"))
        if descriptions:
            for i, description in enumerate(descriptions, start=1):
                dst.set_band_description(i, description)
    return path


@pytest.fixture
def dem_tif(tmp_path):
    data = np.arange(30, dtype="float32").reshape(1, 6, 5)
    data[0, 0, 0] = -9999.0
    return _write_tif(tmp_path / "dem.tif", data)


class TestOpenRaster:
    """Test reading raster files."""

    def test_single_band(self, dem_tif):
        da = open_raster(dem_tif)
        assert da.dims == ("y", "x")
        assert da.shape == (6, 5)
        assert da.name == "dem"
        assert da.attrs["crs"] == "EPSG:32632"
        assert da.attrs["source"] == str(dem_tif)

    def test_nodata_is_nan(self, dem_tif):
        da = open_raster(dem_tif)
        assert np.isnan(da.values[0, 0])
        assert da.values[0, 1] == 1.0

    def test_cell_center_coordinates(self, dem_tif):
        da = open_raster(dem_tif)
        assert da.x.values[0] == pytest.approx(480050.0)
        assert da.y.values[0] == pytest.approx(5629950.0)
        assert da.y.values[-1] == pytest.approx(5629450.0)

    def test_multi_band_descriptions(self, tmp_path):
        data = np.ones((3, 4, 4), dtype="float32")
        path = _write_tif(tmp_path / "rgb.tif", data, descriptions=["red", "green", "blue"])
        da = open_raster(path)
        assert da.dims == ("band", "y", "x")
        assert list(da.band.values) == ["red", "green", "blue"]

    def test_multi_band_numbers(self, tmp_path):
        path = _write_tif(tmp_path / "bands.tif", np.ones((2, 4, 4), dtype="float32"))
        assert list(open_raster(path).band.values) == [1, 2]

    def test_selected_band(self, tmp_path):
        data = np.stack([np.full((4, 4), 1.0), np.full((4, 4), 2.0)])
        path = _write_tif(tmp_path / "bands.tif", data)
        da = open_raster(path, band=2)
        assert da.dims == ("y", "x")
        assert float(da.mean()) == 2.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            open_raster(tmp_path / "missing.tif")

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.tif"
        path.write_text("not a raster")
        with pytest.raises(InvalidParameterError, match="Failed to read raster"):
            open_raster(path)


class TestOpenVector:
    """Test reading vector files."""

    def test_geojson(self, tmp_path, points_gdf):
        path = tmp_path / "points.geojson"
        points_gdf.to_file(path, driver="GeoJSON")
        gdf = open_vector(path)
        assert len(gdf) == 5
        assert "zinc" in gdf.columns
        assert gdf.crs.to_epsg() == 4326

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            open_vector(tmp_path / "missing.gpkg")

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.geojson"
        path.write_text("{ not json")
        with pytest.raises(InvalidParameterError, match="Failed to read vector file"):
            open_vector(path)
