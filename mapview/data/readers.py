"""
Readers turning raster and vector files into the objects mapview draws.

Rasters are read with rasterio into ``xarray.DataArray`` objects with cell
center ``x``/``y`` coordinates, NaN for nodata and the CRS in
``attrs["crs"]``. Vector files are read with ``geopandas.read_file``.
"""

import logging
from pathlib import Path
from typing import Optional, Union

import geopandas as gpd
import numpy as np
import rasterio
import xarray as xr
from rasterio.errors import RasterioError

from ..exceptions import InvalidParameterError

logger = logging.getLogger(__name__)


def open_raster(path: Union[str, Path], band: Optional[int] = None) -> xr.DataArray:
    """
    Read a raster file into a DataArray.

    Single-band files (or a selected ``band``) give a 2-D ``(y, x)`` array,
    multi-band files a 3-D ``(band, y, x)`` stack. Band labels are the band
    descriptions when all bands have one, otherwise the band numbers.

    Args:
        path: Any file rasterio can open (GeoTIFF, PNG with world file, ...)
        band: 1-based band number to read; all bands if None

    Returns:
        DataArray named after the file stem

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidParameterError: If the file cannot be read or is rotated

    Example:
        >>> dem = open_raster("dem.tif")
        >>> dem.attrs["crs"]
        'EPSG:32632'
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raster file not found: {path}")

    try:
        with rasterio.open(path) as src:
            transform = src.transform
            if transform.b != 0 or transform.d != 0:
                raise InvalidParameterError(f"Rotated rasters are not supported: {path}")

            indexes = [band] if band is not None else list(src.indexes)
            data = src.read(indexes, masked=True).astype("float64").filled(np.nan)
            descriptions = [src.descriptions[i - 1] for i in indexes]
            crs = src.crs.to_string() if src.crs is not None else None
            width, height = src.width, src.height
    except RasterioError as e:
        raise InvalidParameterError(f"Failed to read raster {path}: {e}") from e

    x = transform.c + (np.arange(width) + 0.5) * transform.a
    y = transform.f + (np.arange(height) + 0.5) * transform.e

    attrs = {"source": str(path)}
    if crs is not None:
        attrs["crs"] = crs

    if len(indexes) == 1:
        da = xr.DataArray(data[0], dims=("y", "x"), coords={"y": y, "x": x},
                          name=path.stem, attrs=attrs)
    else:
        labels = descriptions if all(descriptions) else indexes
        da = xr.DataArray(data, dims=("band", "y", "x"),
                          coords={"band": labels, "y": y, "x": x},
                          name=path.stem, attrs=attrs)

    logger.debug(f"Read raster {path.name}: dims={dict(da.sizes)} crs={crs}")
    return da


def open_vector(path: Union[str, Path], **kwargs) -> gpd.GeoDataFrame:
    """
    Read a vector file (GeoPackage, Shapefile, GeoJSON, ...) with geopandas.

    Args:
        path: Vector file path
        **kwargs: Passed on to ``geopandas.read_file`` (e.g. ``layer``)

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidParameterError: If geopandas cannot read the file
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Vector file not found: {path}")

    try:
        gdf = gpd.read_file(path, **kwargs)
    except Exception as e:
        raise InvalidParameterError(f"Failed to read vector file {path}: {e}") from e

    logger.debug(f"Read {len(gdf)} features from {path.name} (crs={gdf.crs})")
    return gdf
