"""
Projection handling for rasters and vector layers.

Leaflet only accepts geographic WGS84 coordinates, so every layer passes
through one of the ``*_check_adjust_projection`` functions before it is
drawn. Reprojection itself is delegated: rasters go through
``rasterio.warp.reproject`` and vector layers through ``GeoDataFrame.to_crs``.

Layers without a coordinate reference system cannot be placed on a basemap.
Their coordinates are rescaled into a small pseudo lon/lat box instead
(x to [0, 1], y to [0, y-range / x-range]) so that shape and aspect ratio are
preserved, and they are drawn on a map without tiles.
"""

import logging
import math
from typing import Any, Optional, Tuple, Union

import numpy as np
import xarray as xr
import geopandas as gpd
from rasterio.crs import CRS
from rasterio.errors import CRSError
from rasterio.transform import from_origin
from rasterio.warp import calculate_default_transform, reproject, Resampling

from .constants import LONLAT_CRS, LONLAT_EPSG, X_COORD_NAMES, Y_COORD_NAMES
from .exceptions import InvalidParameterError, ProjectionError

logger = logging.getLogger(__name__)


# ============================================================================
# CRS helpers
# ============================================================================

def is_lonlat(crs: Any) -> bool:
    """Return True when ``crs`` is geographic WGS84 (EPSG:4326)."""
    if crs is None:
        return False
    try:
        return crs.to_epsg() == LONLAT_EPSG
    except Exception:
        return False


def raster_xy_names(da: xr.DataArray) -> Tuple[str, str]:
    """Return the (x, y) coordinate names of a raster."""

    def _find(options: Tuple[str, ...]) -> Optional[str]:
        for name in options:
            if name in da.dims:
                return name
        return None

    x_name = _find(X_COORD_NAMES)
    y_name = _find(Y_COORD_NAMES)
    if x_name is None or y_name is None:
        raise InvalidParameterError(
            f"Raster must have x/y (or lon/lat) dimensions. Found dims={list(da.dims)}"
        )
    return x_name, y_name


def get_raster_crs(da: xr.DataArray) -> Optional[CRS]:
    """Read the coordinate reference system of a raster.

    Looks at ``attrs["crs"]`` first, then at a CF/rioxarray style
    ``spatial_ref`` coordinate. Rasters with ``lon``/``lat`` dimensions and
    no explicit CRS are taken to be geographic.

    Raises:
        ProjectionError: If a CRS is present but cannot be parsed.
    """
    crs = da.attrs.get("crs")
    if crs is None and "spatial_ref" in da.coords:
        ref_attrs = da.coords["spatial_ref"].attrs
        crs = ref_attrs.get("crs_wkt") or ref_attrs.get("spatial_ref")

    if crs is None:
        if any(name in da.dims for name in ("lon", "longitude")):
            return CRS.from_epsg(LONLAT_EPSG)
        return None

    try:
        if isinstance(crs, (int, np.integer)):
            return CRS.from_epsg(int(crs))
        return CRS.from_user_input(crs)
    except CRSError as e:
        raise ProjectionError(f"Cannot parse raster CRS {crs!r}: {e}") from e


def _resolution(coord: np.ndarray) -> float:
    if coord.size < 2:
        return 1.0
    return float(abs(coord[1] - coord[0]))


def raster_bounds(da: xr.DataArray) -> Tuple[float, float, float, float]:
    """Cell-edge bounds ``(west, south, east, north)`` of a raster."""
    x_name, y_name = raster_xy_names(da)
    x = np.asarray(da[x_name].values, dtype="float64")
    y = np.asarray(da[y_name].values, dtype="float64")
    dx = _resolution(x)
    dy = _resolution(y)
    return (
        float(x.min() - dx / 2),
        float(y.min() - dy / 2),
        float(x.max() + dx / 2),
        float(y.max() + dy / 2),
    )


# ============================================================================
# Coordinate rescaling for layers without CRS
# ============================================================================

def _scale_params(xmin: float, xmax: float, ymin: float, ymax: float) -> float:
    x_range = xmax - xmin
    y_range = ymax - ymin
    if x_range > 0:
        return 1.0 / x_range
    if y_range > 0:
        return 1.0 / y_range
    return 0.0


def scale_coordinates(x: Any, y: Any) -> np.ndarray:
    """Rescale coordinates into a pseudo lon/lat box.

    x is rescaled to [0, 1] and y to [0, ratio] where ratio is the y-range
    divided by the x-range. A single coordinate maps to (0, 0).

    Returns:
        Array of shape (n, 2) with the rescaled (x, y) pairs.
    """
    x = np.asarray(x, dtype="float64").ravel()
    y = np.asarray(y, dtype="float64").ravel()
    if x.size != y.size:
        raise InvalidParameterError("x and y must have the same length")
    if x.size <= 1:
        return np.zeros((x.size, 2))

    scale = _scale_params(np.nanmin(x), np.nanmax(x), np.nanmin(y), np.nanmax(y))
    return np.column_stack([(x - np.nanmin(x)) * scale, (y - np.nanmin(y)) * scale])


def scale_raster_coordinates(da: xr.DataArray) -> xr.DataArray:
    """Rescale raster coordinates into a pseudo lon/lat box (see module docs)."""
    x_name, y_name = raster_xy_names(da)
    west, south, east, north = raster_bounds(da)
    scale = _scale_params(west, east, south, north)
    return da.assign_coords({
        x_name: (da[x_name] - west) * scale,
        y_name: (da[y_name] - south) * scale,
    })


def scale_vector_coordinates(
    x: Union[gpd.GeoDataFrame, gpd.GeoSeries]
) -> Union[gpd.GeoDataFrame, gpd.GeoSeries]:
    """Rescale vector geometries into a pseudo lon/lat box (see module docs)."""
    geoms = x if isinstance(x, gpd.GeoSeries) else x.geometry
    if len(geoms) == 1 and geoms.iloc[0].geom_type == "Point":
        minx, miny = geoms.iloc[0].x, geoms.iloc[0].y
        matrix = [0.0, 0.0, 0.0, 0.0, 0.0, 0.0]
    else:
        minx, miny, maxx, maxy = geoms.total_bounds
        scale = _scale_params(minx, maxx, miny, maxy)
        matrix = [scale, 0.0, 0.0, scale, -minx * scale, -miny * scale]

    scaled = geoms.affine_transform(matrix)
    if isinstance(x, gpd.GeoSeries):
        return scaled
    out = x.copy()
    out[geoms.name] = scaled
    return out


# ============================================================================
# Raster adjustments
# ============================================================================

def sample_regular(da: xr.DataArray, maxpixels: int) -> xr.DataArray:
    """Subsample a raster with a regular stride to at most ``maxpixels`` cells."""
    x_name, y_name = raster_xy_names(da)
    ncell = da.sizes[x_name] * da.sizes[y_name]
    if ncell <= maxpixels:
        return da

    step = int(math.ceil(math.sqrt(ncell / float(maxpixels))))
    sampled = da.isel({y_name: slice(None, None, step), x_name: slice(None, None, step)})
    logger.info(
        f"Raster has {ncell} cells, sampled every {step} cells to "
        f"{sampled.sizes[x_name] * sampled.sizes[y_name]} (maxpixels={maxpixels})"
    )
    return sampled


def trim_raster(da: xr.DataArray) -> xr.DataArray:
    """Remove outer rows and columns that contain only missing values."""
    x_name, y_name = raster_xy_names(da)
    values = np.asarray(da.transpose(y_name, x_name).values, dtype="float64")
    valid = np.isfinite(values)
    if not valid.any():
        return da

    rows = np.flatnonzero(valid.any(axis=1))
    cols = np.flatnonzero(valid.any(axis=0))
    return da.isel({
        y_name: slice(rows[0], rows[-1] + 1),
        x_name: slice(cols[0], cols[-1] + 1),
    })


def reproject_raster(
    da: xr.DataArray,
    dst_crs: str = LONLAT_CRS,
    categorical: bool = False
) -> xr.DataArray:
    """Reproject a 2-D raster with rasterio.

    Categorical rasters use nearest-neighbour resampling so that no new
    class values are invented; everything else is resampled bilinearly.
    """
    src_crs = get_raster_crs(da)
    if src_crs is None:
        raise ProjectionError("Cannot reproject a raster without CRS")

    x_name, y_name = raster_xy_names(da)
    da = da.sortby(x_name).sortby(y_name, ascending=False)
    values = np.asarray(da.transpose(y_name, x_name).values, dtype="float64")
    height, width = values.shape

    west, south, east, north = raster_bounds(da)
    x = np.asarray(da[x_name].values, dtype="float64")
    y = np.asarray(da[y_name].values, dtype="float64")
    src_transform = from_origin(west, north, _resolution(x), _resolution(y))

    try:
        dst_transform, dst_width, dst_height = calculate_default_transform(
            src_crs, dst_crs, width, height,
            left=west, bottom=south, right=east, top=north
        )
        destination = np.full((dst_height, dst_width), np.nan, dtype="float64")
        reproject(
            source=values,
            destination=destination,
            src_transform=src_transform,
            src_crs=src_crs,
            src_nodata=np.nan,
            dst_transform=dst_transform,
            dst_crs=dst_crs,
            dst_nodata=np.nan,
            resampling=Resampling.nearest if categorical else Resampling.bilinear
        )
    except Exception as e:
        raise ProjectionError(f"Failed to reproject raster from {src_crs} to {dst_crs}: {e}") from e

    xs = dst_transform.c + (np.arange(dst_width) + 0.5) * dst_transform.a
    ys = dst_transform.f + (np.arange(dst_height) + 0.5) * dst_transform.e

    attrs = dict(da.attrs)
    attrs["crs"] = dst_crs
    logger.debug(f"Reprojected raster {height}x{width} -> {dst_height}x{dst_width} ({dst_crs})")
    return xr.DataArray(
        destination,
        dims=("y", "x"),
        coords={"y": ys, "x": xs},
        name=da.name,
        attrs=attrs
    )


def raster_check_adjust_projection(
    da: xr.DataArray,
    maxpixels: int,
    categorical: bool = False,
    verbose: bool = False
) -> xr.DataArray:
    """Prepare a 2-D raster for display on a web map.

    Subsamples to ``maxpixels`` cells, then reprojects to geographic WGS84.
    Rasters without CRS get rescaled coordinates instead.
    """
    da = sample_regular(da, maxpixels)
    crs = get_raster_crs(da)
    log = logger.info if verbose else logger.debug

    if crs is None:
        logger.warning(
            f"Raster '{da.name}' has no CRS; coordinates are rescaled and "
            f"drawn without basemaps"
        )
        return scale_raster_coordinates(da)

    if is_lonlat(crs):
        log(f"Raster '{da.name}' already in {LONLAT_CRS}")
        return da

    log(f"Reprojecting raster '{da.name}' from {crs} to {LONLAT_CRS}")
    return reproject_raster(da, LONLAT_CRS, categorical=categorical)


# ============================================================================
# Vector adjustments
# ============================================================================

def sp_check_adjust_projection(
    x: Union[gpd.GeoDataFrame, gpd.GeoSeries],
    verbose: bool = False
) -> Union[gpd.GeoDataFrame, gpd.GeoSeries]:
    """Prepare a vector layer for display on a web map.

    Reprojects to geographic WGS84, or rescales coordinates when the layer
    has no CRS.
    """
    log = logger.info if verbose else logger.debug

    if x.crs is None:
        logger.warning("Vector layer has no CRS; coordinates are rescaled and drawn without basemaps")
        return scale_vector_coordinates(x)

    if is_lonlat(x.crs):
        log(f"Vector layer already in {LONLAT_CRS}")
        return x

    log(f"Reprojecting vector layer from {x.crs} to {LONLAT_CRS}")
    try:
        return x.to_crs(LONLAT_CRS)
    except Exception as e:
        raise ProjectionError(f"Failed to reproject vector layer from {x.crs}: {e}") from e
