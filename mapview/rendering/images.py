"""
Conversion of rasters to RGBA images.

Images are float arrays of shape ``(rows, cols, 4)`` in [0, 1], north up.
They feed both folium image overlays and the PNG files of the slide view.
PNG encoding and decoding are done with ``matplotlib.image``.
"""

import logging
from pathlib import Path
from typing import Any, Sequence, Union

import matplotlib.image as mimage
import numpy as np
import xarray as xr

from ..constants import SLIDEVIEW_NA_COLOR
from ..exceptions import InvalidParameterError
from ..palette import color_numeric, mapview_palette
from ..projection import raster_xy_names, sample_regular

logger = logging.getLogger("mapview.rendering.images")


def _north_up(da: xr.DataArray) -> xr.DataArray:
    x_name, y_name = raster_xy_names(da)
    return da.sortby(x_name).sortby(y_name, ascending=False)


def band_dim(da: xr.DataArray) -> str:
    """Name of the non-spatial dimension of a 3-D raster stack."""
    x_name, y_name = raster_xy_names(da)
    others = [d for d in da.dims if d not in (x_name, y_name)]
    if da.ndim != 3 or len(others) != 1:
        raise InvalidParameterError(
            f"Expected a 3-D raster stack with one band dimension, got dims={list(da.dims)}"
        )
    return others[0]


def raster_to_rgba(da: xr.DataArray, palette) -> np.ndarray:
    """Color a 2-D raster with ``palette`` (see ``mapview.palette``)."""
    x_name, y_name = raster_xy_names(da)
    values = _north_up(da).transpose(y_name, x_name).values
    return palette.rgba(values)


def raster_to_png(
    da: xr.DataArray,
    colors: Sequence[Any] = None,
    na_color: str = SLIDEVIEW_NA_COLOR,
    maxpixels: int = 500000
) -> np.ndarray:
    """
    Convert a 2-D raster into an RGBA image.

    Values are colored with a continuous scale over the raster's range.

    Args:
        da: 2-D raster
        colors: Palette colors (default: ``mapview_palette(7)``)
        na_color: Color for missing values
        maxpixels: Maximum number of cells, larger rasters are subsampled

    Returns:
        Float RGBA array of shape (rows, cols, 4)
    """
    if da.ndim != 2:
        raise InvalidParameterError(f"raster_to_png expects a 2-D raster, got {da.ndim} dimensions")
    if colors is None:
        colors = mapview_palette(7)

    da = sample_regular(da, maxpixels)
    values = np.asarray(da.values, dtype="float64")
    palette = color_numeric(colors, values[np.isfinite(values)], na_color=na_color)
    return raster_to_rgba(da, palette)


def _stretch(band: np.ndarray) -> np.ndarray:
    finite = np.isfinite(band)
    if not finite.any():
        return np.zeros_like(band)
    lo = band[finite].min()
    hi = band[finite].max()
    if hi == lo:
        out = np.zeros_like(band)
    else:
        out = (band - lo) / (hi - lo)
    return np.where(finite, out, 0.0)


def rgb_stack_to_png(da: xr.DataArray, maxpixels: int = 500000) -> np.ndarray:
    """
    Convert the first three bands of a raster stack into an RGBA image.

    Each band is linearly stretched to [0, 1]. Pixels missing in any of the
    three bands are transparent.

    Args:
        da: 3-D raster stack (band, y, x)
        maxpixels: Maximum number of cells, larger rasters are subsampled

    Returns:
        Float RGBA array of shape (rows, cols, 4)
    """
    bdim = band_dim(da)
    if da.sizes[bdim] < 3:
        raise InvalidParameterError(
            f"RGB conversion needs at least 3 bands, got {da.sizes[bdim]}"
        )

    x_name, y_name = raster_xy_names(da)
    da = _north_up(sample_regular(da.isel({bdim: slice(0, 3)}), maxpixels))
    values = np.asarray(da.transpose(bdim, y_name, x_name).values, dtype="float64")

    rgb = np.stack([_stretch(band) for band in values], axis=-1)
    alpha = np.all(np.isfinite(values), axis=0).astype("float64")
    return np.concatenate([rgb, alpha[..., None]], axis=-1)


def write_png(path: Union[str, Path], image: np.ndarray) -> Path:
    """Write an RGB(A) or grayscale image (float in [0, 1] or uint8) to a PNG file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if image.ndim == 2:
        vmax = 255 if image.dtype == np.uint8 else 1.0
        mimage.imsave(str(path), image, cmap="gray", vmin=0, vmax=vmax)
    else:
        mimage.imsave(str(path), image)
    logger.debug(f"Wrote {image.shape[1]}x{image.shape[0]} PNG to {path}")
    return path


def read_png(path: Union[str, Path]) -> np.ndarray:
    """Read a PNG file into a float array in [0, 1].

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidParameterError: If the file cannot be decoded as an image
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    try:
        return mimage.imread(str(path))
    except (OSError, ValueError, SyntaxError) as e:
        raise InvalidParameterError(f"Cannot read image {path}: {e}") from e
