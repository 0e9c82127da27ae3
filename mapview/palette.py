"""
Color palettes and value-to-color scales for mapview layers.

Colors are handled by Matplotlib: the default palette is sampled from a
Matplotlib colormap and scales interpolate between palette colors with a
``LinearSegmentedColormap``. Two scale types mirror Leaflet's color helpers:

- ``color_numeric``: continuous mapping over the range of a numeric domain
- ``color_factor``: one color per categorical level

Both return callables producing hex strings for popups/legends, and expose
``rgba()`` for vectorised coloring of raster images.
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import matplotlib
import matplotlib.colors as mcolors
import numpy as np

from .constants import (
    DEFAULT_COLORMAP,
    DEFAULT_NA_COLOR,
    LEGEND_DIGITS,
    LEGEND_N_VALUES,
    LEGEND_RANGE_PADDING,
)
from .exceptions import InvalidParameterError

logger = logging.getLogger(__name__)


def to_rgba(color: Any) -> Tuple[float, float, float, float]:
    """Convert any Matplotlib color spec (plus ``"transparent"``) to RGBA."""
    if isinstance(color, str) and color.strip().lower() == "transparent":
        return (0.0, 0.0, 0.0, 0.0)
    try:
        return mcolors.to_rgba(color)
    except ValueError as e:
        raise InvalidParameterError(f"Invalid color specification: {color!r}") from e


def to_hex(color: Any) -> str:
    """Convert a color to a hex string, keeping alpha only when not opaque.

    Example:
        >>> to_hex("red")
        '#ff0000'
        >>> to_hex("transparent")
        '#00000000'
    """
    rgba = to_rgba(color)
    return mcolors.to_hex(rgba, keep_alpha=rgba[3] < 1.0)


def mapview_palette(n: int) -> List[str]:
    """Return ``n`` hex colors sampled evenly from the default colormap."""
    if n < 1:
        raise InvalidParameterError(f"Palette size must be >= 1, got {n}")
    cmap = matplotlib.colormaps[DEFAULT_COLORMAP]
    return [mcolors.to_hex(cmap(x)) for x in np.linspace(0.0, 1.0, n)]


def _ramp(colors: Sequence[Any]) -> mcolors.Colormap:
    if isinstance(colors, str):
        # A single color or a Matplotlib colormap name.
        if colors in matplotlib.colormaps:
            return matplotlib.colormaps[colors]
        colors = [colors]
    rgba = [to_rgba(c) for c in colors]
    if not rgba:
        raise InvalidParameterError("At least one color is required")
    if len(rgba) == 1:
        rgba = rgba * 2
    return mcolors.LinearSegmentedColormap.from_list("mapview_ramp", rgba)


def _hex_array(rgba: np.ndarray) -> List[str]:
    return [mcolors.to_hex(tuple(c), keep_alpha=c[3] < 1.0) for c in rgba.reshape(-1, 4)]


def format_value(value: Any) -> str:
    """Format a legend or popup value (15 significant digits for floats, NA for missing)."""
    if isinstance(value, (float, np.floating)):
        if np.isnan(value):
            return "NA"
        return f"{value:.15g}"
    if value is None:
        return "NA"
    return str(value)


class NumericPalette:
    """Continuous color scale over ``[min(domain), max(domain)]``.

    Values outside the domain and missing values map to ``na_color``.
    """

    kind = "numeric"

    def __init__(self, colors: Sequence[Any], domain: Iterable[float], na_color: str = DEFAULT_NA_COLOR):
        values = np.asarray(list(domain), dtype="float64")
        finite = values[np.isfinite(values)]
        if finite.size == 0:
            raise InvalidParameterError("Numeric color domain contains no finite values")
        self.vmin = float(finite.min())
        self.vmax = float(finite.max())
        self.na_color = to_hex(na_color)
        self._na_rgba = np.asarray(to_rgba(na_color))
        self._cmap = _ramp(colors)

    def _normalise(self, values: np.ndarray) -> np.ndarray:
        if self.vmax == self.vmin:
            return np.where(np.isfinite(values), 0.5, np.nan)
        return (values - self.vmin) / (self.vmax - self.vmin)

    def rgba(self, values: Any) -> np.ndarray:
        """Map an array of values to an RGBA float array of shape ``(..., 4)``."""
        values = np.asarray(values, dtype="float64")
        scaled = self._normalise(values)
        # Small tolerance so rounded legend endpoints still get a color.
        valid = np.isfinite(scaled) & (scaled >= -1e-9) & (scaled <= 1 + 1e-9)
        out = np.empty(values.shape + (4,), dtype="float64")
        out[...] = self._na_rgba
        if valid.any():
            out[valid] = self._cmap(np.clip(scaled[valid], 0.0, 1.0))
        n_outside = int((np.isfinite(values) & ~valid).sum())
        if n_outside:
            logger.debug(f"{n_outside} values outside color domain mapped to NA color")
        return out

    def __call__(self, values: Any) -> List[str]:
        return _hex_array(self.rgba(np.atleast_1d(values)))

    def legend_entries(self, values: Optional[Iterable[Any]] = None) -> List[Tuple[str, str]]:
        """``(label, color)`` pairs; five breaks across the domain by default."""
        if values is None:
            values = np.linspace(self.vmin, self.vmax, 5)
        values = np.asarray(list(values), dtype="float64")
        labels = [format_value(v) for v in np.round(values, LEGEND_DIGITS)]
        return list(zip(labels, self(values)))


class FactorPalette:
    """Categorical color scale assigning one interpolated color per level."""

    kind = "factor"

    def __init__(self, colors: Sequence[Any], levels: Iterable[Any], na_color: str = DEFAULT_NA_COLOR):
        self.levels = list(dict.fromkeys(_drop_missing(levels)))
        if not self.levels:
            raise InvalidParameterError("Categorical color scale needs at least one level")
        self.na_color = to_hex(na_color)
        self._na_rgba = np.asarray(to_rgba(na_color))
        cmap = _ramp(colors)
        self._level_rgba = {
            level: np.asarray(cmap(x))
            for level, x in zip(self.levels, np.linspace(0.0, 1.0, len(self.levels)))
        }

    def rgba(self, values: Any) -> np.ndarray:
        values = np.asarray(values, dtype=object)
        out = np.empty(values.shape + (4,), dtype="float64")
        out[...] = self._na_rgba
        for level, color in self._level_rgba.items():
            out[values == level] = color
        return out

    def __call__(self, values: Any) -> List[str]:
        flat = np.empty(len(np.atleast_1d(values)), dtype=object)
        flat[:] = list(np.atleast_1d(values))
        return _hex_array(self.rgba(flat))

    def legend_entries(self, values: Optional[Iterable[Any]] = None) -> List[Tuple[str, str]]:
        levels = self.levels if values is None else list(dict.fromkeys(_drop_missing(values)))
        return list(zip([format_value(v) for v in levels], self(levels)))


def _drop_missing(values: Iterable[Any]) -> List[Any]:
    out = []
    for v in values:
        if v is None:
            continue
        if isinstance(v, (float, np.floating)) and np.isnan(v):
            continue
        out.append(v.item() if isinstance(v, np.generic) else v)
    return out


def color_numeric(colors: Sequence[Any], domain: Iterable[float], na_color: str = DEFAULT_NA_COLOR) -> NumericPalette:
    """Create a continuous color scale over a numeric domain."""
    return NumericPalette(colors, domain, na_color=na_color)


def color_factor(colors: Sequence[Any], levels: Iterable[Any], na_color: str = DEFAULT_NA_COLOR) -> FactorPalette:
    """Create a categorical color scale with one color per level."""
    return FactorPalette(colors, levels, na_color=na_color)


def legend_values(data: Any, values: Optional[Iterable[float]] = None) -> np.ndarray:
    """Values shown in a numeric legend and used as the color domain.

    User supplied ``values`` are only rounded. Otherwise ten evenly spaced
    values span the data range padded by 5% on each side.

    Example:
        >>> legend_values(np.array([0.0, 10.0]))[[0, -1]]
        array([-0.5, 10.5])
    """
    if values is not None:
        return np.round(np.asarray(list(values), dtype="float64"), LEGEND_DIGITS)

    arr = np.asarray(data, dtype="float64")
    finite = arr[np.isfinite(arr)]
    if finite.size == 0:
        raise InvalidParameterError("Cannot derive legend values: layer has no finite values")

    lo = float(finite.min())
    hi = float(finite.max())
    offset = (hi - lo) * LEGEND_RANGE_PADDING
    return np.round(np.linspace(lo - offset, hi + offset, LEGEND_N_VALUES), LEGEND_DIGITS)


def legend_levels(values: Iterable[Any]) -> List[Any]:
    """Categorical legend values with numeric entries rounded like ``legend_values``."""
    return [
        round(float(v), LEGEND_DIGITS) if isinstance(v, (float, np.floating)) else v
        for v in values
    ]
