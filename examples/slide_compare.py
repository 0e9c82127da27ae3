"""Before/after slider example.

This example compares two states of a synthetic vegetation index raster with
slide_view(). Both rasters are colored with the default mapview palette,
written as PNG files and embedded in a single HTML page with a slider.

Output:
  - output/ndvi_change.html
"""

import argparse
import logging
from pathlib import Path

import numpy as np
import xarray as xr

from mapview import SlideViewError, slide_view

logger = logging.getLogger(__name__)


def make_ndvi(seed: int, shift: float) -> xr.DataArray:
    """Smooth random field in [-0.2, 0.9] standing in for an NDVI scene."""
    rng = np.random.default_rng(seed)
    x = np.linspace(0.0, 1.0, 200)
    y = np.linspace(1.0, 0.0, 150)
    xx, yy = np.meshgrid(x, y)
    field = np.sin(6 * xx + shift) * np.cos(4 * yy) + 0.3 * rng.standard_normal(xx.shape)
    field = (field - field.min()) / (field.max() - field.min())
    return xr.DataArray(
        -0.2 + 1.1 * field,
        dims=("y", "x"),
        coords={"y": y, "x": x},
        name="ndvi",
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Compare two rasters with a slider")
    parser.add_argument("--output", default="output/ndvi_change.html", help="Output HTML file")
    parser.add_argument("--maxpixels", type=int, default=500000, help="Maximum cells per image")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    before = make_ndvi(seed=1, shift=0.0)
    after = make_ndvi(seed=2, shift=0.8)

    try:
        sv = slide_view(before, after, maxpixels=args.maxpixels, height="600px")
    except SlideViewError as e:
        logger.error(f"Slide view failed: {e}")
        return 1

    output_path = sv.save(Path(args.output))
    logger.info(f"Images kept in {sv.image_dir}")
    print(f"Success! Slide view saved to: {output_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
