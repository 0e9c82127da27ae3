"""
Basic Map Example

This example demonstrates how to put rasters and vector layers on one
interactive map with mapview. It builds a small synthetic elevation raster
and a handful of sample points around Marburg, draws both with map_view()
and writes a standalone HTML page.

Output: An HTML file with the elevation raster, one layer per point attribute
(zinc, landuse) and a layers control to switch between them.
"""

import logging
from pathlib import Path

import geopandas as gpd
import numpy as np
import xarray as xr
from shapely.geometry import Point

from mapview import InvalidParameterError, RenderError, map_view

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# ============================================================================
# Sample Data
# ============================================================================

lon = np.linspace(8.70, 8.84, 60)
lat = np.linspace(50.86, 50.76, 45)
lon2d, lat2d = np.meshgrid(lon, lat)
elevation = 180.0 + 120.0 * np.exp(-((lon2d - 8.77) ** 2 + (lat2d - 50.81) ** 2) / 0.001)

dem = xr.DataArray(
    elevation,
    dims=("y", "x"),
    coords={"y": lat, "x": lon},
    name="elevation",
    attrs={"crs": "EPSG:4326"},
)

samples = gpd.GeoDataFrame(
    {
        "zinc": [112.0, 260.0, 845.0, 1320.0, 405.0],
        "landuse": ["forest", "field", "urban", "urban", "field"],
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

# ============================================================================
# Interactive Map
# ============================================================================

print("Creating interactive map:")
print(f"  Raster: {dem.name} ({dem.sizes['x']}x{dem.sizes['y']} cells)")
print(f"  Points: {len(samples)} samples, columns {list(samples.columns[:-1])}")
print()

try:
    mv = map_view(dem, map_types=["OpenTopoMap", "Esri.WorldImagery"])
    mv = map_view(samples, map=mv, burst=True, radius="zinc")

    output_path = mv.save(Path("output/basic_map.html"))

    print(f"Success! Map saved to: {output_path}")
    print()
    print("The map displays:")
    print("  - Elevation raster with a legend")
    print("  - One point layer per attribute (only the first is switched on)")
    print("  - Marker size scaled by zinc concentration")

except InvalidParameterError as e:
    print(f"Error creating map (invalid input): {e}")

except RenderError as e:
    print(f"Error creating map (render failed): {e}")
