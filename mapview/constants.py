"""
Constants and fixed parameters for the mapview package.

This module defines basemap providers, default layer styling, coordinate
reference systems and the default view used for empty maps.
"""

# ============================================================================
# Basemap Providers
# ============================================================================

# Names follow the leaflet-providers naming scheme
# (http://leaflet-extras.github.io/leaflet-providers/preview/).
MAP_PROVIDERS = {
    "OpenStreetMap": {
        "tiles": "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png",
        "attr": '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors',
        "max_zoom": 19,
    },
    "OpenTopoMap": {
        "tiles": "https://{s}.tile.opentopomap.org/{z}/{x}/{y}.png",
        "attr": (
            'Map data: &copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> '
            'contributors, SRTM | Map style: &copy; <a href="https://opentopomap.org">OpenTopoMap</a>'
        ),
        "max_zoom": 17,
    },
    "Esri.WorldImagery": {
        "tiles": "https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        "attr": (
            "Tiles &copy; Esri &mdash; Source: Esri, i-cubed, USDA, USGS, AEX, GeoEye, "
            "Getmapping, Aerogrid, IGN, IGP, UPR-EGP, and the GIS User Community"
        ),
        "max_zoom": 19,
    },
    "Esri.WorldTopoMap": {
        "tiles": "https://server.arcgisonline.com/ArcGIS/rest/services/World_Topo_Map/MapServer/tile/{z}/{y}/{x}",
        "attr": "Tiles &copy; Esri &mdash; Esri, DeLorme, NAVTEQ, TomTom, Intermap, iPC, USGS, FAO, NPS, NRCAN",
        "max_zoom": 19,
    },
    "CartoDB.Positron": {
        "tiles": "https://{s}.basemaps.cartocdn.com/light_all/{z}/{x}/{y}{r}.png",
        "attr": (
            '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> '
            'contributors &copy; <a href="https://carto.com/attributions">CARTO</a>'
        ),
        "max_zoom": 20,
    },
    "CartoDB.DarkMatter": {
        "tiles": "https://{s}.basemaps.cartocdn.com/dark_all/{z}/{x}/{y}{r}.png",
        "attr": (
            '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> '
            'contributors &copy; <a href="https://carto.com/attributions">CARTO</a>'
        ),
        "max_zoom": 20,
    },
}

DEFAULT_MAP_TYPES = ("OpenStreetMap", "Esri.WorldImagery")

# ============================================================================
# Coordinate Reference Systems
# ============================================================================

# Everything handed to Leaflet is in geographic WGS84.
LONLAT_CRS = "EPSG:4326"
LONLAT_EPSG = 4326

# Coordinate names recognised on xarray rasters, in lookup order.
X_COORD_NAMES = ("x", "lon", "longitude")
Y_COORD_NAMES = ("y", "lat", "latitude")

# ============================================================================
# Layer Styling Defaults
# ============================================================================

DEFAULT_MAXPIXELS = 500000
DEFAULT_PALETTE_SIZE = 7
DEFAULT_LAYER_OPACITY = 0.8
DEFAULT_LEGEND_OPACITY = 1.0
DEFAULT_NA_COLOR = "transparent"
DEFAULT_RADIUS = 10
DEFAULT_WEIGHT = 2

# Leaflet's default path color, used for layers drawn without attributes.
LEAFLET_DEFAULT_COLOR = "#03F"

# Radius range (pixels) for circle markers sized by an attribute column.
RADIUS_RANGE = (3.0, 15.0)

# Relative padding added on both ends of a numeric raster's value range
# when deriving legend values.
LEGEND_RANGE_PADDING = 0.05
LEGEND_N_VALUES = 10
LEGEND_DIGITS = 5

# Decimal places used for coordinates shown in popups.
POPUP_COORD_DIGITS = 2

# Colors the default palette is interpolated from (matplotlib colormap name).
DEFAULT_COLORMAP = "Spectral_r"

# ============================================================================
# Empty Map View
# ============================================================================

DEFAULT_VIEW = {
    "lat": 50.814772,
    "lon": 8.770862,
    "zoom": 18,
}

EASTER_EGG_LOCATION = {
    "lat": 50.814891,
    "lon": 8.771676,
}

# ============================================================================
# Slide View
# ============================================================================

SLIDEVIEW_IMAGE_NAMES = ("img1.png", "img2.png")
SLIDEVIEW_NA_COLOR = "#00000000"
