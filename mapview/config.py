"""
Configuration management for the mapview package.

This module provides the defaults used when converting spatial objects into
interactive maps: basemap providers, layer and legend opacity, palette size,
raster sampling limits and widget dimensions.
"""

import json
import yaml
from dataclasses import dataclass, asdict, field, fields
from pathlib import Path
from typing import Optional, Tuple

from .constants import (
    DEFAULT_MAP_TYPES,
    DEFAULT_MAXPIXELS,
    DEFAULT_PALETTE_SIZE,
    DEFAULT_LAYER_OPACITY,
    DEFAULT_LEGEND_OPACITY,
    DEFAULT_NA_COLOR,
    DEFAULT_RADIUS,
    DEFAULT_WEIGHT,
    DEFAULT_VIEW,
    MAP_PROVIDERS,
)


@dataclass
class Config:
    """Configuration for interactive map generation.

    Attributes:
        map_types: Basemap provider names, the first one is shown initially.
        maxpixels: Maximum number of raster cells drawn; larger rasters are
            subsampled regularly.
        palette_size: Number of colors in the default palette.
        layer_opacity: Opacity of raster overlays.
        legend: Whether legends are added for colored layers.
        legend_opacity: Opacity of legend swatches.
        na_color: Color for missing values.
        trim: Whether NA rows/columns on raster edges are removed.
        radius: Default circle marker radius in pixels.
        weight: Default stroke width for lines and polygon outlines.
        use_layer_names: Whether raster names are used as layer group names.
        width: Widget width (CSS size).
        height: Widget height (CSS size).
        default_lat: Latitude of the view used for empty maps.
        default_lon: Longitude of the view used for empty maps.
        default_zoom: Zoom of the view used for empty maps.
        output_dir: Directory for saved HTML widgets.
    """

    map_types: Tuple[str, ...] = DEFAULT_MAP_TYPES
    maxpixels: int = DEFAULT_MAXPIXELS
    palette_size: int = DEFAULT_PALETTE_SIZE
    layer_opacity: float = DEFAULT_LAYER_OPACITY
    legend: bool = True
    legend_opacity: float = DEFAULT_LEGEND_OPACITY
    na_color: str = DEFAULT_NA_COLOR
    trim: bool = True
    radius: float = DEFAULT_RADIUS
    weight: float = DEFAULT_WEIGHT
    use_layer_names: bool = True
    width: str = "100%"
    height: str = "100%"
    default_lat: float = DEFAULT_VIEW["lat"]
    default_lon: float = DEFAULT_VIEW["lon"]
    default_zoom: int = DEFAULT_VIEW["zoom"]
    output_dir: Path = field(default_factory=lambda: Path("./output"))

    def __post_init__(self):
        """Normalise list/str inputs coming from files or the CLI."""
        if isinstance(self.map_types, str):
            self.map_types = (self.map_types,)
        else:
            self.map_types = tuple(self.map_types)
        if isinstance(self.output_dir, str):
            self.output_dir = Path(self.output_dir)

    @classmethod
    def load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a YAML or JSON file.

        Args:
            path: Path to configuration file (.yaml, .yml, or .json).

        Returns:
            Config instance with loaded settings.

        Raises:
            ValueError: If the format is not supported or the file sets
                keys that are not Config fields.
            FileNotFoundError: If file does not exist.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            elif path.suffix == '.json':
                data = json.load(f)
            else:
                raise ValueError(f"Unsupported file format: {path.suffix}. Use .yaml, .yml, or .json")

        data = data or {}
        unknown = sorted(set(data) - {f.name for f in fields(cls)})
        if unknown:
            raise ValueError(f"Unknown settings in {path.name}: {unknown}")
        return cls(**data)

    def save_to_file(self, path: Path) -> None:
        """Save configuration to a YAML or JSON file.

        Args:
            path: Path where configuration should be saved.

        Raises:
            ValueError: If file format is not supported.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = asdict(self)
        data['map_types'] = list(data['map_types'])
        data['output_dir'] = str(data['output_dir'])

        with open(path, 'w') as f:
            if path.suffix in ['.yaml', '.yml']:
                yaml.dump(data, f, default_flow_style=False, sort_keys=False)
            elif path.suffix == '.json':
                json.dump(data, f, indent=2)
            else:
                raise ValueError(f"Unsupported file format: {path.suffix}. Use .yaml, .yml, or .json")

    def validate(self) -> bool:
        """Validate configuration parameters.

        Returns:
            True if configuration is valid.

        Raises:
            ValueError: If any configuration parameter is invalid.
        """
        unknown = [name for name in self.map_types if name not in MAP_PROVIDERS]
        if unknown:
            raise ValueError(
                f"Unknown map types {unknown}. Available: {list(MAP_PROVIDERS.keys())}"
            )

        if not isinstance(self.maxpixels, int) or self.maxpixels < 1:
            raise ValueError("maxpixels must be an integer >= 1")

        if not isinstance(self.palette_size, int) or self.palette_size < 1:
            raise ValueError("palette_size must be an integer >= 1")

        if not (0.0 <= float(self.layer_opacity) <= 1.0):
            raise ValueError("layer_opacity must be in the range [0.0, 1.0]")

        if not (0.0 <= float(self.legend_opacity) <= 1.0):
            raise ValueError("legend_opacity must be in the range [0.0, 1.0]")

        if not isinstance(self.na_color, str) or not self.na_color:
            raise ValueError("na_color must be a non-empty string")

        if self.radius <= 0:
            raise ValueError("radius must be positive")

        if self.weight < 0:
            raise ValueError("weight must be non-negative")

        if not (-90.0 <= self.default_lat <= 90.0):
            raise ValueError("default_lat must be in the range [-90, 90]")

        if not (-180.0 <= self.default_lon <= 180.0):
            raise ValueError("default_lon must be in the range [-180, 180]")

        return True

    def ensure_directories(self) -> None:
        """Create the output directory if it doesn't exist."""
        self.output_dir.mkdir(parents=True, exist_ok=True)


def get_default_config() -> Config:
    """Get a Config instance with default settings.

    Returns:
        Config instance initialized with default values.
    """
    return Config()


def resolve(config: Optional[Config], name: str, value):
    """Return ``value`` unless it is None, else the attribute from ``config``."""
    if value is not None:
        return value
    if config is None:
        config = Config()
    return getattr(config, name)
