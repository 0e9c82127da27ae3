"""
Result object returned by every viewer.

``MapView`` pairs the spatial object that was drawn with the folium map it
was drawn on. It is immutable; adding another layer returns a new MapView
sharing the (updated) map.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Union

import folium

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class MapView:
    """An interactive map together with the object it shows.

    Attributes:
        object: The projection-adjusted spatial object, or None for a bare map.
        map: The folium map holding all layers added so far.

    Example:
        >>> mv = map_view(gdf)
        >>> mv.save("points.html")
        >>> mv2 = map_view(raster, map=mv)  # add a layer to the same map
    """

    object: Any
    map: folium.Map

    @property
    def layer_names(self) -> List[str]:
        """Names of the overlay groups currently on the map."""
        # rendering.basemap imports this module
        from .rendering.basemap import get_layer_names_from_map
        return get_layer_names_from_map(self.map)

    def to_html(self) -> str:
        """Render the map as a standalone HTML document."""
        return self.map.get_root().render()

    def save(self, path: Union[str, Path]) -> Path:
        """Write the map to a standalone HTML file.

        Args:
            path: Output file path; parent directories are created.

        Returns:
            The path written to.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.map.save(str(path))
        logger.info(f"Map saved to {path}")
        return path

    def _repr_html_(self) -> str:
        return self.map._repr_html_()

    def __repr__(self) -> str:
        kind = type(self.object).__name__ if self.object is not None else "None"
        return f"MapView(object={kind}, layers={self.layer_names})"
