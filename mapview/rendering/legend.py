"""
Legend control for colored map layers.

Legends are Leaflet controls injected through a branca ``MacroElement``, the
same mechanism folium uses for its own map controls. Each legend shows one
color swatch per value, so numeric and categorical scales share a layout.
"""

import html
import logging
from typing import Iterable, Optional, Tuple

import folium
from branca.element import MacroElement
from jinja2 import Template

logger = logging.getLogger(__name__)

LEGEND_POSITIONS = ("topleft", "topright", "bottomleft", "bottomright")


class Legend(MacroElement):
    """A Leaflet legend control.

    Args:
        entries: ``(label, hex color)`` pairs, top to bottom.
        title: Legend heading.
        position: Leaflet control corner.
        opacity: Opacity of the color swatches.
        layer_id: Identifier used to replace an existing legend for the same
            layer instead of stacking a second one.
    """

    _template = Template(u"""
        {% macro header(this, kwargs) %}
            <style>
                .mapview-legend {
                    padding: 6px 8px;
                    background: rgba(255, 255, 255, 0.8);
                    box-shadow: 0 0 15px rgba(0, 0, 0, 0.2);
                    border-radius: 5px;
                    line-height: 18px;
                    font: 12px/18px Arial, Helvetica, sans-serif;
                    color: #555;
                }
                .mapview-legend i {
                    width: 18px;
                    height: 18px;
                    float: left;
                    margin-right: 8px;
                }
            </style>
        {% endmacro %}

        {% macro script(this, kwargs) %}
            var {{ this.get_name() }} = L.control({position: {{ this.position|tojson }}});
            {{ this.get_name() }}.onAdd = function (map) {
                var div = L.DomUtil.create('div', 'info legend mapview-legend');
                div.setAttribute('data-layer-id', {{ this.layer_id|tojson }});
                div.innerHTML = {{ this.html|tojson }};
                return div;
            };
            {{ this.get_name() }}.addTo({{ this._parent.get_name() }});
        {% endmacro %}
        """)

    def __init__(
        self,
        entries: Iterable[Tuple[str, str]],
        title: Optional[str] = None,
        position: str = "topright",
        opacity: float = 1.0,
        layer_id: Optional[str] = None
    ):
        super().__init__()
        if position not in LEGEND_POSITIONS:
            raise ValueError(f"Legend position must be one of {LEGEND_POSITIONS}, got {position!r}")
        self._name = "Legend"
        self.entries = list(entries)
        self.title = title
        self.position = position
        self.opacity = float(opacity)
        self.layer_id = layer_id if layer_id is not None else (title or "")

    @property
    def html(self) -> str:
        parts = []
        if self.title:
            parts.append(f"<strong>{html.escape(str(self.title))}</strong><br>")
        for label, color in self.entries:
            parts.append(
                f'<i style="background:{color};opacity:{self.opacity:g}"></i>'
                f"{html.escape(label)}<br>"
            )
        return "".join(parts)


def add_legend(
    m: folium.Map,
    entries: Iterable[Tuple[str, str]],
    title: Optional[str] = None,
    position: str = "topright",
    opacity: float = 1.0,
    layer_id: Optional[str] = None
) -> Legend:
    """Add a legend to ``m``, replacing an existing legend with the same layer id."""
    legend = Legend(entries, title=title, position=position, opacity=opacity, layer_id=layer_id)

    for key, child in list(m._children.items()):
        if isinstance(child, Legend) and child.layer_id == legend.layer_id:
            del m._children[key]
            logger.debug(f"Replaced legend for layer '{legend.layer_id}'")

    legend.add_to(m)
    return legend
