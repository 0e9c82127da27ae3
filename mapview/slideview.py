"""
Slide comparison of two images.

``slide_view`` converts two rasters (or takes two existing PNG files), writes
them as ``img1.png`` and ``img2.png`` to a fresh temporary directory and
wraps them in a small HTML widget with a slider that swipes between them.

Example:
    >>> from mapview import slide_view
    >>> sv = slide_view(ndvi_2015, ndvi_2020)
    >>> sv.save("ndvi_change.html")
"""

import base64
import html
import logging
import tempfile
import uuid
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import numpy as np
import xarray as xr
from jinja2 import Environment, FileSystemLoader

from .constants import DEFAULT_MAXPIXELS, SLIDEVIEW_IMAGE_NAMES, SLIDEVIEW_NA_COLOR
from .exceptions import MapviewError, SlideViewError, UnsupportedTypeError
from .rendering.images import raster_to_png, read_png, rgb_stack_to_png, write_png

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).parent
STATIC_DIR = PACKAGE_DIR / "static"
TEMPLATE_DIR = PACKAGE_DIR / "templates"

_env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=False)


def _data_uri(path: Path) -> str:
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


class SlideView:
    """Before/after slider widget over two PNG images.

    Attributes:
        filename1: First image (shown left of the slider handle).
        filename2: Second image (shown right of the slider handle).
        width: CSS width of the widget.
        height: CSS height of the widget.
    """

    def __init__(
        self,
        filename1: Union[str, Path],
        filename2: Union[str, Path],
        width: Optional[str] = None,
        height: Optional[str] = None
    ):
        self.filename1 = Path(filename1)
        self.filename2 = Path(filename2)
        self.width = width or "100%"
        self.height = height or "auto"

    @property
    def image_dir(self) -> Path:
        """Directory holding the images."""
        return self.filename1.parent

    def to_html(self, title: str = "slideView") -> str:
        """Render a standalone HTML page with both images embedded."""
        try:
            template = _env.get_template("slideview.html")
            return template.render(
                title=html.escape(title),
                widget_id=f"slideview_{uuid.uuid4().hex}",
                width=self.width,
                height=self.height,
                src1=_data_uri(self.filename1),
                src2=_data_uri(self.filename2),
                label1=html.escape(self.filename1.name),
                label2=html.escape(self.filename2.name),
                css=(STATIC_DIR / "slideview.css").read_text(encoding="utf-8"),
                js=(STATIC_DIR / "slideview.js").read_text(encoding="utf-8"),
            )
        except OSError as e:
            raise SlideViewError(f"Failed to render slide view: {e}") from e

    def save(self, path: Union[str, Path]) -> Path:
        """Write the widget to a standalone HTML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_html(), encoding="utf-8")
        logger.info(f"Slide view saved to {path}")
        return path

    def _repr_html_(self) -> str:
        encoded = base64.b64encode(self.to_html().encode("utf-8")).decode("ascii")
        height = "500px" if self.height == "auto" else self.height
        return (
            f'<iframe src="data:text/html;charset=utf-8;base64,{encoded}" '
            f'width="{self.width}" height="{height}" style="border:none"></iframe>'
        )

    def __repr__(self) -> str:
        return f"SlideView(image_dir={str(self.image_dir)!r})"


def _image_kind(img: Any) -> str:
    if isinstance(img, xr.DataArray):
        if img.ndim == 3:
            return "stack"
        if img.ndim == 2:
            return "layer"
        raise UnsupportedTypeError(
            f"slide_view needs 2-D or 3-D rasters, got {img.ndim} dimensions"
        )
    if isinstance(img, (str, Path)):
        return "png"
    raise UnsupportedTypeError(f"slide_view does not support objects of type {type(img).__name__}")


def _to_image(img: Any, kind: str, colors, na_color: str, maxpixels: int) -> np.ndarray:
    if kind == "stack":
        return rgb_stack_to_png(img, maxpixels=maxpixels)
    if kind == "layer":
        return raster_to_png(img, colors=colors, na_color=na_color, maxpixels=maxpixels)
    return read_png(img)


def slide_view(
    img1: Any,
    img2: Any,
    colors: Optional[Sequence[Any]] = None,
    na_color: str = SLIDEVIEW_NA_COLOR,
    maxpixels: int = DEFAULT_MAXPIXELS,
    width: Optional[str] = None,
    height: Optional[str] = None
) -> SlideView:
    """
    Compare two images with a slider.

    Args:
        img1: 3-D raster stack (RGB), 2-D raster or path to a PNG file
        img2: Object of the same kind as ``img1``
        colors: Palette for 2-D rasters (default: ``mapview_palette(7)``)
        na_color: Color for missing values of 2-D rasters
        maxpixels: Maximum number of raster cells, larger rasters are subsampled
        width: CSS width of the widget
        height: CSS height of the widget

    Returns:
        SlideView widget

    Raises:
        SlideViewError: If the inputs differ in kind or conversion fails
        UnsupportedTypeError: If an input is not a raster or a path

    Example:
        >>> sv = slide_view("before.png", "after.png")
        >>> html = sv.to_html()
    """
    kind1 = _image_kind(img1)
    kind2 = _image_kind(img2)
    if kind1 != kind2:
        raise SlideViewError(
            f"Both images must be of the same kind, got '{kind1}' and '{kind2}'"
        )

    try:
        images = [_to_image(img, kind1, colors, na_color, maxpixels) for img in (img1, img2)]
    except (MapviewError, FileNotFoundError) as e:
        raise SlideViewError(f"Failed to prepare slide view images: {e}") from e

    image_dir = Path(tempfile.mkdtemp(prefix="slideview_"))
    try:
        paths = [
            write_png(image_dir / name, image)
            for name, image in zip(SLIDEVIEW_IMAGE_NAMES, images)
        ]
    except (OSError, ValueError) as e:
        raise SlideViewError(f"Failed to write slide view images to {image_dir}: {e}") from e

    logger.debug(f"Slide view images written to {image_dir}")
    return SlideView(paths[0], paths[1], width=width, height=height)
