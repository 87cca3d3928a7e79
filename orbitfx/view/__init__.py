from .view_widget import (
    OrbitViewWidget,
    allocate_backing,
    hsla_color,
    paint_backing,
    render_frame,
    render_to_image,
)

__all__ = [
    "OrbitViewWidget",
    "allocate_backing",
    "hsla_color",
    "paint_backing",
    "render_frame",
    "render_to_image",
]
