from .canvas import draw_hline, draw_vline, fill_rect, new_canvas
from .draw_lines import draw_line
from .draw_text import draw_text, text_size
from .frame import RasterFrame

__all__ = [
    "RasterFrame",
    "draw_hline",
    "draw_line",
    "draw_text",
    "draw_vline",
    "fill_rect",
    "new_canvas",
    "text_size",
]
