from .text import Cell, Style, end_screen_lines, render_cells, render_lines, status_line

__all__ = ["Cell", "Style", "end_screen_lines", "render_cells", "render_lines", "status_line"]
