"""
ui/
---
Presentation layer.

    from ui import render_chart, SvgRenderer
    from ui import transport_controls, algorithm_selector, …
"""

from ui.canvas import render_chart, bar_color, SvgRenderer, CanvasConfig

from ui.controls import (
    transport_controls,
    algorithm_selector,
    record_table,
    pseudocode_viewer,
    analytics_panel,
    comparison_panel,
)

__all__ = [
    "render_chart",
    "bar_color",
    "SvgRenderer",
    "CanvasConfig",
    "transport_controls",
    "algorithm_selector",
    "record_table",
    "pseudocode_viewer",
    "analytics_panel",
    "comparison_panel",
]
