"""
canvas.py — SVG Bar Chart Renderer
===================================
Pure rendering function: RecordList → SVG string.  One horizontal bar
per record, top to bottom in list order, bar length = value.

Bar colour encodes how recently the record was touched: a bar that was
just swapped is red and fades to blue over `fade_seconds`.

SvgRenderer is the Renderer the PlaybackController publishes to.  It
only remembers the latest snapshot; drawing happens when the web page
asks for it, so back-to-back publishes at delay 0 cost nothing.
"""

import time
from html import escape
from typing import Callable, List, Optional, Sequence

from records import Record, RecordList


# ---------------------------------------------------------------------------
# Visual Config
# ---------------------------------------------------------------------------
class CanvasConfig:
    width:        int   = 900
    bar_height:   int   = 6
    bar_gap:      int   = 2
    min_height:   int   = 120
    bg:           str   = "#0d1117"
    label_color:  str   = "#7d8590"
    label_size:   int   = 11
    fade_seconds: float = 1.0


CONFIG = CanvasConfig()


# ---------------------------------------------------------------------------
# Main Render Function
# ---------------------------------------------------------------------------
def render_chart(
    records: Sequence[Record],
    now: Optional[float] = None,
    config: CanvasConfig = CONFIG,
    max_value: Optional[float] = None,
) -> str:
    """
    Returns an SVG string.

    Args:
        records   : Snapshot to draw, in rank order.
        now       : Clock reading to age `updated_at` against (same clock!).
        config    : Visual config.
        max_value : Value that maps to the full width (default: largest value).
    """
    now = time.monotonic() if now is None else now
    pitch = config.bar_height + config.bar_gap
    height = max(config.min_height, len(records) * pitch)

    top = max_value if max_value is not None else max((r.value for r in records), default=0)
    scale = (config.width / top) if top and top > 0 else 0.0

    parts: List[str] = [
        f'<svg width="{config.width}" height="{height}" '
        f'viewBox="0 0 {config.width} {height}" '
        f'xmlns="http://www.w3.org/2000/svg" style="background: {config.bg};">'
    ]

    if not records:
        parts.append(
            f'<text x="{config.width // 2}" y="{height // 2}" text-anchor="middle" '
            f'fill="{config.label_color}" font-size="{config.label_size}">'
            f'No records — add some or reset.</text>'
        )

    for idx, rec in enumerate(records):
        w = max(0.0, rec.value * scale)
        parts.append(
            f'<rect id="r-{escape(rec.id)}" x="0" y="{idx * pitch}" '
            f'width="{w:.1f}" height="{config.bar_height}" '
            f'fill="{bar_color(rec, now, config.fade_seconds)}">'
            f'<title>{escape(str(rec.value))}</title></rect>'
        )

    parts.append("</svg>")
    return "\n".join(parts)


def bar_color(record: Record, now: float, fade_seconds: float = 1.0) -> str:
    """Red right after a touch, blue once `fade_seconds` have passed."""
    age = max(0.0, now - record.updated_at)
    s = min(1.0, age / fade_seconds) if fade_seconds > 0 else 1.0
    r = round(255 - 255 * s)
    b = round(255 * s)
    return f"rgb({r}, 0, {b})"


# ---------------------------------------------------------------------------
# Renderer — the controller's publish target
# ---------------------------------------------------------------------------
class SvgRenderer:
    """
    Attributes:
        records       : Latest published snapshot.
        publish_count : Number of publish() calls so far.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        config: CanvasConfig = CONFIG,
    ):
        self.records:       RecordList = ()
        self.publish_count: int        = 0
        self._clock  = clock
        self._config = config

    def publish(self, records: RecordList) -> None:
        self.records = records
        self.publish_count += 1

    def render(self, max_value: Optional[float] = None) -> str:
        return render_chart(self.records, self._clock(), self._config, max_value)
