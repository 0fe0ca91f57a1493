"""
controls.py — UI Control Panels
=================================
Every UI panel is a pure function that takes state and returns HTML.

Panels:
  • transport_controls   – play/pause/unpause/stop/step/shuffle + delay slider
  • algorithm_selector   – radio group over the registry, with complexity and a stable badge
  • record_table         – id / value / updated grid with inline value edit
  • pseudocode_viewer    – the selected algorithm's pseudocode
  • analytics_panel      – steps taken vs worst case, wall time
  • comparison_panel     – side-by-side metrics of two recorded runs

Design:
  - All panels are stateless render functions.
  - State is passed in as kwargs.
  - Output is raw HTML strings (no templating engine).
  - The main app stitches them together.
"""

from html import escape
from typing import List, Optional, Sequence

from algorithms import AlgoInfo
from engine import ComparisonResult, RunMetrics
from records import Record


# ---------------------------------------------------------------------------
# Transport Controls
# ---------------------------------------------------------------------------
def transport_controls(
    state: str = "idle",
    delay_ms: int = 0,
    max_delay_ms: int = 1000,
    steps_taken: int = 0,
) -> str:
    live = state in ("running", "paused")

    def button(btn_id: str, label: str, enabled: bool) -> str:
        disabled = "" if enabled else "disabled"
        return f'<button id="{btn_id}" {disabled}>{label}</button>'

    return f"""
    <div class="panel transport-controls">
      <h3>⏯ Playback</h3>
      <div class="button-row">
        {button("btn-shuffle", "🔀 Shuffle", not live)}
        {button("btn-play", "▶ Play", not live)}
        {button("btn-stop", "⏹ Stop", live)}
      </div>
      <div class="button-row">
        {button("btn-pause", "⏸ Pause", state == "running")}
        {button("btn-unpause", "⏯ Unpause", state == "paused")}
        {button("btn-step", "⏭ Step", live)}
      </div>
      <div class="delay-control">
        <label for="delay-slider">Delay:</label>
        <input id="delay-slider" type="range" min="0" max="{max_delay_ms}" value="{delay_ms}">
        <span id="delay-value">{delay_ms} ms</span>
      </div>
      <div class="step-info">
        State <span id="state">{state.upper()}</span> ·
        Step <span id="steps-taken">{steps_taken}</span>
      </div>
    </div>
    """


# ---------------------------------------------------------------------------
# Algorithm Selector
# ---------------------------------------------------------------------------
def algorithm_selector(
    algorithms: List[AlgoInfo],
    selected_key: str = "selectionSort",
    disabled: bool = False,
) -> str:
    options = []
    for algo in algorithms:
        checked = "checked" if algo.key == selected_key else ""
        badge = ' <span class="badge">stable</span>' if algo.stable else ""
        tags = " ".join(f"tag-{t}" for t in algo.tags)
        options.append(
            f'<label class="algo-option {tags}" title="{escape(algo.description)}">'
            f'<input type="radio" name="algorithm" value="{algo.key}" {checked} '
            f'{"disabled" if disabled else ""}> {algo.label}{badge}'
            f' <span class="muted">time {algo.complexity_time} · space {algo.complexity_space}</span></label>'
        )

    return f"""
    <div class="panel algorithm-selector">
      <h3>🧠 Algorithm</h3>
      {''.join(options)}
    </div>
    """


# ---------------------------------------------------------------------------
# Record Table
# ---------------------------------------------------------------------------
def record_table(records: Sequence[Record], editable: bool = True) -> str:
    rows = []
    for rec in records:
        rid = escape(rec.id)
        if editable:
            cell = (
                f'<input class="value-edit" type="number" data-id="{rid}" '
                f'value="{escape(str(rec.value))}">'
            )
        else:
            cell = escape(str(rec.value))
        rows.append(
            f"<tr><td class=\"mono\">{rid[:8]}</td><td>{cell}</td>"
            f"<td class=\"muted\">{rec.updated_at:.3f}</td></tr>"
        )

    add_button = '<button id="btn-add">＋ Add</button>' if editable else ""
    return f"""
    <div class="panel record-table">
      <h3>📋 Records ({len(records)})</h3>
      <table>
        <thead><tr><th>Id</th><th>Value</th><th>Updated</th></tr></thead>
        <tbody>{''.join(rows)}</tbody>
      </table>
      {add_button}
    </div>
    """


# ---------------------------------------------------------------------------
# Pseudocode Viewer
# ---------------------------------------------------------------------------
def pseudocode_viewer(pseudocode_lines: List[str], algo_label: str = "") -> str:
    lines = "".join(
        f'<div class="code-line">{escape(line)}</div>' for line in pseudocode_lines
    )
    return f"""
    <div id="pseudocode-container">
      <h3>{escape(algo_label) or "Pseudocode"}</h3>
      <div class="code-block">{lines}</div>
    </div>
    """


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------
def analytics_panel(metrics: Optional[RunMetrics] = None) -> str:
    if metrics is None:
        body = '<p class="muted">Compare two algorithms to see analytics.</p>'
    else:
        body = _metrics_table(metrics)
    return f"""
    <div class="panel analytics">
      <h3>📊 Analytics</h3>
      {body}
    </div>
    """


def comparison_panel(result: ComparisonResult) -> str:
    return f"""
    <div class="panel comparison">
      <h3>⚖ Comparison</h3>
      <div class="comparison-grid">
        <div>{_metrics_table(result.left)}</div>
        <div>{_metrics_table(result.right)}</div>
      </div>
      <p>Fewer steps: <strong>{escape(result.winner_steps)}</strong></p>
      <p>Faster: <strong>{escape(result.winner_time)}</strong></p>
    </div>
    """


def _metrics_table(m: RunMetrics) -> str:
    return f"""
      <table class="metrics">
        <tr><th colspan="2">{escape(m.algo_label)}</th></tr>
        <tr><td>Records</td><td>{m.size}</td></tr>
        <tr><td>Steps</td><td>{m.total_steps} / {m.max_steps} worst case</td></tr>
        <tr><td>Wall time</td><td>{m.wall_time_ms} ms</td></tr>
        <tr><td>Sorted</td><td>{"yes" if m.is_sorted else "NO"}</td></tr>
      </table>
    """
