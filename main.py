"""
main.py — Sorting Visualizer Flask App
=======================================
The web server that powers the visualizer.

Routes:
  GET  /                       – main UI
  GET  /api/state              – pump the timer, return state + chart + table
  POST /api/play               – start a run  {delay, algorithm}
  POST /api/pause              – pause the timer
  POST /api/unpause            – resume the timer
  POST /api/stop               – abandon the run
  POST /api/step               – advance exactly one step
  POST /api/delay              – change the tick delay  {delay}
  POST /api/shuffle            – shuffle the records (idle only)
  POST /api/reset              – new record list  {values?} | {count?}
  POST /api/records/add        – append a record  {value?}
  POST /api/records/edit       – change a value  {id, value}
  POST /api/compare            – run two algorithms to completion  {left, right}

State management:
  One PlaybackController per server process (one visualization session).
  Its timer lives on a TickScheduler that is pumped at the start of every
  request, and the server runs single-threaded, so ticks and commands are
  never interleaved.

Errors:
  A rejected command answers 409 (invalid transition) or 400 (bad
  argument) with {"error", "kind", "state"}.  An aborted run answers 500.
"""

from flask import Flask, render_template_string, request, jsonify
import logging
import os
import random
import sys
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Tuple

# add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import Settings, configure_logging
from errors import InvalidArgument, InvariantViolation, StepFailed, UnknownAlgorithm
from records import from_values, is_value, random_records
from algorithms import get_algorithm, list_algorithms
from engine import CommandResult, PlaybackController, Recorder, TickScheduler, compare
from ui import (
    SvgRenderer,
    transport_controls,
    algorithm_selector,
    record_table,
    pseudocode_viewer,
    analytics_panel,
    comparison_panel,
)


logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.from_mapping(Settings().to_flask())
configure_logging(app.config["LOG_LEVEL"], app.config["LOG_FORMAT"])


# ---------------------------------------------------------------------------
# Playback Session
# ---------------------------------------------------------------------------
@dataclass
class Playback:
    controller: PlaybackController
    scheduler:  TickScheduler
    renderer:   SvgRenderer
    selected:   str


def init_playback(flask_app: Flask, clock: Callable[[], float] = time.monotonic) -> Playback:
    """(Re)build the session's controller from the app config."""
    cfg = flask_app.config
    rng = random.Random(cfg["SEED"])
    scheduler = TickScheduler(clock=clock, max_callbacks=cfg["MAX_TICKS_PER_POLL"])
    renderer = SvgRenderer(clock=clock)
    controller = PlaybackController(
        records=random_records(cfg["RECORD_COUNT"], rng, cfg["MAX_VALUE"], clock),
        scheduler=scheduler,
        renderer=renderer,
        delay_ms=cfg["DEFAULT_DELAY_MS"],
        validate=cfg["VALIDATE_STEPS"],
        rng=rng,
        clock=clock,
        max_value=cfg["MAX_VALUE"],
        max_records=cfg["MAX_RECORDS"],
    )
    renderer.publish(controller.records)

    old = flask_app.extensions.get("playback")
    if old is not None:
        old.controller.close()
        old.scheduler.clear()

    playback = Playback(controller, scheduler, renderer, cfg["DEFAULT_ALGORITHM"])
    flask_app.extensions["playback"] = playback
    return playback


def get_playback() -> Playback:
    return app.extensions["playback"]


@app.before_request
def pump_timer():
    """Fire every tick that came due since the last request."""
    get_playback().scheduler.run_due()


# ---------------------------------------------------------------------------
# Response Helpers
# ---------------------------------------------------------------------------
def state_payload() -> Dict[str, Any]:
    pb = get_playback()
    ctl = pb.controller
    status = ctl.status()
    return {
        **status,
        "selected":  pb.selected,
        "pending":   pb.scheduler.pending,
        "svg":       pb.renderer.render(max_value=app.config["MAX_VALUE"]),
        "table":     record_table(ctl.records, editable=not ctl.has_sequence),
    }


def respond(result: CommandResult) -> Tuple[Any, int]:
    payload = {**state_payload(), **result.to_dict()}
    if result.ok:
        return jsonify(payload), 200
    if isinstance(result.error, InvalidArgument):
        return jsonify(payload), 400
    if isinstance(result.error, (InvariantViolation, StepFailed)):
        return jsonify(payload), 500
    return jsonify(payload), 409


def bad_request(message: str) -> Tuple[Any, int]:
    return jsonify({"error": message, "kind": InvalidArgument.kind}), 400


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def int_field(data: Dict[str, Any], name: str, default: int) -> int:
    """Read an integer field; the slider posts numbers as strings."""
    raw = data.get(name, default)
    if isinstance(raw, bool):
        raise InvalidArgument(f"'{name}' must be an integer")
    try:
        return int(raw)
    except (TypeError, ValueError, OverflowError):
        raise InvalidArgument(f"'{name}' must be an integer, got {raw!r}")


# ---------------------------------------------------------------------------
# Main UI Route
# ---------------------------------------------------------------------------
@app.route("/")
def index():
    pb = get_playback()
    algo_info = get_algorithm(pb.selected)
    state = state_payload()

    html = render_template_string(INDEX_TEMPLATE,
        svg=state["svg"],
        transport=transport_controls(
            state=state["state"],
            delay_ms=state["delay_ms"],
            max_delay_ms=app.config["MAX_DELAY_MS"],
            steps_taken=state["steps_taken"],
        ),
        algo_selector=algorithm_selector(
            algorithms=list_algorithms(),
            selected_key=pb.selected,
            disabled=pb.controller.has_sequence,
        ),
        pseudocode=pseudocode_viewer(
            pseudocode_lines=algo_info.pseudocode if algo_info else [],
            algo_label=algo_info.label if algo_info else "",
        ),
        table=state["table"],
        analytics=analytics_panel(),
    )
    return html


@app.route("/api/state")
def api_state():
    return jsonify(state_payload())


# ---------------------------------------------------------------------------
# API: Transport
# ---------------------------------------------------------------------------
@app.route("/api/play", methods=["POST"])
def api_play():
    pb = get_playback()
    data = json_body()
    try:
        delay = int_field(data, "delay", pb.controller.delay_ms)
    except InvalidArgument as e:
        return bad_request(str(e))

    algo_key = data.get("algorithm", pb.selected)
    result = pb.controller.play(delay, algo_key)
    if result.ok:
        pb.selected = algo_key
    return respond(result)


@app.route("/api/pause", methods=["POST"])
def api_pause():
    return respond(get_playback().controller.pause())


@app.route("/api/unpause", methods=["POST"])
def api_unpause():
    return respond(get_playback().controller.unpause())


@app.route("/api/stop", methods=["POST"])
def api_stop():
    return respond(get_playback().controller.stop())


@app.route("/api/step", methods=["POST"])
def api_step():
    return respond(get_playback().controller.step())


@app.route("/api/delay", methods=["POST"])
def api_delay():
    pb = get_playback()
    data = json_body()
    if "preset" in data:
        return respond(pb.controller.set_speed(data["preset"]))
    try:
        delay = int_field(data, "delay", pb.controller.delay_ms)
    except InvalidArgument as e:
        return bad_request(str(e))
    return respond(pb.controller.set_delay(delay))


# ---------------------------------------------------------------------------
# API: Records
# ---------------------------------------------------------------------------
@app.route("/api/shuffle", methods=["POST"])
def api_shuffle():
    return respond(get_playback().controller.shuffle())


@app.route("/api/reset", methods=["POST"])
def api_reset():
    pb = get_playback()
    data = json_body()

    if "values" in data:
        values = data["values"]
        if not isinstance(values, list) or not all(is_value(v) for v in values):
            return bad_request("'values' must be a list of finite numbers")
        records = from_values(values)
    else:
        try:
            count = int_field(data, "count", app.config["RECORD_COUNT"])
        except InvalidArgument as e:
            return bad_request(str(e))
        if not 0 <= count <= app.config["MAX_RECORDS"]:
            return bad_request(f"'count' must be between 0 and {app.config['MAX_RECORDS']}")
        records = random_records(count, max_value=app.config["MAX_VALUE"])

    return respond(pb.controller.reset(records))


@app.route("/api/records/add", methods=["POST"])
def api_records_add():
    return respond(get_playback().controller.add_record(json_body().get("value")))


@app.route("/api/records/edit", methods=["POST"])
def api_records_edit():
    data = json_body()
    value = data.get("value")
    if isinstance(value, str):
        try:
            value = float(value) if "." in value else int(value)
        except ValueError:
            return bad_request(f"'value' must be a number, got {value!r}")
    return respond(get_playback().controller.edit_record(str(data.get("id", "")), value))


# ---------------------------------------------------------------------------
# API: Comparison
# ---------------------------------------------------------------------------
@app.route("/api/compare", methods=["POST"])
def api_compare():
    pb = get_playback()
    data = json_body()
    left_key = data.get("left", "bubbleSort")
    right_key = data.get("right", "quickSort")

    try:
        left, right = Recorder(keep_steps=False), Recorder(keep_steps=False)
        left.start(left_key, pb.controller.records)
        right.start(right_key, pb.controller.records)
    except UnknownAlgorithm as e:
        return jsonify(e.to_dict()), 400

    left.run_to_completion()
    right.run_to_completion()
    result = compare(left, right)
    logger.info(
        "compare %s vs %s on %d records: %d vs %d steps",
        left_key, right_key, result.left.size, result.left.total_steps, result.right.total_steps,
    )
    return jsonify({
        "left":         left.export(),
        "right":        right.export(),
        "winner_steps": result.winner_steps,
        "winner_time":  result.winner_time,
        "html":         comparison_panel(result),
    })


# ---------------------------------------------------------------------------
# HTML Template
# ---------------------------------------------------------------------------
INDEX_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Sorting Algorithms</title>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    :root {
      --bg-dark: #0d1117;
      --bg-darker: #010409;
      --bg-panel: #161b22;
      --border: #30363d;
      --text-primary: #e6edf3;
      --text-secondary: #7d8590;
      --accent-cyan: #0ea5e9;
      --accent-teal: #06b6d4;
    }
    body {
      font-family: -apple-system, BlinkMacSystemFont, sans-serif;
      background: var(--bg-darker);
      color: var(--text-primary);
      display: flex;
      height: 100vh;
      overflow: hidden;
    }
    #sidebar {
      width: 360px;
      background: var(--bg-dark);
      border-right: 1px solid var(--border);
      overflow-y: auto;
      padding: 24px 16px;
    }
    #main { flex: 1; display: flex; flex-direction: column; overflow-y: auto; }
    #canvas-container { padding: 20px; border-bottom: 1px solid var(--border); }
    #bottom-panel { display: grid; grid-template-columns: 1fr 1fr; gap: 20px; padding: 20px; }
    .panel, #pseudocode-container {
      background: var(--bg-panel);
      border: 1px solid var(--border);
      border-radius: 12px;
      padding: 18px;
      margin-bottom: 16px;
    }
    .panel h3, #pseudocode-container h3 {
      font-size: 13px;
      text-transform: uppercase;
      letter-spacing: 0.5px;
      margin-bottom: 14px;
      color: var(--accent-cyan);
    }
    .button-row { display: flex; gap: 8px; margin-bottom: 12px; }
    button {
      background: linear-gradient(135deg, var(--accent-cyan), var(--accent-teal));
      color: #fff;
      border: none;
      padding: 8px 12px;
      border-radius: 8px;
      cursor: pointer;
      font-size: 13px;
      font-weight: 600;
    }
    button:disabled { opacity: 0.35; cursor: not-allowed; }
    .algo-option { display: block; margin: 6px 0; font-size: 14px; }
    .badge { background: var(--border); border-radius: 6px; padding: 1px 6px; font-size: 11px; }
    .muted { color: var(--text-secondary); font-size: 12px; }
    .mono, .code-block { font-family: 'JetBrains Mono', 'Courier New', monospace; }
    .code-block { font-size: 13px; line-height: 1.6; white-space: pre; }
    table { width: 100%; border-collapse: collapse; font-size: 13px; }
    td, th { padding: 4px 6px; border-bottom: 1px solid var(--border); text-align: left; }
    .value-edit { width: 80px; background: var(--bg-darker); color: var(--text-primary); border: 1px solid var(--border); }
    .comparison-grid { display: grid; grid-template-columns: 1fr 1fr; gap: 12px; }
    #error-banner { color: #f43f5e; font-size: 13px; min-height: 18px; margin-bottom: 8px; }
  </style>
</head>
<body>
  <div id="sidebar">
    <div id="error-banner"></div>
    <div id="transport">{{ transport|safe }}</div>
    {{ algo_selector|safe }}
    <div class="panel">
      <h3>⚖ Compare</h3>
      <div class="button-row">
        <select id="compare-left"></select>
        <select id="compare-right"></select>
        <button id="btn-compare">Run</button>
      </div>
      <div id="analytics">{{ analytics|safe }}</div>
    </div>
  </div>
  <div id="main">
    <div id="canvas-container">{{ svg|safe }}</div>
    <div id="bottom-panel">
      <div id="table">{{ table|safe }}</div>
      {{ pseudocode|safe }}
    </div>
  </div>

  <script>
    async function post(url, body = {}) {
      const res = await fetch(url, {
        method: 'POST',
        headers: {'Content-Type': 'application/json'},
        body: JSON.stringify(body),
      });
      const data = await res.json();
      document.getElementById('error-banner').textContent = res.ok ? '' : (data.error || '');
      if (data.svg) apply(data);
      return data;
    }

    function selectedAlgorithm() {
      const el = document.querySelector('input[name="algorithm"]:checked');
      return el ? el.value : 'selectionSort';
    }

    let lastTable = '';
    function apply(state) {
      document.getElementById('canvas-container').innerHTML = state.svg;
      applyTransport(state);
      if (state.table !== lastTable) {
        document.getElementById('table').innerHTML = state.table;
        lastTable = state.table;
      }
      document.querySelectorAll('input[name="algorithm"]').forEach(el => {
        el.disabled = state.state === 'running' || state.state === 'paused';
      });
      if (state.last_error) {
        document.getElementById('error-banner').textContent = state.last_error.error;
      }
    }

    // the panel is rendered once; polls only flip flags and text so a
    // slider held by the pointer is never replaced
    let sliderHeld = false;
    function applyTransport(state) {
      const live = state.state === 'running' || state.state === 'paused';
      const enabled = {
        'btn-shuffle': !live,
        'btn-play':    !live,
        'btn-stop':    live,
        'btn-pause':   state.state === 'running',
        'btn-unpause': state.state === 'paused',
        'btn-step':    live,
      };
      Object.entries(enabled).forEach(([id, on]) => {
        document.getElementById(id).disabled = !on;
      });
      document.getElementById('state').textContent = state.state.toUpperCase();
      document.getElementById('steps-taken').textContent = state.steps_taken;
      if (!sliderHeld) {
        document.getElementById('delay-slider').value = state.delay_ms;
        document.getElementById('delay-value').textContent = state.delay_ms + ' ms';
      }
    }

    function bindTransport() {
      const slider = document.getElementById('delay-slider');
      const delay = () => parseInt(slider.value, 10);
      document.getElementById('btn-shuffle').onclick = () => post('/api/shuffle');
      document.getElementById('btn-play').onclick = () => post('/api/play', {delay: delay(), algorithm: selectedAlgorithm()});
      document.getElementById('btn-stop').onclick = () => post('/api/stop');
      document.getElementById('btn-pause').onclick = () => post('/api/pause');
      document.getElementById('btn-unpause').onclick = () => post('/api/unpause');
      document.getElementById('btn-step').onclick = () => post('/api/step');
      slider.onpointerdown = () => { sliderHeld = true; };
      slider.oninput = () => {
        document.getElementById('delay-value').textContent = slider.value + ' ms';
      };
      slider.onchange = () => {
        sliderHeld = false;
        post('/api/delay', {delay: delay()});
      };
    }

    document.getElementById('table').addEventListener('change', (e) => {
      if (e.target.classList.contains('value-edit')) {
        post('/api/records/edit', {id: e.target.dataset.id, value: e.target.value});
      }
    });
    document.getElementById('table').addEventListener('click', (e) => {
      if (e.target.id === 'btn-add') post('/api/records/add');
    });

    const algos = Array.from(document.querySelectorAll('input[name="algorithm"]')).map(el => el.value);
    ['compare-left', 'compare-right'].forEach((id, i) => {
      const sel = document.getElementById(id);
      algos.forEach(a => sel.add(new Option(a, a)));
      sel.selectedIndex = Math.min(i + 1, algos.length - 1);
    });
    document.getElementById('btn-compare').onclick = async () => {
      const res = await fetch('/api/compare', {
        method: 'POST',
        headers: {'Content-Type': 'application/json'},
        body: JSON.stringify({
          left: document.getElementById('compare-left').value,
          right: document.getElementById('compare-right').value,
        }),
      });
      const data = await res.json();
      document.getElementById('analytics').innerHTML = data.html || data.error;
    };

    bindTransport();
    setInterval(async () => {
      const res = await fetch('/api/state');
      apply(await res.json());
    }, 50);
  </script>
</body>
</html>
"""


init_playback(app)


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    logger.info("Sorting Visualizer on http://localhost:5000")
    # single-threaded: timer ticks and commands share one thread
    app.run(debug=True, port=5000, threaded=False)
