"""Flask application factory for the simulator's JSON API.

The ``create_app`` function returns a Flask app with two endpoints:

- ``GET /api/defaults`` -- default queue ladder and policy switches.
- ``POST /api/simulate`` -- run a simulation and return the report,
  including the event log.

The request body of ``/api/simulate`` is the same JSON document the CLI
accepts with ``--config`` (see ``mlfq_sim.config.config_from_mapping``).
"""

from __future__ import annotations

from flask import Flask, Response, jsonify, request

from mlfq_sim.cli import DEFAULT_ALLOTMENTS, DEFAULT_QUANTUMS
from mlfq_sim.config import (
    ConfigError,
    SchedulerConfig,
    SimulationConfig,
    config_from_mapping,
    config_to_mapping,
    parse_int_list,
    queue_configs_from_lists,
)
from mlfq_sim.logging import LogLevel
from mlfq_sim.scheduler import SimulationLimitError
from mlfq_sim.simulation import simulate_config

_HTTP_BAD_REQUEST = 400

# Step budget per request; idle ticks count, so far-off arrivals hit it.
DEFAULT_MAX_STEPS = 100_000


def default_config() -> SimulationConfig:
    """Return the CLI's default ladder with no jobs."""
    queues = queue_configs_from_lists(
        parse_int_list(DEFAULT_QUANTUMS), parse_int_list(DEFAULT_ALLOTMENTS)
    )
    return SimulationConfig(scheduler=SchedulerConfig(), queues=tuple(queues))


def create_app(*, max_steps: int = DEFAULT_MAX_STEPS) -> Flask:
    """Create and configure the Flask application.

    Args:
        max_steps: Step budget for each simulation request.

    Returns:
        A configured Flask application ready to serve.

    """
    app = Flask(__name__)

    @app.route("/api/defaults")
    def defaults() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the default configuration document."""
        return jsonify(config_to_mapping(default_config()))

    @app.route("/api/simulate", methods=["POST"])
    def simulate() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Run a simulation described by the JSON body.

        Query parameter ``verbose=1`` includes debug events in ``events``.

        Returns:
            JSON with the report fields and an ``events`` list, or
            ``{"error": ...}`` with status 400 for bad input or a
            simulation that exceeds the step budget.

        """
        data = request.get_json(silent=True)
        if data is None:
            return jsonify({"error": "Request body must be a JSON object"}), _HTTP_BAD_REQUEST
        try:
            config = config_from_mapping(data)
        except ConfigError as e:
            return jsonify({"error": str(e)}), _HTTP_BAD_REQUEST

        try:
            report = simulate_config(config, max_steps=max_steps)
        except SimulationLimitError as e:
            return jsonify({"error": str(e)}), _HTTP_BAD_REQUEST

        verbose = request.args.get("verbose", "0") not in ("", "0", "false")
        min_level = LogLevel.DEBUG if verbose else LogLevel.INFO
        body = report.to_dict()
        body["events"] = report.log.lines(min_level=min_level)
        return jsonify(body)

    return app


def main() -> None:
    """Run the development server.

    This is the ``mlfq-sim-web`` console entry point.
    """
    app = create_app()
    app.run(debug=True, port=8080)
