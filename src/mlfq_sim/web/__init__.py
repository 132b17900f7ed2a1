"""Browser-facing JSON API for the simulator.

This package provides a Flask application that runs simulations over
HTTP.  It is an **optional** extra -- install with::

    pip install mlfq-sim[web]

The ``create_app`` factory in ``app.py`` serves two endpoints:

- ``GET /api/defaults`` -- the configuration the CLI uses by default.
- ``POST /api/simulate`` -- run a simulation and return its report as JSON.
"""
