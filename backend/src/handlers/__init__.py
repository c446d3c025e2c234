"""Entry points: HTTP API, update cycle and scheduler."""
