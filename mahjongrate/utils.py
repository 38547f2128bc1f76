"""Utility functions for the application."""

from flask import jsonify, request

from .errors import ValidationError


def callable_data():
    """Return the ``data`` object of a callable request body.

    Callable clients post ``{"data": {...}}``; a missing body counts as an
    empty ``data`` object.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    data = payload.get("data")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("'data' must be a JSON object.")
    return data


def callable_result(result):
    """Wrap a value in a callable success body."""
    return jsonify({"result": result})
