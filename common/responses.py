"""Standardized JSON response helpers."""

from __future__ import annotations

import json
from typing import Any, Iterable, Mapping

from flask import Response, jsonify, stream_with_context

from .errors import AppError

NDJSON_MIMETYPE = "application/x-ndjson"


def ok(data: Any, *, status: int = 200) -> Response:
    """Return a success envelope."""

    payload = {"success": True, "data": data}
    response = jsonify(payload)
    response.status_code = status
    return response


def fail(error: AppError | Mapping[str, Any], *, status: int | None = None) -> Response:
    """Return a standardized failure envelope."""

    if isinstance(error, AppError):
        payload = {"success": False, "error": error.to_dict()}
        response = jsonify(payload)
        response.status_code = status or error.status_code
        return response

    payload = {"success": False, "error": dict(error)}
    response = jsonify(payload)
    response.status_code = status or 400
    return response


def ndjson(records: Iterable[Mapping[str, Any]], *, status: int = 200) -> Response:
    """Stream ``records`` as newline delimited JSON, one record per line.

    Records are serialized lazily so a paced generator reaches the client
    one item at a time.
    """

    def _generate():
        for record in records:
            yield json.dumps(record, separators=(",", ":")) + "\n"

    response = Response(stream_with_context(_generate()), mimetype=NDJSON_MIMETYPE)
    response.status_code = status
    response.headers["Cache-Control"] = "no-store"
    response.headers["X-Accel-Buffering"] = "no"
    return response


__all__ = ["ok", "fail", "ndjson", "NDJSON_MIMETYPE"]
