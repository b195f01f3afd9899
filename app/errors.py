"""Failures raised by the collaborators around the engine.

The engine itself never raises; these are caught by the exception handler in
``app.main`` and rendered as ``{"error": code, "detail": ...}``.
"""
from typing import Any


class AdvisorError(Exception):
    status_code: int = 500
    code: str = "error"
    default_detail: str = "Request failed"

    def __init__(self, detail: Any = None):
        self.detail = detail if detail is not None else self.default_detail
        super().__init__(self.detail)


class NoReadingAvailable(AdvisorError):
    status_code = 404
    code = "no_reading"
    default_detail = "No soil data found for this device"


class UpstreamFetchFailure(AdvisorError):
    status_code = 502
    code = "upstream_fetch_failure"
    default_detail = "Failed to load data"


class PersistenceFailure(AdvisorError):
    status_code = 409
    code = "persistence_failure"
    default_detail = "Failed to save prediction"


class ValidationFailure(AdvisorError):
    status_code = 422
    code = "validation_failure"
    default_detail = "Missing or invalid fields"


class MalformedId(AdvisorError):
    status_code = 400
    code = "invalid_id"
    default_detail = "Invalid prediction id"


class NotFound(AdvisorError):
    status_code = 404
    code = "not_found"
    default_detail = "Not found"
