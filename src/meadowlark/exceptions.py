"""PipelineException hierarchy for controlled aborts and fatal errors."""

from __future__ import annotations


class PipelineException(Exception):
    """Base for all pipeline exceptions."""


class PipelineAbort(PipelineException):
    """Controlled abort with HTTP status code and detail."""

    def __init__(self, detail: str, *, status_code: int = 400) -> None:
        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


class Unauthorized(PipelineAbort):
    """Visible denial: the client is redirected (303) to the unauthorized page."""

    def __init__(
        self, detail: str = "Unauthorized", *, location: str = "/unauthorized"
    ) -> None:
        super().__init__(detail, status_code=303)
        self.location = location


class RouteConcealed(PipelineAbort):
    """Concealed denial: the route behaves as if it did not exist (404)."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(detail, status_code=404)


class CSRFError(PipelineAbort):
    """Missing or mismatched anti-forgery token (403)."""

    def __init__(self, detail: str = "Invalid CSRF token") -> None:
        super().__init__(detail, status_code=403)


class ConfigurationError(PipelineException):
    """Startup configuration is unusable; the process must not start."""


class UnknownEnvironment(ConfigurationError):
    """The environment designator is neither development nor production."""

    def __init__(self, env: str) -> None:
        super().__init__(f"Unknown execution environment: {env}")
        self.env = env


class MissingCredentials(ConfigurationError):
    """TLS key or certificate file is absent."""

    def __init__(self, *paths: str) -> None:
        super().__init__("One or both of the SSL cert or key are missing")
        self.paths = paths


class StoreError(Exception):
    """A document store operation failed. Never retried."""


class RecordNotFound(StoreError):
    """No document matches the requested identifier."""

    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(f"{collection}: no record with id {record_id!r}")
        self.collection = collection
        self.record_id = record_id
