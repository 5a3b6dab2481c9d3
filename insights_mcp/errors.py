"""Error taxonomy for tool invocations and the single handler that renders faults.

Every fault raised while validating, fetching or formatting ends up in
:func:`classify_error`, which maps it to exactly one :class:`ErrorKind` by
type (never by message text).  :func:`render_error` turns the record into the
user-facing Markdown that goes back in an error envelope.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from insights_mcp.schemas.common import ERROR_MARKER, ErrorKind, ErrorRecord

logger = logging.getLogger("mcp.tools")


class InsightsApiError(Exception):
    """The upstream API answered with a non-success HTTP status."""

    def __init__(self, status_code: int, endpoint: str, reason: str = "") -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        self.reason = reason or "Unknown Error"
        super().__init__(f"API request failed: {self.reason}")


class NetworkError(Exception):
    """The request never produced an HTTP response (timeout, DNS, refused...)."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(message)


class ResponseValidationError(Exception):
    """The upstream body could not be parsed into the expected shape."""

    def __init__(self, endpoint: str, issues: list[str]) -> None:
        self.endpoint = endpoint
        self.issues = issues
        super().__init__(f"Unexpected response format from {endpoint}")


def validation_issues(exc: ValidationError) -> list[str]:
    """Flatten a pydantic ValidationError into ``field: message`` lines."""
    issues = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "input"
        issues.append(f"{loc}: {err['msg']}")
    return issues


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify_error(exc: BaseException) -> ErrorRecord:
    """Map any caught fault to exactly one ErrorRecord."""
    if isinstance(exc, ValidationError):
        return ErrorRecord(
            kind=ErrorKind.VALIDATION,
            message="Invalid input parameters",
            issues=validation_issues(exc),
        )
    if isinstance(exc, ResponseValidationError):
        return ErrorRecord(
            kind=ErrorKind.VALIDATION,
            message=str(exc),
            endpoint=exc.endpoint,
            issues=list(exc.issues),
        )
    if isinstance(exc, InsightsApiError):
        return ErrorRecord(
            kind=ErrorKind.UPSTREAM_API,
            message=str(exc),
            status_code=exc.status_code,
            endpoint=exc.endpoint,
        )
    if isinstance(exc, NetworkError):
        return ErrorRecord(
            kind=ErrorKind.NETWORK,
            message=str(exc),
            cause=repr(exc.cause) if exc.cause is not None else None,
        )
    return ErrorRecord(kind=ErrorKind.UNEXPECTED_INTERNAL, message=str(exc) or repr(exc))


def describe_failure(exc: BaseException) -> str:
    """Short one-line reason, used in composite availability notices."""
    record = classify_error(exc)
    if record.kind is ErrorKind.UPSTREAM_API:
        return f"API error {record.status_code}"
    if record.kind is ErrorKind.NETWORK:
        return f"network error: {record.message}"
    if record.kind is ErrorKind.VALIDATION:
        return "unexpected response format"
    return "internal error"


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_error(record: ErrorRecord) -> str:
    """Render a kind-specific message that always starts with the error marker."""
    if record.kind is ErrorKind.VALIDATION:
        title = "Validation Error" if record.endpoint is None else "Response Validation Error"
        lines = [f"{ERROR_MARKER} **{title}**: {record.message}", ""]
        lines.extend(f"- {issue}" for issue in record.issues)
        if record.endpoint is not None:
            lines += ["", f"Endpoint: {record.endpoint}"]
            lines += ["", "The API returned data in an unexpected format."]
        else:
            lines += ["", "Please check your input parameters and try again."]
        return "\n".join(lines)

    if record.kind is ErrorKind.UPSTREAM_API:
        return "\n".join(
            [
                f"{ERROR_MARKER} **API Error**: {record.message}",
                "",
                f"Status: {record.status_code}",
                f"Endpoint: {record.endpoint}",
                "",
                "The Braiins Insights API may be temporarily unavailable. Please try again later.",
            ]
        )

    if record.kind is ErrorKind.NETWORK:
        return "\n".join(
            [
                f"{ERROR_MARKER} **Network Error**: Could not reach Braiins Insights API",
                "",
                f"Details: {record.message}",
                "",
                "Please check your internet connection and try again.",
            ]
        )

    return "\n".join(
        [
            f"{ERROR_MARKER} **Unexpected Error**: {record.message}",
            "",
            "Please report this issue if it persists.",
        ]
    )


def handle_tool_error(tool_name: str, exc: Exception) -> tuple[ErrorRecord, str]:
    """Classify, log and render a fault raised inside a tool."""
    record = classify_error(exc)
    if record.kind is ErrorKind.UNEXPECTED_INTERNAL:
        logger.exception("tool=%s unexpected error", tool_name)
    else:
        logger.warning("tool=%s failed kind=%s: %s", tool_name, record.kind.value, record.message)
    return record, render_error(record)
