"""Exceptions raised by ``GhostClient`` for Admin API error responses."""

from typing import Any


class GhostAPIError(Exception):
    """The Admin API answered with an error status.

    Attributes:
        status_code: HTTP status of the response.
        error_type: Ghost error type (e.g. ``NotFoundError``,
            ``ValidationError``, ``UpdateCollisionError``), or ``None``
            when the body carried no Ghost error object.
        message: Human-readable message from Ghost.
        context: Optional extra detail Ghost attached to the error.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        error_type: str | None = None,
        context: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.error_type = error_type
        self.context = context
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"{self.message} (HTTP {self.status_code}"
        if self.error_type:
            text += f", {self.error_type}"
        text += ")"
        if self.context:
            text += f": {self.context}"
        return text


class GhostNotFoundError(GhostAPIError):
    """The requested resource does not exist (HTTP 404)."""


class GhostConflictError(GhostAPIError):
    """The update was rejected because the resource changed (HTTP 409)."""


def error_from_response(status_code: int, body: Any) -> GhostAPIError:
    """Build the matching ``GhostAPIError`` subclass from a response body.

    Ghost error bodies look like ``{"errors": [{"message", "type", "context"}]}``;
    anything else falls back to a generic message.
    """
    message = "Ghost API request failed"
    error_type = None
    context = None
    if isinstance(body, dict) and body.get("errors"):
        first = body["errors"][0]
        message = first.get("message") or message
        error_type = first.get("type")
        context = first.get("context")

    if status_code == 404 or error_type == "NotFoundError":
        cls: type[GhostAPIError] = GhostNotFoundError
    elif status_code == 409 or error_type == "UpdateCollisionError":
        cls = GhostConflictError
    else:
        cls = GhostAPIError
    return cls(status_code, message, error_type, context)
