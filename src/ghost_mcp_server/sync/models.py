"""Pydantic models for the post sync engine.

Defines the data contracts shared by the reconcilers and the reporter:

- ``SyncFormat``: Enum of local content encodings.
- ``SyncDirection``: Enum of sync directions.
- ``SyncAction``: Enum of per-post outcomes.
- ``PostResult``: Outcome of reconciling one post.
- ``SyncError``: One per-post failure or conflict.
- ``SyncNote``: One informational note (push only).
- ``SyncReport``: Aggregate results for a pull or push run.

All models are frozen (immutable) for safety.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class SyncFormat(str, Enum):
    """Local content encodings for synced posts."""

    LEXICAL = "lexical"
    HTML = "html"
    MARKDOWN = "markdown"

    @classmethod
    def parse(cls, value: str | SyncFormat | None) -> SyncFormat:
        """Parse caller input, accepting ``structured`` for Lexical.

        Raises:
            ValueError: If *value* names no known encoding.
        """
        if value is None:
            return cls.LEXICAL
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized == "structured":
            return cls.LEXICAL
        try:
            return cls(normalized)
        except ValueError:
            valid = ", ".join(["structured", *(f.value for f in cls)])
            raise ValueError(
                f"Unknown sync format '{value}'. Valid formats: {valid}"
            ) from None


class SyncDirection(str, Enum):
    """Direction of a sync run."""

    PULL = "pull"
    PUSH = "push"


class SyncAction(str, Enum):
    """Outcome of reconciling one post."""

    SYNCED = "synced"
    SKIPPED = "skipped"
    ERROR = "error"
    INFO = "info"


class PostResult(BaseModel):
    """Result of reconciling one post.

    Attributes:
        action: What happened to the post.
        id: Post id, when known.
        title: Post title, when known.
        slug: Local directory name, when known.
        message: Error or note text for ``ERROR`` and ``INFO`` results.
    """

    action: SyncAction
    id: str | None = None
    title: str | None = None
    slug: str | None = None
    message: str | None = None

    model_config = {"frozen": True}


class SyncError(BaseModel):
    """A per-post failure or conflict.

    Attributes:
        id: Post id, when known.
        title: Post title, when known.
        error: Human-readable description.
    """

    id: str | None = None
    title: str | None = None
    error: str

    model_config = {"frozen": True}


class SyncNote(BaseModel):
    """An informational note that is not an error.

    Attributes:
        slug: Local directory name the note refers to.
        title: Post title from local metadata, when present.
        message: Human-readable description.
    """

    slug: str
    title: str | None = None
    message: str

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate report for one pull or push run.

    Attributes:
        direction: Pull or push.
        format: Local content encoding used.
        synced: Number of posts written (locally or remotely).
        skipped: Number of posts left unchanged because both sides matched.
        errors: Per-post errors and conflicts.
        info: Informational notes (push only).
        started_at: ISO 8601 timestamp when the run started.
        completed_at: ISO 8601 timestamp when the run completed.
    """

    direction: SyncDirection
    format: SyncFormat
    synced: int = 0
    skipped: int = 0
    errors: list[SyncError] = []
    info: list[SyncNote] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    @classmethod
    def from_results(
        cls,
        direction: SyncDirection,
        format: SyncFormat,
        results: list[PostResult],
        started_at: str,
        completed_at: str | None = None,
    ) -> SyncReport:
        """Tally per-post results into a report."""
        errors = [
            SyncError(id=r.id, title=r.title, error=r.message or "")
            for r in results
            if r.action == SyncAction.ERROR
        ]
        info = [
            SyncNote(slug=r.slug or "", title=r.title, message=r.message or "")
            for r in results
            if r.action == SyncAction.INFO
        ]
        return cls(
            direction=direction,
            format=format,
            synced=sum(1 for r in results if r.action == SyncAction.SYNCED),
            skipped=sum(1 for r in results if r.action == SyncAction.SKIPPED),
            errors=errors,
            info=info,
            started_at=started_at,
            completed_at=completed_at,
        )
