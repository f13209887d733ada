"""Shared pytest fixtures for ghost-mcp-server tests."""

import copy
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv

from ghost_mcp_server.config import Config
from ghost_mcp_server.core.exceptions import (
    GhostConflictError,
    GhostNotFoundError,
)

load_dotenv()

ADMIN_API_KEY = "64f1c2a9e4b0a1b2c3d4e5f6:" + "ab" * 32


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live Ghost instance",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live Ghost instance"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def mock_config(tmp_path):
    """Create a Config instance for testing."""
    return Config(
        api_url="https://blog.example.com",
        admin_api_key=ADMIN_API_KEY,
        sync_dir=str(tmp_path / "posts"),
        insecure=False,
    )


@pytest.fixture
def mock_ghost_client(mock_config):
    """Create a mock GhostClient instance for testing."""
    from ghost_mcp_server.core.client import GhostClient

    client = MagicMock(spec=GhostClient)
    client.config = mock_config
    return client


# ---------------------------------------------------------------------------
# In-memory Ghost
# ---------------------------------------------------------------------------


def make_post(
    post_id: str = "64f1c2a9e4b0a1b2c3d4e5f6",
    slug: str = "hello-world",
    title: str = "Hello World",
    updated_at: str = "2026-03-01T10:00:00.000Z",
    html: str = "<h1>Hello</h1><p>Some <strong>bold</strong> text.</p>",
    lexical: str | None = None,
    **extra,
) -> dict:
    """Build a post dict shaped like an Admin API response."""
    if lexical is None:
        lexical = (
            '{"root":{"children":[{"type":"paragraph","children":'
            '[{"type":"text","text":"Hello"}]}],"type":"root","version":1}}'
        )
    post = {
        "id": post_id,
        "uuid": f"uuid-{post_id}",
        "title": title,
        "slug": slug,
        "status": "draft",
        "updated_at": updated_at,
        "lexical": lexical,
        "html": html,
    }
    post.update(extra)
    return post


class FakeGhostClient:
    """In-memory stand-in for GhostClient used by the sync tests.

    Posts are returned with only the requested content format, like Ghost.
    ``edit_post`` enforces ``updated_at`` equality and bumps the timestamp.
    """

    def __init__(self, posts=None, config=None):
        self.posts: dict[str, dict] = {
            p["id"]: copy.deepcopy(p) for p in (posts or [])
        }
        self.config = config
        self.edits: list[tuple[str, dict, str | None]] = []
        self.fail_get: set[str] = set()
        self.browse_calls = 0
        self._clock = 0

    def _view(self, post: dict, formats: str | None) -> dict:
        wanted = set((formats or "html").split(","))
        view = copy.deepcopy(post)
        for field in ("lexical", "html"):
            if field not in wanted:
                view.pop(field, None)
        return view

    def browse_posts(self, limit=None, formats=None, **kwargs):
        self.browse_calls += 1
        return [self._view(p, formats) for p in self.posts.values()]

    def get_post(self, post_id, formats=None, include=None):
        if post_id in self.fail_get:
            raise RuntimeError("connection reset")
        if post_id not in self.posts:
            raise GhostNotFoundError(404, "Post not found.", "NotFoundError")
        return self._view(self.posts[post_id], formats)

    def edit_post(self, post_id, data, source=None, formats=None):
        current = self.posts.get(post_id)
        if current is None:
            raise GhostNotFoundError(404, "Post not found.", "NotFoundError")
        if data.get("updated_at") != current["updated_at"]:
            raise GhostConflictError(
                409, "Saving failed!", "UpdateCollisionError"
            )
        self.edits.append((post_id, copy.deepcopy(data), source))
        current.update(data)
        self._clock += 1
        current["updated_at"] = f"2026-03-02T00:00:{self._clock:02d}.000Z"
        return self._view(current, formats)

    def touch(self, post_id: str, **changes) -> None:
        """Simulate a remote edit made in Ghost Admin."""
        self._clock += 1
        self.posts[post_id].update(changes)
        self.posts[post_id]["updated_at"] = (
            f"2026-03-03T00:00:{self._clock:02d}.000Z"
        )


@pytest.fixture
def fake_ghost(mock_config):
    """FakeGhostClient holding a single post."""
    return FakeGhostClient([make_post()], config=mock_config)


@pytest.fixture
def sync_root(tmp_path):
    return tmp_path / "posts"


@pytest.fixture
def post_factory():
    """Factory fixture for Admin API post dicts."""
    return make_post


@pytest.fixture
def ghost_factory(mock_config):
    """Factory fixture for FakeGhostClient instances."""

    def _create(posts):
        return FakeGhostClient(posts, config=mock_config)

    return _create
