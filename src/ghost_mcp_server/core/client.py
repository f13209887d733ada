import logging
import threading
import time
from typing import Any

import requests
from jose import jwt

from ..config import Config
from ..validators import validate_post_id
from .exceptions import error_from_response

logger = logging.getLogger(__name__)

# Ghost rejects admin tokens valid for longer than 5 minutes
TOKEN_TTL_SECONDS = 5 * 60
TOKEN_AUDIENCE = "/admin/"


class GhostClient:
    def __init__(self, config: Config):
        self.config = config
        self._thread_local = threading.local()
        self.api_base = self._get_api_base()
        self._key_id, self._secret = self._split_admin_key()

    @property
    def session(self) -> requests.Session:
        """Accessor for the current thread's session."""
        return self._get_session()

    def _get_api_base(self) -> str:
        return f"{self.config.api_url.rstrip('/')}/ghost/api/admin"

    def _split_admin_key(self) -> tuple[str, bytes]:
        key_id, _, secret = self.config.admin_api_key.partition(":")
        if not key_id or not secret:
            raise ValueError(
                "Admin API key must have the form '<id>:<secret>'"
            )
        return key_id, bytes.fromhex(secret)

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.verify = not self.config.insecure
        session.headers.update(
            {
                "Accept-Version": self.config.api_version,
                "Accept": "application/json",
            }
        )
        return session

    def create_token(self, now: int | None = None) -> str:
        """
        Sign a short-lived Admin API JWT.

        Args:
            now: Issue time as Unix seconds (default: current time).

        Returns:
            HS256 token with ``kid`` header and ``/admin/`` audience.
        """
        iat = int(time.time()) if now is None else now
        claims = {
            "iat": iat,
            "exp": iat + TOKEN_TTL_SECONDS,
            "aud": TOKEN_AUDIENCE,
        }
        return jwt.encode(
            claims,
            self._secret,
            algorithm="HS256",
            headers={"kid": self._key_id},
        )

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make an authenticated request to the Admin API.

        Raises:
            GhostAPIError: If Ghost answers with an error status.
            requests.RequestException: On transport failures.
        """
        url = f"{self.api_base}/{path.strip('/')}/"
        query = {k: v for k, v in (params or {}).items() if v is not None}
        headers = {"Authorization": f"Ghost {self.create_token()}"}

        logger.debug("%s %s params=%s", method, url, query)
        response = self._get_session().request(
            method,
            url,
            params=query or None,
            json=json_body,
            headers=headers,
            timeout=(10, self.config.timeout),
        )

        if response.status_code == 204 or not response.content:
            if not response.ok:
                raise error_from_response(response.status_code, None)
            return {}

        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok:
            raise error_from_response(response.status_code, body)
        if not isinstance(body, dict):
            raise ValueError(
                f"Unexpected non-JSON response from {method} {url}"
            )
        return body

    @staticmethod
    def _first(body: dict[str, Any], key: str) -> dict[str, Any]:
        items = body.get(key)
        if not isinstance(items, list) or not items:
            raise ValueError(f"Response did not contain any {key}")
        return items[0]

    @staticmethod
    def _check_id(post_id: str) -> None:
        is_valid, error_msg = validate_post_id(post_id)
        if not is_valid:
            raise ValueError(f"Invalid post id: {error_msg}")

    # Site

    def get_site(self) -> dict[str, Any]:
        """
        Get basic site information (title, url, version).
        """
        return self._request("GET", "site").get("site", {})

    def validate_connection(self) -> str:
        """
        Validate connection and credentials.

        Returns the Ghost version string if successful. The site endpoint
        is public, so a token-protected call follows it to prove the key.
        """
        site = self.get_site()
        self._request("GET", "posts", params={"limit": 1, "fields": "id"})
        return str(site.get("version") or "")

    # Posts

    def browse_posts(
        self,
        limit: int | str | None = None,
        page: int | None = None,
        filter: str | None = None,
        order: str | None = None,
        fields: str | None = None,
        formats: str | None = None,
        include: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        List posts.

        Args:
            limit: Page size, or ``"all"`` to fetch every post in one call.
            page: Page number (1-based).
            filter: NQL filter expression (e.g. ``status:draft``).
            order: Sort order (e.g. ``published_at desc``).
            fields: Comma-separated field whitelist.
            formats: Content formats to include (``lexical``, ``html``).
            include: Relations to include (``tags``, ``authors``...).

        Returns:
            List of post dicts.
        """
        body = self._request(
            "GET",
            "posts",
            params={
                "limit": limit,
                "page": page,
                "filter": filter,
                "order": order,
                "fields": fields,
                "formats": formats,
                "include": include,
            },
        )
        posts = body.get("posts")
        if not isinstance(posts, list):
            raise ValueError("Response did not contain a posts list")
        return posts

    def get_post(
        self,
        post_id: str,
        formats: str | None = None,
        include: str | None = None,
    ) -> dict[str, Any]:
        """
        Get a post by id.

        Raises:
            ValueError: If post_id is malformed.
            GhostNotFoundError: If no post has this id.
        """
        self._check_id(post_id)
        body = self._request(
            "GET",
            f"posts/{post_id}",
            params={"formats": formats, "include": include},
        )
        return self._first(body, "posts")

    def get_post_by_slug(
        self,
        slug: str,
        formats: str | None = None,
        include: str | None = None,
    ) -> dict[str, Any]:
        """
        Get a post by slug.

        Raises:
            GhostNotFoundError: If no post has this slug.
        """
        if not slug or not slug.strip():
            raise ValueError("Slug cannot be empty")
        body = self._request(
            "GET",
            f"posts/slug/{slug}",
            params={"formats": formats, "include": include},
        )
        return self._first(body, "posts")

    def add_post(
        self,
        data: dict[str, Any],
        source: str | None = None,
        formats: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a post.

        Args:
            data: Post fields; ``title`` is required.
            source: ``"html"`` when ``data`` carries HTML content so Ghost
                converts it instead of ignoring it in favour of lexical.
            formats: Content formats to return.

        Returns:
            The created post.
        """
        if not data.get("title") or not str(data["title"]).strip():
            raise ValueError("Title is required and cannot be empty")

        body = self._request(
            "POST",
            "posts",
            params={"source": source, "formats": formats},
            json_body={"posts": [data]},
        )
        return self._first(body, "posts")

    def edit_post(
        self,
        post_id: str,
        data: dict[str, Any],
        source: str | None = None,
        formats: str | None = None,
    ) -> dict[str, Any]:
        """
        Update a post with optimistic locking.

        ``data`` must carry the ``updated_at`` value the caller last saw;
        Ghost rejects the update with ``UpdateCollisionError`` when the
        post has changed since.

        Raises:
            ValueError: If post_id is malformed or updated_at is missing.
            GhostConflictError: If the post was modified concurrently.
            GhostNotFoundError: If no post has this id.
        """
        self._check_id(post_id)
        if not data.get("updated_at"):
            raise ValueError(
                "updated_at is required for post updates (optimistic locking)"
            )

        body = self._request(
            "PUT",
            f"posts/{post_id}",
            params={"source": source, "formats": formats},
            json_body={"posts": [data]},
        )
        return self._first(body, "posts")

    def delete_post(self, post_id: str) -> bool:
        """
        Delete a post permanently.

        Returns:
            True if successful
        """
        self._check_id(post_id)
        self._request("DELETE", f"posts/{post_id}")
        return True
