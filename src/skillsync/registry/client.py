"""
HTTP client for GitHub-hosted skill registries.

Endpoints used:
- GET api.github.com/repos/{owner}/{repo}                   -> default branch
- GET api.github.com/repos/{owner}/{repo}/git/trees/{ref}   -> recursive tree
- GET raw.githubusercontent.com/{owner}/{repo}/{ref}/{path} -> raw file

Only resolve_default_branch raises on failure. Tree listings and raw files
degrade to empty/absent so callers can skip what is missing without
aborting the run.
"""

import json as _json
import re

import httpx
import structlog
from pydantic import ValidationError
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .. import __version__
from ..config.schema import RegistrySettings
from ..errors import RegistryUnavailable, UnsupportedRegistry
from .models import CategoryMetadata, RemoteMetadata, TreeEntry

logger = structlog.get_logger()

API_BASE = "https://api.github.com"
RAW_BASE = "https://raw.githubusercontent.com"
METADATA_PATH = "skills/metadata.json"
FALLBACK_BRANCH = "main"

# Host must be github.com itself: optional scheme, optional user@ (ssh form)
_GITHUB_LOCATOR = re.compile(
    r"^(?:[a-z][a-z0-9+.-]*://)?(?:[^@/\s]+@)?github\.com[/:]([^/\s]+)/([^/\s#?]+)",
    re.IGNORECASE,
)


def parse_registry(locator: str) -> tuple[str, str]:
    """Extract (owner, repo) from a github.com/owner/repo locator.

    Accepts an optional scheme and a trailing ".git".

    Raises:
        UnsupportedRegistry: If the locator is not a GitHub repository URL.
    """
    match = _GITHUB_LOCATOR.match((locator or "").strip())
    if not match:
        raise UnsupportedRegistry(locator)
    owner, repo = match.group(1), match.group(2)
    if repo.lower().endswith(".git"):
        repo = repo[:-4]
    if not owner or not repo:
        raise UnsupportedRegistry(locator)
    return owner, repo


class RegistryClient:
    """Synchronous client for registry content.

    Requests run one at a time; the client holds a single httpx.Client and
    must be closed (or used as a context manager).
    """

    def __init__(
        self,
        settings: RegistrySettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """Create the client.

        Args:
            settings: Timeout, retries and token. Defaults apply if None.
            transport: Optional transport override (tests use httpx.MockTransport).
        """
        self.settings = settings or RegistrySettings()
        self.log = logger.bind(component="registry_client")

        # Sent only with registry requests, never as a client default
        self._auth_headers: dict[str, str] = {}
        if self.settings.token:
            self._auth_headers["Authorization"] = f"Bearer {self.settings.token}"

        self.http = httpx.Client(
            headers={"User-Agent": f"agent-skills-sync/{__version__}"},
            timeout=self.settings.timeout,
            follow_redirects=True,
            transport=transport,
        )

        self.log.info(
            "registry.client.initialized",
            timeout=self.settings.timeout,
            retries=self.settings.retries,
            has_token=self.settings.token is not None,
        )

    # ── Transport ─────────────────────────────────────────────────────────

    def _on_retry_sleep(self, retry_state: RetryCallState) -> None:
        """Log the attempt and wait time before each retry."""
        next_wait = retry_state.next_action.sleep if retry_state.next_action else 0
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        self.log.warning(
            "registry.retry",
            attempt=retry_state.attempt_number,
            wait_seconds=round(next_wait, 1),
            error=str(exc) if exc else None,
            error_type=type(exc).__name__ if exc else None,
        )

    def _get(self, url: str, headers: dict[str, str] | None = None, **kwargs) -> httpx.Response:
        """Authenticated GET with retries on transport errors (connect failures, timeouts).

        HTTP error statuses are returned as-is; only settings.retries extra
        attempts are made.
        """
        headers = {**self._auth_headers, **(headers or {})}
        for attempt in Retrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self.settings.retries + 1),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            before_sleep=self._on_retry_sleep,
            reraise=True,
        ):
            with attempt:
                return self.http.get(url, headers=headers, **kwargs)

    # ── Endpoints ─────────────────────────────────────────────────────────

    def resolve_default_branch(self, owner: str, repo: str) -> str:
        """Return the repository's default branch.

        Raises:
            RegistryUnavailable: If the repository metadata cannot be fetched.
        """
        url = f"{API_BASE}/repos/{owner}/{repo}"
        try:
            response = self._get(url, headers={"Accept": "application/vnd.github.v3+json"})
        except httpx.HTTPError as e:
            raise RegistryUnavailable(url, reason=str(e)) from e

        if not response.is_success:
            raise RegistryUnavailable(url, status=response.status_code)

        try:
            data = response.json()
        except ValueError:
            data = None

        branch = data.get("default_branch") if isinstance(data, dict) else None
        return branch or FALLBACK_BRANCH

    def list_tree(self, owner: str, repo: str, ref: str) -> list[TreeEntry]:
        """Recursive tree listing at ref. Empty list when unavailable."""
        url = f"{API_BASE}/repos/{owner}/{repo}/git/trees/{ref}"
        try:
            response = self._get(
                url,
                params={"recursive": "1"},
                headers={"Accept": "application/vnd.github.v3+json"},
            )
        except httpx.HTTPError as e:
            self.log.warning("registry.tree.error", ref=ref, error=str(e))
            return []

        if not response.is_success:
            self.log.warning("registry.tree.unavailable", ref=ref, status=response.status_code)
            return []

        try:
            data = response.json()
        except ValueError:
            self.log.warning("registry.tree.invalid_json", ref=ref)
            return []

        if not isinstance(data, dict):
            return []

        if data.get("truncated"):
            self.log.warning("registry.tree.truncated", ref=ref)

        entries: list[TreeEntry] = []
        for raw in data.get("tree") or []:
            try:
                entries.append(TreeEntry.model_validate(raw))
            except ValidationError:
                self.log.debug("registry.tree.skip_entry", entry=raw)
        self.log.debug("registry.tree.listed", ref=ref, entries=len(entries))
        return entries

    def fetch_raw_file(self, owner: str, repo: str, ref: str, path: str) -> str | None:
        """Raw text of one file at ref. None when it cannot be fetched."""
        url = f"{RAW_BASE}/{owner}/{repo}/{ref}/{path.lstrip('/')}"
        try:
            response = self._get(url)
        except httpx.HTTPError as e:
            self.log.debug("registry.file.error", path=path, ref=ref, error=str(e))
            return None

        if not response.is_success:
            self.log.debug("registry.file.unavailable", path=path, ref=ref, status=response.status_code)
            return None
        return response.text

    # ── Derived lookups ───────────────────────────────────────────────────

    def fetch_metadata(self, owner: str, repo: str, ref: str) -> RemoteMetadata | None:
        """Fetch and validate skills/metadata.json.

        Categories are validated one by one: a malformed entry is dropped
        and the rest are kept. None if the file is absent or is not a JSON
        object with a "categories" mapping.
        """
        content = self.fetch_raw_file(owner, repo, ref, METADATA_PATH)
        if content is None:
            return None
        try:
            data = _json.loads(content)
        except ValueError as e:
            self.log.warning("registry.metadata.invalid", ref=ref, error=str(e))
            return None

        raw_categories = data.get("categories") if isinstance(data, dict) else None
        if not isinstance(raw_categories, dict):
            self.log.warning("registry.metadata.invalid", ref=ref, error="no categories mapping")
            return None

        categories: dict[str, CategoryMetadata] = {}
        for name, raw in raw_categories.items():
            try:
                categories[name] = CategoryMetadata.model_validate(raw)
            except ValidationError as e:
                self.log.warning("registry.metadata.category_invalid", ref=ref, category=name, error=str(e))
        return RemoteMetadata(categories=categories)

    def list_categories(self, owner: str, repo: str, ref: str) -> list[str]:
        """Top-level category folders under skills/."""
        categories: dict[str, None] = {}
        for entry in self.list_tree(owner, repo, ref):
            parts = entry.path.split("/")
            if entry.type == "tree" and len(parts) == 2 and parts[0] == "skills":
                categories.setdefault(parts[1], None)
        return list(categories)

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "RegistryClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<RegistryClient(timeout={self.settings.timeout}, retries={self.settings.retries})>"
