"""
Error taxonomy for skillsync.

Only configuration-level errors abort a run. Registry errors are converted
to empty results at the smallest scope that can absorb them, and partial
fetch failures are collected as records instead of being raised.
"""

from dataclasses import dataclass


class SkillSyncError(Exception):
    """Base error for skillsync operations."""

    pass


class UnsupportedRegistry(SkillSyncError):
    """The registry locator is not a recognizable github.com/owner/repo URL."""

    def __init__(self, locator: str):
        self.locator = locator
        super().__init__(
            f"Unsupported registry '{locator}'. "
            f"Only GitHub registries (github.com/owner/repo) are supported."
        )


class RegistryUnavailable(SkillSyncError):
    """A registry endpoint could not be reached or returned a non-success status."""

    def __init__(self, url: str, status: int | None = None, reason: str = ""):
        self.url = url
        self.status = status
        detail = f"status {status}" if status is not None else reason or "unreachable"
        super().__init__(f"Registry unavailable: {url} ({detail})")


class ConfigurationMissing(SkillSyncError):
    """No .skillsrc found in the working directory."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"{path} not found in current directory.")


class ConfigurationInvalid(SkillSyncError):
    """The .skillsrc file exists but cannot be parsed or validated."""

    pass


@dataclass
class FetchPartialFailure:
    """Record of a file or category that could not be fetched.

    Never raised: the sync pipeline collects these so the run can report
    them and still finish successfully.
    """

    category: str
    ref: str
    skill: str | None = None
    path: str | None = None
    reason: str = ""

    def describe(self) -> str:
        target = self.category
        if self.skill:
            target = f"{target}/{self.skill}"
        if self.path:
            target = f"{target}/{self.path}"
        return f"{target}@{self.ref}: {self.reason}" if self.reason else f"{target}@{self.ref}"
