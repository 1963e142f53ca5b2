"""
Registry data models: tree entries, the remote metadata descriptor, and a
hierarchical index over a recursive tree listing.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class TreeEntry(BaseModel):
    """One entry of a recursive git tree listing."""

    path: str
    type: Literal["blob", "tree", "commit"] = "blob"

    model_config = {"extra": "ignore"}

    @property
    def is_file(self) -> bool:
        return self.type == "blob"


class CategoryMetadata(BaseModel):
    """Published version info for one category."""

    version: str | None = None
    tag_prefix: str | None = None

    model_config = {"extra": "ignore"}

    @field_validator("version", "tag_prefix", mode="before")
    @classmethod
    def _scalar_as_str(cls, v: Any) -> Any:
        # "version": 2 still builds "flutter-v2"
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def latest_tag(self) -> str | None:
        """tag_prefix + version, or None when either is missing."""
        if not self.version or not self.tag_prefix:
            return None
        return f"{self.tag_prefix}{self.version}"


class RemoteMetadata(BaseModel):
    """Contents of skills/metadata.json in the registry."""

    categories: dict[str, CategoryMetadata] = Field(default_factory=dict)

    model_config = {"extra": "ignore"}

    def latest_tag(self, category: str) -> str | None:
        meta = self.categories.get(category)
        return meta.latest_tag if meta else None


class TreeIndex:
    """Directory -> children index over a flat tree listing.

    Built once per listing so per-category and per-skill lookups do not
    rescan the whole tree. Children keep first-seen order.
    """

    def __init__(self, entries: list[TreeEntry]):
        self._children: dict[str, dict[str, None]] = {}
        self._files: dict[str, list[TreeEntry]] = {}

        for entry in entries:
            parts = [p for p in entry.path.split("/") if p]
            for depth in range(len(parts)):
                parent = "/".join(parts[:depth])
                self._children.setdefault(parent, {}).setdefault(parts[depth], None)
                if entry.is_file and depth < len(parts) - 1:
                    directory = "/".join(parts[: depth + 1])
                    self._files.setdefault(directory, []).append(entry)

    def children(self, directory: str) -> list[str]:
        """Immediate child names of a directory, in first-seen order."""
        return list(self._children.get(directory.strip("/"), {}))

    def files_under(self, directory: str) -> list[TreeEntry]:
        """Every file entry below a directory, at any depth, in listing order."""
        return list(self._files.get(directory.strip("/"), []))
