"""Version identifiers and the per-run version set."""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, model_validator

DEFAULT_DEVELOPMENT_MARKER = "develop"

_FORBIDDEN_SEGMENTS = {"", ".", ".."}


def is_safe_segment(name: str) -> bool:
    """Whether *name* can be used verbatim as one filesystem path segment."""
    if name in _FORBIDDEN_SEGMENTS or name.startswith("-"):
        return False
    return not any(ch in name for ch in ("/", "\\", "\0"))


class VersionSet(BaseModel):
    """Ordered, duplicate-free versions to build in one run.

    Tags keep the order in which the version-control collaborator listed
    them.  The development marker, when present, is always the last element.
    """

    model_config = ConfigDict(frozen=True)

    versions: tuple[str, ...]
    development_marker: str | None = DEFAULT_DEVELOPMENT_MARKER

    @model_validator(mode="after")
    def _check_invariants(self) -> VersionSet:
        if len(set(self.versions)) != len(self.versions):
            raise ValueError(f"Duplicate versions in {list(self.versions)}")
        for name in self.versions:
            if not is_safe_segment(name):
                raise ValueError(f"Version {name!r} is not a safe path segment")
        marker = self.development_marker
        if marker is not None:
            if not self.versions or self.versions[-1] != marker:
                raise ValueError(
                    f"Development marker {marker!r} must be the last version"
                )
        return self

    @classmethod
    def from_tags(
        cls,
        tags: list[str] | tuple[str, ...],
        development_marker: str | None = DEFAULT_DEVELOPMENT_MARKER,
    ) -> VersionSet:
        """Build a set from already-filtered tags, appending the marker."""
        versions = tuple(tags)
        if development_marker is not None:
            versions += (development_marker,)
        return cls(versions=versions, development_marker=development_marker)

    @property
    def tags(self) -> tuple[str, ...]:
        """Released tags only, without the development marker."""
        if self.development_marker is None:
            return self.versions
        return self.versions[:-1]

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.versions)

    def __contains__(self, version: object) -> bool:
        return version in self.versions

    def __len__(self) -> int:
        return len(self.versions)
