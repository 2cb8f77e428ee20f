from __future__ import annotations

from collections.abc import Iterable, Sequence

from .target_field import TargetField

"""ColumnMapping model: target field key -> source header (or unmapped).

The mapping holds exactly one entry per TargetField of the current import kind.
After the initial auto-mapping, remap() is the only way to change an entry.

Two target fields may point at the same source header. This is legal; callers
can inspect shared_sources() to warn the user about it.
"""

__all__ = [
    "ColumnMapping",
    "MappingError",
]


class MappingError(Exception):
    """Raised when a remap targets an unknown field key or header."""


class ColumnMapping:
    def __init__(self, headers: Sequence[str], entries: dict[str, str | None]) -> None:
        self._headers: tuple[str, ...] = tuple(headers)
        # 挿入順 = TargetField 宣言順
        self._entries: dict[str, str | None] = dict(entries)

    @classmethod
    def empty(cls, headers: Sequence[str], fields: Iterable[TargetField]) -> ColumnMapping:
        return cls(headers, {f.key: None for f in fields})

    @property
    def headers(self) -> tuple[str, ...]:
        return self._headers

    def remap(self, key: str, header: str | None) -> None:
        """Point a target field at another source header, or clear it with None."""
        if key not in self._entries:
            raise MappingError(f"unknown target field: {key}")
        if header is not None and header not in self._headers:
            raise MappingError(f"header not found in file: {header!r}")
        self._entries[key] = header

    def source_for(self, key: str) -> str | None:
        if key not in self._entries:
            raise MappingError(f"unknown target field: {key}")
        return self._entries[key]

    def mapped_keys(self) -> list[str]:
        return [k for k, h in self._entries.items() if h is not None]

    def mapped_sources(self) -> set[str]:
        return {h for h in self._entries.values() if h is not None}

    def unmapped_required(self, fields: Iterable[TargetField]) -> list[TargetField]:
        return [f for f in fields if f.required and self._entries.get(f.key) is None]

    def shared_sources(self) -> dict[str, list[str]]:
        """Source headers used by more than one target field."""
        users: dict[str, list[str]] = {}
        for key, header in self._entries.items():
            if header is not None:
                users.setdefault(header, []).append(key)
        return {h: keys for h, keys in users.items() if len(keys) > 1}

    def as_dict(self) -> dict[str, str | None]:
        return dict(self._entries)

    def copy(self) -> ColumnMapping:
        return ColumnMapping(self._headers, self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColumnMapping):
            return NotImplemented
        return self._headers == other._headers and self._entries == other._entries

    def __repr__(self) -> str:  # pragma: no cover (debug aid)
        return f"ColumnMapping({self._entries!r})"
