"""GatewayPath: immutable, validated absolute path on the storage gateway."""

from __future__ import annotations

from typing import Final

from gateway_transfer._errors import InvalidPath


class GatewayPath:
    """An immutable, normalized absolute path such as ``/home/data/a.txt``.

    :param raw: The raw path string to normalize and validate.
    :raises InvalidPath: If the path is malformed or unsafe.
    """

    __slots__ = ("_path",)
    _path: Final[str]  # type: ignore[misc]

    def __init__(self, raw: str) -> None:
        normalized = self._normalize(raw)
        object.__setattr__(self, "_path", normalized)

    @staticmethod
    def _normalize(raw: str) -> str:
        if not raw.strip():
            raise InvalidPath("Path is empty", path=raw)
        if "\0" in raw:
            raise InvalidPath("Path contains null byte", path=raw)
        p = raw.replace("\\", "/")
        parts: list[str] = []
        for segment in p.split("/"):
            if segment == "" or segment == ".":
                continue
            if segment == "..":
                raise InvalidPath("Path contains '..' segment", path=raw)
            parts.append(segment)
        return "/" + "/".join(parts)

    @classmethod
    def _from_normalized(cls, path: str) -> GatewayPath:
        p = object.__new__(cls)
        object.__setattr__(p, "_path", path)
        return p

    @property
    def is_root(self) -> bool:
        return self._path == "/"

    @property
    def name(self) -> str:
        """Final component of the path; empty for the root."""
        return self._path.rsplit("/", 1)[-1]

    @property
    def parent(self) -> GatewayPath | None:
        """Parent path, or ``None`` for the root and top-level paths like ``/home``."""
        if self.is_root:
            return None
        parent_str = self._path.rsplit("/", 1)[0]
        if not parent_str:
            return None
        return self._from_normalized(parent_str)

    @property
    def dirname(self) -> str:
        """Parent directory as a string; ``"/"`` for top-level paths."""
        parent = self.parent
        return str(parent) if parent is not None else "/"

    @property
    def parts(self) -> tuple[str, ...]:
        """Tuple of path components; empty for the root."""
        if self.is_root:
            return ()
        return tuple(self._path[1:].split("/"))

    def ancestors(self) -> list[GatewayPath]:
        """All paths from the top-level component down to this one, inclusive.

        The root itself is never listed, so the root has no ancestors.
        """
        result: list[GatewayPath] = []
        current = ""
        for part in self.parts:
            current = f"{current}/{part}"
            result.append(self._from_normalized(current))
        return result

    def __truediv__(self, other: str) -> GatewayPath:
        return GatewayPath(f"{self._path.rstrip('/')}/{other}")

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"GatewayPath({self._path!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, GatewayPath):
            return self._path == other._path
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._path)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"GatewayPath is immutable: cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"GatewayPath is immutable: cannot delete '{name}'")
