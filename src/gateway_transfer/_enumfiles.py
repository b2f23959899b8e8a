"""EnumFilesAction: list the contents of remote containers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gateway_transfer._action import Action
from gateway_transfer._models import ResourceType
from gateway_transfer._status import unwrap

if TYPE_CHECKING:
    from collections.abc import Callable

    from gateway_transfer._models import ResourceInfo
    from gateway_transfer._path import GatewayPath

_LISTED_TYPES = frozenset({ResourceType.FILE, ResourceType.CONTAINER, ResourceType.REFERENCE, ResourceType.SYMLINK})


class EnumFilesAction(Action):
    """Enumerate files and directories of a container."""

    def list_all(self, path: str | GatewayPath, include_subdirectories: bool = False) -> list[ResourceInfo]:
        """List all files and directories under ``path``.

        Resources that are neither files, directories, references nor symlinks
        are skipped.

        :param include_subdirectories: Recurse into subdirectories.
        :raises RPCError: If listing any container fails.
        """
        self._session.require_valid()
        p = self._path(path)
        infos = unwrap("ListContainer", self._session.gateway.list_container(self._session.context, p)) or []
        result: list[ResourceInfo] = []
        for info in infos:
            if info.type not in _LISTED_TYPES:
                continue
            result.append(info)
            if include_subdirectories and info.is_container:
                result.extend(self.list_all(info.path, include_subdirectories))
        return result

    def list_all_with_filter(
        self,
        path: str | GatewayPath,
        include_subdirectories: bool,
        predicate: Callable[[ResourceInfo], bool],
    ) -> list[ResourceInfo]:
        """List all resources under ``path`` that satisfy ``predicate``."""
        return [info for info in self.list_all(path, include_subdirectories) if predicate(info)]

    def list_files(self, path: str | GatewayPath, include_subdirectories: bool = False) -> list[ResourceInfo]:
        """List files (including symlinks) under ``path``."""
        return self.list_all_with_filter(
            path, include_subdirectories, lambda i: i.type in (ResourceType.FILE, ResourceType.SYMLINK)
        )

    def list_dirs(self, path: str | GatewayPath, include_subdirectories: bool = False) -> list[ResourceInfo]:
        """List directories under ``path``."""
        return self.list_all_with_filter(path, include_subdirectories, lambda i: i.is_container)
