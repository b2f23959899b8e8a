"""FileOperationsAction: single-call file operations on the gateway."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gateway_transfer._action import Action
from gateway_transfer._errors import GatewayError, InvalidResource, NotFound, RPCError
from gateway_transfer._path import GatewayPath
from gateway_transfer._status import check_status, unwrap

if TYPE_CHECKING:
    from gateway_transfer._models import ResourceInfo

log = logging.getLogger(__name__)


class FileOperationsAction(Action):
    """Stat, create, move and remove resources."""

    def stat(self, path: str | GatewayPath) -> ResourceInfo:
        """Query the metadata of a remote resource.

        :raises NotFound: If the resource does not exist.
        :raises RPCError: For any other non-OK status.
        """
        self._session.require_valid()
        p = self._path(path)
        return unwrap("Stat", self._session.gateway.stat(self._session.context, p))

    def file_exists(self, path: str | GatewayPath) -> bool:
        """Check whether ``path`` exists and is a file."""
        try:
            return self.stat(path).is_file
        except RPCError:
            return False

    def dir_exists(self, path: str | GatewayPath) -> bool:
        """Check whether ``path`` exists and is a directory."""
        try:
            return self.stat(path).is_container
        except RPCError:
            return False

    def resource_exists(self, path: str | GatewayPath) -> bool:
        """Check whether ``path`` exists, regardless of its type."""
        try:
            self.stat(path)
            return True
        except RPCError:
            return False

    def make_path(self, path: str | GatewayPath) -> None:
        """Create ``path`` and all missing parent directories.

        :raises InvalidResource: If a component exists but is not a directory.
        :raises RPCError: If creating a directory fails.
        """
        self._session.require_valid()
        target = path if isinstance(path, GatewayPath) else GatewayPath(path)
        gateway = self._session.gateway
        for current in target.ancestors():
            try:
                info = self.stat(current)
            except NotFound:
                log.debug("Creating container %s", current)
                check_status("CreateContainer", gateway.create_container(self._session.context, str(current)).status)
                continue
            if not info.is_container:
                raise InvalidResource(f"'{current}' is not a directory", path=str(current))

    def move(self, source: str | GatewayPath, target: str | GatewayPath) -> None:
        """Move ``source`` to ``target``; the target directory must exist.

        :raises GatewayError: If the source is missing or the target already exists.
        """
        src, dst = self._path(source), self._path(target)
        if not self.resource_exists(src):
            raise GatewayError(f"The source '{src}' doesn't exist", path=src, operation="Move")
        if self.resource_exists(dst):
            raise GatewayError(f"The target '{dst}' already exists", path=dst, operation="Move")
        check_status("Move", self._session.gateway.move(self._session.context, src, dst).status)

    def move_to(self, source: str | GatewayPath, directory: str | GatewayPath) -> None:
        """Move ``source`` into ``directory``, creating it if necessary."""
        src = GatewayPath(self._path(source))
        dest_dir = GatewayPath(self._path(directory))
        self.make_path(dest_dir)
        self.move(src, dest_dir / src.name)

    def remove(self, path: str | GatewayPath) -> None:
        """Delete a remote resource."""
        self._session.require_valid()
        p = self._path(path)
        check_status("Delete", self._session.gateway.delete(self._session.context, p).status)
