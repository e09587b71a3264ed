# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Translate paths between a build container and the host filesystem.

When the toolchain runs inside a container (``command_wrapper``), the paths it
prints belong to the container filesystem. The bind mount linking both sides is
not declared anywhere, so it is discovered by comparing inode numbers of the
ancestors of a known container path with those of the host working directory.
"""

from __future__ import annotations

import logging
import os
import posixpath
import re
import shlex
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from .interfaces import CommandRunner
from .logging import fail, warn
from .models import MountMapping
from .process_utils import run_checked

LOGGER = logging.getLogger(__name__)

INODE_WALK_TIMEOUT: Final[float] = 20.0
PARENT_PREFIX: Final[str] = "../"
_INODE_LINE: Final[re.Pattern[str]] = re.compile(r"^\d+$", re.MULTILINE)


class ResolveDirection(str, Enum):
    """Direction of a path translation."""

    HOST_TO_CONTAINER = "hostToContainer"
    CONTAINER_TO_HOST = "containerToHost"


@dataclass(frozen=True, slots=True)
class ResolutionNotice:
    """Path whose translation could not be confirmed to exist."""

    input_path: str
    resolved_path: str
    direction: ResolveDirection
    modal: bool = False

    @property
    def message(self) -> str:
        """Return a user-facing explanation of the unresolved path."""

        return (
            f"Couldn't find {self.input_path} corresponding paths inside and outside of the container "
            f"(best guess: {self.resolved_path}). Adjust the container volumes to use the same paths "
            "as those present on the host machine."
        )


NoticeHandler = Callable[[ResolutionNotice], None]
HostExists = Callable[[str], bool]
HostInode = Callable[[str], int]


def default_notice_handler(notice: ResolutionNotice) -> None:
    """Log ``notice`` and echo it to the console."""

    LOGGER.warning("Unresolved path %s -> %s", notice.input_path, notice.resolved_path)
    if notice.modal:
        fail(notice.message)
    else:
        warn(notice.message)


def _host_inode(path: str) -> int:
    return os.stat(path).st_ino


def iter_ancestors(path: str) -> Iterator[str]:
    """Yield ``path`` and each parent directory, stopping before ``/``."""

    current = posixpath.normpath(path)
    while current not in ("/", "", "."):
        yield current
        parent = posixpath.dirname(current)
        if parent == current:
            return
        current = parent


def parent_inode_command(path: str) -> str:
    """Return a shell loop printing the inode of ``path`` and each ancestor."""

    return (
        f"f={shlex.quote(path)}; "
        'while [ "$f" != / ]; do stat -c %i "$f"; f=$(realpath "$(dirname "$f")"); done'
    )


def parse_inodes(output: str) -> list[int]:
    """Return one inode number per output line consisting only of digits."""

    return [int(match) for match in _INODE_LINE.findall(output)]


def find_mount_points(
    container_anchor: str,
    container_inodes: list[int],
    host_anchor: str,
    host_inode: HostInode,
) -> tuple[str, str] | None:
    """Return the ``(container, host)`` directories sharing an inode.

    The host walk is the outer loop and the container walk restarts from the
    full container path for every host ancestor.

    Args:
        container_anchor: Path known inside the container.
        container_inodes: Inodes of ``container_anchor`` and its ancestors.
        host_anchor: Path known on the host.
        host_inode: Callable returning the inode of a host directory.

    Returns:
        tuple[str, str] | None: Matching directories, ``None`` without a match.
    """

    for host_dir in iter_ancestors(host_anchor):
        inode = host_inode(host_dir)
        for index, container_dir in enumerate(iter_ancestors(container_anchor)):
            if index >= len(container_inodes):
                break
            LOGGER.debug(
                "Comparing container inodes: %s:%s %s:%s",
                container_dir,
                container_inodes[index],
                host_dir,
                inode,
            )
            if container_inodes[index] == inode:
                return container_dir, host_dir
    return None


class PathResolver:
    """Discover the container bind mount and translate paths across it."""

    def __init__(
        self,
        runner: CommandRunner,
        host_workdir: Callable[[], Path | str],
        *,
        host_exists: HostExists = os.path.exists,
        host_inode: HostInode = _host_inode,
        notify: NoticeHandler = default_notice_handler,
    ) -> None:
        """Create a resolver bound to ``runner``.

        Args:
            runner: Runner executing commands inside the build environment.
            host_workdir: Callable returning the host working directory used as
                the host-side discovery anchor.
            host_exists: Host filesystem existence check.
            host_inode: Host filesystem inode lookup.
            notify: Handler receiving unresolved path notices.
        """

        self._runner = runner
        self._host_workdir = host_workdir
        self._host_exists = host_exists
        self._host_inode = host_inode
        self._notify = notify
        self._mapping = MountMapping()
        self._discovery_attempted = False

    @property
    def mapping(self) -> MountMapping:
        """Return the mount mapping learned during the current pass."""

        return self._mapping

    @property
    def needs_container_paths_resolution(self) -> bool:
        """Return ``True`` when a container mount point has been discovered."""

        return self._mapping.container_mount_point is not None

    def reset(self) -> None:
        """Forget the mapping so the next container path triggers discovery."""

        self._mapping.reset()
        self._discovery_attempted = False

    async def discover(self, container_anchor: str, host_anchor: str) -> None:
        """Discover the bind mount shared by ``container_anchor`` and ``host_anchor``.

        Nothing is discovered when ``container_anchor`` exists on the local
        filesystem: either no container is involved or it shares the host paths.

        Args:
            container_anchor: Path reported by the toolchain inside the container.
            host_anchor: Host working directory.

        Raises:
            CommandExecutionError: If the remote inode walk fails.
        """

        self._mapping.reset()
        if self._host_exists(container_anchor):
            return
        output = await run_checked(
            self._runner,
            parent_inode_command(container_anchor),
            timeout=INODE_WALK_TIMEOUT,
        )
        container_inodes = parse_inodes(output)
        found = find_mount_points(
            container_anchor,
            container_inodes,
            os.path.abspath(host_anchor),
            self._host_inode,
        )
        if found is None:
            LOGGER.debug("No container mount point found for %s", container_anchor)
            return
        self._mapping.container_mount_point, self._mapping.host_mount_point = found
        LOGGER.info("Found container mount point: %s -> %s", *found)

    async def resolve(
        self,
        path: str,
        direction: ResolveDirection,
        *,
        quiet: bool = False,
        modal: bool = False,
    ) -> str:
        """Translate ``path`` across the bind mount.

        Args:
            path: Path expressed in the origin namespace.
            direction: Translation direction.
            quiet: ``True`` to suppress the unresolved path notice.
            modal: ``True`` to flag the notice as blocking.

        Returns:
            str: Translated path, best effort when its existence cannot be
            confirmed, or ``path`` itself when no mapping is known.
        """

        host_to_container = direction is ResolveDirection.HOST_TO_CONTAINER
        if not host_to_container and not self._discovery_attempted and self._mapping.container_mount_point is None:
            self._discovery_attempted = True
            await self.discover(path, str(self._host_workdir()))

        if host_to_container:
            origin, destination = self._mapping.host_mount_point, self._mapping.container_mount_point
        else:
            origin, destination = self._mapping.container_mount_point, self._mapping.host_mount_point
        if origin is None or destination is None:
            return path

        relative = posixpath.relpath(path, origin)
        resolved = posixpath.normpath(posixpath.join(destination, relative))
        if not await self._exists(resolved, in_container=host_to_container):
            # Container and host roots are often one directory level apart (/work vs /work/project).
            resolved = posixpath.normpath(posixpath.join(destination, relative.removeprefix(PARENT_PREFIX)))
        if not await self._exists(resolved, in_container=host_to_container) and not quiet:
            self._notify(ResolutionNotice(input_path=path, resolved_path=resolved, direction=direction, modal=modal))
        return resolved

    async def resolve_container_path(self, path: str, *, quiet: bool = False) -> str:
        """Translate a container path to the host."""

        return await self.resolve(path, ResolveDirection.CONTAINER_TO_HOST, quiet=quiet)

    async def resolve_host_path(self, path: str, *, quiet: bool = False, modal: bool = False) -> str:
        """Translate a host path into the container."""

        return await self.resolve(path, ResolveDirection.HOST_TO_CONTAINER, quiet=quiet, modal=modal)

    async def _exists(self, path: str, *, in_container: bool) -> bool:
        if not in_container:
            return self._host_exists(path)
        result = await self._runner.execute(f"test -e {shlex.quote(path)}")
        return result.returncode == 0


__all__ = [
    "INODE_WALK_TIMEOUT",
    "PathResolver",
    "ResolutionNotice",
    "ResolveDirection",
    "default_notice_handler",
    "find_mount_points",
    "iter_ancestors",
    "parent_inode_command",
    "parse_inodes",
]
