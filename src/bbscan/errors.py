# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy raised while scanning a BitBake project."""

from __future__ import annotations


class BitbakeScanError(RuntimeError):
    """Base class for failures that abort a scan pass."""


class ToolchainOutputShapeError(BitbakeScanError):
    """Raised when toolchain output lacks an expected structural marker.

    A missing section header, assignment or version literal means the
    toolchain output is incompatible, not that there are zero results.
    """


class CommandExecutionError(BitbakeScanError):
    """Raised when a toolchain command exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, stderr: str | None) -> None:
        """Initialise the error with captured command metadata.

        Args:
            command: Command text submitted to the runner.
            returncode: Exit status reported by the process.
            stderr: Captured standard error stream.
        """

        super().__init__(f"Failed to execute bitbake command: {command}\n{stderr or ''}".rstrip())
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


__all__ = ["BitbakeScanError", "CommandExecutionError", "ToolchainOutputShapeError"]
