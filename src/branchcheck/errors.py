"""Exception types raised by branchcheck."""

from __future__ import annotations


class BranchCheckError(RuntimeError):
    """Base class for failures that stop a branchcheck run."""


class ConfigError(BranchCheckError):
    """Raised when the configuration file or environment cannot be used."""


class DescriptorError(BranchCheckError):
    """Raised when a build descriptor is unreadable or declares no version."""


class VcsError(BranchCheckError):
    """Raised when a git command fails or prints output we cannot parse."""


class BranchCheckEnvironmentError(BranchCheckError):
    """Raised when the working tree is not in a state branchcheck can judge."""
