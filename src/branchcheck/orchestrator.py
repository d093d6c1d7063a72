"""Drive the check, duplicate-audit and show-version modes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .compat import (
    CompatResult,
    check_branch_version,
    check_trunk_version,
    is_detached_head,
    is_skipped_branch,
    is_trunk_branch_name,
)
from .config import BranchCheckConfig
from .descriptor import find_descriptors, is_unresolved_token, read_effective_version
from .errors import BranchCheckEnvironmentError, DescriptorError, VcsError
from .vcs import VcsAdapter

MODE_CHECK = "check"
MODE_AUDIT = "audit"
MODE_SHOW_VERSION = "show-version"

_logger = logging.getLogger("branchcheck.orchestrator")


@dataclass
class CheckReport:
    branch: str
    skipped_branch: bool = False
    checked: list[CompatResult] = field(default_factory=list)
    skipped: dict[str, str] = field(default_factory=dict)
    failure: CompatResult | None = None
    failure_path: str = ""

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": MODE_CHECK,
            "ok": self.ok,
            "branch": self.branch,
            "skipped_branch": self.skipped_branch,
            "checked": [item.to_dict() for item in self.checked],
            "skipped": dict(self.skipped),
            "failure": self.failure.to_dict() if self.failure else None,
            "failure_path": self.failure_path,
        }


@dataclass
class AuditReport:
    versions: dict[str, list[str]] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)

    @property
    def conflicts(self) -> dict[str, list[str]]:
        return {version: branches for version, branches in self.versions.items() if len(branches) > 1}

    @property
    def ok(self) -> bool:
        return not self.conflicts

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": MODE_AUDIT,
            "ok": self.ok,
            "versions": {key: list(value) for key, value in self.versions.items()},
            "conflicts": self.conflicts,
            "skipped": dict(self.skipped),
        }


def _current_branch(vcs: VcsAdapter) -> str:
    try:
        branch = vcs.current_branch()
    except VcsError as exc:
        raise BranchCheckEnvironmentError(
            f"Cannot determine current branch name; you may not be in a git repository: {exc}"
        ) from exc
    if is_detached_head(branch):
        raise BranchCheckEnvironmentError("You are not on a branch (detached HEAD).")
    return branch


def run_check(config: BranchCheckConfig, vcs: VcsAdapter) -> CheckReport:
    branch = _current_branch(vcs)
    report = CheckReport(branch=branch)
    if is_skipped_branch(branch, config.skip_branches):
        _logger.info("branchcheck does not analyze branch %s; skipping.", branch)
        report.skipped_branch = True
        return report

    _logger.debug("Analyzing branch %s", branch)
    root = vcs.repo_root()
    descriptors = find_descriptors(root, config.excludes, config.descriptor_name)
    if not descriptors:
        raise DescriptorError(f"Cannot find any {config.descriptor_name} under {root}.")

    trunk = is_trunk_branch_name(branch, config.trunk_branch)
    for rel_path in descriptors:
        _logger.debug("Analyzing %s", rel_path)
        version = read_effective_version(root / rel_path)
        if is_unresolved_token(version):
            _logger.info("Skipping %s because of unresolvable token %s in its version element.", rel_path, version)
            report.skipped[rel_path] = version
            continue
        result = check_trunk_version(version, branch) if trunk else check_branch_version(branch, version)
        report.checked.append(result)
        if not result.ok:
            report.failure = result
            report.failure_path = rel_path
            _logger.error(
                "%s in %s [%s]: expected %r, found %r",
                result.detail,
                rel_path,
                result.reason.value,
                result.expected,
                result.actual,
            )
            return report

    _logger.info("Branch %s is compatible with %d descriptor version(s).", branch, len(report.checked))
    return report


def run_audit(config: BranchCheckConfig, vcs: VcsAdapter) -> AuditReport:
    """Check out every remote branch in turn and group branches by declared version.

    The originally checked-out branch is restored afterwards, also on failure.
    """
    original = _current_branch(vcs)
    report = AuditReport()
    try:
        vcs.fetch()
        branches = vcs.remote_branch_names()
        descriptor = root_descriptor_path(config, vcs)
        for branch in branches:
            vcs.stash()
            vcs.checkout_branch(branch)
            version = read_effective_version(descriptor)
            if is_unresolved_token(version):
                _logger.info("Skipping branch %s because of unresolvable token %s in its version.", branch, version)
                report.skipped[branch] = version
                continue
            report.versions.setdefault(version, []).append(branch)
    except BaseException:
        try:
            vcs.checkout_branch(original)
        except VcsError as exc:
            _logger.error("Cannot restore branch %s after audit failure: %s", original, exc)
        raise
    _logger.debug("Restoring branch %s", original)
    vcs.checkout_branch(original)

    for version, owners in sorted(report.conflicts.items()):
        _logger.error("Multiple branches %s declare version %s", ", ".join(owners), version)
    if report.ok:
        _logger.info("No duplicate versions across %d branch(es).", sum(len(v) for v in report.versions.values()))
    return report


def root_descriptor_path(config: BranchCheckConfig, vcs: VcsAdapter) -> Path:
    return vcs.repo_root() / config.descriptor_name


def show_version(config: BranchCheckConfig, vcs: VcsAdapter) -> str:
    """Return the effective version of the descriptor at the repository top level."""
    return read_effective_version(root_descriptor_path(config, vcs))
