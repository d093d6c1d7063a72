"""Branch name / project version compatibility rules."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

SNAPSHOT_SUFFIX = "-SNAPSHOT"
FEATURE_PREFIX = "feature"
HOTFIX_PREFIX = "hotfix"
DEFAULT_TRUNK_BRANCH = "develop"
DETACHED_HEAD = "HEAD"
DEFAULT_SKIP_BRANCHES = ("master", "main")

TRUNK_VERSION_PATTERN = re.compile(r"^[1-9][0-9]*(?:\.(?:0|[1-9][0-9]*))+-SNAPSHOT$")


class Reason(str, Enum):
    OK = "ok"
    MALFORMED_BRANCH = "malformed_branch"
    NOT_SNAPSHOT = "not_snapshot"
    UNKNOWN_PREFIX = "unknown_prefix"
    WRONG_CASE = "wrong_case"
    WRONG_PUNCTUATION = "wrong_punctuation"
    WRONG_STORY = "wrong_story"
    INVALID_TRUNK_VERSION = "invalid_trunk_version"


@dataclass(frozen=True)
class CompatResult:
    ok: bool
    reason: Reason
    branch: str
    version: str
    expected: str = ""
    actual: str = ""
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["reason"] = self.reason.value
        return payload


def is_trunk_version_valid(version: str) -> bool:
    return TRUNK_VERSION_PATTERN.match(version) is not None


def check_trunk_version(version: str, branch: str = DEFAULT_TRUNK_BRANCH) -> CompatResult:
    if is_trunk_version_valid(version):
        return CompatResult(ok=True, reason=Reason.OK, branch=branch, version=version)
    return CompatResult(
        ok=False,
        reason=Reason.INVALID_TRUNK_VERSION,
        branch=branch,
        version=version,
        expected="MAJOR.MINOR[.PATCH...]-SNAPSHOT",
        actual=version,
        detail=(
            f"Trunk branch '{branch}' must declare a plain snapshot version such as "
            f"'1.4-SNAPSHOT' with no story suffix; found '{version}'."
        ),
    )


def split_branch(branch: str) -> tuple[str, str, bool]:
    """Split ``prefix/story``; ``ok`` is False unless there are exactly two non-empty segments."""
    parts = branch.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return "", "", False
    return parts[0], parts[1], True


def truncate_snapshot(version: str) -> tuple[str, bool]:
    if not version.endswith(SNAPSHOT_SUFFIX):
        return version, False
    return version[: -len(SNAPSHOT_SUFFIX)], True


def normalize_feature_story(story: str) -> str:
    return story.lower().replace("-", "_")


def check_branch_version(branch: str, version: str) -> CompatResult:
    """Decide whether ``version`` carries the story of ``branch``.

    Feature branches expect the story lowercased with ``-`` mapped to ``_``,
    matched case-sensitively at the end of the version body. Hotfix branches
    expect the story verbatim, matched case-insensitively.
    """
    prefix, story, ok = split_branch(branch)
    if not ok:
        return CompatResult(
            ok=False,
            reason=Reason.MALFORMED_BRANCH,
            branch=branch,
            version=version,
            expected="<prefix>/<story>",
            actual=branch,
            detail=f"Branch '{branch}' is not a taggable branch; expected exactly one '/' as in 'feature/PRJ-12'.",
        )

    body, ok = truncate_snapshot(version)
    if not ok:
        return CompatResult(
            ok=False,
            reason=Reason.NOT_SNAPSHOT,
            branch=branch,
            version=version,
            expected=f"...{SNAPSHOT_SUFFIX}",
            actual=version,
            detail=f"Version '{version}' is not a snapshot version; branch '{branch}' requires a '{SNAPSHOT_SUFFIX}' suffix.",
        )

    if prefix == FEATURE_PREFIX:
        return _check_feature(branch, version, body, story)
    if prefix == HOTFIX_PREFIX:
        return _check_hotfix(branch, version, body, story)
    return CompatResult(
        ok=False,
        reason=Reason.UNKNOWN_PREFIX,
        branch=branch,
        version=version,
        expected=f"{FEATURE_PREFIX}|{HOTFIX_PREFIX}",
        actual=prefix,
        detail=f"Branch prefix '{prefix}' is not recognized; use '{FEATURE_PREFIX}/' or '{HOTFIX_PREFIX}/'.",
    )


def _check_feature(branch: str, version: str, body: str, story: str) -> CompatResult:
    expected = normalize_feature_story(story)
    if body.endswith(expected):
        return CompatResult(ok=True, reason=Reason.OK, branch=branch, version=version, expected=expected, actual=body)
    if body.lower().endswith(expected):
        return CompatResult(
            ok=False,
            reason=Reason.WRONG_CASE,
            branch=branch,
            version=version,
            expected=expected,
            actual=body,
            detail=(
                f"Version '{version}' carries the story of branch '{branch}' in the wrong case: "
                f"expected the version to end with '{expected}{SNAPSHOT_SUFFIX}' (lowercase)."
            ),
        )
    if normalize_feature_story(body).endswith(expected):
        case_note = "" if body.lower() == body else " and lowercase"
        return CompatResult(
            ok=False,
            reason=Reason.WRONG_PUNCTUATION,
            branch=branch,
            version=version,
            expected=expected,
            actual=body,
            detail=(
                f"Version '{version}' carries the story of branch '{branch}' with '-' where '_' is expected: "
                f"expected the version to end with '{expected}{SNAPSHOT_SUFFIX}' ('-' replaced by '_'{case_note})."
            ),
        )
    return CompatResult(
        ok=False,
        reason=Reason.WRONG_STORY,
        branch=branch,
        version=version,
        expected=expected,
        actual=body,
        detail=f"Version '{version}' does not carry the story of branch '{branch}': expected suffix '{expected}{SNAPSHOT_SUFFIX}'.",
    )


def _check_hotfix(branch: str, version: str, body: str, story: str) -> CompatResult:
    expected = story.lower()
    actual = body.lower()
    if actual.endswith(expected):
        return CompatResult(ok=True, reason=Reason.OK, branch=branch, version=version, expected=expected, actual=actual)
    return CompatResult(
        ok=False,
        reason=Reason.WRONG_STORY,
        branch=branch,
        version=version,
        expected=expected,
        actual=actual,
        detail=(
            f"Version '{version}' does not carry the story of hotfix branch '{branch}': "
            f"expected suffix '{story}{SNAPSHOT_SUFFIX}' (case-insensitive)."
        ),
    )


def is_branch_version_compatible(branch: str, version: str) -> bool:
    return check_branch_version(branch, version).ok


def is_trunk_branch_name(name: str, trunk_branch: str = DEFAULT_TRUNK_BRANCH) -> bool:
    return name == trunk_branch


def is_detached_head(name: str) -> bool:
    return name == DETACHED_HEAD


def is_skipped_branch(name: str, skip_branches: tuple[str, ...] = DEFAULT_SKIP_BRANCHES) -> bool:
    return name in skip_branches
