"""Run configuration assembled from defaults, a YAML file, the environment and CLI flags."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

from .compat import DEFAULT_SKIP_BRANCHES, DEFAULT_TRUNK_BRANCH
from .descriptor import DEFAULT_DESCRIPTOR_NAME
from .errors import ConfigError

DEFAULT_CONFIG_NAME = ".branchcheck.yaml"
TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_excludes(raw: Any) -> frozenset[str]:
    """Accept a comma/semicolon separated string or a list of relative descriptor paths."""
    if raw is None:
        return frozenset()
    if isinstance(raw, str):
        items = re.split(r"[;,]", raw)
    elif isinstance(raw, (list, tuple, set, frozenset)):
        items = [str(item) for item in raw]
    else:
        raise ConfigError(f"excludes must be a string or a list, got {type(raw).__name__}.")
    out: set[str] = set()
    for item in items:
        value = item.strip().replace("\\", "/")
        while value.startswith("./"):
            value = value[2:]
        if value:
            out.add(value)
    return frozenset(out)


def _as_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip().lower() in TRUE_VALUES


def load_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot load config file {path}: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level.")
    return payload


@dataclass(frozen=True)
class BranchCheckConfig:
    root: Path
    excludes: frozenset[str] = field(default_factory=frozenset)
    trunk_branch: str = DEFAULT_TRUNK_BRANCH
    skip_branches: tuple[str, ...] = DEFAULT_SKIP_BRANCHES
    descriptor_name: str = DEFAULT_DESCRIPTOR_NAME
    debug: bool = False
    config_file: Path | None = None

    @classmethod
    def from_root(
        cls,
        root: Path,
        *,
        config_file: Path | None = None,
        excludes: str | None = None,
        debug: bool | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "BranchCheckConfig":
        env = os.environ if environ is None else environ
        root = root.resolve()
        if config_file is None:
            env_config = str(env.get("BRANCHCHECK_CONFIG_FILE", "")).strip()
            config_file = Path(env_config) if env_config else root / DEFAULT_CONFIG_NAME
        config_file = config_file.resolve()
        from_file = load_config_file(config_file)

        merged_excludes = set(parse_excludes(from_file.get("excludes")))
        merged_excludes |= parse_excludes(env.get("BRANCHCHECK_EXCLUDES"))
        merged_excludes |= parse_excludes(excludes)

        resolved_debug = _as_bool(from_file.get("debug", False))
        if "BRANCHCHECK_DEBUG" in env:
            resolved_debug = resolved_debug or _as_bool(env["BRANCHCHECK_DEBUG"])
        if debug:
            resolved_debug = True

        skip_raw = from_file.get("skip_branches", list(DEFAULT_SKIP_BRANCHES))
        if isinstance(skip_raw, str):
            skip_raw = [skip_raw]
        if not isinstance(skip_raw, list):
            raise ConfigError(f"skip_branches in {config_file} must be a list of branch names.")
        skip_branches = tuple(str(item).strip() for item in skip_raw if str(item).strip())

        trunk_branch = str(from_file.get("trunk_branch", DEFAULT_TRUNK_BRANCH)).strip() or DEFAULT_TRUNK_BRANCH
        descriptor_name = (
            str(from_file.get("descriptor_name", DEFAULT_DESCRIPTOR_NAME)).strip() or DEFAULT_DESCRIPTOR_NAME
        )

        return cls(
            root=root,
            excludes=frozenset(merged_excludes),
            trunk_branch=trunk_branch,
            skip_branches=skip_branches,
            descriptor_name=descriptor_name,
            debug=resolved_debug,
            config_file=config_file if config_file.exists() else None,
        )
