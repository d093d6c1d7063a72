"""CLI entrypoint for branchcheck."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from importlib import metadata
from pathlib import Path
from typing import Any

from .config import BranchCheckConfig
from .errors import BranchCheckError
from .orchestrator import MODE_SHOW_VERSION, root_descriptor_path, run_audit, run_check, show_version
from .vcs import GitAdapter

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

_logger = logging.getLogger("branchcheck.cli")


def build_identifier(env: dict[str, str] | None = None) -> str:
    env = dict(os.environ) if env is None else env
    try:
        version = metadata.version("branchcheck")
    except metadata.PackageNotFoundError:
        version = "0+unknown"
    commit = env.get("BRANCHCHECK_BUILD_COMMIT", "").strip()
    return f"branchcheck {version} (commit {commit})" if commit else f"branchcheck {version}"


def configure_logging(debug: bool) -> None:
    logger = logging.getLogger("branchcheck")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="branchcheck",
        description="Verify that the git branch name and the pom.xml versions follow the branch naming convention.",
    )
    parser.add_argument("--root", default=".", help="repository directory")
    parser.add_argument("--config", default="", help="YAML config file (default: <root>/.branchcheck.yaml)")
    parser.add_argument(
        "--excludes",
        default="",
        help="comma-separated poms to exclude, by path relative to repository top level (e.g. a/pom.xml,b/pom.xml)",
    )
    parser.add_argument("--version", action="store_true", help="print the build identifier and exit")
    parser.add_argument(
        "--version-dups",
        action="store_true",
        help="check out every remote branch and report pom versions declared by more than one branch",
    )
    parser.add_argument(
        "--branch-compat",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="verify branch name and pom versions are compatible",
    )
    parser.add_argument("--pom-version", action="store_true", help="print the effective version of the root pom.xml")
    parser.add_argument("--debug", action="store_true", help="verbose logging to stderr")
    parser.add_argument("--json", action="store_true", help="print the mode's report as JSON")
    return parser


def _emit(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print(build_identifier())
        return 0

    try:
        config = BranchCheckConfig.from_root(
            Path(args.root),
            config_file=Path(args.config) if args.config else None,
            excludes=args.excludes or None,
            debug=args.debug,
        )
    except BranchCheckError as exc:
        configure_logging(args.debug)
        _logger.error("%s", exc)
        return 1
    configure_logging(config.debug)
    _logger.debug("%s", build_identifier())

    vcs = GitAdapter(config.root)
    try:
        if args.version_dups:
            audit = run_audit(config, vcs)
            if args.json:
                _emit(audit.to_dict())
            return 0 if audit.ok else 1

        if args.pom_version:
            version = show_version(config, vcs)
            if args.json:
                _emit(
                    {
                        "mode": MODE_SHOW_VERSION,
                        "path": str(root_descriptor_path(config, vcs)),
                        "version": version,
                    }
                )
            else:
                print(version)
            return 0

        if args.branch_compat:
            report = run_check(config, vcs)
            if args.json:
                _emit(report.to_dict())
            return 0 if report.ok else 1
    except BranchCheckError as exc:
        _logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
