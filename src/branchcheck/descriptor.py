"""Maven POM discovery and effective-version resolution."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from .errors import DescriptorError

DEFAULT_DESCRIPTOR_NAME = "pom.xml"
POM_NAMESPACE = "http://maven.apache.org/POM/4.0.0"
SKIP_DIRS = {".git", ".hg", ".svn"}

_logger = logging.getLogger("branchcheck.descriptor")


@dataclass(frozen=True)
class Descriptor:
    path: Path
    own_version: str
    parent_version: str

    @property
    def effective_version(self) -> str:
        return self.own_version or self.parent_version

    @property
    def inherits_version(self) -> bool:
        return not self.own_version and bool(self.parent_version)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> str:
    for child in element:
        if _local_name(child.tag) == name:
            return (child.text or "").strip()
    return ""


def _child(element: ET.Element, name: str) -> ET.Element | None:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def load_descriptor(path: Path) -> Descriptor:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DescriptorError(f"Cannot read descriptor {path}: {exc}") from exc
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise DescriptorError(f"Cannot parse descriptor {path}: {exc}") from exc
    if _local_name(root.tag) != "project":
        raise DescriptorError(f"Descriptor {path} has root element <{_local_name(root.tag)}>, expected <project>.")
    parent = _child(root, "parent")
    return Descriptor(
        path=path,
        own_version=_child_text(root, "version"),
        parent_version=_child_text(parent, "version") if parent is not None else "",
    )


def read_effective_version(path: Path) -> str:
    """Return the project version, falling back to the parent version when blank."""
    descriptor = load_descriptor(path)
    if not descriptor.effective_version:
        raise DescriptorError(f"Descriptor {path} declares neither a version nor a parent version.")
    if descriptor.inherits_version:
        _logger.debug("Using parent version in %s", path)
    _logger.debug("Effective version %s in %s", descriptor.effective_version, path)
    return descriptor.effective_version


def is_unresolved_token(version: str) -> bool:
    return version.startswith("$")


def find_descriptors(
    root: Path,
    excludes: frozenset[str] = frozenset(),
    descriptor_name: str = DEFAULT_DESCRIPTOR_NAME,
) -> list[str]:
    """List descriptor paths under ``root`` as POSIX paths relative to it."""
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if name not in SKIP_DIRS)
        if descriptor_name not in filenames:
            continue
        rel = (Path(dirpath) / descriptor_name).relative_to(root).as_posix()
        if rel in excludes:
            _logger.debug("Skipping excluded descriptor %s", rel)
            continue
        found.append(rel)
    _logger.debug("Found %d descriptors under %s", len(found), root)
    return sorted(found)
