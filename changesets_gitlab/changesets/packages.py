"""Workspace package discovery.

Needed to attribute publish output to packages and to find the changelog of
each published package. Workspaces are declared by ``pnpm-workspace.yaml``
(pnpm) or the ``workspaces`` field of the root ``package.json`` (npm, yarn).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import yaml

from changesets_gitlab.core.result import Err, Ok, Result
from changesets_gitlab.core.structured import (
    StrDict,
    as_str_dict,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "PNPM_WORKSPACE_FILE",
    "PackageInfo",
    "Workspace",
    "changelog_entry",
    "read_workspace",
]

PNPM_WORKSPACE_FILE = "pnpm-workspace.yaml"


@dataclass(frozen=True, slots=True)
class PackageInfo:
    name: str
    version: str
    dir: Path


@dataclass(frozen=True, slots=True)
class Workspace:
    """Packages of a repository.

    Attributes:
        root: Root package (None if the root manifest has no name/version)
        packages: Workspace packages; empty for a single-package repository
    """

    root: PackageInfo | None
    packages: tuple[PackageInfo, ...] = ()

    @property
    def is_single_package(self) -> bool:
        return not self.packages

    def find(self, name: str) -> PackageInfo | None:
        for pkg in self.packages:
            if pkg.name == name:
                return pkg
        if self.root is not None and self.root.name == name:
            return self.root
        return None


def _read_manifest(path: Path) -> Result[StrDict, str]:
    try:
        obj: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(f"failed to read {path}: {e}")
    except json.JSONDecodeError as e:
        return Err(f"invalid JSON in {path}: {e}")
    data = as_str_dict(obj)
    if data is None:
        return Err(f"{path} must contain a JSON object")
    return Ok(data)


def _package_info(data: StrDict, directory: Path) -> PackageInfo | None:
    name = get_str(data, "name")
    version = get_str(data, "version")
    if name is None or version is None:
        return None
    return PackageInfo(name=name, version=version, dir=directory)


def _workspace_globs(data: StrDict) -> list[str]:
    # npm/yarn: "workspaces": [...] or "workspaces": {"packages": [...]}
    globs = get_str_list(data, "workspaces")
    if globs:
        return globs
    table = get_table(data, "workspaces")
    if table is not None:
        return get_str_list(table, "packages")
    return []


def _pnpm_workspace_globs(path: Path) -> Result[list[str], str]:
    try:
        with path.open("r", encoding="utf-8") as f:
            obj: object = yaml.safe_load(f) or {}
    except (OSError, UnicodeDecodeError) as e:
        return Err(f"failed to read {path}: {e}")
    except yaml.YAMLError as e:
        return Err(f"invalid YAML in {path}: {e}")
    data = as_str_dict(obj)
    if data is None:
        return Err(f"{path} must contain a mapping")
    return Ok(get_str_list(data, "packages"))


def read_workspace(root: Path) -> Result[Workspace, str]:
    """Read the root manifest and the workspace packages it declares."""
    manifest = root / "package.json"
    if not manifest.is_file():
        return Ok(Workspace(root=None))

    data = _read_manifest(manifest)
    if isinstance(data, Err):
        return data

    pnpm_file = root / PNPM_WORKSPACE_FILE
    if pnpm_file.is_file():
        globs = _pnpm_workspace_globs(pnpm_file)
        if isinstance(globs, Err):
            return globs
        patterns = globs.value
    else:
        patterns = _workspace_globs(data.value)

    packages: list[PackageInfo] = []
    seen: set[Path] = set()
    for pattern in patterns:
        if pattern.startswith("!"):
            continue
        for directory in sorted(root.glob(pattern.rstrip("/"))):
            pkg_json = directory / "package.json"
            if directory in seen or "node_modules" in directory.parts or not pkg_json.is_file():
                continue
            seen.add(directory)
            pkg_data = _read_manifest(pkg_json)
            if isinstance(pkg_data, Err):
                return pkg_data
            info = _package_info(pkg_data.value, directory)
            if info is not None:
                packages.append(info)

    return Ok(Workspace(root=_package_info(data.value, root), packages=tuple(packages)))


def changelog_entry(changelog: str, version: str) -> str | None:
    """Body of the ``## <version>`` section of a changelog, None if absent."""
    lines = changelog.splitlines()
    body: list[str] | None = None
    for line in lines:
        if line.startswith("## "):
            if body is not None:
                break
            if line[3:].strip() == version:
                body = []
            continue
        if body is not None:
            body.append(line)
    if body is None:
        return None
    return "\n".join(body).strip()
