"""
layer_helper.pruning — Decide which staged paths are not needed at runtime.

select_prune_targets is pure: it takes a snapshot of relative paths and
returns the ones to delete.  Only remove_paths touches the filesystem.
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath


@dataclass(frozen=True)
class PruneRule:
    """Name-based deletion rule.

    top_level_names match only entries directly under the staging root.
    names and suffixes match at any depth.
    """

    label: str
    top_level_names: frozenset[str] = frozenset()
    names: frozenset[str] = frozenset()
    suffixes: tuple[str, ...] = ()

    def matches(self, path: PurePosixPath) -> bool:
        name = path.name
        if len(path.parts) == 1 and name in self.top_level_names:
            return True
        return name in self.names or (bool(self.suffixes) and name.endswith(self.suffixes))


# pip and the build tooling pip installs into every fresh environment.
RESIDUE_RULE = PruneRule(
    label="package-manager and build-tooling residue",
    top_level_names=frozenset(
        {
            "pip",
            "setuptools",
            "wheel",
            "pkg_resources",
            "_distutils_hack",
            "distutils-precedence.pth",
        }
    ),
    suffixes=("dist-info", ".egg-info"),
)

BYTECODE_RULE = PruneRule(
    label="bytecode caches",
    names=frozenset({"__pycache__"}),
)


def snapshot_tree(root: Path) -> list[PurePosixPath]:
    """Return every path under root, relative and sorted."""
    return sorted(PurePosixPath(p.relative_to(root).as_posix()) for p in root.rglob("*"))


def select_prune_targets(
    paths: Iterable[PurePosixPath], rule: PruneRule
) -> list[PurePosixPath]:
    """Return the matching paths, dropping any nested under another match."""
    selected: list[PurePosixPath] = []
    seen: set[PurePosixPath] = set()
    for path in sorted(paths):
        if any(parent in seen for parent in path.parents):
            continue
        if rule.matches(path):
            selected.append(path)
            seen.add(path)
    return selected


def remove_paths(root: Path, targets: Iterable[PurePosixPath]) -> None:
    for target in targets:
        path = root / target
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()


def prune(root: Path, rule: PruneRule) -> list[PurePosixPath]:
    """Delete everything under root matched by rule and return what was removed."""
    targets = select_prune_targets(snapshot_tree(root), rule)
    remove_paths(root, targets)
    return targets
