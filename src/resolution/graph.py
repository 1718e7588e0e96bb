"""Dependency resolution and depth-limited graph traversal."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants
from .models import Comparator, Dependency, ErrorFlags, Package, PackageFlags
from .vercmp import version_satisfies

logger = logging.getLogger(__name__)

Visitor = Callable[[Any, Package, Any], None]


def provided_version(pkg: Package, name: str) -> Optional[str]:
    """Version ``pkg`` offers under ``name``: its own, or the one its provides entry pins."""
    if name == pkg.id:
        return pkg.version
    for entry in pkg.provides:
        if entry.package == name:
            if entry.compare is Comparator.EQ and entry.version is not None:
                return entry.version
            break
    return pkg.version


def verify_dependency(session, dep: Dependency) -> Tuple[Optional[Package], ErrorFlags]:
    """Resolve ``dep`` to a concrete package.

    The first successful resolution of an edge records the match and bumps
    the package's hit count.  Copies resolve through the edge they were taken
    from, so one edge is never counted twice.

    Returns:
        (package, ErrorFlags.OK) on success, otherwise (None, error flag).
    """
    source = dep.origin if dep.origin is not None else dep
    if dep.match is not None:
        return dep.match, ErrorFlags.OK
    if source.match is not None:
        dep.match = source.match
        return dep.match, ErrorFlags.OK

    pkg = session.find_package(source.package)
    if pkg is None:
        return None, ErrorFlags.PACKAGE_NOT_FOUND

    if not version_satisfies(provided_version(pkg, source.package), source.compare, source.version):
        return None, ErrorFlags.VERSION_MISMATCH

    source.match = pkg
    pkg.hits += 1
    dep.match = pkg
    return pkg, ErrorFlags.OK


def report_graph_error(session, parent: Package, dep: Dependency, eflags: ErrorFlags) -> None:
    """Log a human readable explanation of a failed edge."""
    if eflags & ErrorFlags.VERSION_MISMATCH:
        pkg = session.find_package(dep.package)
        have = provided_version(pkg, dep.package) if pkg is not None else None
        logger.error(
            "Package dependency requirement '%s' could not be satisfied. "
            "Package '%s' has version '%s', required version is '%s %s'",
            dep, dep.package, have, dep.compare.value, dep.version,
        )
    elif eflags & ErrorFlags.PACKAGE_NOT_FOUND:
        logger.error("Package '%s', required by '%s', not found", dep.package, parent.id)


def _walk_conflicts(session, pkg: Package) -> ErrorFlags:
    """Check ``pkg``'s conflicts against the packages it requires."""
    eflags = ErrorFlags.OK
    for conflict in pkg.conflicts:
        for dep in pkg.required:
            if dep.package != conflict.package:
                continue
            target, _ = verify_dependency(session, dep)
            if target is None:
                continue
            if version_satisfies(provided_version(target, conflict.package), conflict.compare, conflict.version):
                logger.error(
                    "Version '%s' of '%s' creates a conflict. ('%s' conflicts with '%s')",
                    target.version, target.id, pkg.id, conflict,
                )
                eflags |= ErrorFlags.PACKAGE_CONFLICT
    return eflags


def _reach(depth: int) -> float:
    """Remaining depth as a comparable reach; negative depths never run out."""
    return float("inf") if depth < 0 else depth


def _traverse_list(
    session,
    parent: Package,
    deps: List[Dependency],
    visitor: Optional[Visitor],
    data: Any,
    depth: int,
    skip_flags: PackageFlags,
    walked: Dict[Package, int],
) -> ErrorFlags:
    eflags = ErrorFlags.OK
    # visitors may append to the list being walked; only walk what was there
    for dep in list(deps):
        pkg, err = verify_dependency(session, dep)
        if pkg is None:
            report_graph_error(session, parent, dep, err)
            eflags |= err
            continue
        if pkg.serial == session.serial:
            # already seen this pass; only a shallower path may extend its walk
            reached = walked.get(pkg)
            if reached is None or _reach(depth - 1) <= _reach(reached):
                continue
            eflags |= _traverse_main(session, pkg, visitor, data, depth - 1, skip_flags, walked, visit=False)
            continue
        if pkg.flags & skip_flags:
            logger.debug("Skipping %s (flags %s)", pkg.id, pkg.flags)
            continue
        pkg.serial = session.serial
        eflags |= _traverse_main(session, pkg, visitor, data, depth - 1, skip_flags, walked)
    return eflags


def _traverse_main(
    session,
    pkg: Package,
    visitor: Optional[Visitor],
    data: Any,
    depth: int,
    skip_flags: PackageFlags,
    walked: Dict[Package, int],
    visit: bool = True,
) -> ErrorFlags:
    logger.debug("%s: depth %d, serial %d", pkg.id, depth, session.serial)
    walked[pkg] = depth
    if visit and visitor is not None:
        visitor(session, pkg, data)
    if depth == 0:
        return ErrorFlags.OK

    eflags = _walk_conflicts(session, pkg) if visit else ErrorFlags.OK
    eflags |= _traverse_list(session, pkg, pkg.required, visitor, data, depth, skip_flags, walked)
    if session.search_private:
        eflags |= _traverse_list(session, pkg, pkg.requires_private, visitor, data, depth, skip_flags, walked)
    return eflags


def traverse(
    session,
    root: Package,
    visitor: Optional[Visitor],
    data: Any,
    max_depth: int,
    skip_flags: PackageFlags = PackageFlags.NONE,
) -> ErrorFlags:
    """Walk every package reachable from ``root`` within ``max_depth`` edges.

    ``visitor(session, pkg, data)`` is called once per visited package,
    starting with ``root``.  A negative ``max_depth`` means unlimited.  A
    package reached again by a shorter path has its dependencies walked again
    with the extra depth, but is not visited twice.  Errors on individual
    edges are reported and OR-ed into the result while the walk goes on.
    """
    if max_depth < 0:
        max_depth = Constants.UNLIMITED_DEPTH
    session.bump_serial()
    root.serial = session.serial

    eflags = _traverse_main(session, root, visitor, data, max_depth, skip_flags, {})
    if is_debug_enabled(logger):
        logger.debug(
            "Traversal finished",
            extra=extra_context(
                event="traverse",
                component="graph",
                target=root.id,
                outcome="ok" if eflags == ErrorFlags.OK else "error",
                serial=session.serial,
            ),
        )
    return eflags
