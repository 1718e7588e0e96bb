"""Compile a queue of dependency requests into one flattened dependency set.

The queue is turned into the dependency list of a synthetic "world" package.
Every package reachable from the world folds its own edges into the world's
lists, and the lists are then deduplicated and ordered by how many edges in
the graph resolved to each package.  This is the recommended way to build a
dependency graph from an arbitrary set of requests.
"""

from __future__ import annotations

import contextlib
import logging
from typing import Any, Callable, Iterator, List

from common.logging_utils import Timer, extra_context, is_debug_enabled
from constants import Constants
from .errors import DependencyInvariantError
from .graph import traverse, verify_dependency
from .models import Dependency, ErrorFlags, Package, PackageFlags, RequestQueue
from .parser import parse_dependency_list

logger = logging.getLogger(__name__)

ApplyCallback = Callable[[Any, Package, Any, int], bool]


def compile_queue(session, world: Package, queue: RequestQueue) -> bool:
    """Parse every request into ``world.required``, in queue order.

    Returns:
        False when nothing in the queue produced a dependency.
    """
    for request in queue:
        parse_dependency_list(session, world, world.required, request, 0)
    return bool(world.required)


def collect_dependents(_session, pkg: Package, world: Package) -> None:
    """Traversal visitor copying ``pkg``'s edges into the world's lists."""
    if pkg is world:
        return

    for dep in pkg.required:
        world.required.append(dep.copy())
    for dep in pkg.requires_private:
        world.requires_private.append(dep.copy())


def _hits(dep: Dependency) -> int:
    return dep.match.hits


def flatten_dependency_set(session, dep_list: List[Dependency]) -> None:
    """Deduplicate ``dep_list`` in place and order it by descending hit count.

    An entry is admitted when it resolves, its package is not yet stamped
    with the current serial, and no admitted entry carries the same name.
    Survivors are stably sorted so ties keep their scan order.

    Raises:
        DependencyInvariantError: if a resolved entry carries no match.
    """
    admitted: List[Dependency] = []
    debug = is_debug_enabled(logger)

    for dep in dep_list:
        pkg, _ = verify_dependency(session, dep)
        if pkg is None:
            continue
        if pkg.serial == session.serial:
            continue

        if dep.match is None:
            logger.critical("unmatched dependency %r <%s>", dep, dep.package)
            raise DependencyInvariantError(f"dependency {dep.package} resolved without a match")

        # virtual packages can be reached under the same name more than once
        duplicate = False
        for other in admitted:
            if debug:
                logger.debug("dedup %s = %s?", dep.package, other.package)
            if dep.package == other.package:
                logger.debug("skipping, %d deps", len(admitted))
                duplicate = True
                break
        if duplicate:
            continue

        pkg.serial = session.serial
        admitted.append(dep)
        logger.debug("added %s to dep table", dep.package)

    admitted.sort(key=_hits, reverse=True)

    dep_list[:] = admitted
    if debug:
        for slot, dep in enumerate(dep_list):
            logger.debug(
                "slot %d: dep %s matched to %s hits %d",
                slot, dep.package, dep.match.id, dep.match.hits,
            )


def verify_queue(session, world: Package, queue: RequestQueue, max_depth: int) -> ErrorFlags:
    """Compile ``queue`` into ``world``, collect the graph and flatten it."""
    if not compile_queue(session, world, queue):
        return ErrorFlags.DEPGRAPH_BREAK

    with Timer() as t:
        result = traverse(session, world, collect_dependents, world, max_depth)
    if result != ErrorFlags.OK:
        return result

    if is_debug_enabled(logger):
        logger.debug(
            "Dependencies collected",
            extra=extra_context(
                event="collect",
                component="queue",
                count=len(world.required) + len(world.requires_private),
                duration_ms=t.duration_ms(),
            ),
        )

    # a fresh serial per list: a package admitted to one list must still be
    # admissible to the other
    session.bump_serial()
    logger.debug("flattening requires deps")
    flatten_dependency_set(session, world.required)

    session.bump_serial()
    logger.debug("flattening requires.private deps")
    flatten_dependency_set(session, world.requires_private)

    return ErrorFlags.OK


def _normalize_depth(max_depth: int) -> int:
    if max_depth <= 0:
        return Constants.UNLIMITED_DEPTH
    return max_depth


@contextlib.contextmanager
def world_package(session) -> Iterator[Package]:
    """Yield a fresh world root and release it exactly once on exit."""
    world = Package(
        id=Constants.WORLD_ID,
        realname=Constants.WORLD_REALNAME,
        flags=PackageFlags.STATIC | PackageFlags.VIRTUAL,
    )
    try:
        yield world
    finally:
        session.free_package(world)


def apply_queue(
    session,
    queue: RequestQueue,
    callback: ApplyCallback,
    max_depth: int,
    user_data: Any = None,
) -> bool:
    """Resolve ``queue`` and hand the flattened world to ``callback``.

    ``callback(session, world, user_data, max_depth)`` only runs when the
    graph resolves.  A ``max_depth`` of 0 means unlimited.

    Returns:
        True if the graph resolved and the callback reported success.
    """
    max_depth = _normalize_depth(max_depth)
    with session.lock, world_package(session) as world:
        result = verify_queue(session, world, queue, max_depth)
        if result != ErrorFlags.OK:
            logger.debug("queue did not resolve: %s", result)
            return False
        return bool(callback(session, world, user_data, max_depth))


def validate_queue(session, queue: RequestQueue, max_depth: int) -> bool:
    """Check that ``queue`` resolves to a consistent dependency graph."""
    max_depth = _normalize_depth(max_depth)
    with session.lock, world_package(session) as world:
        return verify_queue(session, world, queue, max_depth) == ErrorFlags.OK
