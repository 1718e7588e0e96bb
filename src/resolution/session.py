"""Resolution session: serial counter, package cache and catalog access.

One session serves one resolution at a time.  The serial-based visited
marking is not re-entrant, so concurrent resolutions either use their own
session or hold ``session.lock`` for the whole compile/traverse/flatten run.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from common.logging_utils import extra_context, is_debug_enabled
from .catalog import PackageCatalog, PackageDefinition
from .errors import DependencyInvariantError
from .models import Package, PackageFlags
from .parser import parse_dependency_list

logger = logging.getLogger(__name__)


class Session:
    """Session-scoped resolution state.

    Attributes:
        catalog: Package definitions this session resolves against.
        search_private: Also walk ``requires_private`` edges while traversing.
        serial: Generation counter; a package stamped with the current serial
            has already been handled in the current pass.
        lock: Held by the queue operations for a full resolution.
    """

    def __init__(self, catalog: Optional[PackageCatalog] = None, *, search_private: bool = False):
        self.catalog = catalog if catalog is not None else PackageCatalog()
        self.search_private = search_private
        self.serial = 0
        self.lock = threading.RLock()
        self._cache: Dict[str, Package] = {}

    def bump_serial(self) -> int:
        """Start a new pass and return its serial."""
        self.serial += 1
        return self.serial

    def find_package(self, name: str) -> Optional[Package]:
        """Return the package answering to ``name``, loading it on first use.

        An exact package name wins over a package that merely provides
        ``name``; among providers the first in catalog order wins.
        """
        pkg = self._cache.get(name)
        if pkg is not None:
            return pkg

        definition = self.catalog.lookup(name)
        if definition is None:
            providers = self.catalog.providers(name)
            if not providers:
                logger.debug("No package or provider named %s", name)
                return None
            definition = providers[0]
            logger.debug("%s is provided by %s", name, definition.name)

        pkg = self._cache.get(definition.name)
        if pkg is None:
            pkg = self._load(definition)
            self._cache[definition.name] = pkg
        self._cache[name] = pkg
        return pkg

    def _load(self, definition: PackageDefinition) -> Package:
        pkg = Package(
            id=definition.name,
            realname=definition.name,
            version=definition.version,
            description=definition.description,
            flags=PackageFlags.CACHED,
        )
        parse_dependency_list(self, pkg, pkg.required, definition.requires)
        parse_dependency_list(self, pkg, pkg.requires_private, definition.requires_private)
        parse_dependency_list(self, pkg, pkg.provides, definition.provides)
        parse_dependency_list(self, pkg, pkg.conflicts, definition.conflicts)

        if is_debug_enabled(logger):
            logger.debug(
                "Loaded package",
                extra=extra_context(
                    event="package_load",
                    component="session",
                    target=pkg.id,
                    count=len(pkg.required) + len(pkg.requires_private),
                ),
            )
        return pkg

    def cached_packages(self) -> List[Package]:
        """Distinct packages loaded so far, in load order."""
        seen: List[Package] = []
        for pkg in self._cache.values():
            if not any(pkg is other for other in seen):
                seen.append(pkg)
        return seen

    def free_package(self, pkg: Package) -> None:
        """Release ``pkg``: drop its dependency lists and forget it.

        Raises:
            DependencyInvariantError: if ``pkg`` was already released.
        """
        if pkg.released:
            raise DependencyInvariantError(f"package {pkg.id} released twice")
        pkg.required.clear()
        pkg.requires_private.clear()
        pkg.provides.clear()
        pkg.conflicts.clear()
        pkg.released = True
        for key in [k for k, v in self._cache.items() if v is pkg]:
            del self._cache[key]

    def close(self) -> None:
        """Release every cached package."""
        for pkg in self.cached_packages():
            self.free_package(pkg)
