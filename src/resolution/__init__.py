"""Dependency queue compilation and flattening."""

from .catalog import PackageCatalog, PackageDefinition
from .errors import AtomParseError, CatalogError, DependencyInvariantError, DepQueueError
from .models import Comparator, Dependency, ErrorFlags, Package, PackageFlags, RequestQueue
from .queue import (
    apply_queue,
    collect_dependents,
    compile_queue,
    flatten_dependency_set,
    validate_queue,
    verify_queue,
)
from .session import Session

__all__ = [
    "PackageCatalog",
    "PackageDefinition",
    "AtomParseError",
    "CatalogError",
    "DependencyInvariantError",
    "DepQueueError",
    "Comparator",
    "Dependency",
    "ErrorFlags",
    "Package",
    "PackageFlags",
    "RequestQueue",
    "apply_queue",
    "collect_dependents",
    "compile_queue",
    "flatten_dependency_set",
    "validate_queue",
    "verify_queue",
    "Session",
]
