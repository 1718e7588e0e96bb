"""Exceptions raised by the resolution layer.

Ordinary resolution failures are reported as ``ErrorFlags`` / bool results.
Exceptions are reserved for bad input files, malformed single atoms and
broken internal invariants.
"""


class DepQueueError(Exception):
    """Base class for recoverable depqueue errors."""


class CatalogError(DepQueueError):
    """A package catalog could not be loaded or is malformed."""


class AtomParseError(DepQueueError):
    """A single dependency atom is malformed."""


class DependencyInvariantError(RuntimeError):
    """The dependency graph reached a state that must never happen.

    Callers must not recover from this: the CLI logs it and exits.
    """
