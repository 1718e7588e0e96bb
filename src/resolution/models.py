"""Data models for dependency queues and package graphs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Iterator, List, Optional


class PackageFlags(IntFlag):
    """Property bits carried by a package."""
    NONE = 0
    STATIC = 1
    CACHED = 2
    VIRTUAL = 4


class ErrorFlags(IntFlag):
    """Resolution error bits; several may be OR-ed together by a traversal."""
    OK = 0
    PACKAGE_NOT_FOUND = 1
    VERSION_MISMATCH = 2
    PACKAGE_CONFLICT = 4
    DEPGRAPH_BREAK = 8


class Comparator(Enum):
    """Version comparison operators understood in dependency atoms."""
    ANY = ""
    LT = "<"
    LE = "<="
    EQ = "="
    NE = "!="
    GE = ">="
    GT = ">"

    @classmethod
    def from_operator(cls, text: str) -> "Comparator":
        """Map operator text to a comparator; ``==`` is accepted as ``=``."""
        if text == "==":
            return cls.EQ
        return cls(text)


@dataclass(eq=False)
class Dependency:
    """One edge in a dependency list.

    ``match`` points at the concrete package this edge resolved to.  Copies
    share the same Package object, so its hit counter is shared as well.
    """
    package: str
    compare: Comparator = Comparator.ANY
    version: Optional[str] = None
    match: Optional["Package"] = None
    parent: Optional["Package"] = None
    origin: Optional["Dependency"] = field(default=None, repr=False)

    def copy(self) -> "Dependency":
        """Return an independently owned entry with the same match.

        The copy remembers the edge it was taken from, so resolving it later
        reuses that edge's match instead of counting a second hit.
        """
        return Dependency(
            package=self.package,
            compare=self.compare,
            version=self.version,
            match=self.match,
            parent=self.parent,
            origin=self.origin or self,
        )

    def __str__(self) -> str:
        if self.compare is Comparator.ANY or self.version is None:
            return self.package
        return f"{self.package} {self.compare.value} {self.version}"


@dataclass(eq=False)
class Package:
    """A resolved package, or the synthetic world root."""
    id: str
    realname: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    flags: PackageFlags = PackageFlags.NONE
    serial: int = 0
    hits: int = 0
    required: List[Dependency] = field(default_factory=list)
    requires_private: List[Dependency] = field(default_factory=list)
    provides: List[Dependency] = field(default_factory=list)
    conflicts: List[Dependency] = field(default_factory=list)
    released: bool = False

    def __repr__(self) -> str:
        return f"<Package {self.id}>"


class RequestQueue:
    """Ordered list of raw dependency requests, in the order they were pushed."""

    def __init__(self, requests: Optional[List[str]] = None):
        self._requests: List[str] = []
        self._freed = False
        for text in requests or []:
            self.push(text)

    def push(self, text: str) -> None:
        """Append a request; syntax is only checked when the queue is compiled."""
        self._requests.append(str(text))

    def free(self) -> None:
        """Release every request.  The queue must not be freed twice."""
        if self._freed:
            raise RuntimeError("request queue already released")
        self._requests.clear()
        self._freed = True

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._requests))

    def __len__(self) -> int:
        return len(self._requests)

    def __bool__(self) -> bool:
        return bool(self._requests)
