"""Package catalog: the set of package definitions a session can resolve.

A catalog file is YAML or JSON::

    packages:
      gtk+-3.0:
        version: "3.24.38"
        description: GTK graphical user interface library
        requires: "gdk-3.0, atk >= 2.15.1, pango >= 1.41.0"
        requires_private: "wayland-client >= 1.14.91"
      libjpeg-turbo:
        version: "2.1.5"
        provides: "libjpeg = 8"
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional

import yaml

from .errors import AtomParseError, CatalogError
from .parser import iter_atoms, parse_atom

logger = logging.getLogger(__name__)

_LIST_FIELDS = ("requires", "requires_private", "provides", "conflicts")


@dataclass
class PackageDefinition:
    """Raw metadata for one package; dependency fields are unparsed atom text."""
    name: str
    version: Optional[str] = None
    description: Optional[str] = None
    requires: str = ""
    requires_private: str = ""
    provides: str = ""
    conflicts: str = ""

    def provided_names(self) -> List[str]:
        """Names this package answers to besides its own."""
        return [atom[0] for atom in iter_atoms(self.provides)]


def _as_atom_text(value: Any, field_name: str, pkg_name: str) -> str:
    """Accept either an atom string or a list of atom strings."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    raise CatalogError(f"{pkg_name}: '{field_name}' must be a string or a list, got {type(value).__name__}")


class PackageCatalog:
    """Name-indexed package definitions."""

    def __init__(self, definitions: Optional[Mapping[str, Any]] = None):
        self._packages: Dict[str, PackageDefinition] = {}
        for name, data in (definitions or {}).items():
            self.add(self._build_definition(name, data))

    @staticmethod
    def _build_definition(name: str, data: Any) -> PackageDefinition:
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise CatalogError(f"{name}: package entry must be a mapping")
        version = data.get("version")
        fields = {f: _as_atom_text(data.get(f), f, name) for f in _LIST_FIELDS}
        return PackageDefinition(
            name=str(name),
            version=str(version) if version is not None else None,
            description=data.get("description"),
            **fields,
        )

    def add(self, definition: PackageDefinition) -> None:
        """Register a definition; a later definition replaces an earlier one."""
        try:
            atom = parse_atom(definition.name)
        except AtomParseError as exc:
            raise CatalogError(f"invalid package name {definition.name!r}: {exc}") from exc
        if atom[0] != definition.name:
            raise CatalogError(f"invalid package name {definition.name!r}")
        if definition.name in self._packages:
            logger.debug("Replacing catalog entry for %s", definition.name)
        self._packages[definition.name] = definition

    def lookup(self, name: str) -> Optional[PackageDefinition]:
        """Return the definition carrying exactly ``name``."""
        return self._packages.get(name)

    def providers(self, name: str) -> List[PackageDefinition]:
        """Return definitions that provide ``name`` as a virtual alias, in catalog order."""
        return [d for d in self._packages.values() if name in d.provided_names()]

    def __contains__(self, name: str) -> bool:
        return name in self._packages

    def __iter__(self) -> Iterator[PackageDefinition]:
        return iter(self._packages.values())

    def __len__(self) -> int:
        return len(self._packages)

    @classmethod
    def from_file(cls, path: str) -> "PackageCatalog":
        """Load a catalog from a YAML (.yml/.yaml) or JSON file.

        Raises:
            CatalogError: if the file is missing, unreadable or malformed.
        """
        if not os.path.isfile(path):
            raise CatalogError(f"Catalog file not found: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.lower().endswith(".json"):
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise CatalogError(f"Failed to read catalog {path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise CatalogError(f"Catalog {path} must contain a mapping")
        packages = data.get("packages") or {}
        if not isinstance(packages, Mapping):
            raise CatalogError(f"Catalog {path}: 'packages' must be a mapping")

        catalog = cls(packages)
        logger.info("Loaded %d package definitions from %s", len(catalog), path)
        return catalog
