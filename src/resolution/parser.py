"""Dependency atom parsing.

Atoms follow the pkg-config ``Requires`` syntax: ``name [op version]``,
separated by commas and/or whitespace, e.g. ``"glib-2.0 >= 2.50, zlib"``.
"""

import logging
import re
from typing import Iterator, List, Optional, Tuple, Union

from .errors import AtomParseError
from .models import Comparator, Dependency, Package

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\s*(,|<=|>=|!=|==|[<>=!]|[^\s,<>=!]+)")
_OPERATORS = {"<", "<=", "=", "==", "!=", ">=", ">"}

Atom = Tuple[str, Comparator, Optional[str]]


def _tokenize(text: str) -> List[str]:
    return [m.group(1) for m in _TOKEN_RE.finditer(text or "")]


def _scan(text: str) -> Iterator[Union[Atom, AtomParseError]]:
    """Yield parsed atoms in text order, or an error for each malformed one."""
    name: Optional[str] = None
    op: Optional[str] = None
    skip_version = False

    for token in _tokenize(text):
        if token == ",":
            if op is not None:
                yield AtomParseError(f"'{name} {op}' is missing a version")
            elif name is not None:
                yield (name, Comparator.ANY, None)
            name, op, skip_version = None, None, False
        elif token == "!":
            yield AtomParseError(f"unknown operator '!' after '{name or ''}'")
            name, op, skip_version = None, None, True
        elif token in _OPERATORS:
            if name is None:
                yield AtomParseError(f"operator '{token}' without a package name")
            else:
                if op is not None:
                    yield AtomParseError(f"'{name} {op}' is followed by another operator '{token}'")
                    name, op = None, None
                else:
                    op = token
                    continue
            skip_version = True
        elif skip_version:
            # version belonging to an atom that was already rejected
            skip_version = False
        elif op is not None:
            yield (name, Comparator.from_operator(op), token)
            name, op = None, None
        else:
            if name is not None:
                yield (name, Comparator.ANY, None)
            name = token

    if op is not None:
        yield AtomParseError(f"'{name} {op}' is missing a version")
    elif name is not None:
        yield (name, Comparator.ANY, None)


def parse_atom(text: str) -> Atom:
    """Parse exactly one atom.

    Raises:
        AtomParseError: if ``text`` is malformed or holds zero or several atoms.
    """
    results = list(_scan(text))
    for result in results:
        if isinstance(result, AtomParseError):
            raise result
    if len(results) != 1:
        raise AtomParseError(f"expected one dependency atom, got {len(results)}: {text!r}")
    return results[0]  # type: ignore[return-value]


def parse_dependency_list(
    _session,
    owner: Optional[Package],
    target: List[Dependency],
    text: str,
    _flags: int = 0,
) -> int:
    """Append every atom in ``text`` to ``target``.

    Malformed atoms are logged and skipped.  The session and flags arguments
    keep the calling convention shared by the other collaborators; parsing
    itself does not touch them.

    Returns:
        Number of entries appended.
    """
    added = 0
    for result in _scan(text):
        if isinstance(result, AtomParseError):
            logger.warning(
                "Skipping malformed dependency in %s: %s",
                owner.id if owner is not None else "<request>",
                result,
            )
            continue
        name, compare, version = result
        target.append(Dependency(package=name, compare=compare, version=version, parent=owner))
        added += 1
    return added


def iter_atoms(text: str) -> Iterator[Atom]:
    """Yield the well-formed atoms of ``text``, silently ignoring the rest."""
    for result in _scan(text):
        if not isinstance(result, AtomParseError):
            yield result
