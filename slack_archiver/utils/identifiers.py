"""
Identifier helpers

IdentifierSet collects the user / team ids a retrieval has to fetch, and
resolve() swaps an id for the entity it references during finalization.
"""

from typing import Iterable, Iterator, Mapping, TypeVar

from slack_archiver.integrations.slack.exceptions import IdNotFoundInMap

T = TypeVar("T")


class IdentifierSet:
    """
    Deduplicating collection of string identifiers.

    Equality ignores order, but iteration follows first insertion so the
    ids can be zipped positionally with results fetched from them.
    """

    def __init__(self, identifiers: Iterable[str] = ()):
        self._ids: dict[str, None] = {}
        self.update(identifiers)

    def add(self, identifier: str) -> None:
        self._ids.setdefault(identifier, None)

    def update(self, identifiers: Iterable[str]) -> None:
        for identifier in identifiers:
            self.add(identifier)

    def to_list(self) -> list[str]:
        return list(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, identifier: object) -> bool:
        return identifier in self._ids

    def __eq__(self, other: object) -> bool:
        if isinstance(other, IdentifierSet):
            return self._ids.keys() == other._ids.keys()
        if isinstance(other, (set, frozenset)):
            return self._ids.keys() == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"IdentifierSet({self.to_list()!r})"


def resolve(identifier: str, mapping: Mapping[str, T], error_cls: type[IdNotFoundInMap]) -> T:
    """Look up ``identifier`` in ``mapping`` or raise ``error_cls``."""
    try:
        return mapping[identifier]
    except KeyError:
        raise error_cls(identifier, list(mapping)) from None
