"""Selection by an explicit list of identifiers."""

from __future__ import annotations

from collections.abc import Iterable

from typtest.query.errors import MissingTestsError
from typtest.query.values import QueryTest


class ExactFilter:
    """Select tests whose identifier is one of *identifiers*."""

    def __init__(self, identifiers: Iterable[str]) -> None:
        self.identifiers = frozenset(identifiers)

    def apply(self, universe: Iterable[QueryTest]) -> frozenset[QueryTest]:
        """Return the named tests.

        Raises:
            MissingTestsError: Listing every identifier not in *universe*.
        """
        by_id = {t.identifier: t for t in universe}
        missing = self.identifiers - by_id.keys()
        if missing:
            raise MissingTestsError(missing)
        return frozenset(by_id[i] for i in self.identifiers)
