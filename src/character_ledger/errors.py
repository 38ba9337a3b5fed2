"""
Error taxonomy for character ledgers and personality profiles.

Every error is raised synchronously from the operation that detected it.
Nothing is retried: all operations are deterministic, so the same input
produces the same failure.

    LedgerError
    ├── ConfigurationError    invalid static definitions (catalogs, facets)
    ├── UnknownDimension      bad dimension id at read/write time
    ├── UnknownFacet          bad facet id on a profile lookup
    ├── InvalidDecay          negative or non-numeric decay amount
    ├── DeserializationError  malformed persisted snapshot
    └── MissingLegacyManager  legacy adapter called without a manager
"""

from typing import Any, Iterable, List


class LedgerError(Exception):
    """Base class for all character ledger errors."""
    pass


class ConfigurationError(LedgerError, ValueError):
    """
    Static configuration failed validation.

    Carries every violated rule, not just the first one found.
    """
    def __init__(self, violations: Iterable[str]):
        self.violations: List[str] = list(violations)
        if len(self.violations) == 1:
            message = self.violations[0]
        else:
            lines = "\n".join(f"  - {v}" for v in self.violations)
            message = f"{len(self.violations)} configuration errors:\n{lines}"
        super().__init__(message)


class UnknownDimension(LedgerError, KeyError):
    """A dimension id is not part of the ledger's catalog."""
    def __init__(self, dimension_id: Any, label: str = "dimension"):
        self.dimension_id = dimension_id
        self.label = label
        super().__init__(dimension_id)

    def __str__(self) -> str:
        return f"{self.label.capitalize()} '{self.dimension_id}' not found"


class UnknownFacet(LedgerError, KeyError):
    """A facet id is not present in the requested facet collection."""
    def __init__(self, facet_id: Any, kind: str):
        self.facet_id = facet_id
        self.kind = kind
        super().__init__(facet_id)

    def __str__(self) -> str:
        return f"Facet '{self.facet_id}' not found in {self.kind}"


class InvalidDecay(LedgerError, ValueError):
    """A decay amount is negative, non-numeric or not finite."""
    def __init__(self, dimension_id: Any, amount: Any):
        self.dimension_id = dimension_id
        self.amount = amount
        super().__init__(
            f"Decay amount for '{dimension_id}' must be a non-negative number, got {amount!r}"
        )


class DeserializationError(LedgerError, ValueError):
    """A persisted snapshot could not be reconstructed."""
    pass


class MissingLegacyManager(LedgerError, ValueError):
    """The legacy adapter was handed no manager."""
    def __init__(self, manager_name: str):
        self.manager_name = manager_name
        super().__init__(f"{manager_name} is required")
