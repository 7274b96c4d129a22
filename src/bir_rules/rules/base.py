"""Shared scaffolding for rule modules."""

from decimal import Decimal
from enum import Enum
from itertools import count
from typing import Callable, ClassVar


class RuleModuleId(str, Enum):
    """Closed set of rule modules, in pipeline order."""

    REGIME_DETERMINATION = "REGIME_DETERMINATION"
    TAX_COMPUTATION = "TAX_COMPUTATION"
    FILING_OBLIGATIONS = "FILING_OBLIGATIONS"
    DEADLINE_CALCULATION = "DEADLINE_CALCULATION"
    RISK_ASSESSMENT = "RISK_ASSESSMENT"


class RuleModule:
    """Identity shared by every rule module.

    Subclasses declare their identity as class attributes and implement an
    ``execute`` method. Rule modules hold no per-run state, so one instance
    can serve any number of concurrent assessments.
    """

    module_id: ClassVar[RuleModuleId]
    code: ClassVar[str]
    version: ClassVar[str] = "1.0.0"
    title: ClassVar[str]

    @property
    def explanation_id(self) -> str:
        """Key of this module version in the reasoning receipt."""
        return f"{self.module_id.value}_v{self.version}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self.module_id.value!r}, version={self.version!r})"


def id_sequence(prefix: str) -> Callable[[], str]:
    """Return a generator of ``PREFIX-1``, ``PREFIX-2``, ... scoped to one call."""
    counter = count(1)
    return lambda: f"{prefix}-{next(counter)}"


def format_peso(amount: Decimal) -> str:
    """Format a peso amount with thousands separators.

    Whole amounts drop the centavos: ``₱250,000``; others keep two
    places: ``₱1,234.50``.
    """
    if amount == amount.to_integral_value():
        return f"₱{amount:,.0f}"
    return f"₱{amount:,.2f}"
