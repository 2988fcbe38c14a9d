"""Rule value type."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from cohortline.domain.enums import CohortType
from cohortline.domain.models import Customer

Predicate = Callable[[Customer], bool]


@dataclass(frozen=True)
class Rule:
    """A named predicate over a customer and the cohort it assigns.

    Rules carry no mutable state, so one instance can be evaluated from
    any number of tasks or threads at once. ``params`` records the bounds
    and flags the rule was built with, for logging and introspection.
    """

    name: str
    cohort_type: CohortType
    predicate: Predicate = field(repr=False, compare=False)
    params: dict[str, Any] = field(default_factory=dict, compare=False)

    def evaluate(self, customer: Customer | None) -> bool:
        """Return whether ``customer`` belongs to this rule's cohort.

        A missing customer never matches.
        """
        if customer is None:
            return False
        return bool(self.predicate(customer))

    @property
    def cohort_id(self) -> str:
        """Identifier combining rule name and cohort, e.g. DailySpend_PREMIUM."""
        return f"{self.name}_{self.cohort_type.value}"
