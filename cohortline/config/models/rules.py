"""Rule set configuration models."""

from pydantic import BaseModel, Field

from cohortline.domain.enums import CohortType


class RuleConfig(BaseModel):
    """One configured rule.

    Which fields matter depends on ``type``:

    - ``daily-spend``: ``max_threshold`` is the spend the customer must
      exceed (default 5000).
    - ``mid-spend``: ``cohort_type`` picks the assigned cohort (default
      NORMAL); PREMIUM additionally requires a PAID customer.
    - ``custom-rule``: ``cohort_type`` is required; each of
      ``min_threshold``, ``max_threshold`` and ``require_paid_user`` is
      checked only when set.
    """

    type: str = Field(description="Rule kind: daily-spend, mid-spend or custom-rule")
    cohort_type: CohortType | None = Field(default=None, description="Cohort assigned on match")
    min_threshold: float | None = Field(default=None, description="Lower spend bound")
    max_threshold: float | None = Field(default=None, description="Upper spend bound")
    require_paid_user: bool | None = Field(
        default=None,
        description="Only match PAID customers",
    )


class RulesConfig(BaseModel):
    """Rule set configuration.

    When ``enabled`` is false, or no configured entry yields a valid rule,
    the built-in defaults are used.
    """

    enabled: bool = Field(default=True, description="Use configured rules instead of defaults")
    configurations: list[RuleConfig] = Field(
        default_factory=list,
        description="Configured rules, evaluated in order",
    )
