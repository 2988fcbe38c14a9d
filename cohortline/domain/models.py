"""Value types for customers, membership facts and stream positions."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cohortline.domain.enums import CohortType, UserType


class Customer(BaseModel):
    """Snapshot of a customer record as last observed.

    Instances are immutable. Every update received from the queue or the
    change stream produces a new snapshot; classification always starts
    from the snapshot, never from earlier state.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    customer_id: str = Field(alias="customerId", min_length=1)
    daily_spend: float | None = Field(default=None, alias="dailySpend")
    user_type: UserType | None = Field(default=None, alias="userType")

    @field_validator("customer_id")
    @classmethod
    def _strip_customer_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("customer_id must not be blank")
        return stripped


class MembershipFact(BaseModel):
    """A persisted (customer, cohort type) association."""

    model_config = ConfigDict(frozen=True)

    customer_id: str
    cohort_type: CohortType


class ShardCursor(BaseModel):
    """Read position within one change-stream shard.

    ``position`` is opaque; only the stream adapter that issued it can
    interpret it. A ``None`` position means the shard is closed and fully
    consumed.
    """

    shard_id: str
    position: str | None
