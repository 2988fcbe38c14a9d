"""ChangeStream abstract interface.

A change stream is a shard-partitioned feed of row-level changes to the
customer table. Consumers read each shard through an opaque cursor that
advances with every pull.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cohortline.domain.enums import ChangeKind


class StartPosition(str, Enum):
    """Where a fresh cursor starts within a shard."""

    TRIM_HORIZON = "TRIM_HORIZON"
    LATEST = "LATEST"


@dataclass(frozen=True)
class ChangeRecord:
    """One row-level change.

    ``change_kind`` is None for event names the pipeline does not know.
    ``post_image`` is the row after the change, absent for removals.
    """

    change_kind: ChangeKind | None
    post_image: Mapping[str, Any] | None = None
    sequence_number: str | None = None


@dataclass(frozen=True)
class PullResult:
    """Records from one pull and the cursor to use next.

    ``next_cursor`` is None once a closed shard has been read to its end.
    """

    records: list[ChangeRecord] = field(default_factory=list)
    next_cursor: str | None = None


class ChangeStream(ABC):
    """Abstract interface for the customer table's change stream."""

    @abstractmethod
    async def list_shards(self, table_name: str) -> list[str]:
        """Shard ids of the table's live stream, parents before children.

        Raises:
            StreamUnavailableError: If the table or its stream is not visible
        """
        pass

    @abstractmethod
    async def get_cursor(
        self,
        table_name: str,
        shard_id: str,
        position: StartPosition = StartPosition.TRIM_HORIZON,
    ) -> str:
        """Obtain a fresh cursor for ``shard_id``.

        Raises:
            StreamUnavailableError: If the stream or shard is not visible
        """
        pass

    @abstractmethod
    async def pull(self, cursor: str, limit: int) -> PullResult:
        """Read up to ``limit`` records from the cursor's position.

        Raises:
            CursorExpiredError: If the cursor cannot be used any more
            StreamUnavailableError: If the stream is temporarily unreachable
        """
        pass
