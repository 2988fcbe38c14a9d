"""In-memory ChangeStream for tests and local runs."""

from collections.abc import Mapping
from typing import Any

from cohortline.domain.enums import ChangeKind
from cohortline.errors import CursorExpiredError, StreamUnavailableError
from cohortline.ingestion.stream.interface import (
    ChangeRecord,
    ChangeStream,
    PullResult,
    StartPosition,
)


class _Shard:
    def __init__(self) -> None:
        self.records: list[ChangeRecord] = []
        self.closed = False
        # Records below this offset have been trimmed away
        self.trimmed = 0


class InMemoryChangeStream(ChangeStream):
    """Shards are append-only lists; a cursor is ``{shard_id}:{offset}``.

    Tables become visible through ``enable_stream``, which lets tests
    reproduce the start-up race where the consumer looks for the stream
    before the table exists.
    """

    def __init__(self) -> None:
        self._tables: dict[str, dict[str, _Shard]] = {}
        self._sequence = 0

    def enable_stream(self, table_name: str, shard_ids: tuple[str, ...] = ("shard-0",)) -> None:
        shards = self._tables.setdefault(table_name, {})
        for shard_id in shard_ids:
            shards.setdefault(shard_id, _Shard())

    def add_shard(self, table_name: str, shard_id: str) -> None:
        self._shards(table_name).setdefault(shard_id, _Shard())

    def close_shard(self, table_name: str, shard_id: str) -> None:
        self._shards(table_name)[shard_id].closed = True

    def drop_shard(self, table_name: str, shard_id: str) -> None:
        """Remove a shard entirely, as retention does to old closed shards."""
        self._shards(table_name).pop(shard_id, None)

    def trim(self, table_name: str, shard_id: str, offset: int) -> None:
        """Drop access to records before ``offset``."""
        self._shards(table_name)[shard_id].trimmed = offset

    def append(
        self,
        table_name: str,
        change_kind: ChangeKind | None,
        post_image: Mapping[str, Any] | None,
        shard_id: str | None = None,
    ) -> ChangeRecord:
        """Append a change to ``shard_id`` (default: the last open shard)."""
        shards = self._shards(table_name)
        if shard_id is None:
            open_ids = [sid for sid, shard in shards.items() if not shard.closed]
            if not open_ids:
                raise StreamUnavailableError(f"No open shard for table {table_name}")
            shard_id = open_ids[-1]

        self._sequence += 1
        record = ChangeRecord(
            change_kind=change_kind,
            post_image=dict(post_image) if post_image is not None else None,
            sequence_number=str(self._sequence),
        )
        shards[shard_id].records.append(record)
        return record

    def _shards(self, table_name: str) -> dict[str, _Shard]:
        shards = self._tables.get(table_name)
        if shards is None:
            raise StreamUnavailableError(f"No stream for table {table_name}")
        return shards

    def _locate(self, shard_id: str) -> _Shard:
        for shards in self._tables.values():
            if shard_id in shards:
                return shards[shard_id]
        raise CursorExpiredError(f"Unknown shard: {shard_id}", shard_id=shard_id)

    async def list_shards(self, table_name: str) -> list[str]:
        return list(self._shards(table_name))

    async def get_cursor(
        self,
        table_name: str,
        shard_id: str,
        position: StartPosition = StartPosition.TRIM_HORIZON,
    ) -> str:
        shards = self._shards(table_name)
        shard = shards.get(shard_id)
        if shard is None:
            raise StreamUnavailableError(f"Unknown shard: {shard_id}", shard_id=shard_id)
        offset = shard.trimmed if position is StartPosition.TRIM_HORIZON else len(shard.records)
        return f"{shard_id}:{offset}"

    async def pull(self, cursor: str, limit: int) -> PullResult:
        shard_id, _, raw_offset = cursor.rpartition(":")
        shard = self._locate(shard_id)
        offset = int(raw_offset)
        if offset < shard.trimmed:
            raise CursorExpiredError(f"Cursor {cursor} points at trimmed data", shard_id=shard_id)

        records = shard.records[offset : offset + limit]
        next_offset = offset + len(records)
        if shard.closed and next_offset >= len(shard.records):
            return PullResult(records=records, next_cursor=None)
        return PullResult(records=records, next_cursor=f"{shard_id}:{next_offset}")
