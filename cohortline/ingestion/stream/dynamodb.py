"""DynamoDB Streams implementation of ChangeStream.

Uses the boto3 ``dynamodbstreams`` client. Blocking calls run in a worker
thread via ``asyncio.to_thread``. Cursors are DynamoDB shard iterators.
"""

import asyncio
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from cohortline.domain.enums import ChangeKind
from cohortline.errors import CursorExpiredError, StreamUnavailableError
from cohortline.ingestion.stream.interface import (
    ChangeRecord,
    ChangeStream,
    PullResult,
    StartPosition,
)
from cohortline.observability.logging import get_logger

logger = get_logger(__name__)

# get_records errors after which the iterator can never be used again
_EXPIRED_CODES = frozenset({
    "ExpiredIteratorException",
    "TrimmedDataAccessException",
    "ResourceNotFoundException",
})


def _error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


class DynamoDbChangeStream(ChangeStream):
    """Change stream of a DynamoDB table.

    The stream ARN of each table is resolved through ``list_streams`` and
    cached; the first stream listed is the live one.
    """

    def __init__(self, client: Any) -> None:
        """Initialize with a boto3 ``dynamodbstreams`` client."""
        self._client = client
        self._stream_arns: dict[str, str] = {}

    async def _stream_arn(self, table_name: str, refresh: bool = False) -> str:
        if not refresh and table_name in self._stream_arns:
            return self._stream_arns[table_name]

        try:
            response = await asyncio.to_thread(self._client.list_streams, TableName=table_name)
        except ClientError as e:
            raise StreamUnavailableError(f"Cannot list streams for {table_name}: {e}") from e
        except BotoCoreError as e:
            raise StreamUnavailableError(f"Cannot list streams for {table_name}: {e}") from e

        streams = response.get("Streams", [])
        if not streams:
            raise StreamUnavailableError(f"No streams found for table {table_name}")

        arn = streams[0]["StreamArn"]
        if self._stream_arns.get(table_name) != arn:
            logger.info("stream_resolved", table_name=table_name, stream_arn=arn)
        self._stream_arns[table_name] = arn
        return arn

    async def list_shards(self, table_name: str) -> list[str]:
        arn = await self._stream_arn(table_name, refresh=True)

        shard_ids: list[str] = []
        start_shard_id: str | None = None
        while True:
            kwargs: dict[str, Any] = {"StreamArn": arn}
            if start_shard_id:
                kwargs["ExclusiveStartShardId"] = start_shard_id
            try:
                response = await asyncio.to_thread(self._client.describe_stream, **kwargs)
            except (BotoCoreError, ClientError) as e:
                raise StreamUnavailableError(f"Cannot describe stream {arn}: {e}") from e

            description = response.get("StreamDescription", {})
            shard_ids.extend(shard["ShardId"] for shard in description.get("Shards", []))
            start_shard_id = description.get("LastEvaluatedShardId")
            if not start_shard_id:
                return shard_ids

    async def get_cursor(
        self,
        table_name: str,
        shard_id: str,
        position: StartPosition = StartPosition.TRIM_HORIZON,
    ) -> str:
        arn = await self._stream_arn(table_name)
        try:
            response = await asyncio.to_thread(
                self._client.get_shard_iterator,
                StreamArn=arn,
                ShardId=shard_id,
                ShardIteratorType=position.value,
            )
        except (BotoCoreError, ClientError) as e:
            raise StreamUnavailableError(
                f"Cannot get iterator for shard {shard_id}: {e}", shard_id=shard_id
            ) from e
        return response["ShardIterator"]

    async def pull(self, cursor: str, limit: int) -> PullResult:
        try:
            response = await asyncio.to_thread(
                self._client.get_records, ShardIterator=cursor, Limit=limit
            )
        except ClientError as e:
            if _error_code(e) in _EXPIRED_CODES:
                raise CursorExpiredError(f"Shard iterator unusable: {e}") from e
            raise StreamUnavailableError(f"Cannot read records: {e}") from e
        except BotoCoreError as e:
            raise StreamUnavailableError(f"Cannot read records: {e}") from e

        records = [self._to_record(raw) for raw in response.get("Records", [])]
        return PullResult(records=records, next_cursor=response.get("NextShardIterator"))

    @staticmethod
    def _to_record(raw: dict[str, Any]) -> ChangeRecord:
        data = raw.get("dynamodb") or {}
        return ChangeRecord(
            change_kind=ChangeKind.from_event_name(raw.get("eventName", "")),
            post_image=data.get("NewImage"),
            sequence_number=data.get("SequenceNumber"),
        )
