import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, List, NamedTuple, Optional, Sequence

from dynamo_conditions.errors import ConditionalCheckFailedException
from dynamo_conditions.item_store import Item

logger = logging.getLogger(__name__)

COMMITTED = "committed"
REJECTED = "rejected"
FAILED = "failed"


class PutRequest(NamedTuple):
    item: Item
    attribute_not_exists: Optional[Sequence[str]] = None


@dataclass
class BatchResult:
    committed: int = 0
    rejected: int = 0
    failed: int = 0
    outcomes: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.committed + self.rejected + self.failed


def put_one(target: Any, request: PutRequest) -> str:
    """Run a single conditional put and classify its outcome.

    ``target`` is anything exposing ``put_item(item, attribute_not_exists)``.
    """
    try:
        target.put_item(request.item, request.attribute_not_exists)
        return COMMITTED
    except ConditionalCheckFailedException:
        return REJECTED


def put_items(target: Any, requests: Sequence[PutRequest], max_workers: int = 10) -> BatchResult:
    """Submit a batch of conditional puts in parallel.

    Outcomes are reported in request order. Unexpected errors are logged and
    counted as failed rather than aborting the batch.
    """
    result = BatchResult(outcomes=[FAILED] * len(requests))
    if not requests:
        return result

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(put_one, target, req): idx for idx, req in enumerate(requests)}
        for future in as_completed(futures):
            idx = futures[future]
            try:
                outcome = future.result()
            except Exception as e:
                logger.error(f"💥 Unhandled error for {requests[idx].item}: {e}")
                outcome = FAILED
            result.outcomes[idx] = outcome

    result.committed = result.outcomes.count(COMMITTED)
    result.rejected = result.outcomes.count(REJECTED)
    result.failed = result.outcomes.count(FAILED)
    logger.info(
        f"✅ Batch result: {result.committed} committed, {result.rejected} rejected, {result.failed} failed"
    )
    return result
