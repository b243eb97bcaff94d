# core/batch_runner.py
import asyncio
from typing import AsyncIterator, Awaitable, Callable, List, Optional, Sequence, TypeVar
from core.evidence_normalizer import failed_result
from model.checklist import ChecklistItemDefinition
from model.verification import VerificationResult
from util.constants import DEFAULT_MAX_CONCURRENCY
from util.functions import parse_positive_int
import logging
from util.timing import timed

logger = logging.getLogger(__name__)

T = TypeVar("T")
Dispatch = Callable[[ChecklistItemDefinition], Awaitable[VerificationResult]]
ShouldContinue = Callable[[], bool]

SLICE_FAILURE_REASON = "Processing failed"


def resolve_max_concurrency(raw: object, default: int = DEFAULT_MAX_CONCURRENCY) -> int:
    """Configured cap, or `default` for non-numeric / non-positive input."""
    n = parse_positive_int(raw, default)
    if n == default and str(raw).strip() != str(default):
        logger.warning("batch.concurrency.invalid raw=%r using=%d", raw, default)
    return n


def partition(items: Sequence[T], size: int) -> List[List[T]]:
    """Consecutive slices of `size`; the last one may be shorter."""
    if size <= 0:
        raise ValueError("slice size must be positive")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


async def _guarded(
    dispatch: Dispatch, item: ChecklistItemDefinition
) -> VerificationResult:
    # Second line of containment: dispatchers are expected not to raise.
    try:
        return await dispatch(item)
    except Exception as e:
        logger.error("batch.item.escaped item=%s err=%s", item.id, type(e).__name__)
        return failed_result(item.id, SLICE_FAILURE_REASON, text="API error")


async def run_batch(
    items: Sequence[ChecklistItemDefinition],
    max_concurrency: int,
    dispatch: Dispatch,
    should_continue: Optional[ShouldContinue] = None,
) -> List[VerificationResult]:
    """
    Collect-all variant. Each slice runs fully in parallel and is awaited as a
    whole before the next one starts, so at most `max_concurrency` dispatch
    calls are ever in flight. Results come back in input order.
    """
    slices = partition(items, max_concurrency)
    results: List[VerificationResult] = []
    with timed(logger, "batch.run", items=len(items), slices=len(slices)):
        for n, chunk in enumerate(slices):
            if should_continue is not None and not should_continue():
                logger.warning("batch.stopped slice=%d of=%d", n, len(slices))
                break
            results.extend(
                await asyncio.gather(*(_guarded(dispatch, it) for it in chunk))
            )
    return results


async def iter_batch(
    items: Sequence[ChecklistItemDefinition],
    max_concurrency: int,
    dispatch: Dispatch,
    should_continue: Optional[ShouldContinue] = None,
) -> AsyncIterator[VerificationResult]:
    """
    Streaming variant of run_batch: same slices and barrier, but each result
    is yielded as soon as it settles. Within a slice order is completion
    order; slices never overlap.
    """
    slices = partition(items, max_concurrency)
    for n, chunk in enumerate(slices):
        if should_continue is not None and not should_continue():
            logger.warning("batch.stopped slice=%d of=%d", n, len(slices))
            return
        tasks = [asyncio.create_task(_guarded(dispatch, it)) for it in chunk]
        with timed(logger, "batch.slice", slice=n, size=len(chunk)):
            for fut in asyncio.as_completed(tasks):
                yield await fut
