import asyncio

import pytest

from core.batch_runner import iter_batch, partition, resolve_max_concurrency, run_batch
from model.checklist import ChecklistItemDefinition
from model.verification import Evidence, VerificationResult


def _items(n):
    return [ChecklistItemDefinition(id=i, description=f"Item {i}") for i in range(1, n + 1)]


def _ok(item, status="verified"):
    return VerificationResult(itemId=item.id, status=status, evidence=Evidence(text="ok"))


class Tracker:
    """Dispatch stub that records how many calls overlap."""

    def __init__(self, delays=None):
        self.in_flight = 0
        self.peak = 0
        self.started = []
        self.delays = delays or {}

    async def __call__(self, item):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        self.started.append(item.id)
        try:
            await asyncio.sleep(self.delays.get(item.id, 0.01))
            return _ok(item)
        finally:
            self.in_flight -= 1


class TestResolveMaxConcurrency:

    @pytest.mark.parametrize(
        "raw,expected",
        [(None, 5), ("", 5), ("abc", 5), ("0", 5), ("-3", 5), (0, 5), ("3", 3), (7, 7), (" 2 ", 2)],
    )
    def test_values(self, raw, expected):
        assert resolve_max_concurrency(raw) == expected

    def test_custom_default(self):
        assert resolve_max_concurrency("nope", default=2) == 2


class TestPartition:

    def test_last_slice_is_shorter(self):
        assert partition([1, 2, 3, 4, 5, 6, 7], 3) == [[1, 2, 3], [4, 5, 6], [7]]

    def test_empty(self):
        assert partition([], 4) == []

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            partition([1], 0)


class TestRunBatch:

    @pytest.mark.asyncio
    async def test_results_keep_input_order(self):
        items = _items(6)
        # Later items finish first inside each slice.
        tracker = Tracker(delays={1: 0.05, 2: 0.03, 3: 0.01, 4: 0.05, 5: 0.03, 6: 0.01})
        results = await run_batch(items, 3, tracker)
        assert [r.itemId for r in results] == [1, 2, 3, 4, 5, 6]

    @pytest.mark.asyncio
    async def test_in_flight_never_exceeds_cap(self):
        tracker = Tracker()
        results = await run_batch(_items(12), 5, tracker)
        assert len(results) == 12
        assert tracker.peak == 5

    @pytest.mark.asyncio
    async def test_single_slot_is_sequential(self):
        tracker = Tracker()
        await run_batch(_items(4), 1, tracker)
        assert tracker.peak == 1
        assert tracker.started == [1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self):
        async def dispatch(item):
            if item.id == 3:
                raise RuntimeError("socket closed")
            return _ok(item)

        results = await run_batch(_items(5), 5, dispatch)
        assert [r.status for r in results] == ["verified", "verified", "failed", "verified", "verified"]
        failed = results[2]
        assert failed.itemId == 3
        assert failed.reason == "Processing failed"
        assert failed.evidence.text == "API error"
        assert failed.evidence.confidence == 0.0

    @pytest.mark.asyncio
    async def test_empty_input(self):
        tracker = Tracker()
        assert await run_batch([], 5, tracker) == []
        assert tracker.started == []

    @pytest.mark.asyncio
    async def test_should_continue_stops_between_slices(self):
        tracker = Tracker()
        checks = iter([True, False])
        results = await run_batch(_items(6), 2, tracker, should_continue=lambda: next(checks))
        assert [r.itemId for r in results] == [1, 2]
        assert tracker.started == [1, 2]


class TestIterBatch:

    @pytest.mark.asyncio
    async def test_completion_order_within_slice(self):
        tracker = Tracker(delays={1: 0.05, 2: 0.01, 3: 0.03})
        seen = [r.itemId async for r in iter_batch(_items(3), 3, tracker)]
        assert seen == [2, 3, 1]

    @pytest.mark.asyncio
    async def test_slices_do_not_overlap(self):
        items = _items(5)
        # Item 1 is slow; item 3 must still wait for it.
        tracker = Tracker(delays={1: 0.08, 2: 0.01, 3: 0.01, 4: 0.01, 5: 0.01})
        seen = []
        async for r in iter_batch(items, 2, tracker):
            seen.append(r.itemId)
            if r.itemId == 2:
                assert 3 not in tracker.started
        assert seen[:2] == [2, 1]
        assert sorted(seen[2:4]) == [3, 4]
        assert seen[4] == 5
        assert tracker.peak == 2

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self):
        async def dispatch(item):
            if item.id == 2:
                raise ValueError("bad reply")
            return _ok(item)

        results = {r.itemId: r async for r in iter_batch(_items(3), 3, dispatch)}
        assert results[2].status == "failed"
        assert results[1].status == results[3].status == "verified"

    @pytest.mark.asyncio
    async def test_should_continue_false_yields_nothing(self):
        tracker = Tracker()
        seen = [r async for r in iter_batch(_items(3), 2, tracker, should_continue=lambda: False)]
        assert seen == []
        assert tracker.started == []
