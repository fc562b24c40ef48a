"""Tests for the statistics aggregator."""
import asyncio
import itertools
import random

import pytest

from review_leaderboard.application.aggregator import StatsAggregator, accumulate
from review_leaderboard.application.streams import Stream
from review_leaderboard.domain.models import StatsDelta


DELTAS = [
    StatsDelta.for_pull_request("alice"),
    StatsDelta.for_review("bob", "looks good"),
    StatsDelta.for_comment("bob", "fix this"),
    StatsDelta.for_comment("bob", "a\nb"),
    StatsDelta.for_pull_request("bob"),
    StatsDelta.for_comment("carol", ""),
]


def _rows(totals):
    return {user: stats.as_row() for user, stats in totals.items()}


def test_accumulate_sums_per_user():
    totals = accumulate(DELTAS)

    assert _rows(totals) == {
        "alice": ("alice", 1, 0, 0, 0),
        "bob": ("bob", 1, 1, 2, 4),
        "carol": ("carol", 0, 0, 1, 1),
    }


def test_accumulate_is_order_independent():
    expected = _rows(accumulate(DELTAS))

    for permutation in itertools.permutations(DELTAS):
        assert _rows(accumulate(permutation)) == expected


def test_accumulate_continues_existing_totals():
    totals = accumulate(DELTAS[:2])
    accumulate(DELTAS[2:], totals)

    assert _rows(totals) == _rows(accumulate(DELTAS))


@pytest.mark.asyncio
async def test_aggregate_drains_stream_fed_by_concurrent_producers():
    """Many producers and a small stream still deliver every delta exactly once."""
    stream = Stream(capacity=2)
    deltas = DELTAS * 20
    random.Random(7).shuffle(deltas)

    async def produce(chunk):
        for delta in chunk:
            await stream.put(delta)

    async def produce_all():
        await asyncio.gather(*(produce(deltas[i::5]) for i in range(5)))
        await stream.close()

    _, totals = await asyncio.gather(produce_all(), StatsAggregator().aggregate(stream))

    assert _rows(totals) == _rows(accumulate(deltas))
    assert totals["bob"].comments == 40


@pytest.mark.asyncio
async def test_aggregate_empty_stream():
    stream = Stream()
    await stream.close()

    assert await StatsAggregator().aggregate(stream) == {}


@pytest.mark.asyncio
async def test_put_after_close_is_rejected():
    stream = Stream()
    await stream.close()

    assert stream.closed
    with pytest.raises(RuntimeError):
        await stream.put(StatsDelta.for_pull_request("alice"))
