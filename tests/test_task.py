import asyncio

import pytest

from wordcrawler.crawler.job import CrawlJobSpec
from wordcrawler.crawler.state import CrawlState
from wordcrawler.crawler.task import CrawlContext, CrawlTask
from wordcrawler.utils.monitoring import CrawlMetrics

from fakes import FakeClock, FakeFetcher, page


def _run(url, depth, *, deadline=100.0, clock=None, state=None, fetcher=None, ignored=()):
    metrics = CrawlMetrics()
    state = state or CrawlState()
    fetcher = fetcher or FakeFetcher({url: page({"word": 1})})

    async def scenario():
        context = CrawlContext(
            job=CrawlJobSpec.create(ignored_urls=ignored, max_depth=depth),
            state=state,
            fetcher=fetcher,
            limiter=asyncio.Semaphore(1),
            clock=clock or FakeClock(0.0),
            metrics=metrics,
        )
        await CrawlTask(url, depth, deadline, context).run()

    asyncio.run(scenario())
    return state, fetcher, metrics.snapshot()


@pytest.mark.parametrize("kwargs, reason", [
    ({"depth": 0}, "depth"),
    ({"depth": 1, "clock": FakeClock(101.0)}, "deadline"),
    ({"depth": 1, "ignored": [r"http://a"]}, "ignored"),
])
def test_short_circuits_before_claiming(kwargs, reason):
    state, fetcher, snapshot = _run("http://a", **kwargs)

    assert state.visited_count() == 0
    assert not fetcher.calls
    assert snapshot[f"skipped_{reason}"] == 1


def test_depth_is_checked_before_deadline():
    _, _, snapshot = _run("http://a", 0, clock=FakeClock(500.0))

    assert snapshot["skipped_depth"] == 1
    assert snapshot["skipped_deadline"] == 0


def test_deadline_equal_to_now_still_runs():
    state, _, _ = _run("http://a", 1, deadline=5.0, clock=FakeClock(5.0))

    assert state.visited_count() == 1


def test_already_claimed_url_is_not_fetched():
    state = CrawlState()
    state.claim("http://a")

    _, fetcher, snapshot = _run("http://a", 1, state=state)

    assert not fetcher.calls
    assert snapshot["skipped_duplicate"] == 1


def test_children_get_one_less_depth():
    fetcher = FakeFetcher({
        "http://a": page({"a": 1}, "http://b"),
        "http://b": page({"b": 1}, "http://c"),
        "http://c": page({"c": 1}),
    })

    state, _, snapshot = _run("http://a", 2, fetcher=fetcher)

    assert state.snapshot_counts() == {"a": 1, "b": 1}
    assert snapshot["skipped_depth"] == 1
    assert snapshot["pages_fetched"] == 2
