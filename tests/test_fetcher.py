import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from wordcrawler.crawler.fetcher import FetchError, PageFetcher

INDEX = """
<html><body>
  <p>crawl the web crawl</p>
  <a href="/next">next</a>
</body></html>
"""


def _app():
    async def index(request):
        return web.Response(text=INDEX, content_type="text/html")

    async def missing(request):
        raise web.HTTPNotFound()

    async def image(request):
        return web.Response(body=b"\x89PNG", content_type="image/png")

    async def empty(request):
        return web.Response(status=204, content_type="text/html")

    app = web.Application()
    app.router.add_get("/", index)
    app.router.add_get("/missing", missing)
    app.router.add_get("/image.png", image)
    app.router.add_get("/empty", empty)
    return app


async def _fetch_from_server(path):
    async with test_utils.TestServer(_app()) as server:
        url = str(server.make_url(path))
        async with PageFetcher(parse_workers=2) as fetcher:
            return url, await fetcher.fetch(url)


def test_fetch_http_page():
    url, contribution = asyncio.run(_fetch_from_server("/"))

    assert contribution.word_counts == {"crawl": 2, "the": 1, "web": 1, "next": 1}
    assert contribution.links == [url + "next"]


@pytest.mark.parametrize("path", ["/missing", "/image.png", "/empty"])
def test_http_failures_raise_fetch_error(path):
    with pytest.raises(FetchError):
        asyncio.run(_fetch_from_server(path))


def test_fetch_file_url(tmp_path):
    index = tmp_path / "index.html"
    index.write_text('<html><body>local page <a href="other.html">other</a></body></html>')

    async def scenario():
        async with PageFetcher() as fetcher:
            return await fetcher.fetch(index.as_uri()), fetcher.get_stats()

    contribution, stats = asyncio.run(scenario())

    assert contribution.word_counts == {"local": 1, "page": 1, "other": 1}
    assert contribution.links == [(tmp_path / "other.html").as_uri()]
    assert stats["successful_requests"] == 1


def test_missing_file_raises_fetch_error(tmp_path):
    async def scenario():
        async with PageFetcher() as fetcher:
            await fetcher.fetch((tmp_path / "absent.html").as_uri())

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(scenario())

    assert "absent.html" in excinfo.value.url


def test_ignored_words_are_applied(tmp_path):
    index = tmp_path / "index.html"
    index.write_text("<html><body>keep drop keep</body></html>")

    async def scenario():
        async with PageFetcher(ignored_words=["drop"]) as fetcher:
            return await fetcher.fetch(index.as_uri())

    assert asyncio.run(scenario()).word_counts == {"keep": 2}


def test_fetch_requires_start():
    with pytest.raises(RuntimeError):
        asyncio.run(PageFetcher().fetch("http://example.com/"))


class _MalformedLengthResponse:
    headers = {"content-length": "abc"}
    charset = None


def test_malformed_content_length_raises_fetch_error():
    fetcher = PageFetcher()

    with pytest.raises(FetchError) as excinfo:
        asyncio.run(fetcher._read_content_safely("http://example.com/", _MalformedLengthResponse()))

    assert "content-length" in excinfo.value.reason
