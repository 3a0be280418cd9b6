from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils

from songshelf.core.errors import FetchError
from songshelf.core.fetcher import AssetFetcher

PAYLOAD = bytes(range(256)) * 1024


async def payload_handler(request: web.Request) -> web.Response:
    return web.Response(body=PAYLOAD, content_type="application/octet-stream")


async def missing_handler(request: web.Request) -> web.Response:
    return web.Response(status=404, text="not found")


@pytest_asyncio.fixture
async def asset_server():
    app = web.Application()
    app.router.add_get("/audio.mp3", payload_handler)
    app.router.add_get("/missing.jpg", missing_handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    yield server
    await server.close()


@pytest_asyncio.fixture
async def fetcher(settings):
    async with AssetFetcher(settings) as asset_fetcher:
        yield asset_fetcher


@pytest.mark.parametrize("url,expected", [
    ("https://cdn.example.com/a.mp3", True),
    ("http://cdn.example.com/a.mp3", True),
    ("ftp://cdn.example.com/a.mp3", False),
    ("/relative/a.mp3", False),
    ("", False),
])
def test_is_fetchable(url, expected):
    assert AssetFetcher.is_fetchable(url) is expected


@pytest.mark.asyncio
async def test_fetch_writes_destination(fetcher, asset_server, tmp_path):
    destination = tmp_path / "audio"
    progress = []

    async def on_progress(downloaded, total):
        progress.append((downloaded, total))

    result = await fetcher.fetch(str(asset_server.make_url("/audio.mp3")), destination, on_progress)

    assert result == destination
    assert destination.read_bytes() == PAYLOAD
    assert not (tmp_path / "audio.part").exists()
    assert progress
    assert progress[-1] == (len(PAYLOAD), len(PAYLOAD))
    assert all(a[0] < b[0] for a, b in zip(progress, progress[1:]))


@pytest.mark.asyncio
async def test_fetch_http_error(fetcher, asset_server, tmp_path):
    destination = tmp_path / "cover"
    with pytest.raises(FetchError) as exc_info:
        await fetcher.fetch(str(asset_server.make_url("/missing.jpg")), destination)
    assert "404" in exc_info.value.detail
    assert not destination.exists()
    assert not (tmp_path / "cover.part").exists()


@pytest.mark.asyncio
async def test_fetch_invalid_url(fetcher, tmp_path):
    with pytest.raises(FetchError):
        await fetcher.fetch("not-a-url", tmp_path / "x")


@pytest.mark.asyncio
async def test_fetch_connection_error(fetcher, tmp_path):
    with pytest.raises(FetchError):
        await fetcher.fetch("http://127.0.0.1:1/a.mp3", tmp_path / "x")
    assert not (tmp_path / "x.part").exists()


@pytest.mark.asyncio
async def test_fetch_incomplete_body(settings, tmp_path):
    async def chunks(size):
        yield b"x" * 10

    response = MagicMock()
    response.status = 200
    response.headers = {"Content-Length": "100"}
    response.content.iter_chunked = chunks
    request_cm = MagicMock()
    request_cm.__aenter__ = AsyncMock(return_value=response)
    request_cm.__aexit__ = AsyncMock(return_value=False)
    session = MagicMock()
    session.closed = False
    session.get.return_value = request_cm

    fetcher = AssetFetcher(settings, session=session)
    destination = tmp_path / "audio"
    with pytest.raises(FetchError) as exc_info:
        await fetcher.fetch("https://cdn.example.com/a.mp3", destination)

    assert "Incomplete download" in exc_info.value.detail
    assert not destination.exists()
    assert not (tmp_path / "audio.part").exists()
    await fetcher.close()
    session.close.assert_not_called()
