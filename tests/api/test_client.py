import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils
from pydantic import ValidationError

from songshelf.api.client import MetadataClient
from songshelf.api.models import VideoInfo
from songshelf.core.errors import MetadataError
from songshelf.core.settings import Settings

GOOD_BODY = {
    "title": "Never Gonna Give You Up",
    "audioUrl": "https://cdn.example.com/a.mp3",
    "coverUrl": "https://cdn.example.com/c.jpg",
    "views": 123,
}


async def info_handler(request: web.Request) -> web.Response:
    source_id = request.query.get("id")
    if source_id == "good":
        return web.json_response(GOOD_BODY)
    if source_id == "not_json":
        return web.Response(text="<html>oops</html>", content_type="text/html")
    if source_id == "list":
        return web.json_response([GOOD_BODY])
    if source_id == "missing":
        return web.json_response({"title": "Only a title"})
    if source_id == "blank":
        return web.json_response({**GOOD_BODY, "title": "  "})
    if source_id == "undecodable":
        return web.Response(body=b'{"title": "\xff\xfe bad"}', content_type="application/json")
    return web.json_response({"error": "boom"}, status=500)


@pytest_asyncio.fixture
async def metadata_server():
    app = web.Application()
    app.router.add_get("/info", info_handler)
    server = test_utils.TestServer(app)
    await server.start_server()
    yield server
    await server.close()


@pytest_asyncio.fixture
async def client(metadata_server, tmp_path):
    settings = Settings(data_root=tmp_path / "data", metadata_base_url=str(metadata_server.make_url("/")))
    async with MetadataClient(settings) as metadata_client:
        yield metadata_client


def test_video_info_ignores_extra_fields():
    info = VideoInfo(**GOOD_BODY)
    assert info.title == GOOD_BODY["title"]
    assert not hasattr(info, "views")


def test_video_info_rejects_blank_fields():
    with pytest.raises(ValidationError):
        VideoInfo(title="t", audioUrl="", coverUrl="https://c")


@pytest.mark.asyncio
async def test_get_info(client):
    info = await client.get_info("good")
    assert info.title == GOOD_BODY["title"]
    assert info.audioUrl == GOOD_BODY["audioUrl"]
    assert info.coverUrl == GOOD_BODY["coverUrl"]


@pytest.mark.asyncio
async def test_get_info_http_error(client):
    with pytest.raises(MetadataError) as exc_info:
        await client.get_info("server_error")
    assert exc_info.value.detail == "Metadata error: HTTP 500"


@pytest.mark.asyncio
@pytest.mark.parametrize("source_id", ["not_json", "list", "missing", "blank", "undecodable"])
async def test_get_info_unparseable(client, source_id):
    with pytest.raises(MetadataError) as exc_info:
        await client.get_info(source_id)
    assert exc_info.value.detail == "Failed to parse metadata"


@pytest.mark.asyncio
async def test_get_info_connection_error(tmp_path):
    settings = Settings(data_root=tmp_path / "data", metadata_base_url="http://127.0.0.1:1")
    async with MetadataClient(settings) as metadata_client:
        with pytest.raises(MetadataError) as exc_info:
            await metadata_client.get_info("good")
    assert exc_info.value.detail.startswith("Metadata error")


@pytest.mark.asyncio
async def test_close_keeps_shared_session(tmp_path):
    settings = Settings(data_root=tmp_path / "data")
    async with aiohttp.ClientSession() as session:
        metadata_client = MetadataClient(settings, session=session)
        await metadata_client.close()
        assert not session.closed
