from datetime import datetime, timezone

import httpx
import pytest

from kintai_pulse.errors import SourceUnavailable
from kintai_pulse.slack_client import SlackApiError, SlackChannelSource, SlackClient, to_raw_message


def client_with(handler):
    return SlackClient("xoxb-test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_batch_passes_cursor_and_maps_messages():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "ok": True,
                "messages": [
                    {"type": "message", "user": "U_A", "text": ":zangyo:", "ts": "1711962000.000200"},
                    {"type": "message", "bot_id": "B_1", "text": "deploy done", "ts": "1711961000.000100"},
                ],
            },
        )

    client = client_with(handler)
    source = SlackChannelSource(client, "C123")
    batch = await source.fetch_batch("1711963000.000000", 50)
    await client.close()

    request = seen[0]
    assert request.url.path == "/api/conversations.history"
    assert request.url.params["channel"] == "C123"
    assert request.url.params["latest"] == "1711963000.000000"
    assert request.url.params["limit"] == "50"
    assert request.url.params["inclusive"] == "false"
    assert request.headers["Authorization"] == "Bearer xoxb-test"

    assert [m.id for m in batch] == ["1711962000.000200", "1711961000.000100"]
    assert [m.author for m in batch] == ["U_A", "B_1"]
    assert batch[0].created_at == datetime(2024, 4, 1, 9, 0, 0, 200, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_first_page_has_no_latest():
    def handler(request: httpx.Request) -> httpx.Response:
        assert "latest" not in request.url.params
        return httpx.Response(200, json={"ok": True, "messages": []})

    client = client_with(handler)
    assert await SlackChannelSource(client, "C123").fetch_batch(None, 100) == []
    await client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"ok": False, "error": "channel_not_found"}),
        httpx.Response(429, headers={"Retry-After": "1"}),
        httpx.Response(200, content=b"<html>oops</html>"),
    ],
)
async def test_failures_surface_as_source_unavailable(response):
    client = client_with(lambda request: response)

    with pytest.raises(SourceUnavailable) as excinfo:
        await client.fetch_history_page("C123")
    await client.close()

    assert isinstance(excinfo.value, SlackApiError)
    assert excinfo.value.method == "conversations.history"


@pytest.mark.asyncio
async def test_transport_errors_are_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = client_with(handler)
    with pytest.raises(SlackApiError):
        await client.fetch_history_page("C123")
    await client.close()


def test_to_raw_message_without_author():
    raw = to_raw_message({"text": "joined", "ts": "0.5"})
    assert raw.author == ""
    assert raw.created_at.tzinfo is not None
