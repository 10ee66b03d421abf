"""Integration tests for the links forwarding pipeline."""

import json

import httpx
import pytest

from core.cors import OriginPolicy
from songlink.profiles import PROFILES
from tests.factories import LINKS_PAYLOAD, SPOTIFY_TRACK_ID, encode_body

pytestmark = pytest.mark.integration


@pytest.fixture
def payload_bytes():
    return json.dumps(LINKS_PAYLOAD, separators=(",", ":")).encode()


class TestLookupScenarios:
    @pytest.mark.asyncio
    async def test_platform_lookup_with_gzip_upstream(self, app_client, upstream, payload_bytes):
        upstream.respond(body=encode_body(payload_bytes, "gzip"), headers={"Content-Encoding": "gzip"})

        resp = await app_client.get(
            f"/api/links?platform=spotify&type=song&id={SPOTIFY_TRACK_ID}"
        )

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/json"
        assert resp.content == payload_bytes

        sent = upstream.requests[0]
        assert sent.url.host == "api.song.link"
        assert sent.url.path == "/v1-alpha.1/links"
        assert sent.url.params["platform"] == "spotify"
        assert sent.url.params["type"] == "song"
        assert sent.url.params["id"] == SPOTIFY_TRACK_ID
        assert "url" not in sent.url.params

    @pytest.mark.asyncio
    @pytest.mark.parametrize("encoding", ["br", "deflate"])
    async def test_other_encodings(self, app_client, upstream, payload_bytes, encoding):
        upstream.respond(body=encode_body(payload_bytes, encoding), headers={"Content-Encoding": encoding})
        resp = await app_client.get("/api/links?url=https://open.spotify.com/track/x")
        assert resp.status_code == 200
        assert resp.content == payload_bytes

    @pytest.mark.asyncio
    async def test_no_parameters(self, app_client, upstream):
        resp = await app_client.get("/api/links")

        assert resp.status_code == 400
        body = resp.json()
        assert body["status"] == 400
        assert "url" in body["error"]
        assert "platform" in body["error"]
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_connection_refused(self, app_client, upstream):
        upstream.fail(httpx.ConnectError("[Errno 111] Connection refused"))

        resp = await app_client.get("/api/links?url=https://open.spotify.com/track/x")

        assert resp.status_code == 502
        body = resp.json()
        assert body["status"] == 502
        assert body["error"].startswith("Failed to fetch from Songlink API: ")
        assert "Connection refused" in body["error"]


class TestOutboundRequest:
    @pytest.mark.asyncio
    async def test_url_mode_wins_and_omits_triple(self, app_client, upstream):
        await app_client.get(
            "/api/links?url=https://open.spotify.com/track/x&platform=deezer&type=song&id=1&key=abc"
        )
        params = upstream.requests[0].url.params
        assert params["url"] == "https://open.spotify.com/track/x"
        assert params["key"] == "abc"
        for name in ("platform", "type", "id"):
            assert name not in params

    @pytest.mark.asyncio
    async def test_mirror_url_normalized_before_forwarding(self, app_client, upstream):
        await app_client.get("/api/links", params={"url": "https://monochrome.tf/#/track/77646168"})
        assert upstream.requests[0].url.params["url"] == "https://listen.tidal.com/track/77646168"

    @pytest.mark.asyncio
    async def test_client_headers_not_forwarded(self, app_client, upstream):
        await app_client.get(
            "/api/links?url=https://x",
            headers={"User-Agent": "curl/8.0", "Accept-Language": "xx", "DNT": "7"},
        )
        headers = upstream.requests[0].headers
        profile = next(p for p in PROFILES if p.user_agent == headers["user-agent"])
        assert headers["accept"] == profile.accept
        assert headers["accept-language"] == profile.accept_language
        assert headers["accept-encoding"] == profile.accept_encoding
        assert headers["connection"] == profile.connection
        assert headers["dnt"] == profile.dnt


class TestUpstreamErrors:
    @pytest.mark.asyncio
    async def test_upstream_error_forwarded(self, app_client, upstream):
        body = json.dumps({"statusCode": 400, "code": "could_not_resolve_entity"}).encode()
        upstream.respond(status=400, body=body)

        resp = await app_client.get("/api/links?platform=spotify&type=album&id=nope")

        assert resp.status_code == 400
        assert resp.json() == {"error": "could_not_resolve_entity", "status": 400}

    @pytest.mark.asyncio
    async def test_compressed_upstream_error(self, app_client, upstream):
        body = json.dumps({"message": "Rate limited"}).encode()
        upstream.respond(status=429, body=encode_body(body, "gzip"), headers={"Content-Encoding": "gzip"})

        resp = await app_client.get("/api/links?url=https://x")

        assert resp.status_code == 429
        assert resp.json() == {"error": "Rate limited", "status": 429}

    @pytest.mark.asyncio
    async def test_corrupt_success_body(self, app_client, upstream):
        upstream.respond(body=b"not gzip at all", headers={"Content-Encoding": "gzip"})

        resp = await app_client.get("/api/links?url=https://x")

        assert resp.status_code == 502
        assert "decompress" in resp.json()["error"]

    @pytest.mark.asyncio
    async def test_corrupt_error_body_keeps_upstream_status(self, app_client, upstream):
        upstream.respond(status=503, body=b"garbage", headers={"Content-Encoding": "br"})

        resp = await app_client.get("/api/links?url=https://x")

        assert resp.status_code == 503
        assert resp.json() == {"error": "Songlink API returned status 503", "status": 503}


class TestCors:
    @pytest.fixture
    def set_policy(self):
        from main import app

        previous = app.state.origin_policy

        def _set(dev):
            app.state.origin_policy = OriginPolicy.for_mode(dev=dev)

        yield _set
        app.state.origin_policy = previous

    @pytest.mark.asyncio
    async def test_localhost_allowed_in_dev(self, app_client, upstream, set_policy):
        set_policy(dev=True)
        resp = await app_client.get("/api/links?url=https://x", headers={"Origin": "http://localhost:5173"})
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://localhost:5173"

    @pytest.mark.asyncio
    async def test_localhost_rejected_in_prod(self, app_client, upstream, set_policy):
        set_policy(dev=False)
        resp = await app_client.get("/api/links?url=https://x", headers={"Origin": "http://localhost:5173"})
        assert resp.status_code == 403
        assert resp.json() == {"error": "Origin not allowed", "status": 403}
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_monochrome_allowed_in_prod(self, app_client, upstream, set_policy):
        set_policy(dev=False)
        resp = await app_client.get("/api/links?url=https://x", headers={"Origin": "https://monochrome.tf"})
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "https://monochrome.tf"

    @pytest.mark.asyncio
    async def test_health_ignores_policy_and_upstream(self, app_client, upstream, set_policy):
        set_policy(dev=False)
        upstream.fail(httpx.ConnectError("down"))
        resp = await app_client.get("/health", headers={"Origin": "http://localhost:5173"})
        assert resp.status_code == 200
        assert resp.text == "OK"
