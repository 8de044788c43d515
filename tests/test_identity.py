# Tests for integrations/identity.py
# Created: 2026-10-10

import base64
import json

import httpx

from notebookchat.integrations.identity import (
    USERINFO_URL,
    USERINFO_V3_URL,
    IdentityResolver,
    decode_token_claims,
)


def _signed_token(claims) -> str:
    payload = base64.urlsafe_b64encode(json.dumps(claims).encode()).rstrip(b"=").decode()
    return f"header.{payload}.signature"


def _resolver(handler, calls=None):
    def _recording(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(str(request.url))
        return handler(request)

    return IdentityResolver(transport=httpx.MockTransport(_recording))


class TestDecodeTokenClaims:
    def test_decodes_unpadded_payload(self):
        token = _signed_token({"email": "me@example.com", "sub": "42"})
        assert decode_token_claims(token) == {"email": "me@example.com", "sub": "42"}

    def test_opaque_token(self):
        assert decode_token_claims("ya29.opaque-access-token") is None

    def test_too_many_parts(self):
        assert decode_token_claims("a.b.c.d") is None

    def test_garbage_payload(self):
        assert decode_token_claims("a.!!!not-base64!!!.c") is None

    def test_non_object_payload(self):
        assert decode_token_claims(_signed_token([1, 2, 3])) is None


async def test_resolve_from_userinfo():
    resolver = _resolver(lambda r: httpx.Response(200, json={"email": "me@example.com"}))
    assert await resolver.resolve("tok") == "me@example.com"


async def test_resolve_userinfo_name_when_no_email():
    resolver = _resolver(lambda r: httpx.Response(200, json={"name": "Ada"}))
    assert await resolver.resolve("tok") == "Ada"


async def test_resolve_sends_bearer_token():
    seen = []

    def handler(request):
        seen.append(request.headers["Authorization"])
        return httpx.Response(200, json={"email": "me@example.com"})

    await _resolver(handler).resolve("tok-123")
    assert seen == ["Bearer tok-123"]


async def test_resolve_falls_back_to_token_claims():
    calls = []
    resolver = _resolver(lambda r: httpx.Response(401), calls)
    token = _signed_token({"sub": "1234567890"})

    assert await resolver.resolve(token) == "1234567890"
    # v3 is not consulted once the claims yield a label
    assert calls == [USERINFO_URL]


async def test_resolve_falls_back_to_userinfo_v3():
    def handler(request):
        if str(request.url) == USERINFO_V3_URL:
            return httpx.Response(200, json={"email": "v3@example.com"})
        return httpx.Response(500)

    assert await _resolver(handler).resolve("opaque") == "v3@example.com"


async def test_resolve_unknown_when_everything_fails():
    assert await _resolver(lambda r: httpx.Response(403)).resolve("opaque") == "Unknown"


async def test_resolve_never_raises_on_network_error():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    assert await _resolver(handler).resolve("opaque") == "Unknown"


async def test_resolve_ignores_non_json_body():
    resolver = _resolver(lambda r: httpx.Response(200, text="<html>"))
    assert await resolver.resolve("opaque") == "Unknown"


async def test_resolve_skips_non_string_claims():
    resolver = _resolver(lambda r: httpx.Response(401))
    token = _signed_token({"sub": 12345, "email": None, "name": "Ada"})
    assert await resolver.resolve(token) == "Ada"


async def test_resolve_skips_non_string_userinfo_fields():
    def handler(request):
        if str(request.url) == USERINFO_V3_URL:
            return httpx.Response(200, json={"email": "v3@example.com"})
        return httpx.Response(200, json={"email": {"value": "x"}, "name": 7})

    assert await _resolver(handler).resolve("opaque") == "v3@example.com"


async def test_resolve_unknown_when_only_non_string_fields():
    resolver = _resolver(lambda r: httpx.Response(200, json={"email": ["a"], "name": True}))
    assert await resolver.resolve("opaque") == "Unknown"
