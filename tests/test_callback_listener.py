try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import asyncio

import httpx
import pytest

from aps_mcp.api.callback import create_callback_app
from aps_mcp.core.errors import (
    CallbackStateError,
    InteractiveLoginError,
    LoginTimeoutError,
    OAuthTokenExchangeError,
)
from aps_mcp.services.callback_listener import OAuthCallbackListener


class DummyExchanger:
    def __init__(self, fail: bool = False) -> None:
        self.codes: list[str] = []
        self.fail = fail

    async def __call__(self, code: str) -> str:
        self.codes.append(code)
        if self.fail:
            raise OAuthTokenExchangeError(400, '{"error": "invalid_grant"}')
        return f"access-for-{code}"


def _listener(exchanger: DummyExchanger, verify_state=None) -> OAuthCallbackListener:
    return OAuthCallbackListener(
        host="127.0.0.1", port=0, exchange_code=exchanger, verify_state=verify_state
    )


def _client(listener: OAuthCallbackListener) -> httpx.AsyncClient:
    transport = httpx.ASGITransport(app=create_callback_app(listener))
    return httpx.AsyncClient(transport=transport, base_url="http://localhost")


@pytest.mark.asyncio
async def test_error_callback_is_escaped_and_only_first_request_counts() -> None:
    exchanger = DummyExchanger()
    listener = _listener(exchanger)

    async with _client(listener) as client:
        first = await client.get(
            "/callback",
            params={"error": "access_denied", "error_description": "<script>alert(1)</script>"},
        )
        second = await client.get("/callback", params={"code": "late"})
        other = await client.get("/favicon.ico")

    assert first.status_code == 400
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in first.text
    assert "<script>" not in first.text
    assert second.status_code == 409
    assert other.status_code == 404
    assert exchanger.codes == []


@pytest.mark.asyncio
async def test_missing_code_is_rejected() -> None:
    listener = _listener(DummyExchanger())

    async with _client(listener) as client:
        response = await client.get("/callback")

    assert response.status_code == 400
    assert "No authorization code" in response.text


@pytest.mark.asyncio
async def test_state_mismatch_skips_the_exchange() -> None:
    exchanger = DummyExchanger()

    def verify_state(state):
        if state != "expected":
            raise CallbackStateError("OAuth state does not belong to this login attempt.")

    listener = _listener(exchanger, verify_state)

    async with _client(listener) as client:
        response = await client.get("/callback", params={"code": "abc", "state": "forged"})

    assert response.status_code == 400
    assert "does not belong" in response.text
    assert exchanger.codes == []


@pytest.mark.asyncio
async def test_failed_exchange_returns_bad_gateway() -> None:
    listener = _listener(DummyExchanger(fail=True))

    async with _client(listener) as client:
        response = await client.get("/callback", params={"code": "abc"})

    assert response.status_code == 502
    assert "Token exchange failed" in response.text
    assert "&quot;invalid_grant&quot;" in response.text


@pytest.mark.asyncio
async def test_run_returns_token_from_first_callback() -> None:
    exchanger = DummyExchanger()
    listener = _listener(exchanger)
    responses: list[asyncio.Task] = []

    def on_ready(redirect_uri: str) -> None:
        assert redirect_uri == f"http://localhost:{listener.port}/callback"

        async def _visit() -> httpx.Response:
            async with httpx.AsyncClient() as client:
                return await client.get(
                    f"http://127.0.0.1:{listener.port}/callback", params={"code": "xyz"}
                )

        responses.append(asyncio.create_task(_visit()))

    token = await listener.run(on_ready, timeout=5)

    assert token == "access-for-xyz"
    assert listener.port != 0
    response = await responses[0]
    assert response.status_code == 200
    assert "Authentication complete" in response.text


@pytest.mark.asyncio
async def test_run_raises_with_escaped_provider_error() -> None:
    listener = _listener(DummyExchanger())
    visits: list[asyncio.Task] = []

    def on_ready(redirect_uri: str) -> None:
        async def _visit() -> httpx.Response:
            async with httpx.AsyncClient() as client:
                return await client.get(
                    f"http://127.0.0.1:{listener.port}/callback",
                    params={"error": "access_denied", "error_description": "<b>nope</b>"},
                )

        visits.append(asyncio.create_task(_visit()))

    with pytest.raises(InteractiveLoginError) as excinfo:
        await listener.run(on_ready, timeout=5)

    assert "access_denied" in str(excinfo.value)
    assert "&lt;b&gt;nope&lt;/b&gt;" in str(excinfo.value)
    await asyncio.gather(*visits, return_exceptions=True)


@pytest.mark.asyncio
async def test_run_times_out_without_callback() -> None:
    listener = _listener(DummyExchanger())

    with pytest.raises(LoginTimeoutError, match="Timed out"):
        await listener.run(lambda _: None, timeout=0.05)


class BrokenExchanger:
    async def __call__(self, code: str) -> str:
        raise OSError(28, "No space left on device")


@pytest.mark.asyncio
async def test_unexpected_exchange_failure_rejects_login_immediately() -> None:
    listener = _listener(BrokenExchanger())
    visits: list[asyncio.Task] = []

    def on_ready(redirect_uri: str) -> None:
        async def _visit() -> httpx.Response:
            async with httpx.AsyncClient() as client:
                return await client.get(
                    f"http://127.0.0.1:{listener.port}/callback", params={"code": "abc"}
                )

        visits.append(asyncio.create_task(_visit()))

    with pytest.raises(InteractiveLoginError, match="No space left on device") as excinfo:
        await listener.run(on_ready, timeout=5)

    assert not isinstance(excinfo.value, LoginTimeoutError)
    assert isinstance(excinfo.value.__cause__, OSError)
    response = await visits[0]
    assert response.status_code == 500
    assert "Login could not be completed" in response.text
