"""Tests for the Cosmos DB emulator pre-flight check."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx

from inspection_desk.health import check_emulator


def _settings(endpoint: str) -> MagicMock:
    settings = MagicMock()
    settings.cosmos.endpoint = endpoint
    return settings


def _client(get: AsyncMock) -> MagicMock:
    client = MagicMock()
    client.get = get
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


async def test_missing_endpoint_fails():
    """Test that an unset endpoint fails the check."""
    assert await check_emulator(_settings("")) is False


async def test_remote_endpoint_is_not_probed():
    """Test that https endpoints are trusted without a request."""
    with patch("inspection_desk.health.httpx.AsyncClient") as client_cls:
        assert await check_emulator(_settings("https://acct.documents.azure.com:443/")) is True
    client_cls.assert_not_called()


async def test_local_emulator_reachable():
    """Test that a reachable emulator passes."""
    get = AsyncMock()
    with patch("inspection_desk.health.httpx.AsyncClient", return_value=_client(get)):
        assert await check_emulator(_settings("http://localhost:8081/")) is True
    get.assert_awaited_once_with("http://localhost:8081/")


async def test_local_emulator_unreachable():
    """Test that a connection error fails the check."""
    get = AsyncMock(side_effect=httpx.ConnectError("refused"))
    with patch("inspection_desk.health.httpx.AsyncClient", return_value=_client(get)):
        assert await check_emulator(_settings("http://localhost:8081")) is False
