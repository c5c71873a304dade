#  Latam Site - AI Chat Proxy Tests
#
#  Tests for the upstream request shape and failure mapping, with the shared
#  httpx client mocked.
#
#  Depends on: latam_site/services/ai_chat.py
#  Used by:    pytest

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from latam_site.exceptions import DeliveryError
from latam_site.services.ai_chat import EMPTY_ANSWER, AIChatService

URL = "https://router.example/v1/chat/completions"


def _response(payload, status=200):
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload
    return resp


@pytest.fixture
def http_client():
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def service(http_client):
    return AIChatService(http_client, token="hf_test", url=URL, model="test-model", timeout=3.0)


class TestComplete:
    async def test_returns_first_choice(self, service, http_client):
        http_client.post.return_value = _response(
            {"choices": [{"message": {"content": "Claro, te ayudo."}}]}
        )
        assert await service.complete("Hola") == "Claro, te ayudo."

        args, kwargs = http_client.post.call_args
        assert args[0] == URL
        assert kwargs["headers"]["Authorization"] == "Bearer hf_test"
        assert kwargs["json"] == {
            "model": "test-model",
            "messages": [{"role": "user", "content": "Hola"}],
        }
        assert kwargs["timeout"] == 3.0

    async def test_missing_choices_gives_placeholder(self, service, http_client):
        http_client.post.return_value = _response({"error": "model overloaded"}, status=503)
        assert await service.complete("Hola") == EMPTY_ANSWER

    async def test_empty_content_gives_placeholder(self, service, http_client):
        http_client.post.return_value = _response({"choices": [{"message": {"content": ""}}]})
        assert await service.complete("Hola") == EMPTY_ANSWER

    async def test_timeout_raises_delivery_error(self, service, http_client):
        http_client.post.side_effect = httpx.ReadTimeout("slow")
        with pytest.raises(DeliveryError):
            await service.complete("Hola")

    async def test_connect_error_raises_delivery_error(self, service, http_client):
        http_client.post.side_effect = httpx.ConnectError("refused")
        with pytest.raises(DeliveryError):
            await service.complete("Hola")

    async def test_non_json_body_raises_delivery_error(self, service, http_client):
        resp = _response(None)
        resp.json.side_effect = ValueError("not json")
        http_client.post.return_value = resp
        with pytest.raises(DeliveryError):
            await service.complete("Hola")
