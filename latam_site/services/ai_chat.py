#  Latam Site - AI Chat Proxy
#
#  Forwards a single-turn prompt to the Hugging Face router (OpenAI-style
#  chat completions) so the token never reaches the browser.
#
#  Depends on: config.py, exceptions.py
#  Used by:    container.py, routes/chat.py

import logging

import httpx

from latam_site.exceptions import DeliveryError

logger = logging.getLogger("latam_site.ai_chat")

EMPTY_ANSWER = "Error en la respuesta AI"
_UPSTREAM_FAILED = "Error al conectar con el servicio de IA"


class AIChatService:
    def __init__(self, http_client: httpx.AsyncClient, token: str, url: str,
                 model: str, timeout: float = 30.0):
        self._http = http_client
        self._token = token
        self._url = url
        self._model = model
        self._timeout = timeout

    async def complete(self, prompt: str) -> str:
        """Return the first choice's content, or EMPTY_ANSWER if there is none."""
        try:
            resp = await self._http.post(
                self._url,
                headers={
                    "Authorization": f"Bearer {self._token}",
                    "Content-Type": "application/json",
                },
                json={
                    "model": self._model,
                    "messages": [{"role": "user", "content": prompt}],
                },
                timeout=self._timeout,
            )
            data = resp.json()
        except httpx.TimeoutException:
            logger.error("AI chat upstream timed out after %.1fs", self._timeout)
            raise DeliveryError(_UPSTREAM_FAILED)
        except (httpx.HTTPError, ValueError) as e:
            logger.error("AI chat upstream failed: %s", e)
            raise DeliveryError(_UPSTREAM_FAILED) from e

        if resp.status_code >= 400:
            logger.warning("AI chat upstream returned HTTP %d", resp.status_code)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return EMPTY_ANSWER
        return content or EMPTY_ANSWER
