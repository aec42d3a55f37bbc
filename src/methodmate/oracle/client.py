from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Protocol

import httpx

from methodmate.errors import OracleTransportError
from methodmate.http import HttpClientFactory
from methodmate.oracle.responses import ResponseShape, is_refusal, normalize_response
from methodmate.settings import MethodMateSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OracleReply:
    text: str
    refused: bool = False
    shape: ResponseShape = "direct"


class Oracle(Protocol):
    """A text-analysis service: prompt in, free-form answer or refusal out.

    Implementations raise ``OracleTransportError`` on timeouts, network errors
    and non-2xx responses. A refusal is a normal reply with ``refused=True``.
    """

    async def ask(self, prompt: str, conversation_id: str | None = None) -> OracleReply: ...


def new_conversation_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class CozeOracle:
    """Coze bot chat client (``/open_api/v2/chat``, non-streaming).

    One instance per process; the underlying httpx client is shared.
    """

    def __init__(
        self,
        config: MethodMateSettings,
        *,
        bot_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._bot_id = bot_id or config.coze_bot_id
        self._user_id = config.coze_user_id
        headers = {"Accept": "application/json"}
        if config.coze_api_key:
            headers["Authorization"] = f"Bearer {config.coze_api_key}"
        self._client = HttpClientFactory.client(
            base_url=config.coze_api_url,
            headers=headers,
            timeout=config.oracle_timeout_ms / 1000,
            transport=transport,
        )

    async def aclose(self):
        await self._client.aclose()

    async def ask(self, prompt: str, conversation_id: str | None = None) -> OracleReply:
        body = {
            "bot_id": self._bot_id,
            "user": self._user_id,
            "query": prompt,
            "stream": False,
            "conversation_id": conversation_id or new_conversation_id("chat"),
        }
        try:
            r = await self._client.post("/open_api/v2/chat", json=body)
        except httpx.TimeoutException as e:
            raise OracleTransportError(f"oracle request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise OracleTransportError(f"oracle request failed: {e}") from e

        if r.status_code < 200 or r.status_code >= 300:
            raise OracleTransportError(
                f"oracle responded with status {r.status_code}", status_code=r.status_code
            )

        try:
            payload = r.json()
        except ValueError as e:
            raise OracleTransportError("oracle returned a non-JSON body", status_code=r.status_code) from e

        answer = normalize_response(payload)
        logger.debug("oracle answered (%s shape, %d chars)", answer.shape, len(answer.text))
        return OracleReply(text=answer.text, refused=is_refusal(answer.text), shape=answer.shape)
