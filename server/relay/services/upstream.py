from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from relay.core.settings import Settings
from relay.schemas.chat import ChatMessage, ChatResponse

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Any failure between sending the completion request and parsing its reply."""


@dataclass
class ChatRelay:
    settings: Settings
    http_client: httpx.AsyncClient

    def build_payload(self, messages: Optional[List[ChatMessage]]) -> Dict[str, Any]:
        return {
            "messages": (
                None if messages is None else [m.model_dump() for m in messages]
            ),
            "model": self.settings.upstream_model,
        }

    async def complete(self, messages: Optional[List[ChatMessage]]) -> ChatResponse:
        """
        Forward the messages to the completion API and parse its reply.

        The status code is not inspected: any body that arrives is parsed and
        relayed. Transport errors and unparseable bodies surface as
        UpstreamError; nothing is retried.
        """
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.open_api_key}",
        }

        try:
            resp = await self.http_client.post(
                self.settings.upstream_url,
                content=json.dumps(self.build_payload(messages)),
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Upstream request failed: {e}") from e

        try:
            return ChatResponse.model_validate_json(resp.content)
        except ValidationError as e:
            raise UpstreamError(f"Upstream response not understood: {e}") from e

    async def aclose(self) -> None:
        await self.http_client.aclose()


async def build_chat_relay(
    settings: Settings, http_client: httpx.AsyncClient | None = None
) -> ChatRelay:
    if http_client is None:
        http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.upstream_timeout_seconds)
        )
    logger.info(f"Relaying chat requests to {settings.upstream_url} ({settings.upstream_model})")
    return ChatRelay(settings=settings, http_client=http_client)
