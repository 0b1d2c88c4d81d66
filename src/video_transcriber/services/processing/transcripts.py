from __future__ import annotations

import logging
from typing import List

from src.video_transcriber.domain.models.transcript import TranscriptMessage
from src.video_transcriber.infra.symbl.client import SymblClient

logger = logging.getLogger("processing")


class TranscriptFetcher:
    def __init__(self, client: SymblClient) -> None:
        self._client = client

    async def fetch(self, conversation_id: str, token: str) -> List[TranscriptMessage]:
        """Retrieve the conversation's messages in the order the service returns them."""

        if not conversation_id:
            raise ValueError("A conversation id is required to fetch a transcript")
        messages = await self._client.get_messages(conversation_id, token)
        logger.info("Fetched %d messages for conversation %s", len(messages), conversation_id)
        return messages
