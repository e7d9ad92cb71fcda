"""
Hand Analyzer - Win probability and coaching tip from the analysis model.

The analyzer:
1. Labels the stage from the board size
2. Builds the user message for the hand
3. Sends the whole accumulated context plus that message
4. Validates the reply (chat completion whose content is a JSON object)
5. Commits the exchange to the context and clamps the probability

Nothing is written to the context unless every step succeeds.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
import json
import logging

import httpx
from pydantic import BaseModel, ValidationError

from ..errors import AnalysisError
from .prompts import hand_summary, stage_label

if TYPE_CHECKING:
    from ..engine.context import ConversationContext

logger = logging.getLogger(__name__)


# =============================================================================
# Wire schemas
# =============================================================================

class ChatMessage(BaseModel):
    role: str = "assistant"
    content: str


class ChatChoice(BaseModel):
    message: ChatMessage


class ChatCompletion(BaseModel):
    """The part of a chat completion response the analyzer reads."""
    choices: list[ChatChoice]


class AnalysisReply(BaseModel):
    """JSON object the model is instructed to return."""
    win_probability: float
    tip: str


# =============================================================================
# Analyzer
# =============================================================================

@dataclass(frozen=True)
class HandAnalysis:
    """Result of one analysis call."""
    stage: str
    win_probability: float  # Clamped to [0, 100]
    tip: str


def clamp_probability(value: float) -> float:
    return max(0.0, min(100.0, value))


def _strip_code_fence(content: str) -> str:
    text = content.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


class HandAnalyzer:
    """
    Client for the chat-completions analysis endpoint.

    Usage:
        analyzer = HandAnalyzer(api_key, model="o3-mini")
        analysis = await analyzer.analyze(["AH", "KS"], [], context)
        print(analysis.win_probability, analysis.tip)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "o3-mini",
        url: str = "https://api.openai.com/v1/chat/completions",
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.model = model
        self.url = url
        self._client = client
        # Read budget is the analyze step's, not the 5s httpx default
        self.timeout = httpx.Timeout(timeout, connect=5.0)

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout)

    async def analyze(
        self,
        hole: list[str],
        board: list[str],
        context: ConversationContext,
    ) -> HandAnalysis:
        """
        Analyze the hand and record the exchange in the context.

        Raises:
            AnalysisError: Unsupported board size, HTTP failure, or a reply
                that is not the expected JSON object
        """
        stage = stage_label(board)
        if stage is None:
            raise AnalysisError(f"Unsupported board size: {len(board)}")

        user_content = hand_summary(hole, board)
        payload = {
            "model": self.model,
            "messages": context.with_pending(user_content),
        }
        logger.debug("Analysis payload: %s", json.dumps(payload, indent=2))

        content = await self._complete(payload)
        reply = self._parse_reply(content)

        context.commit_exchange(user_content, content)

        return HandAnalysis(
            stage=stage,
            win_probability=clamp_probability(reply.win_probability),
            tip=reply.tip,
        )

    async def _complete(self, payload: dict) -> str:
        """POST the payload and return the first choice's content."""
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload, headers=headers)
            else:
                async with self._new_client() as client:
                    response = await client.post(self.url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise AnalysisError(f"Analysis request failed: {e}") from e

        if not response.is_success:
            logger.error(
                "Analysis error %s %s: %s",
                response.status_code, response.reason_phrase, response.text,
            )
            raise AnalysisError(
                f"Analysis API error: {response.status_code} {response.reason_phrase}"
            )

        try:
            completion = ChatCompletion.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise AnalysisError(f"Malformed analysis response: {e}") from e

        if not completion.choices:
            raise AnalysisError("Analysis response has no choices")
        return completion.choices[0].message.content.strip()

    def _parse_reply(self, content: str) -> AnalysisReply:
        try:
            data = json.loads(_strip_code_fence(content))
        except json.JSONDecodeError as e:
            logger.error("Analysis reply is not JSON: %s", content)
            raise AnalysisError(f"Failed to parse analysis reply as JSON: {content}") from e

        try:
            return AnalysisReply.model_validate(data)
        except ValidationError as e:
            raise AnalysisError(f"Analysis reply has the wrong shape: {content}") from e
