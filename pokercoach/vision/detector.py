"""
Card Detector - Playing-card recognition via a hosted classifier.

The classifier fetches the photo itself from a URL we serve, and answers
with a list of predictions. A card is usually detected once per visible
corner, so labels are deduplicated keeping the first occurrence.
"""

from __future__ import annotations
from typing import Optional
import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import DetectionError

logger = logging.getLogger(__name__)


class Prediction(BaseModel):
    """One bounding-box prediction."""
    model_config = ConfigDict(extra="allow")

    label: str = Field(alias="class")
    confidence: Optional[float] = None
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = None
    height: Optional[float] = None


class DetectionResponse(BaseModel):
    model_config = ConfigDict(extra="allow")

    predictions: list[Prediction]


def unique_labels(predictions: list[Prediction]) -> list[str]:
    """Labels in first-seen order, duplicates dropped."""
    seen: set[str] = set()
    labels: list[str] = []
    for prediction in predictions:
        if prediction.label not in seen:
            seen.add(prediction.label)
            labels.append(prediction.label)
    return labels


class CardDetector:
    """
    Client for the hosted card classifier.

    Usage:
        detector = CardDetector(api_key, public_url="https://coach.example.com")
        labels = await detector.detect(detector.photo_url(photo.request_id))
    """

    def __init__(
        self,
        api_key: str,
        public_url: str,
        model_url: str = "https://pokerclass.roboflow.cloud/playing-cards-ow27d/4",
        client: httpx.AsyncClient | None = None,
        timeout: float = 20.0,
    ):
        self.api_key = api_key
        self.public_url = public_url.rstrip("/")
        self.model_url = model_url
        self._client = client
        self.timeout = httpx.Timeout(timeout, connect=5.0)

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout)

    def photo_url(self, request_id: str) -> str:
        """URL at which the classifier can fetch a cached photo."""
        return f"{self.public_url}/api/photo/{request_id}"

    async def detect(self, image_url: str) -> list[str]:
        """
        Classify the photo at image_url.

        Returns:
            Deduplicated card labels in first-occurrence order

        Raises:
            DetectionError: Non-2xx response, transport failure, or a body
                that is not a list of labelled predictions
        """
        params = {"api_key": self.api_key, "image": image_url}
        logger.info("Classifier request: %s?image=%s", self.model_url, image_url)

        try:
            if self._client is not None:
                response = await self._client.get(self.model_url, params=params)
            else:
                async with self._new_client() as client:
                    response = await client.get(self.model_url, params=params)
        except httpx.HTTPError as e:
            raise DetectionError(f"Classifier request failed: {e}") from e

        if not response.is_success:
            raise DetectionError(
                f"Classifier API error: {response.status_code} "
                f"{response.reason_phrase} - {response.text}"
            )

        try:
            body = response.json()
        except ValueError as e:
            raise DetectionError("Classifier response is not JSON") from e
        logger.debug("Classifier response: %s", body)

        try:
            parsed = DetectionResponse.model_validate(body)
        except ValidationError as e:
            raise DetectionError(f"Malformed classifier response: {e}") from e

        return unique_labels(parsed.predictions)
