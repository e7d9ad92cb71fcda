"""
Pytest fixtures for Poker Coach tests.

External services are replaced by an httpx.MockTransport that answers
classifier and analysis requests from scripted queues.
"""

import json

import httpx
import pytest

from ..config import Settings
from ..engine.controller import StageController
from ..analysis.analyzer import HandAnalyzer
from ..host.mock import MockHostSession
from ..session.registry import Session
from ..vision.detector import CardDetector
from ..vision.photo_cache import PhotoCache


CLASSIFIER_URL = "https://classifier.test/playing-cards-ow27d/4"
ANALYSIS_URL = "https://analysis.test/v1/chat/completions"
PUBLIC_URL = "http://coach.test"


class FakeBackend:
    """
    Scripted classifier + analysis service.

    Unqueued classifier requests see an empty table; unqueued analysis
    requests get a 50% reply.
    """

    def __init__(self):
        self.detections: list[httpx.Response] = []
        self.analyses: list[httpx.Response] = []
        self.classifier_requests: list[httpx.Request] = []
        self.analysis_requests: list[dict] = []

    def queue_cards(self, *labels: str):
        predictions = [{"class": label, "confidence": 0.9} for label in labels]
        self.detections.append(httpx.Response(200, json={"predictions": predictions}))

    def queue_classifier_response(self, response: httpx.Response):
        self.detections.append(response)

    def queue_analysis(self, win_probability=50, tip="Play it safe.", content=None):
        if content is None:
            content = json.dumps({"win_probability": win_probability, "tip": tip})
        self.analyses.append(httpx.Response(200, json={
            "choices": [{"message": {"role": "assistant", "content": content}}],
        }))

    def queue_analysis_response(self, response: httpx.Response):
        self.analyses.append(response)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "classifier.test":
            self.classifier_requests.append(request)
            if self.detections:
                return self.detections.pop(0)
            return httpx.Response(200, json={"predictions": []})

        if request.url.host == "analysis.test":
            self.analysis_requests.append(json.loads(request.content))
            if self.analyses:
                return self.analyses.pop(0)
            content = json.dumps({"win_probability": 50, "tip": "Play it safe."})
            return httpx.Response(200, json={
                "choices": [{"message": {"role": "assistant", "content": content}}],
            })

        return httpx.Response(404, json={"error": "unknown host"})


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def http_client(backend) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(backend))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        package_name="com.example.pokercoach",
        mentraos_api_key="mentra-key",
        openai_api_key="openai-key",
        roboflow_api_key="roboflow-key",
        port=3000,
        public_url=PUBLIC_URL,
        analysis_url=ANALYSIS_URL,
        roboflow_model_url=CLASSIFIER_URL,
        chime_url="",
    )


@pytest.fixture
def photo_cache() -> PhotoCache:
    return PhotoCache()


@pytest.fixture
def detector(http_client) -> CardDetector:
    return CardDetector(
        api_key="roboflow-key",
        public_url=PUBLIC_URL,
        model_url=CLASSIFIER_URL,
        client=http_client,
    )


@pytest.fixture
def analyzer(http_client) -> HandAnalyzer:
    return HandAnalyzer(
        api_key="openai-key",
        model="o3-mini",
        url=ANALYSIS_URL,
        client=http_client,
    )


@pytest.fixture
def controller(detector, analyzer, photo_cache) -> StageController:
    return StageController(
        detector=detector,
        analyzer=analyzer,
        photo_cache=photo_cache,
    )


@pytest.fixture
def host() -> MockHostSession:
    return MockHostSession()


@pytest.fixture
def session(host) -> Session:
    return Session(session_id="session-1", user_id="user-1", host=host)
