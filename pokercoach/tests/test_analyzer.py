"""
Tests for HandAnalyzer.

Tests:
- Probability clamping
- Context accumulation and payload contents
- Stage labels
- Failures leave the context untouched
"""

import asyncio

import httpx
import pytest

from ..analysis.analyzer import HandAnalyzer, clamp_probability
from ..analysis.prompts import hand_summary, stage_label
from ..engine.context import ConversationContext, Role
from ..errors import AnalysisError
from .conftest import ANALYSIS_URL


def analyze(analyzer, hole, board, context):
    return asyncio.run(analyzer.analyze(hole, board, context))


class TestClamp:
    """Tests for clamping into [0, 100]."""

    @pytest.mark.parametrize("raw,expected", [
        (150, 100),
        (-5, 0),
        (0, 0),
        (100, 100),
        (42.5, 42.5),
    ])
    def test_clamp(self, raw, expected):
        assert clamp_probability(raw) == expected


class TestPrompts:
    """Tests for stage labels and the user message."""

    @pytest.mark.parametrize("size,label", [
        (0, "pre-flop"),
        (3, "flop"),
        (4, "turn"),
        (5, "river"),
    ])
    def test_stage_label(self, size, label):
        assert stage_label(["X"] * size) == label

    def test_impossible_board(self):
        assert stage_label(["X"] * 2) is None

    def test_preflop_summary(self):
        text = hand_summary(["AH", "KS"], [])
        assert text.startswith("Stage: pre-flop. My hand is AH and KS.")
        assert "Community cards" not in text
        assert "win_probability" in text

    def test_board_summary(self):
        text = hand_summary(["AH", "KS"], ["2H", "7D", "JC"])
        assert "Stage: flop." in text
        assert "Community cards: 2H, 7D, JC." in text


class TestHandAnalyzer:
    """Tests for the analysis client."""

    def test_successful_analysis(self, analyzer, backend):
        backend.queue_analysis(win_probability=63, tip="Raise with strong hands.")
        context = ConversationContext()

        result = analyze(analyzer, ["AH", "KS"], [], context)

        assert result.stage == "pre-flop"
        assert result.win_probability == 63
        assert result.tip == "Raise with strong hands."

    def test_probability_clamped_high(self, analyzer, backend):
        backend.queue_analysis(win_probability=150)
        result = analyze(analyzer, ["AH", "KS"], [], ConversationContext())
        assert result.win_probability == 100

    def test_probability_clamped_low(self, analyzer, backend):
        backend.queue_analysis(win_probability=-5)
        result = analyze(analyzer, ["AH", "KS"], [], ConversationContext())
        assert result.win_probability == 0

    def test_context_grows_by_two(self, analyzer, backend):
        context = ConversationContext()
        analyze(analyzer, ["AH", "KS"], [], context)
        assert len(context) == 3
        analyze(analyzer, ["AH", "KS"], ["2H", "7D", "JC"], context)
        assert len(context) == 5
        assert context.messages[1].role == Role.USER
        assert context.messages[2].role == Role.ASSISTANT

    def test_payload_carries_whole_history(self, analyzer, backend):
        """The second call sends the system message and the first exchange."""
        context = ConversationContext()
        analyze(analyzer, ["AH", "KS"], [], context)
        analyze(analyzer, ["AH", "KS"], ["2H", "7D", "JC"], context)

        payload = backend.analysis_requests[1]
        assert payload["model"] == "o3-mini"
        roles = [m["role"] for m in payload["messages"]]
        assert roles == ["system", "user", "assistant", "user"]
        assert "Stage: flop." in payload["messages"][-1]["content"]

    def test_assistant_turn_is_raw_reply(self, analyzer, backend):
        content = '{"win_probability": 30, "tip": "Fold weak hands."}'
        backend.queue_analysis(content=content)
        context = ConversationContext()
        analyze(analyzer, ["7C", "2D"], [], context)
        assert context.messages[-1].content == content

    def test_authorization_header(self, analyzer, backend, http_client):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={
                "choices": [{"message": {"content": '{"win_probability": 1, "tip": "t"}'}}],
            })

        analyzer._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        analyze(analyzer, ["AH", "KS"], [], ConversationContext())
        assert seen["auth"] == "Bearer openai-key"

    def test_code_fenced_reply_accepted(self, analyzer, backend):
        backend.queue_analysis(content='```json\n{"win_probability": 55, "tip": "Call."}\n```')
        result = analyze(analyzer, ["AH", "KS"], [], ConversationContext())
        assert result.win_probability == 55

    def test_http_error_leaves_context_unchanged(self, analyzer, backend):
        backend.queue_analysis_response(httpx.Response(429, text="rate limited"))
        context = ConversationContext()
        with pytest.raises(AnalysisError, match="429"):
            analyze(analyzer, ["AH", "KS"], [], context)
        assert len(context) == 1

    def test_non_json_reply_leaves_context_unchanged(self, analyzer, backend):
        backend.queue_analysis(content="You have a great hand!")
        context = ConversationContext()
        with pytest.raises(AnalysisError):
            analyze(analyzer, ["AH", "KS"], [], context)
        assert len(context) == 1

    def test_wrong_shape_reply(self, analyzer, backend):
        backend.queue_analysis(content='{"probability": 40}')
        with pytest.raises(AnalysisError):
            analyze(analyzer, ["AH", "KS"], [], ConversationContext())

    def test_no_choices(self, analyzer, backend):
        backend.queue_analysis_response(httpx.Response(200, json={"choices": []}))
        with pytest.raises(AnalysisError):
            analyze(analyzer, ["AH", "KS"], [], ConversationContext())

    def test_own_client_uses_analyze_timeout(self):
        analyzer = HandAnalyzer(api_key="k", timeout=60.0)
        client = analyzer._new_client()
        assert client.timeout.read == 60.0
        assert client.timeout.connect == 5.0

    def test_without_injected_client(self, backend, monkeypatch):
        """Each call opens its own client with the configured timeout."""
        analyzer = HandAnalyzer(api_key="openai-key", url=ANALYSIS_URL, timeout=60.0)
        monkeypatch.setattr(analyzer, "_new_client", lambda: httpx.AsyncClient(
            transport=httpx.MockTransport(backend), timeout=analyzer.timeout,
        ))

        result = analyze(analyzer, ["AH", "KS"], [], ConversationContext())

        assert result.win_probability == 50
        assert len(backend.analysis_requests) == 1

    def test_unsupported_board_size(self, analyzer, backend):
        with pytest.raises(AnalysisError, match="board size"):
            analyze(analyzer, ["AH", "KS"], ["2H", "7D"], ConversationContext())
        assert backend.analysis_requests == []
