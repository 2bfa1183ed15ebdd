import unittest
from unittest.mock import patch

import groq
import httpx
import requests
from google.api_core import exceptions as google_exceptions

from roadmapper import ai_engine
from roadmapper.ai_engine import build_roadmap_prompt, error_for_status, generate_roadmap
from roadmapper.core.config import settings
from roadmapper.core.errors import (
    AuthConfigError,
    GenerationFailed,
    InvalidPromptError,
    ParseError,
    ServiceBadRequest,
    ServiceRateLimited,
    ServiceUnauthorized,
)
from roadmapper.schemas.roadmap import Level, RoadmapStyle
from tests.fakes import GROQ_URL, FakeGroqClient, roadmap_json, status_error


class BuildPromptTests(unittest.TestCase):
    def test_node_count_band_follows_level(self) -> None:
        self.assertIn("create 8-10 nodes", build_roadmap_prompt("Python", Level.beginner, RoadmapStyle.topic_wise))
        self.assertIn("create 11-15 nodes", build_roadmap_prompt("Python", Level.intermediate, RoadmapStyle.topic_wise))
        self.assertIn("create 15-18 nodes", build_roadmap_prompt("Python", Level.advanced, RoadmapStyle.topic_wise))

    def test_prompt_carries_contract(self) -> None:
        text = build_roadmap_prompt("Rust", Level.beginner, RoadmapStyle.week_by_week)
        self.assertIn('"Rust"', text)
        self.assertIn("Maximum 2 child nodes per parent", text)
        self.assertIn("beginner (1-4h), intermediate (2-6h), advanced (4-10h)", text)
        self.assertIn("each node is one week", text)


class GenerateRoadmapTests(unittest.IsolatedAsyncioTestCase):
    async def test_well_formed_response(self) -> None:
        client = FakeGroqClient(roadmap_json(8))
        nodes = await generate_roadmap("Python", "beginner", "week-by-week", client=client)

        self.assertEqual(len(nodes), 8)
        self.assertEqual([n.sequence for n in nodes], list(range(1, 9)))
        for i, node in enumerate(nodes, start=1):
            self.assertTrue(node.title.startswith(f"{i}."))

    async def test_request_parameters(self) -> None:
        client = FakeGroqClient(roadmap_json(8))
        await generate_roadmap("Python", Level.beginner, RoadmapStyle.week_by_week, client=client)

        self.assertEqual(len(client.calls), 1)
        call = client.calls[0]
        self.assertEqual(call["model"], settings.GROQ_MODEL)
        self.assertEqual(call["temperature"], 0.7)
        self.assertEqual(call["max_tokens"], 4000)
        self.assertEqual(call["top_p"], 0.9)
        self.assertEqual(call["frequency_penalty"], 0.2)
        self.assertEqual(call["response_format"], {"type": "json_object"})
        self.assertEqual(call["timeout"], 30)
        roles = [m["role"] for m in call["messages"]]
        self.assertEqual(roles, ["system", "user"])
        self.assertIn("ONLY outputs valid JSON", call["messages"][0]["content"])
        self.assertIn("Python", call["messages"][1]["content"])

    async def test_invalid_prompt_makes_no_call(self) -> None:
        client = FakeGroqClient(roadmap_json(8))
        with self.assertRaises(InvalidPromptError):
            await generate_roadmap("what is the weather today", "beginner", "topic-wise", client=client)
        self.assertEqual(client.calls, [])

    async def test_rate_limit_has_specific_message(self) -> None:
        client = FakeGroqClient(error=status_error(groq.RateLimitError, 429))
        with self.assertRaises(ServiceRateLimited) as ctx:
            await generate_roadmap("Python", "beginner", "week-by-week", client=client)
        self.assertEqual(ctx.exception.message, "Too many requests. Please try again later.")

    async def test_unauthorized(self) -> None:
        client = FakeGroqClient(error=status_error(groq.AuthenticationError, 401))
        with self.assertRaises(ServiceUnauthorized) as ctx:
            await generate_roadmap("Python", "beginner", "week-by-week", client=client)
        self.assertEqual(ctx.exception.message, "Authentication failed")

    async def test_bad_request_in_production(self) -> None:
        client = FakeGroqClient(error=status_error(groq.BadRequestError, 400))
        with patch.object(settings, "ENVIRONMENT", "production"):
            with self.assertRaises(ServiceBadRequest):
                await generate_roadmap("Python", "beginner", "week-by-week", client=client)

    async def test_bad_request_in_development_returns_placeholder(self) -> None:
        client = FakeGroqClient(error=status_error(groq.BadRequestError, 400))
        with patch.object(settings, "ENVIRONMENT", "development"):
            nodes = await generate_roadmap("Python", "intermediate", "topic-wise", client=client)
        self.assertEqual(len(nodes), 12)
        self.assertEqual(nodes[0].title, "1. Python Topic 1")

    async def test_rate_limit_is_not_replaced_in_development(self) -> None:
        client = FakeGroqClient(error=status_error(groq.RateLimitError, 429))
        with patch.object(settings, "ENVIRONMENT", "development"):
            with self.assertRaises(ServiceRateLimited):
                await generate_roadmap("Python", "beginner", "week-by-week", client=client)

    async def test_server_error_is_generic(self) -> None:
        client = FakeGroqClient(error=status_error(groq.InternalServerError, 503))
        with self.assertRaises(GenerationFailed):
            await generate_roadmap("Python", "beginner", "week-by-week", client=client)

    async def test_timeout(self) -> None:
        client = FakeGroqClient(error=groq.APITimeoutError(request=httpx.Request("POST", GROQ_URL)))
        with self.assertRaises(GenerationFailed) as ctx:
            await generate_roadmap("Python", "beginner", "week-by-week", client=client)
        self.assertIn("too long", ctx.exception.message)

    async def test_empty_content(self) -> None:
        client = FakeGroqClient(content="   ")
        with self.assertRaises(GenerationFailed) as ctx:
            await generate_roadmap("Python", "beginner", "week-by-week", client=client)
        self.assertEqual(ctx.exception.message, "Invalid response from AI service")

    async def test_unparsable_content(self) -> None:
        client = FakeGroqClient(content="I'd rather not.")
        with self.assertRaises(ParseError):
            await generate_roadmap("Python", "beginner", "week-by-week", client=client)

    async def test_missing_api_key(self) -> None:
        with patch.object(ai_engine, "groq_client", None), patch.object(settings, "AI_PROVIDER", "groq"):
            with self.assertRaises(AuthConfigError):
                await generate_roadmap("Python", "beginner", "week-by-week")

    async def test_module_client_is_used_by_default(self) -> None:
        client = FakeGroqClient(roadmap_json(3))
        with patch.object(ai_engine, "groq_client", client), patch.object(settings, "AI_PROVIDER", "groq"):
            nodes = await generate_roadmap("Golang", "advanced", "topic-wise")
        self.assertEqual(len(nodes), 3)
        self.assertEqual(len(client.calls), 1)


class FakeGeminiResponse:
    def __init__(self, text=None):
        self._text = text

    @property
    def text(self) -> str:
        if self._text is None:
            raise ValueError("The candidate was blocked by safety filters")
        return self._text


class FakeGenerativeModel:
    """Replaces genai.GenerativeModel; returns ``outcome`` or raises it."""

    outcome = None
    calls: list = []

    def __init__(self, model_name, generation_config=None):
        self.model_name = model_name
        self.generation_config = generation_config

    def generate_content(self, prompt, request_options=None):
        FakeGenerativeModel.calls.append({"model": self.model_name, "request_options": request_options})
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


class GeminiProviderTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        FakeGenerativeModel.calls = []
        for target, name, value in (
            (settings, "AI_PROVIDER", "gemini"),
            (settings, "GOOGLE_API_KEY", "test-key"),
            (ai_engine.genai, "GenerativeModel", FakeGenerativeModel),
        ):
            patcher = patch.object(target, name, value)
            patcher.start()
            self.addCleanup(patcher.stop)

    def _respond(self, outcome) -> None:
        patcher = patch.object(FakeGenerativeModel, "outcome", outcome)
        patcher.start()
        self.addCleanup(patcher.stop)

    async def test_success(self) -> None:
        self._respond(FakeGeminiResponse(roadmap_json(8)))
        nodes = await generate_roadmap("Python", "beginner", "topic-wise")

        self.assertEqual(len(nodes), 8)
        self.assertEqual(FakeGenerativeModel.calls[0]["model"], settings.GEMINI_MODEL)
        self.assertEqual(FakeGenerativeModel.calls[0]["request_options"], {"timeout": 30})

    async def test_blocked_candidate_is_an_empty_response(self) -> None:
        self._respond(FakeGeminiResponse(None))
        with self.assertRaises(GenerationFailed) as ctx:
            await generate_roadmap("Python", "beginner", "topic-wise")
        self.assertEqual(ctx.exception.message, "Invalid response from AI service")

    async def test_quota_exhausted_is_rate_limited(self) -> None:
        self._respond(google_exceptions.ResourceExhausted("quota"))
        with self.assertRaises(ServiceRateLimited):
            await generate_roadmap("Python", "beginner", "topic-wise")

    async def test_connection_failure(self) -> None:
        self._respond(requests.exceptions.ConnectionError("Connection refused"))
        with self.assertRaises(GenerationFailed) as ctx:
            await generate_roadmap("Python", "beginner", "topic-wise")
        self.assertIn("Could not reach", ctx.exception.message)

    async def test_read_timeout(self) -> None:
        self._respond(requests.exceptions.ReadTimeout("read timed out"))
        with self.assertRaises(GenerationFailed) as ctx:
            await generate_roadmap("Python", "beginner", "topic-wise")
        self.assertIn("too long", ctx.exception.message)

    async def test_missing_api_key(self) -> None:
        with patch.object(settings, "GOOGLE_API_KEY", None):
            with self.assertRaises(AuthConfigError):
                await generate_roadmap("Python", "beginner", "topic-wise")


class ErrorMappingTests(unittest.TestCase):
    def test_status_codes(self) -> None:
        self.assertIsInstance(error_for_status(401), ServiceUnauthorized)
        self.assertIsInstance(error_for_status(429), ServiceRateLimited)
        self.assertIsInstance(error_for_status(400), ServiceBadRequest)
        self.assertIsInstance(error_for_status(500), GenerationFailed)
        self.assertIsInstance(error_for_status(None), GenerationFailed)

    def test_gemini_error_codes(self) -> None:
        exhausted = google_exceptions.ResourceExhausted("quota")
        self.assertIsInstance(error_for_status(exhausted.code), ServiceRateLimited)
        invalid = google_exceptions.InvalidArgument("bad")
        self.assertIsInstance(error_for_status(invalid.code), ServiceBadRequest)


if __name__ == "__main__":
    unittest.main()
