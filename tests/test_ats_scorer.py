import asyncio
import json
import unittest
from unittest.mock import patch

import httpx

from app.config import settings
from app.services.ai import AIFactory
from app.services.ai.base import AIProviderError
from app.services.ai.openrouter_service import OpenRouterService
from app.services.ats_scorer import (
    NO_FEEDBACK,
    NOT_CONFIGURED_FEEDBACK,
    NO_TEXT_FEEDBACK,
    TECHNICAL_ERROR_FEEDBACK,
    AtsResult,
    AtsScorer,
    build_scoring_prompt,
    clamp_score,
    parse_ai_response,
    parse_embedded_json,
    parse_fenced_json,
    parse_manual,
)
from tests.support import ScriptedProvider

JOB = {
    "title": "Data Engineer",
    "description": "Pipelines in Spark",
    "location": "Remote",
    "type": "full_time",
    "salary_range": "20-30 LPA",
    "education": "Bachelors",
    "experience_min": 3,
    "skills": ["Spark", "Python"],
    "tags": [],
    "category": None,
}


class ParserChainTests(unittest.TestCase):
    def test_clean_json(self):
        result = parse_ai_response('{"score": 72, "feedback": "Good Spark depth"}')
        self.assertEqual(result, AtsResult(72, "Good Spark depth"))

    def test_fenced_json_inside_prose(self):
        text = 'Here is my evaluation:\n```json\n{"score": "87", "feedback": "Strong match"}\n```\nThanks!'
        self.assertEqual(parse_ai_response(text), AtsResult(87, "Strong match"))

    def test_json_embedded_in_prose(self):
        text = 'Sure. {"score": 64.6, "feedback": "- Python\\n- lacks Spark"} Hope this helps.'
        result = parse_ai_response(text)
        self.assertEqual(result.score, 65)
        self.assertEqual(result.feedback, "- Python\n- lacks Spark")

    def test_malformed_json_uses_labeled_fields(self):
        text = '{"score": 55, "feedback": "Decent \\"fit\\" overall\\nNeeds SQL", oops'
        result = parse_ai_response(text)
        self.assertEqual(result.score, 55)
        self.assertEqual(result.feedback, 'Decent "fit" overall\nNeeds SQL')

    def test_bare_number_fallback_keeps_whole_text_as_feedback(self):
        text = "I would rate this candidate 78 out of 100 given the experience."
        result = parse_ai_response(text)
        self.assertEqual(result.score, 78)
        self.assertEqual(result.feedback, text)

    def test_scores_are_clamped(self):
        self.assertEqual(parse_ai_response('{"score": 140, "feedback": "x"}').score, 100)
        self.assertEqual(parse_ai_response('{"score": -5, "feedback": "x"}').score, 0)

    def test_overflowing_score_is_clamped(self):
        result = parse_ai_response('{"score": 1e999, "feedback": "Excellent"}')
        self.assertEqual((result.score, result.feedback), (100, "Excellent"))
        self.assertEqual(clamp_score(float("-inf")), 0)

    def test_zero_is_a_real_score(self):
        result = parse_ai_response('{"score": 0, "feedback": "No overlap"}')
        self.assertEqual(result.score, 0)
        self.assertIsNotNone(result.score)

    def test_missing_score_and_feedback(self):
        result = parse_ai_response('{"verdict": "maybe"}')
        self.assertIsNone(result.score)
        self.assertEqual(result.feedback, NO_FEEDBACK)

    def test_no_number_at_all(self):
        result = parse_ai_response("The candidate seems fine.")
        self.assertIsNone(result.score)
        self.assertEqual(result.feedback, "The candidate seems fine.")

    def test_empty_response(self):
        self.assertEqual(parse_ai_response(""), AtsResult(None, NO_FEEDBACK))
        self.assertEqual(parse_ai_response(None), AtsResult(None, NO_FEEDBACK))

    def test_each_parser_declines_independently(self):
        self.assertIsNone(parse_fenced_json("rating: 80"))
        self.assertIsNone(parse_embedded_json("rating: 80"))
        self.assertEqual(parse_manual("rating: 80").score, 80)

    def test_feedback_list_is_joined(self):
        result = parse_ai_response('{"score": 70, "feedback": ["Strong Python", "No Spark"]}')
        self.assertEqual(result.feedback, "Strong Python\nNo Spark")

    def test_custom_parser_order(self):
        text = '```json\n{"score": 90, "feedback": "fenced"}\n```'
        result = parse_ai_response(text, parsers=[parse_manual])
        self.assertEqual(result.score, 90)
        self.assertEqual(result.feedback, "fenced")

    def test_clamp_score(self):
        self.assertEqual(clamp_score("87"), 87)
        self.assertEqual(clamp_score(99.5), 100)
        self.assertEqual(clamp_score("n/a"), None)
        self.assertEqual(clamp_score(True), None)
        self.assertEqual(clamp_score(None), None)


class PromptTests(unittest.TestCase):
    def test_prompt_embeds_weights_job_and_candidate(self):
        prompt = build_scoring_prompt(JOB, "Five years of Spark")
        self.assertIn("Skills match (40%)", prompt)
        self.assertIn("Experience vs. minimum required (25%)", prompt)
        self.assertIn("Title: Data Engineer", prompt)
        self.assertIn("Minimum Experience: 3 years", prompt)
        self.assertIn("Skills Required: Spark, Python", prompt)
        self.assertIn("Tags: Not specified", prompt)
        self.assertIn("Category: Not specified", prompt)
        self.assertIn("Five years of Spark", prompt)
        self.assertIn('"score": <number 0-100>', prompt)

    def test_prompt_is_deterministic(self):
        self.assertEqual(build_scoring_prompt(JOB, "x"), build_scoring_prompt(JOB, "x"))


class AtsScorerTests(unittest.IsolatedAsyncioTestCase):
    async def test_not_configured_short_circuits(self):
        scorer = AtsScorer(configured=False)
        self.assertEqual(await scorer.score("resume", JOB), AtsResult(None, NOT_CONFIGURED_FEEDBACK))

    async def test_scores_with_provider(self):
        provider = ScriptedProvider('{"score": 81, "feedback": "Solid"}')
        scorer = AtsScorer(provider, max_tokens=300, temperature=0.3)
        self.assertEqual(await scorer.score("Python and Spark", JOB), AtsResult(81, "Solid"))
        self.assertIn("Python and Spark", provider.prompts[0])

    async def test_provider_failure_is_swallowed(self):
        scorer = AtsScorer(ScriptedProvider(AIProviderError("HTTP error 502")))
        self.assertEqual(await scorer.score("resume", JOB), AtsResult(None, TECHNICAL_ERROR_FEEDBACK))

    async def test_unexpected_exception_is_swallowed(self):
        scorer = AtsScorer(ScriptedProvider(RuntimeError("boom")))
        self.assertEqual(await scorer.score("resume", JOB), AtsResult(None, TECHNICAL_ERROR_FEEDBACK))

    async def test_timeout_is_a_failure(self):
        scorer = AtsScorer(ScriptedProvider('{"score": 90}', delay=1.0), timeout=0.05)
        self.assertEqual(await scorer.score("resume", JOB), AtsResult(None, TECHNICAL_ERROR_FEEDBACK))

    async def test_blank_text_is_not_sent(self):
        provider = ScriptedProvider('{"score": 90}')
        result = await AtsScorer(provider).score("  \n ", JOB)
        self.assertEqual(result, AtsResult(None, NO_TEXT_FEEDBACK))
        self.assertEqual(provider.prompts, [])


class OpenRouterServiceTests(unittest.IsolatedAsyncioTestCase):
    def _service(self, handler):
        return OpenRouterService(
            api_key="test-key",
            base_url="https://openrouter.test/api/v1",
            model="mistralai/mistral-7b-instruct",
            transport=httpx.MockTransport(handler),
        )

    async def test_request_shape_and_content(self):
        seen = {}

        def handler(request: httpx.Request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": ' {"score": 70} '}}]})

        content = await self._service(handler).complete("prompt text", max_tokens=300, temperature=0.3)

        self.assertEqual(content, '{"score": 70}')
        self.assertEqual(seen["url"], "https://openrouter.test/api/v1/chat/completions")
        self.assertEqual(seen["auth"], "Bearer test-key")
        self.assertEqual(seen["body"]["model"], "mistralai/mistral-7b-instruct")
        self.assertEqual(seen["body"]["messages"], [{"role": "user", "content": "prompt text"}])
        self.assertEqual(seen["body"]["max_tokens"], 300)
        self.assertEqual(seen["body"]["temperature"], 0.3)

    async def test_non_2xx_raises(self):
        service = self._service(lambda request: httpx.Response(503, text="overloaded"))
        with self.assertRaises(AIProviderError):
            await service.complete("p", max_tokens=10, temperature=0.3)

    async def test_empty_completion_raises(self):
        service = self._service(lambda request: httpx.Response(200, json={"choices": [{"message": {"content": ""}}]}))
        with self.assertRaises(AIProviderError):
            await service.complete("p", max_tokens=10, temperature=0.3)

    async def test_network_error_through_scorer(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        scorer = AtsScorer(self._service(handler))
        result = await scorer.score("resume text", JOB)
        self.assertEqual(result, AtsResult(None, TECHNICAL_ERROR_FEEDBACK))


class AIFactoryTests(unittest.TestCase):
    def setUp(self):
        AIFactory.reset()
        self.addCleanup(AIFactory.reset)

    def test_configured_only_with_key(self):
        with patch.object(settings, "AI_PROVIDER", "openrouter"), patch.object(settings, "OPENROUTER_API_KEY", ""):
            self.assertFalse(AIFactory.is_configured())
            self.assertFalse(AtsScorer().configured)
            with self.assertRaises(ValueError):
                AIFactory.get_provider()

        with patch.object(settings, "OPENROUTER_API_KEY", "sk-or-test"):
            self.assertTrue(AIFactory.is_configured("openrouter"))

    def test_unknown_provider(self):
        self.assertFalse(AIFactory.is_configured("gemini"))
        with self.assertRaises(ValueError):
            AIFactory.get_provider("gemini")

    def test_instances_are_shared(self):
        with patch.object(settings, "OPENROUTER_API_KEY", "sk-or-test"):
            first = AIFactory.get_provider("OpenRouter")
            self.assertIsInstance(first, OpenRouterService)
            self.assertIs(AIFactory.get_provider("openrouter"), first)


if __name__ == "__main__":
    unittest.main()
