"""
ATS scoring
Builds the scoring prompt, asks the configured completion provider for a
verdict and turns its noisy answer into a 0-100 score plus feedback.

Scoring never raises: a missing key, an HTTP failure, a timeout or an
unparseable answer all degrade to ``AtsResult(score=None, feedback=...)``.
"""
import asyncio
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence

from app.config import settings
from app.services.ai import AIFactory, AIProvider

logger = logging.getLogger(__name__)

ATS_SCORING_WEIGHTS = {
    "skills_match": 40,
    "experience": 25,
    "education": 15,
    "role_relevance": 10,
    "other_details": 10,
}

NOT_CONFIGURED_FEEDBACK = "AI scoring not configured"
TECHNICAL_ERROR_FEEDBACK = "Scoring failed due to technical error"
NO_TEXT_FEEDBACK = "No resume text could be extracted for scoring"
NO_FEEDBACK = "No feedback provided"

MAX_CANDIDATE_CHARS = 15000
NOT_SPECIFIED = "Not specified"


@dataclass(frozen=True)
class AtsResult:
    """score is None when no score is available; 0 is a real score."""

    score: Optional[int]
    feedback: str


# ==================== Prompt ====================

def _field(job: Any, name: str, default: Any = None) -> Any:
    if isinstance(job, dict):
        return job.get(name, default)
    return getattr(job, name, default)


def _join(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value) or NOT_SPECIFIED
    return str(value) if value else NOT_SPECIFIED


def build_scoring_prompt(job: Any, candidate_text: str) -> str:
    """Deterministic scoring prompt for ``job`` (ORM object or dict) and the candidate text."""
    weights = ATS_SCORING_WEIGHTS
    return f"""You are an ATS AI system. Evaluate the candidate's resume against the job requirements.
Score strictly from 0-100.

Use the following weighted criteria:
- Skills match ({weights['skills_match']}%)
- Experience vs. minimum required ({weights['experience']}%)
- Education match ({weights['education']}%)
- Job category & role relevance ({weights['role_relevance']}%)
- Other details like projects, certifications, achievements ({weights['other_details']}%)

### Job Details:
Title: {_field(job, 'title') or NOT_SPECIFIED}
Description: {_field(job, 'description') or NOT_SPECIFIED}
Location: {_field(job, 'location') or NOT_SPECIFIED}
Type: {_field(job, 'type') or NOT_SPECIFIED}
Salary Range: {_field(job, 'salary_range') or NOT_SPECIFIED}
Education Requirement: {_field(job, 'education') or NOT_SPECIFIED}
Minimum Experience: {_field(job, 'experience_min') or 0} years
Skills Required: {_join(_field(job, 'skills'))}
Tags: {_join(_field(job, 'tags'))}
Category: {_field(job, 'category') or NOT_SPECIFIED}

### Candidate Resume:
{candidate_text}

Return JSON only in the following format:
{{
  "score": <number 0-100>,
  "feedback": "<short bullet points about strengths/weaknesses>"
}}"""


# ==================== Response parsing ====================

def clamp_score(value: Any) -> Optional[int]:
    """Clamp into [0, 100] and round to the nearest integer; None when not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = re.search(r"-?\d+(?:\.\d+)?", value)
        if not match:
            return None
        value = match.group()
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number:  # NaN
        return None
    return int(round(min(100.0, max(0.0, number))))


def _feedback_text(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        value = "\n".join(str(item) for item in value if str(item).strip())
    if value is None:
        return NO_FEEDBACK
    text = str(value).strip()
    return text or NO_FEEDBACK


def _result_from_json(text: str) -> Optional[AtsResult]:
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return None
    if not isinstance(parsed, dict):
        return None
    return AtsResult(clamp_score(parsed.get("score")), _feedback_text(parsed.get("feedback")))


_FENCE_RE = re.compile(r"```(?:json|JSON)?\s*(.*?)\s*```", re.DOTALL)


def parse_fenced_json(text: str) -> Optional[AtsResult]:
    """Pass 1: strip a markdown code fence (if any) and parse the rest as JSON."""
    fenced = _FENCE_RE.search(text)
    candidate = fenced.group(1) if fenced else text.strip()
    return _result_from_json(candidate)


def parse_embedded_json(text: str) -> Optional[AtsResult]:
    """Pass 2: parse the first {...} span found in surrounding prose."""
    greedy = re.search(r"\{.*\}", text, re.DOTALL)
    if greedy:
        result = _result_from_json(greedy.group())
        if result is not None:
            return result

    decoder = json.JSONDecoder()
    for match in re.finditer(r"\{", text):
        try:
            parsed, _ = decoder.raw_decode(text, match.start())
        except ValueError:
            continue
        if isinstance(parsed, dict):
            return AtsResult(clamp_score(parsed.get("score")), _feedback_text(parsed.get("feedback")))
    return None


_LABELED_SCORE_RE = re.compile(r'"?score"?\s*[:=]\s*"?(-?\d{1,3}(?:\.\d+)?)', re.IGNORECASE)
_BARE_NUMBER_RE = re.compile(r"\b(\d{1,3})\b")
_FEEDBACK_RE = re.compile(r'"?feedback"?\s*:\s*"((?:[^"\\]|\\.)*)', re.IGNORECASE | re.DOTALL)


def parse_manual(text: str) -> Optional[AtsResult]:
    """
    Pass 3: regex extraction from malformed output.

    Looks for a labeled score, then falls back to the first bare 1-3 digit
    number. Feedback is the labeled value (unescaped) or the whole text.
    """
    score = None
    labeled = _LABELED_SCORE_RE.search(text)
    if labeled:
        score = clamp_score(labeled.group(1))
    else:
        bare = _BARE_NUMBER_RE.search(text)
        if bare:
            score = clamp_score(bare.group(1))

    feedback_match = _FEEDBACK_RE.search(text)
    if feedback_match:
        feedback = feedback_match.group(1).replace("\\n", "\n").replace('\\"', '"')
    else:
        feedback = text
    return AtsResult(score, _feedback_text(feedback))


ResponseParser = Callable[[str], Optional[AtsResult]]

DEFAULT_PARSERS: List[ResponseParser] = [parse_fenced_json, parse_embedded_json, parse_manual]


def parse_ai_response(text: Optional[str], parsers: Sequence[ResponseParser] = DEFAULT_PARSERS) -> AtsResult:
    """Run ``parsers`` in order; the first non-None result wins."""
    text = (text or "").strip()
    if not text:
        return AtsResult(None, NO_FEEDBACK)

    for parser in parsers:
        try:
            result = parser(text)
        except Exception as e:
            logger.warning(f"ATS parser {parser.__name__} raised {type(e).__name__}: {e}")
            continue
        if result is not None:
            logger.debug(f"ATS response parsed by {parser.__name__}")
            return result

    return AtsResult(None, _feedback_text(text))


# ==================== Scorer ====================

class AtsScorer:
    """Scores candidate text against a job through the configured AI provider."""

    def __init__(
        self,
        provider: Optional[AIProvider] = None,
        *,
        configured: Optional[bool] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        timeout: Optional[float] = None,
        parsers: Sequence[ResponseParser] = DEFAULT_PARSERS,
    ):
        self._provider = provider
        self.configured = configured if configured is not None else (
            provider is not None or AIFactory.is_configured()
        )
        self.max_tokens = max_tokens or settings.ATS_MAX_TOKENS
        self.temperature = settings.ATS_TEMPERATURE if temperature is None else temperature
        self.timeout = timeout or settings.ATS_TIMEOUT_SECONDS
        self.parsers = parsers

    @property
    def provider(self) -> AIProvider:
        if self._provider is None:
            self._provider = AIFactory.get_provider()
        return self._provider

    async def score(self, candidate_text: str, job: Any) -> AtsResult:
        """Score ``candidate_text`` for ``job``. Never raises."""
        if not self.configured:
            logger.warning("AI scoring key not found, skipping ATS scoring")
            return AtsResult(None, NOT_CONFIGURED_FEEDBACK)

        if not candidate_text or not candidate_text.strip():
            return AtsResult(None, NO_TEXT_FEEDBACK)

        try:
            prompt = build_scoring_prompt(job, candidate_text[:MAX_CANDIDATE_CHARS])
            answer = await asyncio.wait_for(
                self.provider.complete(prompt, max_tokens=self.max_tokens, temperature=self.temperature),
                timeout=self.timeout,
            )
            result = parse_ai_response(answer, self.parsers)
            logger.info(f"ATS scored: score={result.score} feedback_length={len(result.feedback)}")
            return result
        except asyncio.TimeoutError:
            logger.error(f"ATS scoring timed out after {self.timeout}s")
        except Exception as e:
            logger.error(f"Error scoring resume: {type(e).__name__}: {e}")
        return AtsResult(None, TECHNICAL_ERROR_FEEDBACK)
