import asyncio
import json
import logging
import re
from typing import Any, List, Optional

from openai import AsyncOpenAI
from pydantic import ValidationError

from sitescore.core.config import Settings
from sitescore.models.schemas import Recommendation, RecommendationContext, by_priority

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a cybersecurity expert specializing in website security for small and medium enterprises.
Analyze the website security assessment and provide actionable, personalized recommendations.

IMPORTANT:
- Use second-person language (your, you, your website) to make recommendations personal and direct
- Prioritize recommendations by severity (critical, high, medium, low)
- Provide specific, actionable steps
- Include brief explanation of the impact
- Be concise and practical

Return ONLY valid JSON array with this structure:
[
  {
    "priority": "critical|high|medium|low",
    "category": "SSL/TLS|Security Headers|Domain Reputation|Overall Security",
    "title": "Short recommendation title",
    "description": "What the issue is (personalized, use 'your')",
    "action": "Specific step to take (personalized, use 'you' and 'your')",
    "impact": "What this protects against or improves"
  }
]

Generate 3-6 recommendations based on the most critical issues found."""

_JSON_ARRAY = re.compile(r"\[[\s\S]*\]")


def build_prompt(context: RecommendationContext) -> str:
    missing = ", ".join(h.value for h in context.missing_headers) or "None"
    lines = [
        f"Website: {context.domain}",
        f"Security Score: {context.score}/100",
        f"SSL/TLS Grade: {context.ssl_grade}",
        f"Domain Reputation: {context.reputation}",
        f"Missing Security Headers: {missing}",
    ]
    return (
        "Analyze this website security assessment and provide personalized recommendations:\n\n"
        + "\n".join(lines)
        + "\n\nProvide actionable security recommendations in JSON format."
    )


def _load_json(content: str) -> Any:
    try:
        return json.loads(content)
    except json.JSONDecodeError:
        pass
    # models like to wrap the array in prose or a ``` fence
    match = _JSON_ARRAY.search(content)
    if not match:
        return None
    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError:
        return None


def parse_recommendations(content: Optional[str]) -> Optional[List[Recommendation]]:
    """Model output -> recommendations, or None if the output is unusable.

    A single malformed item rejects the whole response.
    """
    if not content:
        return None
    data = _load_json(content)
    if not isinstance(data, list) or not data:
        logger.warning("AI response is not a non-empty JSON array")
        return None
    try:
        recs = [Recommendation.model_validate(item) for item in data]
    except ValidationError as e:
        logger.warning("AI response rejected, %d invalid field(s): %s", e.error_count(), e.errors()[0]["loc"])
        return None
    return by_priority(recs)


class AIRecommendationStrategy:
    name = "ai"

    def __init__(self, client: AsyncOpenAI, model: str, temperature: float = 0.3,
                 max_tokens: int = 1500, timeout: float = 25.0):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["AIRecommendationStrategy"]:
        if not settings.ai_api_key:
            return None
        client = AsyncOpenAI(
            api_key=settings.ai_api_key,
            base_url=settings.ai_base_url,
            max_retries=0,
            default_headers={"HTTP-Referer": settings.app_url, "X-Title": "SiteScore Security Analysis"},
        )
        return cls(
            client,
            model=settings.ai_model,
            temperature=settings.ai_temperature,
            max_tokens=settings.ai_max_tokens,
            timeout=settings.ai_timeout,
        )

    async def generate(self, context: RecommendationContext) -> Optional[List[Recommendation]]:
        """Ask the model for recommendations. Returns None on any failure, never raises."""
        try:
            resp = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": build_prompt(context)},
                    ],
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    timeout=self.timeout,
                ),
                self.timeout,
            )
            content = resp.choices[0].message.content
        except Exception as e:
            logger.warning("AI recommendation request failed for %s: %r", context.domain, e)
            return None

        recs = parse_recommendations(content)
        if recs is not None:
            logger.info("AI generated %d recommendations for %s", len(recs), context.domain)
        return recs
