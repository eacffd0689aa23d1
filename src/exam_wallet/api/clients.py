"""
Search provider implementations.

SerpApiClient queries Google results through SerpAPI and extracts exams heuristically.
PerplexityClient asks Perplexity's OpenAI-compatible chat endpoint for a JSON list of exams.
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
from openai import AsyncOpenAI, OpenAIError

from ..core.errors import RemoteError
from ..core.models import ExamDraft
from ..utils.log_utils import get_logger
from .base import SearchClient
from .extraction import extract_candidate_records, parse_json_records

logger = get_logger(__name__)

SERPAPI_URL = "https://serpapi.com/search"
PERPLEXITY_BASE_URL = "https://api.perplexity.ai"

SEARCH_PROMPT = """
You are a helpful assistant that provides information about educational and competitive exams in India.
Return the result in a JSON array format with the following fields for each exam:
name, category, description, registrationStartDate, registrationEndDate, examDate, resultDate,
answerKeyDate, websiteUrl, eligibility, applicationFee.
Dates should be in ISO format (YYYY-MM-DD). If a date is unknown, leave it out.
For missing data, exclude those fields rather than returning null or empty values.
""".strip()


class SerpApiClient(SearchClient):
    """Client for SerpAPI's Google search endpoint."""

    api_key_env = "SERPAPI_API_KEY"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 30.0,
                 session: Optional[aiohttp.ClientSession] = None):
        self._session = session
        super().__init__(api_key, timeout)

    @property
    def name(self) -> str:
        return "serpapi"

    def _params(self, query: str) -> Dict[str, str]:
        return {
            "engine": "google",
            "q": f"{query} exam registration dates",
            "api_key": self.api_key,
            "location": "India",
            "gl": "in",
            "hl": "en",
            "num": "10",
        }

    async def _fetch(self, session: aiohttp.ClientSession, query: str) -> Dict[str, Any]:
        async with session.get(SERPAPI_URL, params=self._params(query)) as resp:
            if resp.status >= 400:
                text = await resp.text()
                raise RemoteError(f"SerpAPI request failed: {resp.status} {text[:200]}", status=resp.status, body=text)
            return await resp.json(content_type=None)

    async def _search(self, query: str) -> List[ExamDraft]:
        try:
            if self._session is not None:
                data = await self._fetch(self._session, query)
            else:
                timeout = aiohttp.ClientTimeout(total=self.timeout)
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    data = await self._fetch(session, query)
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            logger.error("SerpAPI request failed: %s", err)
            raise RemoteError(f"Search API error: {err}") from err

        return extract_candidate_records(data.get("organic_results") or [], query)


class PerplexityClient(SearchClient):
    """Client for Perplexity's chat completions API (OpenAI compatible)."""

    api_key_env = "PERPLEXITY_API_KEY"

    def __init__(self, api_key: Optional[str] = None, model: str = "sonar", timeout: float = 30.0):
        """Initialize Perplexity client.

        Args:
            api_key: Perplexity API key. If None, uses PERPLEXITY_API_KEY env var.
            model: Model name to use (default: sonar)
        """
        self.model = model
        super().__init__(api_key, timeout)
        self.client = AsyncOpenAI(api_key=self.api_key, base_url=PERPLEXITY_BASE_URL, timeout=timeout)

    @property
    def name(self) -> str:
        return "perplexity"

    async def _search(self, query: str) -> List[ExamDraft]:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SEARCH_PROMPT},
                    {
                        "role": "user",
                        "content": f"Find detailed information about {query} exams, including registration dates, "
                                   f"exam dates, and eligibility criteria.",
                    },
                ],
                max_tokens=4000,
                temperature=0.2,
            )
        except OpenAIError as err:
            logger.error("Perplexity API request failed: %s", err)
            raise RemoteError(f"Perplexity API error: {err}") from err

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise RemoteError("No content in Perplexity response")
        return parse_json_records(content)


def get_client(provider: str, **kwargs) -> SearchClient:
    """Factory function to create search client instances.

    Args:
        provider: Name of the provider ('serpapi', 'perplexity')
        **kwargs: Additional arguments passed to the client constructor
    """
    provider = provider.lower()
    if provider == "serpapi":
        return SerpApiClient(**kwargs)
    elif provider == "perplexity":
        return PerplexityClient(**kwargs)
    else:
        raise ValueError(f"Unsupported search provider: {provider}")
