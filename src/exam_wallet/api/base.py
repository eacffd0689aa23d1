"""
Base functionality for exam search providers.

A provider turns a free-text query into a list of partially populated exam drafts
for the admin review queue. Concrete providers only implement the HTTP call and
the conversion of their payload; key handling and query checks live here.
"""

import os
from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.errors import RemoteError, ValidationError
from ..core.models import ExamDraft
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class SearchClient(ABC):
    """Abstract base class for exam search providers."""

    #: Environment variable consulted when no key is passed in.
    api_key_env: str = ""

    def __init__(self, api_key: Optional[str] = None, timeout: float = 30.0):
        """Initialize the search client.

        Args:
            api_key: API key for the service. If None, will try to get from environment.
            timeout: Request timeout in seconds.
        """
        self.api_key = api_key
        self.timeout = timeout
        self._validate_api_key()

    def _validate_api_key(self) -> None:
        """Validate that the API key is available."""
        key = self.api_key or os.getenv(self.api_key_env)
        if not key:
            raise ValidationError(f"{self.api_key_env} is not configured")
        self.api_key = key

    @property
    @abstractmethod
    def name(self) -> str:
        """Short provider name used in logs."""

    @abstractmethod
    async def _search(self, query: str) -> List[ExamDraft]:
        """Call the provider and convert its payload into exam drafts."""

    async def search_exams(self, query: str) -> List[ExamDraft]:
        """Search for exams matching `query`.

        Raises:
            ValidationError: if the query is empty.
            RemoteError: if the provider call failed or returned something unusable.
        """
        query = (query or "").strip()
        if not query:
            raise ValidationError("Please enter a search query")

        logger.debug("Searching %s for %r", self.name, query)
        try:
            drafts = await self._search(query)
        except RemoteError:
            raise
        except ValueError as err:
            logger.error("%s returned an unusable response: %s", self.name, err)
            raise RemoteError(f"{self.name} response could not be parsed: {err}") from err
        logger.info("%s returned %d candidate exams for %r", self.name, len(drafts), query)
        return drafts
