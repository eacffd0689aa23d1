"""
context.py: Application context holding the stores shared by all consumers.

Build it once at startup and pass it around; nothing in the package keeps
collection state or API keys in module globals.
"""

from dataclasses import dataclass
from typing import Optional

from .api.base import SearchClient
from .api.clients import get_client
from .api.remote_store import RemoteStore, SupabaseStore
from .config import Settings
from .core.curation import ExamCurator
from .core.documents_store import DocumentsStore
from .core.exams_store import ExamsStore
from .core.subscriptions import SubscriptionMarkers
from .utils.log_utils import get_logger

logger = get_logger(__name__)


@dataclass
class AppContext:
    settings: Settings
    remote: RemoteStore
    exams: ExamsStore
    documents: DocumentsStore
    curator: ExamCurator

    @classmethod
    def create(cls, settings: Optional[Settings] = None, remote: Optional[RemoteStore] = None) -> "AppContext":
        """Construct the remote store and every collection store from settings."""
        settings = settings or Settings()
        if remote is None:
            remote = SupabaseStore(
                settings.supabase_url,
                settings.supabase_key,
                access_token=settings.access_token,
                timeout=settings.request_timeout_seconds,
            )
        markers = SubscriptionMarkers(settings.subscriptions_file)
        logger.debug("Loaded %d subscription markers", len(markers))
        return cls(
            settings=settings,
            remote=remote,
            exams=ExamsStore(remote, markers=markers, user_id=settings.user_id,
                             freshness_seconds=settings.freshness_seconds),
            documents=DocumentsStore(remote, user_id=settings.user_id,
                                     freshness_seconds=settings.freshness_seconds),
            curator=ExamCurator(remote),
        )

    def search_client(self, provider: str) -> SearchClient:
        """Create a search client using the configured key for `provider`."""
        kwargs = {"timeout": self.settings.request_timeout_seconds}
        if provider == "serpapi":
            kwargs["api_key"] = self.settings.serpapi_api_key
        elif provider == "perplexity":
            kwargs["api_key"] = self.settings.perplexity_api_key
            kwargs["model"] = self.settings.perplexity_model
        return get_client(provider, **kwargs)

    async def aclose(self) -> None:
        await self.exams.wait_for_mirrors()
        await self.remote.aclose()
