"""
Integrations with external services.

The remote collection store used by the caches, and the search providers used
by the admin curation flow.
"""

from .remote_store import RemoteStore, SupabaseStore
from .base import SearchClient
from .clients import SerpApiClient, PerplexityClient, get_client
from .extraction import extract_candidate_records, extract_dates, guess_category, parse_json_records

__all__ = [
    "RemoteStore",
    "SupabaseStore",
    "SearchClient",
    "SerpApiClient",
    "PerplexityClient",
    "get_client",
    "extract_candidate_records",
    "extract_dates",
    "guess_category",
    "parse_json_records",
]
