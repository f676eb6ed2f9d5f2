import logging
from typing import Optional

from dagster import ConfigurableResource
from pydantic import Field

from musigraph.explorer import ArtistExplorer
from musigraph.settings import (
    DEFAULT_SPARQL_ENDPOINT,
    MUSICBRAINZ_MAX_CONCURRENT_RELEASES,
    MUSICBRAINZ_MAX_RPS,
    QUERY_CACHE_MAX_SIZE,
    QUERY_CACHE_TTL_SECONDS,
)
from musigraph.utils.cache import QueryCache


class ExplorerResource(ConfigurableResource):
    """Client configuration shared by the exploration assets."""
    endpoint: str = Field(DEFAULT_SPARQL_ENDPOINT, description="Default SPARQL endpoint.")
    cache_max_size: int = Field(QUERY_CACHE_MAX_SIZE, description="Maximum cached responses.")
    cache_ttl_seconds: int = Field(QUERY_CACHE_TTL_SECONDS, description="Cache entry lifetime.")
    clear_cache_on_search: bool = Field(
        False, description="Empty the query cache whenever a new search starts."
    )
    musicbrainz_max_rps: float = Field(MUSICBRAINZ_MAX_RPS, description="MusicBrainz requests per second.")
    max_concurrent_releases: int = Field(
        MUSICBRAINZ_MAX_CONCURRENT_RELEASES,
        description="Concurrent release lookups of the deep MusicBrainz helpers.",
    )

    def create_explorer(self, logger: Optional[logging.Logger] = None) -> ArtistExplorer:
        """Returns an unopened explorer; use it with `async with`."""
        return ArtistExplorer(
            endpoint=self.endpoint,
            cache=QueryCache(max_size=self.cache_max_size, ttl=self.cache_ttl_seconds),
            clear_cache_on_search=self.clear_cache_on_search,
            musicbrainz_max_rps=self.musicbrainz_max_rps,
            max_concurrent_releases=self.max_concurrent_releases,
            logger=logger,
        )
