"""
User-facing entry point of the explorer: artist search and profile loading.

`ArtistExplorer` owns the HTTP session and wires the SPARQL client, the
MusicBrainz client and the response cache together. Transport failures are
logged and turned into empty results here; invalid parameters propagate.
"""

import asyncio
import logging
from datetime import date
from typing import Any, Awaitable, Callable, List, Literal, Optional

import aiohttp
from dagster import get_dagster_logger

from musigraph.settings import (
    DEFAULT_SPARQL_ENDPOINT,
    MUSICBRAINZ_MAX_CONCURRENT_RELEASES,
    MUSICBRAINZ_MAX_RPS,
)
from musigraph.utils.cache import QueryCache
from musigraph.utils.concurrency_helpers import AsyncRateLimiter
from musigraph.utils.data_processor import process_artist_data
from musigraph.utils.models import (
    Artist,
    ConnectionTestResult,
    ProcessedArtistData,
    QueryOptions,
    SearchFilters,
)
from musigraph.utils.musicbrainz_helpers import MusicBrainzClient
from musigraph.utils.request_utils import create_aiohttp_session
from musigraph.utils.sparql_client import SparqlClient
from musigraph.utils.sparql_queries import WIKIDATA

DataSource = Literal["sparql", "musicbrainz", "auto"]
DATA_SOURCES = ("sparql", "musicbrainz", "auto")

FETCH_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError)


class ArtistExplorer:
    """
    Async context manager bundling the clients of one exploration session.

    Example:
        async with ArtistExplorer() as explorer:
            artists = await explorer.search("Beatles")
            profile = await explorer.load_profile(artists[0])
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_SPARQL_ENDPOINT,
        cache: Optional[QueryCache] = None,
        clear_cache_on_search: bool = False,
        musicbrainz_max_rps: float = MUSICBRAINZ_MAX_RPS,
        max_concurrent_releases: int = MUSICBRAINZ_MAX_CONCURRENT_RELEASES,
        session: Optional[aiohttp.ClientSession] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.endpoint = endpoint
        self.cache = cache if cache is not None else QueryCache()
        self.clear_cache_on_search = clear_cache_on_search
        self.musicbrainz_max_rps = musicbrainz_max_rps
        self.max_concurrent_releases = max_concurrent_releases
        self.logger = logger or get_dagster_logger(__name__)

        self.session = session
        self._owns_session = session is None
        self.sparql: Optional[SparqlClient] = None
        self.musicbrainz: Optional[MusicBrainzClient] = None
        if session is not None:
            self._build_clients(session)

    def _build_clients(self, session: aiohttp.ClientSession) -> None:
        self.musicbrainz = MusicBrainzClient(
            session,
            limiter=AsyncRateLimiter(self.musicbrainz_max_rps),
            max_concurrent_releases=self.max_concurrent_releases,
            logger=self.logger,
        )
        self.sparql = SparqlClient(
            session,
            endpoint=self.endpoint,
            cache=self.cache,
            musicbrainz=self.musicbrainz,
            clear_cache_on_search=self.clear_cache_on_search,
            logger=self.logger,
        )

    async def __aenter__(self) -> "ArtistExplorer":
        if self.session is None:
            self.session = create_aiohttp_session()
            self._build_clients(self.session)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session is not None:
            await self.session.close()
            self.session = None

    ######################################################################
    #                             SEARCH
    ######################################################################

    async def search(
        self,
        name: str = "",
        filters: Optional[SearchFilters] = None,
        endpoint: Optional[str] = None,
        options: Optional[QueryOptions] = None,
    ) -> List[Artist]:
        """
        Search artists; a failed request is logged and yields no results.

        A plain Wikidata name search (no other filters) that finds nothing is
        retried once with the looser musician search.

        Raises:
            InvalidQueryParameterError: for malformed filter values.
        """
        try:
            artists = await self.sparql.search_artist(
                name, filters=filters, endpoint=endpoint, options=options
            )
            if not artists and self._is_plain_wikidata_name_search(name, filters, endpoint):
                self.logger.info(f"No artists named '{name}'; trying the flexible search.")
                artists = await self.sparql.search_artist_flexible(name)
        except FETCH_ERRORS as e:
            self.logger.error(f"Artist search for '{name}' failed: {e}")
            return []

        self.logger.info(f"Artist search for '{name}' returned {len(artists)} artists.")
        return artists

    def _is_plain_wikidata_name_search(
        self, name: str, filters: Optional[SearchFilters], endpoint: Optional[str]
    ) -> bool:
        if not name.strip() or self.sparql.schema_for(endpoint) != WIKIDATA:
            return False
        return filters is None or not filters.model_dump(exclude_none=True, exclude={"name"})

    async def test_connection(self) -> ConnectionTestResult:
        return await self.sparql.test_connection()

    ######################################################################
    #                          ARTIST PROFILE
    ######################################################################

    async def _load_section(
        self,
        section: str,
        primary: Callable[[], Awaitable[List[Any]]],
        fallback: Optional[Callable[[], Awaitable[List[Any]]]] = None,
    ) -> List[Any]:
        """
        Fetch one profile section. A failure becomes an empty section; an
        empty primary result is retried once through `fallback` if given.
        """
        try:
            result = await primary()
        except FETCH_ERRORS as e:
            self.logger.error(f"Failed to load {section}: {e}")
            result = []

        if result or fallback is None:
            return result

        self.logger.info(f"No {section} found; trying MusicBrainz.")
        try:
            return await fallback()
        except FETCH_ERRORS as e:
            self.logger.error(f"MusicBrainz fallback for {section} failed: {e}")
            return []

    async def load_profile(
        self,
        artist: Artist,
        source: DataSource = "sparql",
        endpoint: Optional[str] = None,
        deep: bool = False,
        today: Optional[date] = None,
    ) -> ProcessedArtistData:
        """
        Load discography, influences and collaborations concurrently and
        bundle them with statistics.

        Args:
            artist: The selected search result.
            source: 'sparql' (with the MusicBrainz discography fallback),
                'musicbrainz', or 'auto' (SPARQL first, MusicBrainz for every
                empty section when the artist has an MBID).
            endpoint: SPARQL endpoint override.
            deep: Use the per-release MusicBrainz lookups for influences
                and collaborations.
            today: Reference date for the active-years statistic.

        Raises:
            ValueError: for an unknown source, or if MusicBrainz is requested
                for an artist without MBID.
        """
        if source not in DATA_SOURCES:
            raise ValueError(f"Unknown data source '{source}'. Expected one of {DATA_SOURCES}.")
        mbid = artist.mbid
        if source == "musicbrainz" and not mbid:
            raise ValueError(f"Artist {artist.id} has no MusicBrainz id.")

        mb = self.musicbrainz

        def mb_influences():
            return mb.fetch_deep_influences(mbid) if deep else mb.fetch_influences(mbid)

        def mb_collaborations():
            return mb.fetch_deep_collaborations(mbid) if deep else mb.fetch_collaborations(mbid)

        if source == "musicbrainz":
            self.logger.info(f"Loading profile of {artist.name} from MusicBrainz ({mbid}).")
            sections = [
                self._load_section("discography", lambda: mb.fetch_discography(mbid)),
                self._load_section("influences", mb_influences),
                self._load_section("collaborations", mb_collaborations),
            ]
        else:
            use_fallback = source == "auto" and bool(mbid)
            self.logger.info(f"Loading profile of {artist.name} from SPARQL ({source}).")
            sections = [
                self._load_section(
                    "discography",
                    lambda: self.sparql.get_artist_discography(artist.id, mbid=mbid, endpoint=endpoint),
                ),
                self._load_section(
                    "influences",
                    lambda: self.sparql.get_artist_influences(artist.id, endpoint=endpoint),
                    mb_influences if use_fallback else None,
                ),
                self._load_section(
                    "collaborations",
                    lambda: self.sparql.get_collaborations(artist.id, endpoint=endpoint),
                    mb_collaborations if use_fallback else None,
                ),
            ]

        discography, influences, collaborations = await asyncio.gather(*sections)
        return process_artist_data(
            artist, discography, influences, collaborations, today=today
        )
