import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

import aiohttp
from dagster import get_dagster_logger

from musigraph.settings import (
    COLLABORATIONS_LIMIT,
    DEFAULT_SPARQL_ENDPOINT,
    DISCOGRAPHY_LIMIT,
    INFLUENCES_LIMIT,
    SEARCH_RESULT_LIMIT,
    SPARQL_HEADERS,
)
from musigraph.utils.cache import QueryCache, get_cache_key
from musigraph.utils.data_processor import (
    build_collaboration_network,
    build_influence_network,
)
from musigraph.utils.models import (
    Album,
    Artist,
    Collaboration,
    CollaborationPair,
    ConnectionTestResult,
    CountryDistribution,
    GenreDistribution,
    NetworkData,
    QueryOptions,
    SearchFilters,
)
from musigraph.utils.musicbrainz_helpers import MusicBrainzClient
from musigraph.utils.normalizers import (
    fold_artist_bindings,
    get_sparql_bindings,
    map_album_bindings,
    map_collaboration_bindings,
    map_collaboration_pair_bindings,
    map_country_count_bindings,
    map_subgenre_count_bindings,
)
from musigraph.utils.request_utils import async_post_sparql
from musigraph.utils.sparql_queries import (
    WIKIDATA,
    build_artist_search_query,
    build_artists_by_genre_query,
    build_collaboration_network_query,
    build_collaborations_query,
    build_connection_test_query,
    build_connections_query,
    build_decade_timeline_query,
    build_discography_query,
    build_flexible_name_query,
    build_frequent_collaborations_query,
    build_genre_exploration_query,
    build_geographic_distribution_query,
    build_influence_network_query,
    build_influences_query,
    build_popular_artists_query,
    build_subgenres_query,
    build_top_bands_query,
    detect_schema,
)


class SparqlClient:
    """
    Executes SPARQL queries against a default endpoint with response caching,
    and maps the results of the artist lookups into domain models.

    Args:
        session: Open aiohttp ClientSession used for every request.
        endpoint: Default endpoint; only its responses are cached.
        cache: Response cache. A fresh `QueryCache` is created if omitted.
        musicbrainz: Client used as the discography fallback.
        clear_cache_on_search: Empty the whole cache whenever a new name
            search starts.
        headers: Request headers for the SPARQL POST.
        logger: Logger; defaults to the Dagster logger.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        endpoint: str = DEFAULT_SPARQL_ENDPOINT,
        cache: Optional[QueryCache] = None,
        musicbrainz: Optional[MusicBrainzClient] = None,
        clear_cache_on_search: bool = False,
        headers: Optional[Dict[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.session = session
        self.endpoint = endpoint
        self.cache = cache if cache is not None else QueryCache()
        self.musicbrainz = musicbrainz
        self.clear_cache_on_search = clear_cache_on_search
        self.headers = headers or SPARQL_HEADERS
        self.logger = logger or get_dagster_logger(__name__)

    ######################################################################
    #                        QUERY EXECUTION
    ######################################################################

    async def query(self, query: str) -> Dict[str, Any]:
        """
        Run a query against the default endpoint, serving repeats from the cache.

        Raises:
            aiohttp.ClientResponseError: when the endpoint answers with a
                non-success status.
        """
        cached = self.cache.get(query)
        if cached is not None:
            self.logger.debug(f"Cache hit for query {get_cache_key(query)}")
            return cached

        self.logger.debug(f"Cache miss for query {get_cache_key(query)}")
        data = await self._post(query, self.endpoint)
        self.cache.set(query, data)
        return data

    async def query_with_endpoint(self, query: str, endpoint: Optional[str] = None) -> Dict[str, Any]:
        """Run a query against `endpoint`; anything but the default bypasses the cache."""
        if not endpoint or endpoint == self.endpoint:
            return await self.query(query)
        return await self._post(query, endpoint)

    async def _post(self, query: str, endpoint: str) -> Dict[str, Any]:
        self.logger.info(f"Sending SPARQL request to {endpoint}")
        return await async_post_sparql(self.session, endpoint, query, headers=self.headers)

    def clear_cache(self) -> None:
        self.cache.clear()

    def schema_for(self, endpoint: Optional[str]) -> str:
        return detect_schema(endpoint or self.endpoint)

    ######################################################################
    #                          ARTIST LOOKUPS
    ######################################################################

    async def search_artist(
        self,
        name: str = "",
        filters: Optional[SearchFilters] = None,
        endpoint: Optional[str] = None,
        options: Optional[QueryOptions] = None,
    ) -> List[Artist]:
        """
        Search artists by name and optional filters.

        Args:
            name: Free-text name fragment; overrides `filters.name` when given.
            filters: Genre, decade, country and artist type filters.
            endpoint: Endpoint to query; defaults to the client's endpoint.
            options: Limit/sorting; defaults to the search result limit.

        Returns:
            Unique artists in result order.
        """
        if self.clear_cache_on_search:
            self.logger.info(f"Clearing query cache for new search '{name}'")
            self.clear_cache()

        filters = filters or SearchFilters()
        if name:
            filters = filters.model_copy(update={"name": name})
        schema = self.schema_for(endpoint)
        query = build_artist_search_query(
            filters, options or QueryOptions(limit=SEARCH_RESULT_LIMIT), schema
        )
        response = await self.query_with_endpoint(query, endpoint)
        return fold_artist_bindings(get_sparql_bindings(response), schema)

    async def get_artist_discography(
        self,
        artist_id: str,
        mbid: Optional[str] = None,
        endpoint: Optional[str] = None,
    ) -> List[Album]:
        """
        Albums of an artist. When the graph has none and an MBID is known,
        MusicBrainz is asked instead; a failing fallback yields the empty
        graph result.
        """
        schema = self.schema_for(endpoint)
        query = build_discography_query(artist_id, schema, limit=DISCOGRAPHY_LIMIT)
        response = await self.query_with_endpoint(query, endpoint)
        albums = map_album_bindings(get_sparql_bindings(response), schema)

        if not albums and mbid and self.musicbrainz is not None:
            self.logger.info(f"No albums found for {artist_id}; falling back to MusicBrainz ({mbid}).")
            try:
                return await self.musicbrainz.fetch_discography(mbid)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                self.logger.error(f"MusicBrainz discography fallback failed for {mbid}: {e}")
        return albums

    async def get_artist_influences(self, artist_id: str, endpoint: Optional[str] = None) -> List[Artist]:
        schema = self.schema_for(endpoint)
        query = build_influences_query(artist_id, schema, limit=INFLUENCES_LIMIT)
        response = await self.query_with_endpoint(query, endpoint)
        return fold_artist_bindings(get_sparql_bindings(response), schema, id_column="influence")

    async def get_collaborations(self, artist_id: str, endpoint: Optional[str] = None) -> List[Collaboration]:
        schema = self.schema_for(endpoint)
        query = build_collaborations_query(artist_id, schema, limit=COLLABORATIONS_LIMIT)
        response = await self.query_with_endpoint(query, endpoint)
        return map_collaboration_bindings(get_sparql_bindings(response), schema)

    async def search_by_genre(self, genre_id: str) -> List[Artist]:
        response = await self.query(build_artists_by_genre_query(genre_id))
        return fold_artist_bindings(get_sparql_bindings(response), WIKIDATA)

    async def search_artist_flexible(self, name: str) -> List[Artist]:
        response = await self.query(build_flexible_name_query(name))
        return fold_artist_bindings(get_sparql_bindings(response), WIKIDATA)

    async def get_top_bands(self, artist_ids: Optional[Iterable[str]] = None) -> List[Artist]:
        response = await self.query(build_top_bands_query(artist_ids))
        return fold_artist_bindings(get_sparql_bindings(response), WIKIDATA)

    async def get_popular_artists(self) -> List[Artist]:
        return await self.get_top_bands()

    ######################################################################
    #                         EXPLORATION VIEWS
    ######################################################################

    async def explore_genre(self, genre_id: str) -> List[Artist]:
        """Bands of a genre, oldest formation first, with all their genre tags."""
        response = await self.query(build_genre_exploration_query(genre_id))
        return fold_artist_bindings(get_sparql_bindings(response), WIKIDATA)

    async def get_decade_artists(self, decade: str) -> List[Artist]:
        response = await self.query(build_decade_timeline_query(decade))
        return fold_artist_bindings(get_sparql_bindings(response), WIKIDATA)

    async def get_influence_network(self, artist: Artist) -> NetworkData:
        """
        Influences of `artist` and the artists it influenced, as one network.
        """
        response = await self.query(build_influence_network_query(artist.id))
        bindings = get_sparql_bindings(response)
        influences = fold_artist_bindings(bindings, WIKIDATA, id_column="influence")
        influenced = fold_artist_bindings(bindings, WIKIDATA, id_column="influenced")
        return build_influence_network(artist, influences, influenced=influenced)

    async def get_collaboration_network(self, artist: Artist) -> NetworkData:
        response = await self.query(build_collaboration_network_query(artist.id))
        collaborations = map_collaboration_bindings(get_sparql_bindings(response), WIKIDATA)
        for collab in collaborations:
            collab.artist = artist.name
        return build_collaboration_network(artist, collaborations)

    async def get_country_distribution(
        self, genre_id: Optional[str] = None
    ) -> List[CountryDistribution]:
        """Musician counts per country, optionally within one genre."""
        response = await self.query(build_geographic_distribution_query(genre_id))
        return map_country_count_bindings(get_sparql_bindings(response))

    async def get_most_influential_artists(self) -> List[Artist]:
        response = await self.query(build_popular_artists_query())
        return fold_artist_bindings(get_sparql_bindings(response), WIKIDATA)

    async def find_connections(self, first_artist_id: str, second_artist_id: str) -> List[Artist]:
        """Artists bridging a two-step influence chain from the first artist to the second."""
        response = await self.query(build_connections_query(first_artist_id, second_artist_id))
        return fold_artist_bindings(
            get_sparql_bindings(response), WIKIDATA, id_column="intermediate"
        )

    async def get_subgenres(self, genre_id: str) -> List[GenreDistribution]:
        response = await self.query(build_subgenres_query(genre_id))
        return map_subgenre_count_bindings(get_sparql_bindings(response))

    async def get_frequent_collaborations(self, min_songs: int = 2) -> List[CollaborationPair]:
        response = await self.query(build_frequent_collaborations_query(min_songs))
        return map_collaboration_pair_bindings(get_sparql_bindings(response))

    ######################################################################
    #                         CONNECTION CHECK
    ######################################################################

    async def test_connection(self) -> ConnectionTestResult:
        """Run a tiny query against the default endpoint and report the outcome."""
        try:
            response = await self.query(build_connection_test_query())
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            return ConnectionTestResult(success=False, message=f"Connection error: {e}")

        bindings = get_sparql_bindings(response)
        if bindings:
            return ConnectionTestResult(
                success=True,
                message=f"Connection succeeded. Found {len(bindings)} results.",
                sample_data=bindings,
            )
        return ConnectionTestResult(
            success=False, message="Connection established but returned no results."
        )
