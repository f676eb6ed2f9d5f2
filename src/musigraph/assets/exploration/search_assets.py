from typing import Optional

from dagster import AssetExecutionContext, Config, MaterializeResult, asset
from pydantic import Field

from musigraph.resources import ExplorerResource
from musigraph.settings import ARTIST_SEARCH_FILE, SEARCH_RESULT_LIMIT
from musigraph.utils.io_helpers import save_models_to_jsonl
from musigraph.utils.models import QueryOptions, SearchFilters


class ArtistSearchConfig(Config):
    """Run configuration of an artist search."""
    name: str = Field("", description="Free-text fragment of the artist name.")
    genre: Optional[str] = Field(None, description="Genre code (Wikidata QID or DBpedia resource).")
    decade: Optional[str] = Field(None, description="First year of a decade, e.g. '1970'.")
    country: Optional[str] = Field(None, description="Country code (Wikidata QID or DBpedia resource).")
    artist_type: Optional[str] = Field(None, description="'solo', 'band' or 'composer'.")
    endpoint: Optional[str] = Field(None, description="SPARQL endpoint override.")
    limit: int = Field(SEARCH_RESULT_LIMIT, description="Maximum number of artists.")
    sort_by: str = Field("name", description="'name', 'date' or 'popularity'.")
    order: str = Field("asc", description="'asc' or 'desc'.")


@asset(
    name="artist_search_results",
    description="Searches artists on the SPARQL endpoint and stores the result set.",
    group_name="exploration",
)
async def artist_search_results(
    context: AssetExecutionContext,
    config: ArtistSearchConfig,
    explorer: ExplorerResource,
) -> MaterializeResult:
    """
    Runs one artist search and saves the unique artists to ARTIST_SEARCH_FILE.
    A failed request produces an empty result set.
    """
    filters = SearchFilters(
        genre=config.genre,
        decade=config.decade,
        country=config.country,
        artist_type=config.artist_type,
    )
    options = QueryOptions(limit=config.limit, sort_by=config.sort_by, order=config.order)
    context.log.info(f"Searching artists for '{config.name}' with {filters.model_dump(exclude_none=True)}")

    async with explorer.create_explorer(logger=context.log) as client:
        artists = await client.search(
            config.name, filters=filters, endpoint=config.endpoint, options=options
        )

    count = save_models_to_jsonl(artists, ARTIST_SEARCH_FILE)
    context.log.info(f"Saved {count} artists to {ARTIST_SEARCH_FILE}")

    return MaterializeResult(
        metadata={"artists": count, "path": str(ARTIST_SEARCH_FILE)}
    )
