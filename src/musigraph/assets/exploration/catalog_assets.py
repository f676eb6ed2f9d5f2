import asyncio
from typing import Optional

from dagster import AssetExecutionContext, Config, MaterializeResult, asset
from pydantic import Field

from musigraph.resources import ExplorerResource
from musigraph.settings import CATALOG_OVERVIEW_FILE, GENRE_CHOICES
from musigraph.utils.io_helpers import save_models_to_jsonl
from musigraph.utils.models import CatalogOverview


class CatalogOverviewConfig(Config):
    """Run configuration of the Wikidata catalog overview."""
    genre: str = Field("Rock", description="Genre name from GENRE_CHOICES, or a Wikidata QID.")
    decade: Optional[str] = Field(None, description="First year of a decade, e.g. '1970'.")
    min_shared_songs: int = Field(2, description="Minimum songs shared by a frequent collaboration pair.")


def resolve_genre_id(genre: str) -> str:
    """Map a known genre name to its QID; anything else is passed through as a QID."""
    return GENRE_CHOICES.get(genre.strip(), genre.strip())


@asset(
    name="catalog_overview",
    description="Genre, decade and collaboration views of the Wikidata music catalog.",
    group_name="exploration",
)
async def catalog_overview(
    context: AssetExecutionContext,
    config: CatalogOverviewConfig,
    explorer: ExplorerResource,
) -> MaterializeResult:
    """
    Queries the catalog-wide views for one genre (and optionally one decade):
    the genre's bands and musicians, its subgenres, the country
    distribution of its musicians, the artists of the decade, the most
    influential and the well-known artists, and the most frequent
    collaboration pairs.
    """
    genre_id = resolve_genre_id(config.genre)
    context.log.info(f"Building catalog overview for genre {genre_id}, decade {config.decade}")

    async with explorer.create_explorer(logger=context.log) as client:
        sparql = client.sparql
        (
            genre_artists,
            genre_musicians,
            subgenres,
            countries,
            influential,
            popular,
            pairs,
        ) = await asyncio.gather(
            sparql.explore_genre(genre_id),
            sparql.search_by_genre(genre_id),
            sparql.get_subgenres(genre_id),
            sparql.get_country_distribution(genre_id),
            sparql.get_most_influential_artists(),
            sparql.get_popular_artists(),
            sparql.get_frequent_collaborations(config.min_shared_songs),
        )
        decade_artists = await sparql.get_decade_artists(config.decade) if config.decade else []

    overview = CatalogOverview(
        genre_id=genre_id,
        decade=config.decade,
        genre_artists=genre_artists,
        genre_musicians=genre_musicians,
        subgenres=subgenres,
        country_distribution=countries,
        decade_artists=decade_artists,
        influential_artists=influential,
        popular_artists=popular,
        frequent_collaborations=pairs,
    )
    save_models_to_jsonl([overview], CATALOG_OVERVIEW_FILE)
    context.log.info(f"Saved catalog overview to {CATALOG_OVERVIEW_FILE}")

    return MaterializeResult(
        metadata={
            "genre_id": genre_id,
            "genre_artists": len(genre_artists),
            "genre_musicians": len(genre_musicians),
            "subgenres": len(subgenres),
            "countries": len(countries),
            "decade_artists": len(decade_artists),
            "collaboration_pairs": len(pairs),
            "path": str(CATALOG_OVERVIEW_FILE),
        }
    )
