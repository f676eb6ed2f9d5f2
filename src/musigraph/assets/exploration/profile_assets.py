from typing import List, Optional

from dagster import AssetExecutionContext, Config, MaterializeResult, asset
from pydantic import Field

from musigraph.resources import ExplorerResource
from musigraph.settings import ARTIST_PROFILE_FILE, ARTIST_SEARCH_FILE
from musigraph.utils.io_helpers import load_jsonl, save_models_to_jsonl
from musigraph.utils.models import Artist


class ArtistProfileConfig(Config):
    """Run configuration of a profile load."""
    artist_id: Optional[str] = Field(
        None, description="Artist to profile; the first search result if empty."
    )
    source: str = Field("sparql", description="'sparql', 'musicbrainz' or 'auto'.")
    endpoint: Optional[str] = Field(None, description="SPARQL endpoint override.")
    deep: bool = Field(False, description="Use per-release MusicBrainz lookups.")


def select_artist(artists: List[Artist], artist_id: Optional[str] = None) -> Artist:
    """
    Picks the artist to profile from the search results.

    Raises:
        ValueError: if the results are empty or do not contain `artist_id`.
    """
    if artist_id:
        for artist in artists:
            if artist.id == artist_id:
                return artist
        raise ValueError(f"Artist {artist_id} is not among the search results.")
    if not artists:
        raise ValueError("The search returned no artists to profile.")
    return artists[0]


@asset(
    name="artist_profile",
    deps=["artist_search_results"],
    description="Loads discography, influences and collaborations of one searched artist.",
    group_name="exploration",
)
async def artist_profile(
    context: AssetExecutionContext,
    config: ArtistProfileConfig,
    explorer: ExplorerResource,
) -> MaterializeResult:
    artists = [Artist(**record) for record in load_jsonl(ARTIST_SEARCH_FILE)]
    artist = select_artist(artists, config.artist_id)
    context.log.info(f"Loading profile of {artist.name} ({artist.id}) from '{config.source}'.")

    async with explorer.create_explorer(logger=context.log) as client:
        profile = await client.load_profile(
            artist, source=config.source, endpoint=config.endpoint, deep=config.deep
        )

    save_models_to_jsonl([profile], ARTIST_PROFILE_FILE)
    stats = profile.statistics
    context.log.info(
        f"Profile of {artist.name}: {stats.total_albums} albums, "
        f"{stats.total_influences} influences, {stats.total_collaborations} collaborations."
    )

    return MaterializeResult(
        metadata={
            "artist_id": artist.id,
            "albums": stats.total_albums,
            "influences": stats.total_influences,
            "collaborations": stats.total_collaborations,
            "active_years": stats.active_years,
            "path": str(ARTIST_PROFILE_FILE),
        }
    )
