from dagster import AssetExecutionContext, Config, MaterializeResult, asset
from pydantic import Field

from musigraph.settings import (
    ARTIST_INSIGHTS_FILE,
    ARTIST_PROFILE_FILE,
    ARTIST_SEARCH_FILE,
    SIMILAR_ARTISTS_LIMIT,
)
from musigraph.utils.data_processor import (
    build_collaboration_network,
    build_genre_timeline,
    build_influence_network,
    extract_genres,
    find_similar_artists,
    process_geographic_data,
)
from musigraph.utils.io_helpers import load_jsonl, save_models_to_jsonl
from musigraph.utils.models import Artist, ArtistInsights, ProcessedArtistData


class ArtistInsightsConfig(Config):
    similar_limit: int = Field(SIMILAR_ARTISTS_LIMIT, description="Number of similar artists.")


@asset(
    name="artist_insights",
    deps=["artist_profile", "artist_search_results"],
    description="Derives networks, timeline, distributions and similar artists.",
    group_name="exploration",
)
def artist_insights(
    context: AssetExecutionContext, config: ArtistInsightsConfig
) -> MaterializeResult:
    """
    Builds the derived views of the profiled artist:
    influence and collaboration networks and the genre timeline of its
    discography, plus the country and genre distributions of the search
    result set and the most similar artists in it.
    """
    # 1. Load upstream outputs
    profile = ProcessedArtistData(**load_jsonl(ARTIST_PROFILE_FILE)[0])
    pool = [Artist(**record) for record in load_jsonl(ARTIST_SEARCH_FILE)]
    artist = profile.basic

    # 2. Derive
    insights = ArtistInsights(
        artist_id=artist.id,
        influence_network=build_influence_network(artist, profile.influences),
        collaboration_network=build_collaboration_network(artist, profile.collaborations),
        genre_timeline=build_genre_timeline(profile.discography),
        geographic_distribution=process_geographic_data(pool),
        genre_distribution=extract_genres(pool),
        similar_artists=find_similar_artists(artist, pool, limit=config.similar_limit),
    )

    # 3. Save
    save_models_to_jsonl([insights], ARTIST_INSIGHTS_FILE)
    context.log.info(f"Saved insights for {artist.name} to {ARTIST_INSIGHTS_FILE}")

    return MaterializeResult(
        metadata={
            "artist_id": artist.id,
            "influence_nodes": len(insights.influence_network.nodes),
            "collaboration_nodes": len(insights.collaboration_network.nodes),
            "timeline_years": len(insights.genre_timeline),
            "similar_artists": len(insights.similar_artists),
            "path": str(ARTIST_INSIGHTS_FILE),
        }
    )
