from typing import Optional

from dagster import AssetExecutionContext, Config, MaterializeResult, asset
from pydantic import Field

from musigraph.resources import ExplorerResource
from musigraph.settings import ARTIST_GRAPH_FILE, ARTIST_PROFILE_FILE
from musigraph.utils.io_helpers import load_jsonl, save_models_to_jsonl
from musigraph.utils.models import ArtistGraphViews, ProcessedArtistData
from musigraph.utils.sparql_queries import InvalidQueryParameterError, validate_wikidata_id


class ArtistGraphConfig(Config):
    connect_to: Optional[str] = Field(
        None, description="Wikidata QID of an artist to link through a two-step influence chain."
    )


@asset(
    name="artist_graph",
    deps=["artist_profile"],
    description="Wikidata influence and collaboration networks around the profiled artist.",
    group_name="exploration",
)
async def artist_graph(
    context: AssetExecutionContext,
    config: ArtistGraphConfig,
    explorer: ExplorerResource,
) -> MaterializeResult:
    """
    Queries the graph-wide neighbourhood of the profiled artist: who it
    influenced as well as who influenced it, its song collaborators and,
    when `connect_to` is set, the artists bridging it to that artist.

    Only Wikidata artists have these views; a profile from another source
    yields empty networks.
    """
    profile = ProcessedArtistData(**load_jsonl(ARTIST_PROFILE_FILE)[0])
    artist = profile.basic
    views = ArtistGraphViews(artist_id=artist.id, connection_target=config.connect_to)

    try:
        validate_wikidata_id(artist.id, "artist id")
    except InvalidQueryParameterError:
        context.log.warning(f"{artist.id} is not a Wikidata item; skipping the graph views.")
    else:
        async with explorer.create_explorer(logger=context.log) as client:
            views.influence_network = await client.sparql.get_influence_network(artist)
            views.collaboration_network = await client.sparql.get_collaboration_network(artist)
            if config.connect_to:
                views.connections = await client.sparql.find_connections(artist.id, config.connect_to)

    save_models_to_jsonl([views], ARTIST_GRAPH_FILE)
    context.log.info(f"Saved graph views of {artist.name} to {ARTIST_GRAPH_FILE}")

    return MaterializeResult(
        metadata={
            "artist_id": artist.id,
            "influence_nodes": len(views.influence_network.nodes),
            "collaboration_nodes": len(views.collaboration_network.nodes),
            "connections": len(views.connections),
            "path": str(ARTIST_GRAPH_FILE),
        }
    )
