import re
from datetime import date
from typing import Any, Dict, List, Optional

import polars as pl

from musigraph.settings import SIMILAR_ARTISTS_LIMIT
from musigraph.utils.models import (
    Album,
    Artist,
    ArtistStatistics,
    Collaboration,
    CountryDistribution,
    GenreDistribution,
    NetworkData,
    NetworkEdge,
    NetworkNode,
    ProcessedArtistData,
    TimelineEntry,
)

_DATE_PATTERN = re.compile(
    r"^(\d{4})(?:-(\d{2})(?:-(\d{2}))?)?"
    r"(?:T\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?$"
)


######################################################################
#                            DATES
######################################################################


def parse_release_date(value: Optional[str]) -> Optional[date]:
    """
    Parses the date formats returned by the SPARQL endpoints and MusicBrainz.

    Accepts 'YYYY', 'YYYY-MM', 'YYYY-MM-DD' and ISO timestamps such as
    '1969-09-26T00:00:00Z'. Wikidata encodes year precision with zeroed
    month/day ('1969-00-00'), which maps to January 1st.

    Returns:
        The calendar date, or None for missing or unparseable values.
    """
    if not isinstance(value, str):
        return None
    match = _DATE_PATTERN.match(value.strip())
    if not match:
        return None

    year = int(match.group(1))
    month = int(match.group(2) or 1) or 1
    day = int(match.group(3) or 1) or 1
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _sort_by_date_desc(items: List[Any]) -> List[Any]:
    """Most recent first; undated items keep their order at the end."""
    dated = []
    undated = []
    for item in items:
        parsed = parse_release_date(item.release_date)
        if parsed is None:
            undated.append(item)
        else:
            dated.append((parsed, item))
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [item for _, item in dated] + undated


def sort_albums_by_date(albums: List[Album]) -> List[Album]:
    return _sort_by_date_desc(albums)


def sort_collaborations_by_date(collaborations: List[Collaboration]) -> List[Collaboration]:
    return _sort_by_date_desc(collaborations)


def sort_artists_by_influence(artists: List[Artist]) -> List[Artist]:
    """Artists with more genres first (more diverse, more influential)."""
    return sorted(artists, key=lambda artist: len(artist.genres), reverse=True)


######################################################################
#                          ARTIST PROFILE
######################################################################


def calculate_artist_statistics(
    artist: Artist,
    discography: List[Album],
    influences: List[Artist],
    collaborations: List[Collaboration],
    today: Optional[date] = None,
) -> ArtistStatistics:
    today = today or date.today()
    birth = parse_release_date(artist.birth_date)
    active_years = max(0, today.year - birth.year) if birth else 0

    return ArtistStatistics(
        total_albums=len(discography),
        total_influences=len(influences),
        total_collaborations=len(collaborations),
        active_years=active_years,
    )


def process_artist_data(
    artist: Artist,
    discography: List[Album],
    influences: List[Artist],
    collaborations: List[Collaboration],
    today: Optional[date] = None,
) -> ProcessedArtistData:
    """
    Bundles an artist with its sorted sections and summary statistics.

    Collaborations without a primary artist are attributed to `artist`.
    """
    collaborations = [
        collab if collab.artist else collab.model_copy(update={"artist": artist.name})
        for collab in collaborations
    ]
    return ProcessedArtistData(
        basic=artist,
        discography=sort_albums_by_date(discography),
        influences=sort_artists_by_influence(influences),
        collaborations=sort_collaborations_by_date(collaborations),
        statistics=calculate_artist_statistics(
            artist, discography, influences, collaborations, today=today
        ),
    )


######################################################################
#                            NETWORKS
######################################################################


def _root_node(artist: Artist) -> NetworkNode:
    return NetworkNode(id=artist.id, label=artist.name, type="artist", data=artist.model_dump())


def build_influence_network(
    artist: Artist,
    influences: List[Artist],
    influenced: Optional[List[Artist]] = None,
) -> NetworkData:
    """
    Star network around `artist`. Edges point from the influenced artist to
    its influence and are weighted by the other end's genre count.

    `influenced` adds the artists that cite `artist` as an influence. An
    artist on both sides gets one node and two edges.
    """
    nodes = {artist.id: _root_node(artist)}
    edges = []

    def add_node(other: Artist) -> None:
        if other.id not in nodes:
            nodes[other.id] = NetworkNode(
                id=other.id, label=other.name, type="artist", data=other.model_dump()
            )

    for influence in influences:
        add_node(influence)
        edges.append(
            NetworkEdge(
                source=artist.id,
                target=influence.id,
                type="influence",
                weight=len(influence.genres),
            )
        )
    for follower in influenced or []:
        add_node(follower)
        edges.append(
            NetworkEdge(
                source=follower.id,
                target=artist.id,
                type="influence",
                weight=len(follower.genres),
            )
        )
    return NetworkData(nodes=list(nodes.values()), edges=edges)


def build_collaboration_network(
    artist: Artist, collaborations: List[Collaboration]
) -> NetworkData:
    """
    One node per distinct collaborator and one edge per collaboration record.

    Collaborators are keyed by their id, or by name when the id is missing.
    Every edge to a collaborator carries the total number of records with
    that collaborator as its weight.
    """
    nodes = [_root_node(artist)]
    counts: Dict[str, int] = {}
    targets = []

    for collab in collaborations:
        collaborator_key = collab.collaborator_id or collab.collaborator
        if collaborator_key not in counts:
            counts[collaborator_key] = 0
            nodes.append(
                NetworkNode(
                    id=collaborator_key,
                    label=collab.collaborator,
                    type="artist",
                    data={"name": collab.collaborator},
                )
            )
        counts[collaborator_key] += 1
        targets.append(collaborator_key)

    edges = [
        NetworkEdge(source=artist.id, target=target, type="collaboration", weight=counts[target])
        for target in targets
    ]
    return NetworkData(nodes=nodes, edges=edges)


######################################################################
#                      TIMELINES & DISTRIBUTIONS
######################################################################


def build_genre_timeline(albums: List[Album]) -> List[TimelineEntry]:
    """
    Groups albums by release year, counting them and collecting the distinct
    genres of each year in first-seen order. Undated albums are ignored.
    """
    rows = []
    for album in albums:
        released = parse_release_date(album.release_date)
        if released:
            rows.append({"year": released.year, "genre": album.genre or None})
    if not rows:
        return []

    df = pl.from_dicts(rows, schema={"year": pl.Int64, "genre": pl.Utf8})
    timeline = (
        df.group_by("year", maintain_order=True)
        .agg(
            pl.len().alias("count"),
            pl.col("genre").drop_nulls().unique(maintain_order=True).alias("genres"),
        )
        .sort("year")
    )
    return [TimelineEntry(**row) for row in timeline.iter_rows(named=True)]


def _distribution(rows: List[Dict[str, str]], key: str) -> pl.DataFrame:
    """
    Count rows per `key`, keeping each artist name once per group.
    Sorted by descending count; ties keep first-seen order.
    """
    df = pl.from_dicts(rows, schema={key: pl.Utf8, "name": pl.Utf8})
    return (
        df.group_by(key, maintain_order=True)
        .agg(
            pl.len().alias("count"),
            pl.col("name").unique(maintain_order=True).alias("artists"),
        )
        .sort("count", descending=True, maintain_order=True)
    )


def process_geographic_data(artists: List[Artist]) -> List[CountryDistribution]:
    rows = [
        {"country": artist.country, "name": artist.name}
        for artist in artists
        if artist.country
    ]
    if not rows:
        return []
    distribution = _distribution(rows, "country")
    return [CountryDistribution(**row) for row in distribution.iter_rows(named=True)]


def extract_genres(artists: List[Artist]) -> List[GenreDistribution]:
    rows = [
        {"genre": genre, "name": artist.name}
        for artist in artists
        for genre in artist.genres
    ]
    if not rows:
        return []
    distribution = _distribution(rows, "genre")
    return [GenreDistribution(**row) for row in distribution.iter_rows(named=True)]


######################################################################
#                            SIMILARITY
######################################################################


def _jaccard(first: List[str], second: List[str]) -> float:
    union = set(first) | set(second)
    if not union:
        return 0.0
    return len(set(first) & set(second)) / len(union)


def calculate_similarity(first: Artist, second: Artist) -> float:
    """
    Weighted similarity in [0, 1]:
    0.5 * genre Jaccard + 0.3 * instrument Jaccard + 0.2 * same country.

    A missing country never counts as a match.
    """
    same_country = 1.0 if first.country and first.country == second.country else 0.0
    return (
        0.5 * _jaccard(first.genres, second.genres)
        + 0.3 * _jaccard(first.instruments, second.instruments)
        + 0.2 * same_country
    )


def find_similar_artists(
    target: Artist, pool: List[Artist], limit: int = SIMILAR_ARTISTS_LIMIT
) -> List[Artist]:
    scored = [
        (calculate_similarity(target, candidate), candidate)
        for candidate in pool
        if candidate.id != target.id
    ]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [candidate for _, candidate in scored[:limit]]
