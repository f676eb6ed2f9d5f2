from typing import Any, Dict, List, Optional

from musigraph.settings import (
    UNKNOWN_COLLABORATOR_PLACEHOLDER,
    UNTITLED_PLACEHOLDER,
)
from musigraph.utils.models import (
    Album,
    Artist,
    Collaboration,
    CollaborationPair,
    CountryDistribution,
    GenreDistribution,
)
from musigraph.utils.sparql_queries import DBPEDIA, WIKIDATA


def get_sparql_bindings(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Return the row list of a SPARQL JSON response (empty if absent)."""
    return ((response or {}).get("results") or {}).get("bindings") or []


def get_sparql_binding_value(data: Dict[str, Any], key: str) -> Any | None:
    """Safely extract the 'value' from a SPARQL binding."""
    return (data.get(key) or {}).get("value")


def extract_entity_id(uri: Optional[str], schema: str = WIKIDATA) -> Optional[str]:
    """
    Derive the identifier of a resource from its URI.

    Wikidata artists are addressed by their QID (the last path segment);
    DBpedia resources keep the full URI since names are not unique ids there.
    """
    if not uri:
        return None
    if schema == DBPEDIA:
        return uri
    return uri.rstrip("/").rsplit("/", 1)[-1] or None


def fold_artist_bindings(
    bindings: List[Dict[str, Any]],
    schema: str = WIKIDATA,
    id_column: str = "artist",
    label_column: Optional[str] = None,
) -> List[Artist]:
    """
    Fold SPARQL rows into unique artists.

    Rows sharing an identifier are merged: the first row supplies the scalar
    fields and every row may contribute one genre and one instrument.

    Args:
        bindings: Rows from a SPARQL JSON response.
        schema: `WIKIDATA` or `DBPEDIA`; decides how identifiers are derived.
        id_column: Column holding the artist URI ('artist', 'influence', ...).
        label_column: Column holding the display name. Defaults to
            '<id_column>Label'.

    Returns:
        Artists in order of first appearance.
    """
    label_column = label_column or f"{id_column}Label"
    artists: Dict[str, Artist] = {}

    for row in bindings:
        artist_id = extract_entity_id(get_sparql_binding_value(row, id_column), schema)
        if not artist_id:
            continue

        artist = artists.get(artist_id)
        if artist is None:
            artist = Artist(
                id=artist_id,
                name=get_sparql_binding_value(row, label_column) or "",
                mbid=get_sparql_binding_value(row, "mbid"),
                birth_date=get_sparql_binding_value(row, "birthDate"),
                country=get_sparql_binding_value(row, "countryLabel"),
                image=get_sparql_binding_value(row, "image"),
            )
            artists[artist_id] = artist

        genre = get_sparql_binding_value(row, "genreLabel")
        if genre and genre not in artist.genres:
            artist.genres.append(genre)
        instrument = get_sparql_binding_value(row, "instrumentLabel")
        if instrument and instrument not in artist.instruments:
            artist.instruments.append(instrument)

    return list(artists.values())


def map_album_bindings(
    bindings: List[Dict[str, Any]], schema: str = WIKIDATA
) -> List[Album]:
    """One album per row; missing titles get a placeholder."""
    return [
        Album(
            id=extract_entity_id(get_sparql_binding_value(row, "album"), schema) or "",
            title=get_sparql_binding_value(row, "albumLabel") or UNTITLED_PLACEHOLDER,
            release_date=get_sparql_binding_value(row, "releaseDate"),
            label=get_sparql_binding_value(row, "labelLabel"),
            genre=get_sparql_binding_value(row, "genreLabel"),
        )
        for row in bindings
    ]


def map_collaboration_bindings(
    bindings: List[Dict[str, Any]], schema: str = WIKIDATA
) -> List[Collaboration]:
    """
    One collaboration per row.

    The primary artist is left blank; callers that know it fill it in.
    """
    return [
        Collaboration(
            song=get_sparql_binding_value(row, "songLabel") or UNTITLED_PLACEHOLDER,
            collaborator=(
                get_sparql_binding_value(row, "collaboratorLabel")
                or UNKNOWN_COLLABORATOR_PLACEHOLDER
            ),
            collaborator_id=extract_entity_id(
                get_sparql_binding_value(row, "collaborator"), schema
            ),
            release_date=get_sparql_binding_value(row, "releaseDate"),
        )
        for row in bindings
    ]


def _count_value(row: Dict[str, Any], key: str) -> int:
    value = get_sparql_binding_value(row, key)
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def map_country_count_bindings(bindings: List[Dict[str, Any]]) -> List[CountryDistribution]:
    """Rows of `?countryLabel ?artistCount` aggregates; rows without a country are skipped."""
    return [
        CountryDistribution(
            country=get_sparql_binding_value(row, "countryLabel"),
            count=_count_value(row, "artistCount"),
        )
        for row in bindings
        if get_sparql_binding_value(row, "countryLabel")
    ]


def map_subgenre_count_bindings(bindings: List[Dict[str, Any]]) -> List[GenreDistribution]:
    return [
        GenreDistribution(
            genre=get_sparql_binding_value(row, "subgenreLabel"),
            count=_count_value(row, "artistCount"),
        )
        for row in bindings
        if get_sparql_binding_value(row, "subgenreLabel")
    ]


def map_collaboration_pair_bindings(
    bindings: List[Dict[str, Any]]
) -> List[CollaborationPair]:
    """
    One pair per row of `?artist1 ?artist2 ?collaborationCount`.

    The query matches every pair in both orders; only the first order seen
    is kept.
    """
    pairs: Dict[frozenset, CollaborationPair] = {}
    for row in bindings:
        first_id = extract_entity_id(get_sparql_binding_value(row, "artist1"))
        second_id = extract_entity_id(get_sparql_binding_value(row, "artist2"))
        if not first_id or not second_id:
            continue
        key = frozenset((first_id, second_id))
        if key in pairs:
            continue
        pairs[key] = CollaborationPair(
            first_id=first_id,
            first_name=get_sparql_binding_value(row, "artist1Label") or first_id,
            second_id=second_id,
            second_name=get_sparql_binding_value(row, "artist2Label") or second_id,
            count=_count_value(row, "collaborationCount"),
        )
    return list(pairs.values())
