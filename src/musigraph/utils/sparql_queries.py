import re
from typing import Dict, Iterable, List, Optional, Tuple

from musigraph.settings import (
    DBPEDIA_RESOURCE_URL,
    LABEL_LANGUAGES,
    TOP_BAND_IDS,
    WIKIDATA_ENTITY_URL,
)
from musigraph.utils.models import QueryOptions, SearchFilters


WIKIDATA = "wikidata"
DBPEDIA = "dbpedia"

WIKIDATA_PREFIXES = f"""PREFIX wd: <{WIKIDATA_ENTITY_URL}>
PREFIX wdt: <http://www.wikidata.org/prop/direct/>
PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
PREFIX wikibase: <http://wikiba.se/ontology#>
PREFIX bd: <http://www.bigdata.com/rdf#>"""

DBPEDIA_PREFIXES = """PREFIX dbo: <http://dbpedia.org/ontology/>
PREFIX dbp: <http://dbpedia.org/property/>
PREFIX dbr: <http://dbpedia.org/resource/>
PREFIX rdfs: <http://www.w3.org/2000/01/rdf-schema#>
PREFIX foaf: <http://xmlns.com/foaf/0.1/>"""

LABEL_SERVICE = (
    f'SERVICE wikibase:label {{ bd:serviceParam wikibase:language "{LABEL_LANGUAGES}". }}'
)

_WIKIDATA_ID_PATTERN = re.compile(r"^Q[1-9][0-9]*$")
_DECADE_PATTERN = re.compile(r"^[0-9]{4}$")
# Characters that may not appear inside an IRI reference.
_IRI_FORBIDDEN = re.compile(r'[\s<>"{}|^`\\]')


class InvalidQueryParameterError(ValueError):
    """Raised when a filter or identifier cannot be placed safely into a query."""


######################################################################
#                      INPUT SANITIZATION HELPERS
######################################################################


def detect_schema(endpoint: Optional[str]) -> str:
    """Return the query vocabulary an endpoint speaks (Wikidata unless it is DBpedia)."""
    if endpoint and "dbpedia" in endpoint.lower():
        return DBPEDIA
    return WIKIDATA


def escape_literal(text: str) -> str:
    """
    Escape free text so it can be embedded in a double-quoted SPARQL literal.

    Args:
        text: Raw user input.

    Returns:
        The escaped text, without surrounding quotes.
    """
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )


def validate_wikidata_id(value: str, field: str = "id") -> str:
    """Ensure a value is a Wikidata item id such as 'Q1299'."""
    candidate = (value or "").strip()
    if not _WIKIDATA_ID_PATTERN.match(candidate):
        raise InvalidQueryParameterError(
            f"Invalid Wikidata {field}: {value!r} (expected an id like 'Q1299')"
        )
    return candidate


def dbpedia_resource(value: str, field: str = "resource") -> str:
    """
    Turn a DBpedia resource name or full URI into an IRI reference.

    Args:
        value: Either a full 'http(s)://' URI or a bare resource name
            (spaces are converted to underscores, as DBpedia does).
        field: Name of the parameter, used in error messages.

    Returns:
        The IRI wrapped in angle brackets.
    """
    candidate = (value or "").strip()
    if not candidate.startswith(("http://", "https://")):
        candidate = DBPEDIA_RESOURCE_URL + candidate.replace(" ", "_")
    if candidate == DBPEDIA_RESOURCE_URL or _IRI_FORBIDDEN.search(candidate):
        raise InvalidQueryParameterError(f"Invalid DBpedia {field}: {value!r}")
    return f"<{candidate}>"


def decade_bounds(decade: str) -> Tuple[int, int]:
    """
    Expand a decade such as '1970' into its inclusive year range.

    Returns:
        (start_year, end_year), e.g. (1970, 1979).
    """
    candidate = str(decade).strip()
    if not _DECADE_PATTERN.match(candidate):
        raise InvalidQueryParameterError(
            f"Invalid decade: {decade!r} (expected a four digit year like '1970')"
        )
    start_year = int(candidate)
    return start_year, start_year + 9


def _year_range_filter(variable: str, decade: str) -> str:
    start_year, end_year = decade_bounds(decade)
    return f"FILTER(YEAR({variable}) >= {start_year} && YEAR({variable}) <= {end_year})"


def _solution_modifiers(options: QueryOptions, sort_fields: Dict[str, str]) -> str:
    sort_field = sort_fields.get(options.sort_by, sort_fields["name"])
    modifiers = [
        f"ORDER BY {options.order.upper()}({sort_field})",
        f"LIMIT {options.limit}",
    ]
    if options.offset:
        modifiers.append(f"OFFSET {options.offset}")
    return "\n".join(modifiers)


######################################################################
#                       ARTIST SEARCH QUERIES
######################################################################


def wikidata_artist_type_block(artist_type: Optional[str]) -> str:
    """Return the graph pattern that selects artists of the requested type."""
    if artist_type == "band":
        return "?artist wdt:P31 wd:Q215380 ."
    if artist_type == "solo":
        return (
            "?artist wdt:P31 wd:Q5 ; wdt:P106 wd:Q639669 .\n"
            "  FILTER NOT EXISTS { ?artist wdt:P31 wd:Q215380 }"
        )
    if artist_type == "composer":
        return "?artist wdt:P31 wd:Q5 ; wdt:P106 wd:Q36834 ."
    return (
        "{ ?artist wdt:P31 wd:Q215380 . }\n"
        "  UNION\n"
        "  { ?artist wdt:P31 wd:Q5 ; wdt:P106 wd:Q639669 . }"
    )


def wikidata_filter_clauses(filters: SearchFilters) -> List[str]:
    """
    Build one constraint clause per filter that is set.

    Args:
        filters: Search filters; the artist type is handled by
            `wikidata_artist_type_block`.

    Returns:
        A list of SPARQL clauses in a fixed order (name, genre, decade, country).
    """
    clauses = []
    if filters.name and filters.name.strip():
        name = escape_literal(filters.name.strip())
        clauses.append(f'FILTER(CONTAINS(LCASE(?artistLabel), LCASE("{name}")))')
    if filters.genre:
        genre = validate_wikidata_id(filters.genre, "genre")
        clauses.append(f"?artist wdt:P136 wd:{genre} .")
    if filters.decade:
        clauses.append(
            "?artist wdt:P571|wdt:P569 ?startDate . "
            + _year_range_filter("?startDate", filters.decade)
        )
    if filters.country:
        country = validate_wikidata_id(filters.country, "country")
        clauses.append(f"?artist wdt:P27|wdt:P495 wd:{country} .")
    return clauses


def dbpedia_artist_type_block(artist_type: Optional[str]) -> str:
    if artist_type == "band":
        return "?artist a dbo:Band ."
    if artist_type == "solo":
        return (
            "?artist a dbo:MusicalArtist .\n"
            "  FILTER NOT EXISTS { ?artist dbo:bandMember ?member }"
        )
    if artist_type == "composer":
        return "?artist a dbo:MusicalArtist ; dbo:occupation dbr:Composer ."
    return "?artist a dbo:MusicalArtist ."


def dbpedia_filter_clauses(filters: SearchFilters) -> List[str]:
    """DBpedia counterpart of `wikidata_filter_clauses`."""
    clauses = []
    if filters.name and filters.name.strip():
        name = escape_literal(filters.name.strip())
        clauses.append(f'FILTER(CONTAINS(LCASE(?artistLabel), LCASE("{name}")))')
    if filters.genre:
        clauses.append(f"?artist dbo:genre {dbpedia_resource(filters.genre, 'genre')} .")
    if filters.decade:
        clauses.append(
            "?artist dbo:activeYearsStartYear ?startYear . "
            + _year_range_filter("?startYear", filters.decade)
        )
    if filters.country:
        clauses.append(
            "?artist (dbo:hometown|dbo:birthPlace)/dbo:country|dbo:country "
            f"{dbpedia_resource(filters.country, 'country')} ."
        )
    return clauses


def build_artist_search_query(
    filters: SearchFilters,
    options: Optional[QueryOptions] = None,
    schema: str = WIKIDATA,
) -> str:
    """
    Build the artist search query for the given schema.

    Args:
        filters: Optional name, genre, decade, country and artist type.
        options: Limit, offset and sorting. Defaults to `QueryOptions()`.
        schema: `WIKIDATA` or `DBPEDIA`.

    Returns:
        A SPARQL query string selecting one row per artist/genre/instrument
        combination, to be folded by the result normalizer.
    """
    options = options or QueryOptions()
    if schema == DBPEDIA:
        return _build_dbpedia_artist_search_query(filters, options)

    clauses = "\n  ".join(wikidata_filter_clauses(filters))
    popularity = (
        "OPTIONAL { ?artist wikibase:sitelinks ?linkcount }"
        if options.sort_by == "popularity"
        else ""
    )
    modifiers = _solution_modifiers(
        options,
        {"name": "?artistLabel", "date": "?birthDate", "popularity": "?linkcount"},
    )
    return f"""{WIKIDATA_PREFIXES}

SELECT DISTINCT ?artist ?artistLabel ?mbid ?birthDate ?country ?countryLabel ?genre ?genreLabel ?instrument ?instrumentLabel ?image
WHERE {{
  {wikidata_artist_type_block(filters.artist_type)}
  ?artist rdfs:label ?artistLabel .
  FILTER(LANG(?artistLabel) = "es" || LANG(?artistLabel) = "en")
  {clauses}
  OPTIONAL {{ ?artist wdt:P434 ?mbid }}
  OPTIONAL {{ ?artist wdt:P569 ?birthDate }}
  OPTIONAL {{ ?artist wdt:P571 ?birthDate }}
  OPTIONAL {{ ?artist wdt:P27 ?country }}
  OPTIONAL {{ ?artist wdt:P495 ?country }}
  OPTIONAL {{ ?artist wdt:P136 ?genre }}
  OPTIONAL {{ ?artist wdt:P1303 ?instrument }}
  OPTIONAL {{ ?artist wdt:P18 ?image }}
  {popularity}
  {LABEL_SERVICE}
}}
{modifiers}
"""


def _build_dbpedia_artist_search_query(
    filters: SearchFilters, options: QueryOptions
) -> str:
    clauses = "\n  ".join(dbpedia_filter_clauses(filters))
    modifiers = _solution_modifiers(
        options, {"name": "?artistLabel", "date": "?birthDate"}
    )
    return f"""{DBPEDIA_PREFIXES}

SELECT DISTINCT ?artist ?artistLabel ?birthDate ?countryLabel ?genreLabel ?instrumentLabel ?image
WHERE {{
  {dbpedia_artist_type_block(filters.artist_type)}
  ?artist rdfs:label ?artistLabel .
  FILTER (lang(?artistLabel) = 'es' || lang(?artistLabel) = 'en')
  {clauses}
  OPTIONAL {{ ?artist dbo:birthDate ?birthDate }}
  OPTIONAL {{ ?artist dbo:birthPlace/rdfs:label ?countryLabel . FILTER (lang(?countryLabel) = 'es' || lang(?countryLabel) = 'en') }}
  OPTIONAL {{ ?artist dbo:genre/rdfs:label ?genreLabel . FILTER (lang(?genreLabel) = 'es' || lang(?genreLabel) = 'en') }}
  OPTIONAL {{ ?artist dbo:instrument/rdfs:label ?instrumentLabel . FILTER (lang(?instrumentLabel) = 'es' || lang(?instrumentLabel) = 'en') }}
  OPTIONAL {{ ?artist foaf:depiction ?image }}
  OPTIONAL {{ ?artist dbo:thumbnail ?image }}
}}
{modifiers}
"""


def build_flexible_name_query(name: str, limit: int = 10) -> str:
    """Looser name search over any person with the 'musician' occupation."""
    escaped = escape_literal(name.strip())
    return f"""{WIKIDATA_PREFIXES}

SELECT DISTINCT ?artist ?artistLabel ?mbid ?birthDate ?country ?countryLabel ?genre ?genreLabel ?instrument ?instrumentLabel ?image
WHERE {{
  ?artist wdt:P106 wd:Q639669 .
  {{
    ?artist rdfs:label ?artistLabel .
    FILTER(CONTAINS(LCASE(?artistLabel), LCASE("{escaped}")))
  }}
  OPTIONAL {{ ?artist wdt:P434 ?mbid }}
  OPTIONAL {{ ?artist wdt:P569 ?birthDate }}
  OPTIONAL {{ ?artist wdt:P27 ?country }}
  OPTIONAL {{ ?artist wdt:P136 ?genre }}
  OPTIONAL {{ ?artist wdt:P1303 ?instrument }}
  OPTIONAL {{ ?artist wdt:P18 ?image }}
  {LABEL_SERVICE}
}}
LIMIT {limit}
"""


def build_artists_by_genre_query(genre_id: str, limit: int = 20) -> str:
    """Bands and musicians tagged with a genre, oldest formation first."""
    genre = validate_wikidata_id(genre_id, "genre")
    return f"""{WIKIDATA_PREFIXES}

SELECT DISTINCT ?artist ?artistLabel ?country ?countryLabel ?birthDate
WHERE {{
  {{
    ?artist wdt:P31 wd:Q215380 .
    ?artist wdt:P136 wd:{genre} .
  }}
  UNION
  {{
    ?artist wdt:P31 wd:Q5 ; wdt:P106 wd:Q639669 .
    ?artist wdt:P136 wd:{genre} .
  }}
  OPTIONAL {{ ?artist wdt:P495 ?country }}
  OPTIONAL {{ ?artist wdt:P27 ?country }}
  OPTIONAL {{ ?artist wdt:P571 ?birthDate }}
  {LABEL_SERVICE}
}}
ORDER BY ?birthDate
LIMIT {limit}
"""


def build_top_bands_query(artist_ids: Optional[Iterable[str]] = None) -> str:
    """Fetch a fixed list of well-known artists by id."""
    ids = [validate_wikidata_id(qid) for qid in (artist_ids or TOP_BAND_IDS)]
    values = " ".join(f"wd:{qid}" for qid in ids)
    return f"""{WIKIDATA_PREFIXES}

SELECT DISTINCT ?artist ?artistLabel ?mbid ?birthDate ?country ?countryLabel ?genre ?genreLabel ?image
WHERE {{
  VALUES ?artist {{ {values} }}
  OPTIONAL {{ ?artist wdt:P434 ?mbid }}
  OPTIONAL {{ ?artist wdt:P571 ?birthDate }}
  OPTIONAL {{ ?artist wdt:P495 ?country }}
  OPTIONAL {{ ?artist wdt:P27 ?country }}
  OPTIONAL {{ ?artist wdt:P136 ?genre }}
  OPTIONAL {{ ?artist wdt:P18 ?image }}
  {LABEL_SERVICE}
}}
"""


def build_connection_test_query() -> str:
    return f"""{WIKIDATA_PREFIXES}

SELECT ?artist ?artistLabel WHERE {{
  ?artist wdt:P31 wd:Q215380 .
  {LABEL_SERVICE}
}}
LIMIT 3
"""


######################################################################
#                 DISCOGRAPHY / INFLUENCES / COLLABORATIONS
######################################################################


def build_discography_query(artist_id: str, schema: str = WIKIDATA, limit: int = 50) -> str:
    """
    Build the SPARQL query to fetch albums performed by an artist.

    Args:
        artist_id: Wikidata QID, or the full DBpedia resource URI.
        schema: `WIKIDATA` or `DBPEDIA`.
        limit: Maximum number of rows.

    Returns:
        A SPARQL query string selecting ?album ?albumLabel ?releaseDate and
        label information (plus ?genreLabel on DBpedia).
    """
    if schema == DBPEDIA:
        artist = dbpedia_resource(artist_id, "artist")
        return f"""{DBPEDIA_PREFIXES}

SELECT DISTINCT ?album ?albumLabel ?releaseDate ?labelLabel ?genreLabel
WHERE {{
  ?album a dbo:Album ;
         dbo:artist {artist} ;
         rdfs:label ?albumLabel .
  FILTER (lang(?albumLabel) = 'es' || lang(?albumLabel) = 'en')
  OPTIONAL {{ ?album dbo:releaseDate ?releaseDate }}
  OPTIONAL {{ ?album dbp:released ?releaseDate }}
  OPTIONAL {{ ?album dbo:recordLabel/rdfs:label ?labelLabel . FILTER (lang(?labelLabel) = 'es' || lang(?labelLabel) = 'en') }}
  OPTIONAL {{ ?album dbo:genre/rdfs:label ?genreLabel . FILTER (lang(?genreLabel) = 'es' || lang(?genreLabel) = 'en') }}
}}
ORDER BY ?releaseDate
LIMIT {limit}
"""

    artist = validate_wikidata_id(artist_id, "artist id")
    return f"""{WIKIDATA_PREFIXES}

SELECT DISTINCT ?album ?albumLabel ?releaseDate ?label ?labelLabel
WHERE {{
  ?album wdt:P31/wdt:P279* wd:Q482994 ;  # any kind of album
         wdt:P175 wd:{artist} .         # performer
  OPTIONAL {{ ?album wdt:P577 ?releaseDate }}
  OPTIONAL {{ ?album wdt:P264 ?label }}
  {LABEL_SERVICE}
}}
ORDER BY ?releaseDate
LIMIT {limit}
"""


def build_influences_query(artist_id: str, schema: str = WIKIDATA, limit: int = 20) -> str:
    """Artists the given artist was influenced by (bound as ?influence)."""
    if schema == DBPEDIA:
        artist = dbpedia_resource(artist_id, "artist")
        return f"""{DBPEDIA_PREFIXES}

SELECT DISTINCT ?influence ?influenceLabel ?birthDate ?countryLabel ?genreLabel ?image
WHERE {{
  {artist} dbo:influencedBy ?influence .
  ?influence rdfs:label ?influenceLabel .
  FILTER (lang(?influenceLabel) = 'es' || lang(?influenceLabel) = 'en')
  OPTIONAL {{ ?influence dbo:birthDate ?birthDate }}
  OPTIONAL {{ ?influence dbo:birthPlace/rdfs:label ?countryLabel . FILTER (lang(?countryLabel) = 'es' || lang(?countryLabel) = 'en') }}
  OPTIONAL {{ ?influence dbo:genre/rdfs:label ?genreLabel . FILTER (lang(?genreLabel) = 'es' || lang(?genreLabel) = 'en') }}
  OPTIONAL {{ ?influence foaf:depiction ?image }}
  OPTIONAL {{ ?influence dbo:thumbnail ?image }}
}}
LIMIT {limit}
"""

    artist = validate_wikidata_id(artist_id, "artist id")
    return f"""{WIKIDATA_PREFIXES}

SELECT DISTINCT ?influence ?influenceLabel ?mbid ?birthDate ?country ?countryLabel ?genre ?genreLabel ?image
WHERE {{
  wd:{artist} wdt:P737 ?influence .  # influenced by
  OPTIONAL {{ ?influence wdt:P434 ?mbid }}
  OPTIONAL {{ ?influence wdt:P569 ?birthDate }}
  OPTIONAL {{ ?influence wdt:P571 ?birthDate }}
  OPTIONAL {{ ?influence wdt:P27 ?country }}
  OPTIONAL {{ ?influence wdt:P495 ?country }}
  OPTIONAL {{ ?influence wdt:P136 ?genre }}
  OPTIONAL {{ ?influence wdt:P18 ?image }}
  {LABEL_SERVICE}
}}
LIMIT {limit}
"""


def build_collaborations_query(artist_id: str, schema: str = WIKIDATA, limit: int = 30) -> str:
    """Songs performed by the artist together with at least one other performer."""
    if schema == DBPEDIA:
        artist = dbpedia_resource(artist_id, "artist")
        return f"""{DBPEDIA_PREFIXES}

SELECT DISTINCT ?song ?songLabel ?collaborator ?collaboratorLabel ?releaseDate
WHERE {{
  ?song a dbo:Song ;
        dbo:artist {artist} ;
        dbo:artist ?collaborator ;
        rdfs:label ?songLabel .
  FILTER (?collaborator != {artist})
  FILTER (lang(?songLabel) = 'es' || lang(?songLabel) = 'en')
  ?collaborator rdfs:label ?collaboratorLabel .
  FILTER (lang(?collaboratorLabel) = 'es' || lang(?collaboratorLabel) = 'en')
  OPTIONAL {{ ?song dbo:releaseDate ?releaseDate }}
  OPTIONAL {{ ?song dbp:released ?releaseDate }}
}}
ORDER BY DESC(?releaseDate)
LIMIT {limit}
"""

    artist = validate_wikidata_id(artist_id, "artist id")
    return f"""{WIKIDATA_PREFIXES}

SELECT DISTINCT ?song ?songLabel ?collaborator ?collaboratorLabel ?releaseDate
WHERE {{
  ?song wdt:P31/wdt:P279* wd:Q7366 ;  # song or musical composition
        wdt:P175 wd:{artist} ;
        wdt:P175 ?collaborator .
  FILTER(?collaborator != wd:{artist})
  OPTIONAL {{ ?song wdt:P577 ?releaseDate }}
  {LABEL_SERVICE}
}}
ORDER BY DESC(?releaseDate)
LIMIT {limit}
"""


######################################################################
#                        EXPLORATION QUERIES
######################################################################


def build_genre_exploration_query(genre_id: str, limit: int = 50) -> str:
    genre = validate_wikidata_id(genre_id, "genre")
    return f"""{WIKIDATA_PREFIXES}

SELECT ?artist ?artistLabel ?country ?countryLabel ?birthDate ?genre ?genreLabel
WHERE {{
  ?artist wdt:P31/wdt:P279* wd:Q215380 ;
          wdt:P136 wd:{genre} .
  OPTIONAL {{ ?artist wdt:P495 ?country }}
  OPTIONAL {{ ?artist wdt:P571 ?birthDate }}
  OPTIONAL {{ ?artist wdt:P136 ?genre }}
  {LABEL_SERVICE}
}}
ORDER BY ?birthDate
LIMIT {limit}
"""


def build_decade_timeline_query(decade: str, limit: int = 100) -> str:
    """Musicians born and bands formed within a decade."""
    date_filter = _year_range_filter("?birthDate", decade)
    return f"""{WIKIDATA_PREFIXES}

SELECT ?artist ?artistLabel ?genre ?genreLabel ?birthDate
WHERE {{
  {{
    ?artist wdt:P31 wd:Q5 ;
            wdt:P106 wd:Q639669 ;
            wdt:P569 ?birthDate .
    {date_filter}
  }}
  UNION
  {{
    ?artist wdt:P31 wd:Q215380 ;
            wdt:P571 ?birthDate .
    {date_filter}
  }}
  OPTIONAL {{ ?artist wdt:P136 ?genre }}
  {LABEL_SERVICE}
}}
ORDER BY ?birthDate
LIMIT {limit}
"""


def build_influence_network_query(artist_id: str, limit: int = 100) -> str:
    """Both directions of the influence relation around one artist."""
    artist = validate_wikidata_id(artist_id, "artist id")
    return f"""{WIKIDATA_PREFIXES}

SELECT ?influence ?influenceLabel ?influenced ?influencedLabel ?genre ?genreLabel
WHERE {{
  {{
    wd:{artist} wdt:P737 ?influence .
    ?influence wdt:P136 ?genre .
  }}
  UNION
  {{
    ?influenced wdt:P737 wd:{artist} .
    ?influenced wdt:P136 ?genre .
  }}
  {LABEL_SERVICE}
}}
LIMIT {limit}
"""


def build_collaboration_network_query(artist_id: str, limit: int = 50) -> str:
    artist = validate_wikidata_id(artist_id, "artist id")
    return f"""{WIKIDATA_PREFIXES}

SELECT ?collaborator ?collaboratorLabel ?song ?songLabel ?releaseDate
WHERE {{
  ?song wdt:P31 wd:Q7366 ;
        wdt:P175 wd:{artist} ;
        wdt:P175 ?collaborator ;
        wdt:P577 ?releaseDate .
  FILTER(?collaborator != wd:{artist})
  {LABEL_SERVICE}
}}
ORDER BY DESC(?releaseDate)
LIMIT {limit}
"""


def build_geographic_distribution_query(genre_id: Optional[str] = None, limit: int = 50) -> str:
    """Count musicians per country of citizenship, optionally within one genre."""
    genre_clause = ""
    if genre_id:
        genre_clause = f"?artist wdt:P136 wd:{validate_wikidata_id(genre_id, 'genre')} ."
    return f"""{WIKIDATA_PREFIXES}

SELECT ?country ?countryLabel (COUNT(?artist) AS ?artistCount)
WHERE {{
  ?artist wdt:P31 wd:Q5 ;
          wdt:P106 wd:Q639669 ;
          wdt:P27 ?country .
  {genre_clause}
  {LABEL_SERVICE}
}}
GROUP BY ?country ?countryLabel
ORDER BY DESC(?artistCount)
LIMIT {limit}
"""


def build_popular_artists_query(limit: int = 20) -> str:
    """Musicians ranked by how many artists cite them as an influence."""
    return f"""{WIKIDATA_PREFIXES}

SELECT ?artist ?artistLabel (COUNT(?influenced) AS ?influenceCount)
WHERE {{
  ?artist wdt:P31 wd:Q5 ;
          wdt:P106 wd:Q639669 .
  ?influenced wdt:P737 ?artist .
  {LABEL_SERVICE}
}}
GROUP BY ?artist ?artistLabel
ORDER BY DESC(?influenceCount)
LIMIT {limit}
"""


def build_connections_query(first_artist_id: str, second_artist_id: str, limit: int = 10) -> str:
    """Intermediate artists linking two artists through a two-step influence chain."""
    first = validate_wikidata_id(first_artist_id, "artist id")
    second = validate_wikidata_id(second_artist_id, "artist id")
    return f"""{WIKIDATA_PREFIXES}

SELECT ?intermediate ?intermediateLabel
WHERE {{
  wd:{first} wdt:P737 ?intermediate .
  ?intermediate wdt:P737 wd:{second} .
  {LABEL_SERVICE}
}}
LIMIT {limit}
"""


def build_subgenres_query(genre_id: str, limit: int = 20) -> str:
    genre = validate_wikidata_id(genre_id, "genre")
    return f"""{WIKIDATA_PREFIXES}

SELECT ?subgenre ?subgenreLabel (COUNT(?artist) AS ?artistCount)
WHERE {{
  ?artist wdt:P31 wd:Q5 ;
          wdt:P106 wd:Q639669 ;
          wdt:P136 ?subgenre .
  ?subgenre wdt:P279* wd:{genre} .
  {LABEL_SERVICE}
}}
GROUP BY ?subgenre ?subgenreLabel
ORDER BY DESC(?artistCount)
LIMIT {limit}
"""


def build_frequent_collaborations_query(min_songs: int = 2, limit: int = 50) -> str:
    """Pairs of performers sharing at least `min_songs` songs."""
    return f"""{WIKIDATA_PREFIXES}

SELECT ?artist1 ?artist1Label ?artist2 ?artist2Label (COUNT(?song) AS ?collaborationCount)
WHERE {{
  ?song wdt:P31 wd:Q7366 ;
        wdt:P175 ?artist1 ;
        wdt:P175 ?artist2 .
  FILTER(?artist1 != ?artist2)
  {LABEL_SERVICE}
}}
GROUP BY ?artist1 ?artist1Label ?artist2 ?artist2Label
HAVING(?collaborationCount >= {int(min_songs)})
ORDER BY DESC(?collaborationCount)
LIMIT {limit}
"""
