from musigraph.utils.normalizers import (
    extract_entity_id,
    fold_artist_bindings,
    get_sparql_binding_value,
    get_sparql_bindings,
    map_album_bindings,
    map_collaboration_bindings,
    map_collaboration_pair_bindings,
    map_country_count_bindings,
    map_subgenre_count_bindings,
)
from musigraph.utils.sparql_queries import DBPEDIA, WIKIDATA


def binding(**values):
    """Build one SPARQL JSON row from plain values."""
    return {key: {"type": "literal", "value": value} for key, value in values.items()}


def test_get_sparql_bindings_handles_missing_sections():
    assert get_sparql_bindings({}) == []
    assert get_sparql_bindings(None) == []
    assert get_sparql_bindings({"results": {"bindings": [{"a": 1}]}}) == [{"a": 1}]


def test_get_sparql_bindings_handles_null_sections():
    assert get_sparql_bindings({"results": None}) == []
    assert get_sparql_bindings({"results": {"bindings": None}}) == []


def test_get_sparql_binding_value_handles_null_cell():
    assert get_sparql_binding_value({"artist": None}, "artist") is None
    assert get_sparql_binding_value({}, "artist") is None
    assert get_sparql_binding_value({"artist": {"value": "Q1"}}, "artist") == "Q1"


def test_extract_entity_id_per_schema():
    assert extract_entity_id("http://www.wikidata.org/entity/Q1299", WIKIDATA) == "Q1299"
    assert (
        extract_entity_id("http://dbpedia.org/resource/The_Beatles", DBPEDIA)
        == "http://dbpedia.org/resource/The_Beatles"
    )
    assert extract_entity_id(None) is None


def test_fold_artist_bindings_merges_rows_of_same_artist():
    """Two rows of the same artist fold into one artist with both genres."""
    # 1. Setup
    rows = [
        binding(
            artist="http://www.wikidata.org/entity/Q1299",
            artistLabel="The Beatles",
            mbid="b10bbbfc-cf9e-42e0-be17-e2c3e1d2600d",
            countryLabel="United Kingdom",
            genreLabel="Rock",
            instrumentLabel="Guitar",
        ),
        binding(
            artist="http://www.wikidata.org/entity/Q1299",
            artistLabel="The Beatles",
            countryLabel="Ignored",
            genreLabel="Pop",
            instrumentLabel="Guitar",
        ),
        binding(
            artist="http://www.wikidata.org/entity/Q1299",
            artistLabel="The Beatles",
            genreLabel="Rock",
        ),
    ]

    # 2. Action
    artists = fold_artist_bindings(rows)

    # 3. Assertions
    assert len(artists) == 1
    beatles = artists[0]
    assert beatles.id == "Q1299"
    assert beatles.name == "The Beatles"
    assert beatles.genres == ["Rock", "Pop"]
    assert beatles.instruments == ["Guitar"]
    assert beatles.country == "United Kingdom"
    assert beatles.mbid == "b10bbbfc-cf9e-42e0-be17-e2c3e1d2600d"


def test_fold_artist_bindings_keeps_first_appearance_order_and_skips_rows_without_id():
    rows = [
        binding(artist="http://www.wikidata.org/entity/Q2", artistLabel="Second"),
        binding(artistLabel="No id"),
        binding(artist="http://www.wikidata.org/entity/Q1", artistLabel="First"),
        binding(artist="http://www.wikidata.org/entity/Q2", artistLabel="Second"),
    ]

    artists = fold_artist_bindings(rows)

    assert [artist.id for artist in artists] == ["Q2", "Q1"]


def test_fold_artist_bindings_reads_influence_column():
    rows = [
        binding(
            influence="http://www.wikidata.org/entity/Q392",
            influenceLabel="Bob Dylan",
            genreLabel="Folk",
        )
    ]

    influences = fold_artist_bindings(rows, id_column="influence")

    assert influences[0].id == "Q392"
    assert influences[0].name == "Bob Dylan"
    assert influences[0].genres == ["Folk"]


def test_fold_artist_bindings_dbpedia_keeps_full_uri():
    rows = [
        binding(
            artist="http://dbpedia.org/resource/Queen_(band)",
            artistLabel="Queen",
        )
    ]

    artists = fold_artist_bindings(rows, DBPEDIA)

    assert artists[0].id == "http://dbpedia.org/resource/Queen_(band)"


def test_map_album_bindings_uses_title_placeholder():
    rows = [
        binding(
            album="http://www.wikidata.org/entity/Q199585",
            albumLabel="Abbey Road",
            releaseDate="1969-09-26T00:00:00Z",
            labelLabel="Apple Records",
        ),
        binding(album="http://www.wikidata.org/entity/Q1"),
    ]

    albums = map_album_bindings(rows)

    assert albums[0].id == "Q199585"
    assert albums[0].title == "Abbey Road"
    assert albums[0].label == "Apple Records"
    assert albums[1].title == "Untitled"
    assert albums[1].release_date is None


def test_map_collaboration_bindings_placeholders():
    rows = [
        binding(
            songLabel="Get Back",
            collaborator="http://www.wikidata.org/entity/Q312657",
            collaboratorLabel="Billy Preston",
            releaseDate="1969-04-11",
        ),
        binding(),
    ]

    collaborations = map_collaboration_bindings(rows)

    assert collaborations[0].song == "Get Back"
    assert collaborations[0].collaborator == "Billy Preston"
    assert collaborations[0].collaborator_id == "Q312657"
    assert collaborations[0].artist == ""
    assert collaborations[1].song == "Untitled"
    assert collaborations[1].collaborator == "Unknown collaborator"
    assert collaborations[1].collaborator_id is None


def test_map_country_count_bindings_skips_rows_without_country():
    rows = [
        binding(countryLabel="Jamaica", artistCount="12"),
        binding(artistCount="3"),
        binding(countryLabel="Cuba", artistCount="not a number"),
    ]

    countries = map_country_count_bindings(rows)

    assert [(c.country, c.count, c.artists) for c in countries] == [
        ("Jamaica", 12, []),
        ("Cuba", 0, []),
    ]


def test_map_subgenre_count_bindings():
    rows = [binding(subgenreLabel="Dub", artistCount="7"), binding(artistCount="1")]

    assert [(g.genre, g.count) for g in map_subgenre_count_bindings(rows)] == [("Dub", 7)]


def test_map_collaboration_pair_bindings_folds_mirrored_rows():
    rows = [
        binding(artist1="http://www.wikidata.org/entity/Q1", artist1Label="Simon",
                artist2="http://www.wikidata.org/entity/Q2", artist2Label="Garfunkel",
                collaborationCount="9"),
        binding(artist1="http://www.wikidata.org/entity/Q2", artist1Label="Garfunkel",
                artist2="http://www.wikidata.org/entity/Q1", artist2Label="Simon",
                collaborationCount="9"),
        binding(artist1="http://www.wikidata.org/entity/Q3", collaborationCount="4"),
    ]

    pairs = map_collaboration_pair_bindings(rows)

    assert len(pairs) == 1
    assert (pairs[0].first_id, pairs[0].second_id, pairs[0].count) == ("Q1", "Q2", 9)
