import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from musigraph.explorer import ArtistExplorer
from musigraph.utils.models import Album, Artist, Collaboration, SearchFilters
from musigraph.utils.sparql_queries import DBPEDIA, WIKIDATA, InvalidQueryParameterError

BEATLES = Artist(id="Q1299", name="The Beatles", mbid="mbid-1", birth_date="1960")


@pytest.fixture
def explorer():
    """Explorer on a mock session with both clients replaced by mocks."""
    explorer = ArtistExplorer(session=MagicMock(), logger=MagicMock())
    explorer.sparql = MagicMock()
    explorer.musicbrainz = MagicMock()
    return explorer


# --- Session handling ---

@pytest.mark.asyncio
@patch("musigraph.explorer.create_aiohttp_session")
async def test_explorer_owns_and_closes_session(mock_create_session):
    session = MagicMock()
    session.close = AsyncMock()
    mock_create_session.return_value = session

    async with ArtistExplorer(logger=MagicMock()) as explorer:
        assert explorer.sparql.session is session
        assert explorer.musicbrainz.session is session
        assert explorer.sparql.musicbrainz is explorer.musicbrainz

    session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_explorer_does_not_close_injected_session():
    session = MagicMock()
    session.close = AsyncMock()

    async with ArtistExplorer(session=session, logger=MagicMock()):
        pass

    session.close.assert_not_awaited()


# --- Search ---

@pytest.mark.asyncio
async def test_search_returns_artists(explorer):
    explorer.sparql.search_artist = AsyncMock(return_value=[BEATLES])

    artists = await explorer.search("Beatles", filters=SearchFilters(decade="1960"))

    assert artists == [BEATLES]
    explorer.sparql.search_artist.assert_awaited_once_with(
        "Beatles", filters=SearchFilters(decade="1960"), endpoint=None, options=None
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [aiohttp.ClientConnectionError("unreachable"), asyncio.TimeoutError()],
)
async def test_search_logs_transport_errors_and_returns_empty(explorer, error):
    explorer.sparql.search_artist = AsyncMock(side_effect=error)

    assert await explorer.search("Beatles") == []
    explorer.logger.error.assert_called_once()


@pytest.mark.asyncio
async def test_search_without_hits_tries_flexible_search(explorer):
    explorer.sparql.schema_for.return_value = WIKIDATA
    explorer.sparql.search_artist = AsyncMock(return_value=[])
    explorer.sparql.search_artist_flexible = AsyncMock(return_value=[BEATLES])

    artists = await explorer.search("beatles", filters=SearchFilters())

    assert artists == [BEATLES]
    explorer.sparql.search_artist_flexible.assert_awaited_once_with("beatles")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "name, filters, schema",
    [
        ("beatles", SearchFilters(decade="1960"), WIKIDATA),
        ("beatles", None, DBPEDIA),
        ("", None, WIKIDATA),
    ],
)
async def test_search_flexible_fallback_only_for_plain_wikidata_names(explorer, name, filters, schema):
    explorer.sparql.schema_for.return_value = schema
    explorer.sparql.search_artist = AsyncMock(return_value=[])
    explorer.sparql.search_artist_flexible = AsyncMock()

    assert await explorer.search(name, filters=filters) == []
    explorer.sparql.search_artist_flexible.assert_not_awaited()


@pytest.mark.asyncio
async def test_search_propagates_invalid_parameters(explorer):
    explorer.sparql.search_artist = AsyncMock(side_effect=InvalidQueryParameterError("bad"))

    with pytest.raises(InvalidQueryParameterError):
        await explorer.search("Beatles")


# --- Profile ---

@pytest.mark.asyncio
async def test_load_profile_from_sparql(explorer):
    """Sections are loaded concurrently and bundled with statistics."""
    # 1. Setup
    explorer.sparql.get_artist_discography = AsyncMock(
        return_value=[Album(id="a1", title="Please Please Me", release_date="1963")]
    )
    explorer.sparql.get_artist_influences = AsyncMock(return_value=[Artist(id="Q5", name="Chuck Berry")])
    explorer.sparql.get_collaborations = AsyncMock(
        return_value=[Collaboration(song="Get Back", collaborator="Billy Preston")]
    )

    # 2. Action
    profile = await explorer.load_profile(BEATLES, today=date(2020, 1, 1))

    # 3. Assertions
    assert profile.statistics.total_albums == 1
    assert profile.statistics.total_influences == 1
    assert profile.statistics.active_years == 60
    assert profile.collaborations[0].artist == "The Beatles"
    explorer.sparql.get_artist_discography.assert_awaited_once_with(
        "Q1299", mbid="mbid-1", endpoint=None
    )
    explorer.musicbrainz.fetch_influences.assert_not_called()


@pytest.mark.asyncio
async def test_load_profile_failed_section_becomes_empty(explorer):
    explorer.sparql.get_artist_discography = AsyncMock(side_effect=aiohttp.ClientError("down"))
    explorer.sparql.get_artist_influences = AsyncMock(return_value=[Artist(id="Q5", name="Chuck Berry")])
    explorer.sparql.get_collaborations = AsyncMock(return_value=[])

    profile = await explorer.load_profile(BEATLES)

    assert profile.discography == []
    assert len(profile.influences) == 1
    explorer.logger.error.assert_called_once()


@pytest.mark.asyncio
async def test_load_profile_auto_falls_back_per_empty_section(explorer):
    explorer.sparql.get_artist_discography = AsyncMock(return_value=[Album(id="a1", title="A")])
    explorer.sparql.get_artist_influences = AsyncMock(return_value=[])
    explorer.sparql.get_collaborations = AsyncMock(return_value=[])
    explorer.musicbrainz.fetch_influences = AsyncMock(return_value=[Artist(id="mb", name="Buddy Holly")])
    explorer.musicbrainz.fetch_collaborations = AsyncMock(side_effect=aiohttp.ClientError("down"))

    profile = await explorer.load_profile(BEATLES, source="auto")

    assert [a.name for a in profile.influences] == ["Buddy Holly"]
    assert profile.collaborations == []
    explorer.musicbrainz.fetch_influences.assert_awaited_once_with("mbid-1")


@pytest.mark.asyncio
async def test_load_profile_from_musicbrainz_deep(explorer):
    explorer.musicbrainz.fetch_discography = AsyncMock(return_value=[])
    explorer.musicbrainz.fetch_deep_influences = AsyncMock(return_value=[])
    explorer.musicbrainz.fetch_deep_collaborations = AsyncMock(
        return_value=[Collaboration(song="Let It Be", artist="The Beatles", collaborator="Phil Spector")]
    )

    profile = await explorer.load_profile(BEATLES, source="musicbrainz", deep=True)

    assert profile.statistics.total_collaborations == 1
    explorer.musicbrainz.fetch_deep_influences.assert_awaited_once_with("mbid-1")
    explorer.musicbrainz.fetch_influences.assert_not_called()
    explorer.sparql.get_artist_discography.assert_not_called()


@pytest.mark.asyncio
async def test_load_profile_musicbrainz_requires_mbid(explorer):
    with pytest.raises(ValueError, match="no MusicBrainz id"):
        await explorer.load_profile(Artist(id="Q1", name="No MBID"), source="musicbrainz")


@pytest.mark.asyncio
async def test_load_profile_rejects_unknown_source(explorer):
    with pytest.raises(ValueError, match="Unknown data source"):
        await explorer.load_profile(BEATLES, source="lastfm")
