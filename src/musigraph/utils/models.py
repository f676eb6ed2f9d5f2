from typing import Any, Literal

from pydantic import BaseModel, Field

from musigraph.settings import DEFAULT_SEARCH_LIMIT


ArtistType = Literal["solo", "band", "composer"]
SortField = Literal["name", "date", "popularity"]
SortOrder = Literal["asc", "desc"]


class Artist(BaseModel):
    id: str
    name: str
    mbid: str | None = None
    birth_date: str | None = None
    country: str | None = None
    genres: list[str] = Field(default_factory=list)
    instruments: list[str] = Field(default_factory=list)
    image: str | None = None


class Album(BaseModel):
    id: str
    title: str
    release_date: str | None = None
    label: str | None = None
    genre: str | None = None


class Collaboration(BaseModel):
    song: str
    artist: str = ""
    collaborator: str
    collaborator_id: str | None = None
    release_date: str | None = None


class ArtistStatistics(BaseModel):
    total_albums: int = Field(default=0, ge=0)
    total_influences: int = Field(default=0, ge=0)
    total_collaborations: int = Field(default=0, ge=0)
    active_years: int = Field(default=0, ge=0)


class ProcessedArtistData(BaseModel):
    basic: Artist
    discography: list[Album] = Field(default_factory=list)
    influences: list[Artist] = Field(default_factory=list)
    collaborations: list[Collaboration] = Field(default_factory=list)
    statistics: ArtistStatistics = Field(default_factory=ArtistStatistics)


class NetworkNode(BaseModel):
    id: str
    label: str
    type: Literal["artist", "album", "genre"]
    data: Any = None


class NetworkEdge(BaseModel):
    source: str
    target: str
    type: Literal["influence", "collaboration", "genre"]
    weight: int = 1


class NetworkData(BaseModel):
    nodes: list[NetworkNode] = Field(default_factory=list)
    edges: list[NetworkEdge] = Field(default_factory=list)


class TimelineEntry(BaseModel):
    year: int
    count: int
    genres: list[str] = Field(default_factory=list)


class CountryDistribution(BaseModel):
    country: str
    count: int
    artists: list[str] = Field(default_factory=list)


class GenreDistribution(BaseModel):
    genre: str
    count: int
    artists: list[str] = Field(default_factory=list)


class CollaborationPair(BaseModel):
    first_id: str
    first_name: str
    second_id: str
    second_name: str
    count: int


class SearchFilters(BaseModel):
    name: str | None = None
    genre: str | None = None
    decade: str | None = None
    country: str | None = None
    artist_type: ArtistType | None = None


class QueryOptions(BaseModel):
    limit: int = Field(default=DEFAULT_SEARCH_LIMIT, gt=0)
    offset: int = Field(default=0, ge=0)
    sort_by: SortField = "name"
    order: SortOrder = "asc"


class ConnectionTestResult(BaseModel):
    success: bool
    message: str
    sample_data: list[dict[str, Any]] = Field(default_factory=list)


class ArtistInsights(BaseModel):
    artist_id: str
    influence_network: NetworkData = Field(default_factory=NetworkData)
    collaboration_network: NetworkData = Field(default_factory=NetworkData)
    genre_timeline: list[TimelineEntry] = Field(default_factory=list)
    geographic_distribution: list[CountryDistribution] = Field(default_factory=list)
    genre_distribution: list[GenreDistribution] = Field(default_factory=list)
    similar_artists: list[Artist] = Field(default_factory=list)


class CatalogOverview(BaseModel):
    genre_id: str
    decade: str | None = None
    genre_artists: list[Artist] = Field(default_factory=list)
    genre_musicians: list[Artist] = Field(default_factory=list)
    subgenres: list[GenreDistribution] = Field(default_factory=list)
    country_distribution: list[CountryDistribution] = Field(default_factory=list)
    decade_artists: list[Artist] = Field(default_factory=list)
    influential_artists: list[Artist] = Field(default_factory=list)
    popular_artists: list[Artist] = Field(default_factory=list)
    frequent_collaborations: list[CollaborationPair] = Field(default_factory=list)


class ArtistGraphViews(BaseModel):
    artist_id: str
    influence_network: NetworkData = Field(default_factory=NetworkData)
    collaboration_network: NetworkData = Field(default_factory=NetworkData)
    connection_target: str | None = None
    connections: list[Artist] = Field(default_factory=list)
