"""
Centralized configuration settings for the musigraph explorer.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ==============================================================================
#  CORE PATH DEFINITIONS
# ==============================================================================

# The 'src' directory, which is the root for Python imports.
SRC_ROOT = Path(__file__).resolve().parents[1]

# The absolute root of the project (one level up from 'src').
PROJECT_ROOT = SRC_ROOT.parent

# Load environment variables from .env file located at the project root
load_dotenv(PROJECT_ROOT / ".env")

# Top-level directory for all materialized outputs.
DATA_DIR = Path(os.getenv("MUSIGRAPH_DATA_DIR", PROJECT_ROOT / "data_volume"))

# ==============================================================================
#  EXPLICIT FILE PATHS
# ==============================================================================
# Outputs written by the Dagster assets.

ARTIST_SEARCH_FILE = DATA_DIR / "explorer" / "artist_search.jsonl"
ARTIST_PROFILE_FILE = DATA_DIR / "explorer" / "artist_profile.jsonl"
ARTIST_INSIGHTS_FILE = DATA_DIR / "explorer" / "artist_insights.jsonl"
ARTIST_GRAPH_FILE = DATA_DIR / "explorer" / "artist_graph.jsonl"
CATALOG_OVERVIEW_FILE = DATA_DIR / "explorer" / "catalog_overview.jsonl"

# ==============================================================================
#  API & SERVICE CONFIGURATION
# ==============================================================================

USER_AGENT = "MusiGraph/1.0 (https://musigraph.app)"

# --- SPARQL endpoints ---
WIKIDATA_SPARQL_URL = os.getenv(
    "MUSIGRAPH_WIKIDATA_SPARQL_URL", "https://query.wikidata.org/sparql"
)
DBPEDIA_SPARQL_URL = os.getenv(
    "MUSIGRAPH_DBPEDIA_SPARQL_URL", "https://dbpedia.org/sparql"
)
DEFAULT_SPARQL_ENDPOINT = os.getenv(
    "MUSIGRAPH_DEFAULT_ENDPOINT", WIKIDATA_SPARQL_URL
)
SPARQL_HEADERS = {
    "Content-Type": "application/sparql-query",
    "Accept": "application/sparql-results+json",
    "User-Agent": USER_AGENT,
}

WIKIDATA_ENTITY_URL = "http://www.wikidata.org/entity/"
DBPEDIA_RESOURCE_URL = "http://dbpedia.org/resource/"

# --- MusicBrainz ---
MUSICBRAINZ_API_URL = os.getenv(
    "MUSIGRAPH_MUSICBRAINZ_API_URL", "https://musicbrainz.org/ws/2"
)
MUSICBRAINZ_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
}
# MusicBrainz allows one request per second per client.
MUSICBRAINZ_MAX_RPS = float(os.getenv("MUSIGRAPH_MUSICBRAINZ_MAX_RPS", "1.0"))
MUSICBRAINZ_MAX_CONCURRENT_RELEASES = 3
MUSICBRAINZ_DEEP_MAX_RELEASES = 3

# ==============================================================================
#  QUERY & CACHE PARAMETERS
# ==============================================================================

REQUEST_TIMEOUT_SECONDS = 65

QUERY_CACHE_MAX_SIZE = int(os.getenv("MUSIGRAPH_QUERY_CACHE_MAX_SIZE", "256"))
QUERY_CACHE_TTL_SECONDS = int(os.getenv("MUSIGRAPH_QUERY_CACHE_TTL", "3600"))
QUERY_CACHE_KEY_LENGTH = 20

DEFAULT_SEARCH_LIMIT = 20
SEARCH_RESULT_LIMIT = 30
DISCOGRAPHY_LIMIT = 50
INFLUENCES_LIMIT = 20
COLLABORATIONS_LIMIT = 30
SIMILAR_ARTISTS_LIMIT = 10

# Language preference for the Wikidata label service.
LABEL_LANGUAGES = "es,en"

# Placeholders used when a binding omits a title or name.
UNTITLED_PLACEHOLDER = "Untitled"
UNKNOWN_COLLABORATOR_PLACEHOLDER = "Unknown collaborator"
COLLABORATION_PLACEHOLDER = "Collaboration"
ARTIST_PLACEHOLDER = "Artist"

# ==============================================================================
#  WIKIDATA ENTITIES
# ==============================================================================

# Genre names accepted by the catalog overview in place of a QID.
GENRE_CHOICES = {
    "Rock": "Q11399",
    "Jazz": "Q8341",
    "Pop": "Q37073",
    "Hip Hop": "Q11401",
    "Electronic": "Q9778",
    "Classical": "Q9730",
    "Blues": "Q9759",
    "Country": "Q83440",
    "Reggae": "Q9794",
    "Punk": "Q3071",
    "Heavy metal": "Q38848",
    "Folk": "Q43343",
}

# Well-known artists used for the "popular artists" view.
TOP_BAND_IDS = {
    "Q1299": "The Beatles",
    "Q2306": "Pink Floyd",
    "Q15862": "Queen",
    "Q303": "Elvis Presley",
    "Q392": "Bob Dylan",
}
