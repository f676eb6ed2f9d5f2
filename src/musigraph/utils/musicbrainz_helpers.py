import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import aiohttp
from dagster import get_dagster_logger

from musigraph.settings import (
    ARTIST_PLACEHOLDER,
    COLLABORATION_PLACEHOLDER,
    MUSICBRAINZ_API_URL,
    MUSICBRAINZ_DEEP_MAX_RELEASES,
    MUSICBRAINZ_HEADERS,
    MUSICBRAINZ_MAX_CONCURRENT_RELEASES,
    UNTITLED_PLACEHOLDER,
)
from musigraph.utils.concurrency_helpers import (
    AsyncRateLimiter,
    process_items_concurrently_async,
)
from musigraph.utils.models import Album, Artist, Collaboration
from musigraph.utils.request_utils import async_get_json


######################################################################
#                        RELATION PARSING HELPERS
######################################################################


def get_related_artist(relation: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Return the related artist of a relation if it carries a usable name."""
    artist = relation.get("artist")
    if isinstance(artist, dict) and isinstance(artist.get("name"), str):
        return artist
    return None


def relation_type_matches(relation: Dict[str, Any], *fragments: str) -> bool:
    """Case-insensitive check of the relation type against substrings."""
    relation_type = relation.get("type")
    if not isinstance(relation_type, str):
        return False
    lowered = relation_type.lower()
    return any(fragment in lowered for fragment in fragments)


def get_release_artist_relations(release: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Artist relations attached to a release.

    Reads the legacy 'artist-rels' list as well as artist-targeted entries
    of the 'relations' list returned by the /ws/2 JSON API.
    """
    relations = list(release.get("artist-rels") or [])
    relations.extend(
        rel for rel in release.get("relations") or [] if rel.get("artist") is not None
    )
    return relations


def get_track_artist_relations(track: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Recording-level artist relations of one track."""
    relations = list(track.get("recording-level-rels") or [])
    recording = track.get("recording") or {}
    relations.extend(
        rel for rel in recording.get("relations") or [] if rel.get("artist") is not None
    )
    return relations


def parse_influence(relation: Dict[str, Any]) -> Optional[Artist]:
    artist = get_related_artist(relation)
    if not artist or not relation_type_matches(relation, "influenc"):
        return None
    return Artist(id=artist.get("id") or artist["name"], name=artist["name"], mbid=artist.get("id"))


def unique_artists(artists: Iterable[Artist]) -> List[Artist]:
    """Keep the first artist seen for every id, in order."""
    seen: Dict[str, Artist] = {}
    for artist in artists:
        seen.setdefault(artist.id, artist)
    return list(seen.values())


######################################################################
#                         MUSICBRAINZ CLIENT
######################################################################


class MusicBrainzClient:
    """
    Async client for the MusicBrainz web service, reshaping its JSON into
    the explorer's Album / Artist / Collaboration models.

    Args:
        session: Open aiohttp ClientSession.
        base_url: Root of the versioned web service, e.g. 'https://musicbrainz.org/ws/2'.
        headers: Request headers; must identify the client (User-Agent).
        limiter: Optional rate limiter shared by all requests of this client.
        max_concurrent_releases: Concurrency cap for per-release lookups.
        logger: Logger; defaults to the Dagster logger.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str = MUSICBRAINZ_API_URL,
        headers: Optional[Dict[str, str]] = None,
        limiter: Optional[AsyncRateLimiter] = None,
        max_concurrent_releases: int = MUSICBRAINZ_MAX_CONCURRENT_RELEASES,
        logger: Optional[logging.Logger] = None,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.headers = headers or MUSICBRAINZ_HEADERS
        self.limiter = limiter
        self.max_concurrent_releases = max_concurrent_releases
        self.logger = logger or get_dagster_logger(__name__)

    async def _get(self, resource: str, entity_id: str, includes: Iterable[str]) -> Dict[str, Any]:
        if self.limiter:
            await self.limiter.wait()
        inc = "+".join(includes)
        url = f"{self.base_url}/{resource}/{entity_id}"
        self.logger.info(f"MusicBrainz request: {resource}/{entity_id} (inc={inc})")
        return await async_get_json(
            self.session, url, params={"inc": inc, "fmt": "json"}, headers=self.headers
        )

    async def fetch_artist(self, mbid: str, includes: Iterable[str]) -> Dict[str, Any]:
        return await self._get("artist", mbid, includes)

    async def fetch_release(self, release_id: str, includes: Iterable[str]) -> Dict[str, Any]:
        return await self._get("release", release_id, includes)

    async def fetch_discography(self, mbid: str) -> List[Album]:
        """
        Albums of an artist, from its release groups.

        Only release groups whose primary type is 'Album' are kept.
        """
        data = await self.fetch_artist(mbid, ["release-groups"])
        return [
            Album(
                id=group.get("id") or "",
                title=group.get("title") or UNTITLED_PLACEHOLDER,
                release_date=group.get("first-release-date") or None,
            )
            for group in data.get("release-groups") or []
            if group.get("primary-type") == "Album"
        ]

    async def fetch_influences(self, mbid: str) -> List[Artist]:
        data = await self.fetch_artist(mbid, ["artist-rels"])
        influences = []
        for relation in data.get("relations") or []:
            influence = parse_influence(relation)
            if influence:
                influences.append(influence)
        return unique_artists(influences)

    async def fetch_collaborations(self, mbid: str) -> List[Collaboration]:
        data = await self.fetch_artist(
            mbid, ["artist-rels", "recording-rels", "release-rels"]
        )
        artist_name = data.get("name") or ""
        collaborations = []
        for relation in data.get("relations") or []:
            collaborator = get_related_artist(relation)
            if not collaborator or not relation_type_matches(
                relation, "collaboration", "performance"
            ):
                continue
            recording = relation.get("recording") or {}
            collaborations.append(
                Collaboration(
                    song=recording.get("title") or COLLABORATION_PLACEHOLDER,
                    artist=artist_name,
                    collaborator=collaborator["name"],
                    collaborator_id=collaborator.get("id"),
                    release_date=relation.get("begin") or None,
                )
            )
        return collaborations

    async def _fan_out_releases(
        self,
        mbid: str,
        max_releases: int,
        release_includes: List[str],
        parse_release: Callable[[Dict[str, Any], Dict[str, Any]], List[Any]],
    ) -> List[Any]:
        """
        Look up the first `max_releases` releases of an artist and parse each.

        The artist lookup propagates errors; a failing release lookup is
        logged and skipped. Results keep release order.
        """
        artist_data = await self.fetch_artist(mbid, ["release-groups", "releases"])
        releases = (artist_data.get("releases") or [])[:max_releases]
        release_ids = [release["id"] for release in releases if release.get("id")]

        async def process_release(release_id: str) -> List[Any]:
            release_data = await self.fetch_release(release_id, release_includes)
            return parse_release(artist_data, release_data)

        per_release = await process_items_concurrently_async(
            release_ids,
            process_release,
            max_concurrent_tasks=self.max_concurrent_releases,
            logger=self.logger,
        )
        skipped = len(release_ids) - len(per_release)
        if skipped:
            self.logger.warning(f"Skipped {skipped} release(s) of artist {mbid} after lookup errors.")
        return [item for batch in per_release for item in batch]

    async def fetch_deep_influences(
        self, mbid: str, max_releases: int = MUSICBRAINZ_DEEP_MAX_RELEASES
    ) -> List[Artist]:
        """
        Influences found in the artist relations of the artist's first releases.

        An artist credited on several releases is returned once.
        """

        def parse_release(artist_data: Dict[str, Any], release: Dict[str, Any]) -> List[Artist]:
            found = []
            for relation in get_release_artist_relations(release):
                influence = parse_influence(relation)
                if influence:
                    found.append(influence)
            return found

        influences = await self._fan_out_releases(
            mbid, max_releases, ["artist-rels"], parse_release
        )
        return unique_artists(influences)

    async def fetch_deep_collaborations(
        self, mbid: str, max_releases: int = MUSICBRAINZ_DEEP_MAX_RELEASES
    ) -> List[Collaboration]:
        """
        Collaborations found on the artist's first releases: release-level
        artist relations plus the recording-level relations of every track.
        """

        def parse_release(artist_data: Dict[str, Any], release: Dict[str, Any]) -> List[Collaboration]:
            artist_name = artist_data.get("title") or artist_data.get("name") or ARTIST_PLACEHOLDER
            release_date = release.get("date") or None
            found = []
            for relation in get_release_artist_relations(release):
                collaborator = get_related_artist(relation)
                if collaborator:
                    found.append(
                        Collaboration(
                            song=release.get("title") or COLLABORATION_PLACEHOLDER,
                            artist=artist_name,
                            collaborator=collaborator["name"],
                            collaborator_id=collaborator.get("id"),
                            release_date=release_date,
                        )
                    )
            for medium in release.get("media") or []:
                for track in medium.get("tracks") or []:
                    for relation in get_track_artist_relations(track):
                        collaborator = get_related_artist(relation)
                        if collaborator:
                            found.append(
                                Collaboration(
                                    song=track.get("title") or COLLABORATION_PLACEHOLDER,
                                    artist=artist_name,
                                    collaborator=collaborator["name"],
                                    collaborator_id=collaborator.get("id"),
                                    release_date=release_date,
                                )
                            )
            return found

        return await self._fan_out_releases(
            mbid,
            max_releases,
            ["recordings", "recording-level-rels", "artist-rels"],
            parse_release,
        )
