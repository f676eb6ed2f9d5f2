import ssl
from typing import Any, Dict, Optional

import aiohttp
import certifi

from musigraph.settings import (
    MUSICBRAINZ_HEADERS,
    REQUEST_TIMEOUT_SECONDS,
    SPARQL_HEADERS,
)


def create_aiohttp_session() -> aiohttp.ClientSession:
    """
    Creates an aiohttp ClientSession with SSL verification configured using certifi.
    This resolves ClientConnectorCertificateError on some systems (like macOS).
    """
    ssl_context = ssl.create_default_context(cafile=certifi.where())
    connector = aiohttp.TCPConnector(ssl=ssl_context)
    return aiohttp.ClientSession(connector=connector)


async def async_make_request(
    session: aiohttp.ClientSession,
    url: str,
    method: str = "GET",
    params: Optional[Dict[str, Any]] = None,
    data: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = REQUEST_TIMEOUT_SECONDS,
) -> Any:
    """
    Issue a single request and decode its JSON body.

    There are no retries: a failed request surfaces to the caller immediately.

    Args:
        session: Open aiohttp ClientSession.
        url: Target URL.
        method: HTTP method ('GET' or 'POST').
        params: Query-string parameters.
        data: Raw request body (POST only).
        headers: Request headers.
        timeout: Total timeout for the request in seconds.

    Returns:
        The decoded JSON payload.

    Raises:
        aiohttp.ClientResponseError: on a non-success status. Its `message`
            carries the status text.
        ValueError: for methods other than GET or POST.
    """
    if method.upper() not in ("GET", "POST"):
        raise ValueError("Method must be 'GET' or 'POST'")

    request_args = {
        "headers": headers,
        "timeout": aiohttp.ClientTimeout(total=timeout),
    }
    if params is not None:
        request_args["params"] = params
    if method.upper() == "POST":
        request_args["data"] = data

    async with session.request(method.upper(), url, **request_args) as response:
        response.raise_for_status()
        # SPARQL endpoints answer with application/sparql-results+json
        return await response.json(content_type=None)


async def async_post_sparql(
    session: aiohttp.ClientSession,
    endpoint: str,
    query: str,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = REQUEST_TIMEOUT_SECONDS,
) -> Dict[str, Any]:
    """
    POST a raw SPARQL query and return the tabular JSON result.

    Args:
        session: Open aiohttp ClientSession.
        endpoint: SPARQL endpoint URL.
        query: The raw SPARQL query, sent as the request body.
        headers: Overrides for the default SPARQL headers.
        timeout: Total timeout in seconds.

    Returns:
        The parsed response, shaped as {"results": {"bindings": [...]}}.
    """
    return await async_make_request(
        session,
        endpoint,
        method="POST",
        data=query,
        headers=headers or SPARQL_HEADERS,
        timeout=timeout,
    )


async def async_get_json(
    session: aiohttp.ClientSession,
    url: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = REQUEST_TIMEOUT_SECONDS,
) -> Dict[str, Any]:
    """GET a JSON resource (used for the MusicBrainz web service)."""
    return await async_make_request(
        session,
        url,
        method="GET",
        params=params,
        headers=headers or MUSICBRAINZ_HEADERS,
        timeout=timeout,
    )
