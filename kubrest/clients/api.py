import json
import logging
from typing import Any, AsyncGenerator, AsyncIterator, Mapping, Optional

import aiohttp

from kubrest.clients import auth, errors
from kubrest.structs import configuration, references

logger = logging.getLogger(__name__)


def build_path(
        path: str,  # relative to the api version and namespace, e.g. "/pods/name1".
        *,
        namespace: references.Namespace = None,
        api_version: Optional[str] = None,
        settings: Optional[configuration.ClientSettings] = None,
) -> str:
    """
    Build a server-relative path for either the core or the group's API.

    Without an API version, the core API is used: ``/api/v1``. With an API version,
    it is ``/apis/{group}/{version}``. If the namespace is given, then it goes
    as ``/namespaces/{namespace}`` once between the API and the resource's path.
    """
    settings = settings if settings is not None else configuration.ClientSettings()
    base = f'/apis/{api_version.strip("/")}' if api_version else f'/api/{settings.api.core_version}'
    if namespace:
        base += f'/namespaces/{namespace}'
    return base + '/' + path.lstrip('/') if path.strip('/') else base


async def request(
        method: str,
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        params: Optional[Mapping[str, str]] = None,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
) -> aiohttp.ClientResponse:
    """
    Make a single raw request and check it for errors, but do not parse it.
    """
    settings = settings if settings is not None else configuration.ClientSettings()

    if '://' not in url:
        url = context.server.rstrip('/') + '/' + url.lstrip('/')

    if timeout is None:
        timeout = aiohttp.ClientTimeout(
            total=settings.networking.request_timeout,
            sock_connect=settings.networking.connect_timeout,
        )

    logger.debug(f"Requesting: {method.upper()} {url}")
    response = await context.session.request(
        method=method,
        url=url,
        params=params,
        json=payload,
        headers=headers,
        timeout=timeout,
    )
    try:
        await errors.check_response(response)
    except errors.APIError as e:
        logger.debug(f"Request failed: {method.upper()} {url} -> {e}")
        raise
    return response


async def send(
        method: str,
        path: str,  # relative to the api version and namespace, e.g. "/pods/name1".
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        params: Optional[Mapping[str, str]] = None,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
        namespace: references.Namespace = None,
        api_version: Optional[str] = None,
) -> Any:
    """
    Build the full path, send the request, and parse the response.

    Returns the parsed JSON object or array, or the raw text if the response
    is not a JSON object or array (e.g. the plain-text logs).
    """
    url = build_path(path, namespace=namespace, api_version=api_version, settings=settings)
    response = await request(method, url, context=context, settings=settings,
                             params=params, payload=payload, headers=headers)
    async with response:
        return await errors.parse_response(response)


async def get(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
) -> Any:
    response = await request('get', url, context=context, settings=settings,
                             params=params, headers=headers)
    async with response:
        return await errors.parse_response(response)


async def post(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
) -> Any:
    response = await request('post', url, context=context, settings=settings,
                             payload=payload, headers=headers)
    async with response:
        return await errors.parse_response(response)


async def put(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
) -> Any:
    response = await request('put', url, context=context, settings=settings,
                             payload=payload, headers=headers)
    async with response:
        return await errors.parse_response(response)


async def patch(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
) -> Any:
    response = await request('patch', url, context=context, settings=settings,
                             payload=payload, headers=headers)
    async with response:
        return await errors.parse_response(response)


async def delete(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        payload: Optional[object] = None,
        headers: Optional[Mapping[str, str]] = None,
) -> Any:
    response = await request('delete', url, context=context, settings=settings,
                             payload=payload, headers=headers)
    async with response:
        return await errors.parse_response(response)


async def stream(
        url: str,  # relative to the server/api root.
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        params: Optional[Mapping[str, str]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
) -> AsyncGenerator[Any, None]:
    """
    Stream the newline-delimited JSON values, one parsed value per line.
    """
    response = await request('get', url, context=context, settings=settings,
                             params=params, headers=headers, timeout=timeout)
    async with response:
        async for line in iter_jsonlines(response.content):
            try:
                value = json.loads(line.decode('utf-8'))
            except ValueError as e:
                raise errors.WatchingError(f"Non-JSON line in the stream: {line[:100]!r}") from e
            yield value


async def iter_jsonlines(
        content: aiohttp.StreamReader,
        chunk_size: int = 1024 * 1024,
) -> AsyncIterator[bytes]:
    """
    Iterate line by line over the response's content.

    Usage::

        async for line in iter_jsonlines(response.content):
            pass

    This is an equivalent of::

        async for line in response.content:
            pass

    Except that the aiohttp's line iteration fails if the accumulated buffer
    length is above 2**17 bytes, i.e. 128 KB (`aiohttp.streams.DEFAULT_LIMIT`
    for the buffer's low-watermark, multiplied by 2 for the high-watermark).
    Kubernetes secrets and other fields can be much longer, up to MBs in length.

    The chunk size of 1MB is an empirical guess for keeping the memory footprint
    reasonably low on huge amount of small lines (limited to 1 MB in total),
    while ensuring the near-instant reads of the huge lines (can be a problem
    with a small chunk size due to too many iterations).
    """

    # Minimize the memory footprint by keeping at most 2 copies of a yielded line in memory
    # (in the buffer and as a yielded value), and at most 1 copy of other lines (in the buffer).
    buffer = b''
    async for data in content.iter_chunked(chunk_size):
        buffer += data
        del data

        start = 0
        index = buffer.find(b'\n', start)
        while index >= 0:
            line = buffer[start:index]
            if line.strip():
                yield line
            del line
            start = index + 1
            index = buffer.find(b'\n', start)

        if start > 0:
            buffer = buffer[start:]

    if buffer.strip():
        yield buffer
