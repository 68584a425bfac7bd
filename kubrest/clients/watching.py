"""
Watching and streaming watch-events.

A watch-stream is one long GET request with ``watch=true``, to which the API
responds with newline-delimited JSON events, one per line, until the server
or the client closes the connection. Every event is dispatched as soon as
its line is received.

There is no reconnection or resuming logic here: when the stream is over,
it is over. The callers can restart it from the last seen resource version.
"""
import asyncio
import logging
from typing import AsyncGenerator, Dict, Optional, cast

import aiohttp

from kubrest.clients import api, auth, errors
from kubrest.structs import bodies, configuration, references, selectors

logger = logging.getLogger(__name__)


async def watch_objs(
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        resource: references.Resource,
        namespace: references.Namespace,
        labels: Optional[selectors.LabelSelector] = None,
        fields: Optional[selectors.FieldSelector] = None,
        since: Optional[str] = None,
        timeout: Optional[float] = None,
) -> AsyncGenerator[bodies.RawEvent, None]:
    """
    Watch objects of a specific resource type.

    Yields the raw events of types ``ADDED``, ``MODIFIED``, ``DELETED``.
    Raises `errors.WatchingError` on the ``ERROR`` events in the stream
    (e.g. "410 Gone" when the requested resource version is too old).
    """
    if not resource.supports(references.WATCH):
        raise errors.WatchingError(f"Watching is not supported for {resource.plural}.")

    settings = settings if settings is not None else configuration.ClientSettings()
    timeout = timeout if timeout is not None else settings.watching.server_timeout

    params: Dict[str, str] = {}
    params['watch'] = 'true'
    label_selector = selectors.build_label_selector(labels)
    field_selector = selectors.build_field_selector(fields)
    if label_selector:
        params['labelSelector'] = label_selector
    if field_selector:
        params['fieldSelector'] = field_selector
    if since is not None:
        params['resourceVersion'] = since
    if timeout is not None:
        params['timeoutSeconds'] = str(int(timeout))

    where = f'in {namespace!r}' if namespace and resource.namespaced else 'cluster-wide'
    logger.debug(f"Starting the watch-stream for {resource} {where}.")
    stream = api.stream(
        resource.get_url(namespace=namespace, params=params),
        context=context,
        settings=settings,
        timeout=aiohttp.ClientTimeout(
            total=settings.watching.client_timeout,
            sock_connect=settings.watching.connect_timeout,
        ),
    )
    try:
        async for raw_input in stream:
            raw_type = raw_input.get('type') if isinstance(raw_input, dict) else None
            raw_object = raw_input.get('object') if isinstance(raw_input, dict) else None

            # Errors in the stream are not HTTP errors, but they are fatal for the stream.
            if raw_type == 'ERROR':
                raise errors.WatchingError(f"Error in the watch-stream: {raw_object}")

            # Bookmarks only move the resource version, they carry no objects.
            if raw_type == 'BOOKMARK':
                continue

            # Ensure that the event is something we understand and can handle.
            if raw_type not in ['ADDED', 'MODIFIED', 'DELETED']:
                logger.warning("Ignoring an unsupported event type: %r", raw_input)
                continue

            yield cast(bodies.RawEvent, raw_input)

    # The stream is over when the connection is closed or timed out, either side.
    except (aiohttp.ClientConnectionError, aiohttp.ClientPayloadError, asyncio.TimeoutError):
        pass
    finally:
        await stream.aclose()
        logger.debug(f"Stopping the watch-stream for {resource} {where}.")
