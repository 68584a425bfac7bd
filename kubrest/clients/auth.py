import logging
import os
import ssl
from typing import Any, Dict, Optional

import aiohttp

from kubrest.structs import configuration, credentials

logger = logging.getLogger(__name__)


class APIContext:
    """
    A container for an aiohttp session and the info for URL building.

    The container is constructed only once for every client, lazily on the first
    request (so that the session belongs to the running event loop), and then
    is shared by all repositories of that client. Nothing else is stored here:
    every request is independent from others.
    """

    # The main contained object used by the API methods.
    session: aiohttp.ClientSession

    # Contextual information for URL building.
    server: str
    default_namespace: str

    def __init__(
            self,
            info: credentials.ConnectionInfo,
            settings: Optional[configuration.ClientSettings] = None,
    ) -> None:
        super().__init__()
        settings = settings if settings is not None else configuration.ClientSettings()

        # The SSL part (both client certificate auth and CA verification).
        context: ssl.SSLContext
        if info.certificate_path and info.private_key_path:
            context = ssl.create_default_context(
                purpose=ssl.Purpose.SERVER_AUTH,
                cafile=info.ca_path)
            context.load_cert_chain(
                certfile=info.certificate_path,
                keyfile=info.private_key_path)
        elif info.certificate_path:
            context = ssl.create_default_context(
                purpose=ssl.Purpose.SERVER_AUTH,
                cafile=info.ca_path)
            context.load_cert_chain(certfile=info.certificate_path)  # with the key inside.
        else:
            context = ssl.create_default_context(
                cafile=info.ca_path)

        if info.insecure:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        headers: Dict[str, str] = {}
        headers['Content-Type'] = 'application/json'

        # The token auth part: only if the token file exists (e.g. a service account's).
        token = read_token(info.token_path)
        if token:
            headers['Authorization'] = f'Bearer {token}'

        # It is a good practice to self-identify a bit.
        headers['User-Agent'] = settings.api.user_agent

        # Generic aiohttp session based on the constructed credentials.
        self.session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=0,
                ssl=context,
            ),
            headers=headers,
        )

        # Add the extra payload information. We avoid overriding the constructor.
        self.server = info.master
        self.default_namespace = info.namespace

    async def __aenter__(self) -> "APIContext":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self.session.close()


def read_token(path: Optional[str]) -> Optional[str]:
    """
    Read the bearer token from a file, if the file exists; ``None`` otherwise.
    """
    if not path:
        return None
    if not os.path.exists(path):
        logger.warning(f"The token file {path!r} does not exist; the token is not used.")
        return None
    with open(path, encoding='utf-8') as f:
        return f.read().strip() or None
