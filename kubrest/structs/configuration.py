"""
All configuration flags, options, settings to fine-tune a client.

All settings are grouped semantically just for convenience
(instead of a flat mega-object with all the values in it).

Some of the settings are flags, some are scalars, some are optional,
some are not (but all of them have reasonable defaults).

The connection credentials are not settings: see `credentials.ConnectionInfo`.
"""
import dataclasses
from typing import Optional

from kubrest.helpers import versions


@dataclasses.dataclass
class APISettings:

    core_version: str = 'v1'
    """
    The version of the core API group, as in ``/api/{version}``.
    """

    beta_version: str = 'extensions/v1beta1'
    """
    The group & version of the non-core ("beta") resources,
    as in ``/apis/{group}/{version}``.
    """

    user_agent: str = f'kubrest/{versions.version or "unknown"}'
    """
    How the client identifies itself to the API. Set from the package version.
    """


@dataclasses.dataclass
class NetworkingSettings:

    request_timeout: Optional[float] = None
    """
    A total timeout of one regular (non-streaming) request.
    If ``None``, the HTTP client's defaults apply.
    """

    connect_timeout: Optional[float] = None
    """
    A connection timeout of one regular (non-streaming) request.
    If ``None``, the HTTP client's defaults apply.
    """


@dataclasses.dataclass
class WatchingSettings:

    server_timeout: Optional[float] = None
    """
    The maximum duration of one streaming request, as requested from the server.
    If ``None``, then obey the server-side timeouts (they seem to be random).
    """

    client_timeout: Optional[float] = None
    """
    An HTTP/HTTPS session timeout to use in watch requests.
    """

    connect_timeout: Optional[float] = None
    """
    An HTTP/HTTPS connection timeout to use in watch requests.
    """


@dataclasses.dataclass
class ClientSettings:
    api: APISettings = dataclasses.field(default_factory=APISettings)
    networking: NetworkingSettings = dataclasses.field(default_factory=NetworkingSettings)
    watching: WatchingSettings = dataclasses.field(default_factory=WatchingSettings)
