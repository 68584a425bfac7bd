"""
The main kubrest module for all the exported functions & classes.
"""
# isort: skip_file

# Unlike all other places, where we import other modules and refer
# the functions via the modules, this is the package's top-level interface,
# as it is seen by the users. So, we export the individual functions.

from kubrest.client import (
    Client,
)
from kubrest.repositories import (
    Repository,
    WatchCallback,
)
from kubrest.clients.errors import (
    APIError,
    BadRequestError,
    APIUnauthorizedError,
    APIForbiddenError,
    APINotFoundError,
    APIConflictError,
    APIServerError,
    UnknownKindError,
    WatchingError,
)
from kubrest.engines.loggers import (
    LogFormat,
    configure,
)
from kubrest.helpers.versions import (
    version as __version__,
)
from kubrest.structs.bodies import (
    RawBody,
    RawEvent,
    RawEventType,
    Body,
    Meta,
    Spec,
    Status,
    Labels,
    Annotations,
    WatchEvent,
)
from kubrest.structs.collections import (
    BodyCollection,
)
from kubrest.structs.configuration import (
    ClientSettings,
)
from kubrest.structs.credentials import (
    ConnectionInfo,
    MissingOptionError,
)
from kubrest.structs.references import (
    Kind,
    Resource,
)
from kubrest.structs.selectors import (
    ABSENT,
    PRESENT,
)

__all__ = [
    'Client',
    'Repository', 'WatchCallback',
    'APIError', 'BadRequestError', 'APIServerError',
    'APIUnauthorizedError', 'APIForbiddenError', 'APINotFoundError', 'APIConflictError',
    'UnknownKindError', 'WatchingError', 'MissingOptionError',
    'LogFormat', 'configure',
    'RawBody', 'RawEvent', 'RawEventType',
    'Body', 'Meta', 'Spec', 'Status', 'Labels', 'Annotations', 'WatchEvent',
    'BodyCollection',
    'ClientSettings',
    'ConnectionInfo',
    'Kind', 'Resource',
    'ABSENT', 'PRESENT',
]
