"""
The client: a facade holding the connection and the repositories.

The repositories are resolved from an explicit registry of resource kinds
(see `references.KINDS`), either via the per-kind accessors (``client.pods``,
``client.replica_sets``, etc.) or via `Client.repository` by the kind's key.
Every repository is created on the first access and then cached,
so that the same instance is returned on every access.
"""
import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Union, overload

from kubrest.clients import api, auth, errors
from kubrest.repositories import Repository
from kubrest.structs import configuration, credentials, references

logger = logging.getLogger(__name__)


class _RepositoryAccessor:
    """ A read-only attribute of the client for the repository of one kind. """

    def __init__(self, kind: references.Kind) -> None:
        super().__init__()
        self._kind = kind

    @overload
    def __get__(self, instance: None, owner: Any) -> "_RepositoryAccessor": ...

    @overload
    def __get__(self, instance: "Client", owner: Any) -> Repository: ...

    def __get__(self, instance: Optional["Client"], owner: Any) -> Any:
        if instance is None:
            return self
        return instance.repository(self._kind)


class Client:
    """
    A connection to one Kubernetes API server with the repositories of kinds.

    The options are the same as accepted by `credentials.ConnectionInfo.from_options`.
    The ``master`` option is mandatory: without it, `credentials.MissingOptionError`
    is raised immediately, before any network activity.

    The HTTP session is created on the first request and is shared by all
    the repositories of the client. Close the client when it is not needed:
    either explicitly with `close`, or by using it as an async context manager.
    """

    # v1
    nodes = _RepositoryAccessor(references.Kind.NODES)
    pods = _RepositoryAccessor(references.Kind.PODS)
    replication_controllers = _RepositoryAccessor(references.Kind.REPLICATION_CONTROLLERS)
    services = _RepositoryAccessor(references.Kind.SERVICES)
    secrets = _RepositoryAccessor(references.Kind.SECRETS)
    events = _RepositoryAccessor(references.Kind.EVENTS)
    config_maps = _RepositoryAccessor(references.Kind.CONFIG_MAPS)
    namespaces = _RepositoryAccessor(references.Kind.NAMESPACES)
    persistent_volume_claims = _RepositoryAccessor(references.Kind.PERSISTENT_VOLUME_CLAIMS)

    # extensions/v1beta1
    deployments = _RepositoryAccessor(references.Kind.DEPLOYMENTS)
    jobs = _RepositoryAccessor(references.Kind.JOBS)
    ingresses = _RepositoryAccessor(references.Kind.INGRESSES)
    replica_sets = _RepositoryAccessor(references.Kind.REPLICA_SETS)
    daemon_sets = _RepositoryAccessor(references.Kind.DAEMON_SETS)

    def __init__(
            self,
            options: Optional[Mapping[str, Any]] = None,
            *,
            settings: Optional[configuration.ClientSettings] = None,
            context: Optional[auth.APIContext] = None,
            **kwargs: Any,
    ) -> None:
        super().__init__()
        self._info = credentials.ConnectionInfo.from_options(dict(options or {}, **kwargs))
        self._settings = settings if settings is not None else configuration.ClientSettings()
        self._context = context
        self._context_lock = asyncio.Lock()
        self._repositories: Dict[references.Kind, Repository] = {}

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self._info.master} ns={self._info.namespace!r}>'

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    def info(self) -> credentials.ConnectionInfo:
        return self._info

    @property
    def master(self) -> str:
        return self._info.master

    @property
    def namespace(self) -> str:
        return self._info.namespace

    @property
    def settings(self) -> configuration.ClientSettings:
        return self._settings

    async def get_context(self) -> auth.APIContext:
        """
        Get the shared session & server info; create them on the first call.
        """
        async with self._context_lock:
            if self._context is None:
                logger.debug(f"Connecting to {self._info.master}.")
                self._context = auth.APIContext(self._info, self._settings)
            return self._context

    async def close(self) -> None:
        if self._context is not None:
            context, self._context = self._context, None
            await context.close()

    def repository(self, kind: Union[str, references.Kind]) -> Repository:
        """
        Get the repository of a kind by its key: e.g. ``"pods"`` or ``"replicaSets"``.

        Raises `errors.UnknownKindError` if there is no such kind.
        """
        try:
            kind = references.Kind.parse(kind)
        except LookupError:
            raise errors.UnknownKindError(f"No client methods exist with the name: {kind}") from None
        if kind not in self._repositories:
            resource = references.resolve_resource(kind, self._settings)
            self._repositories[kind] = Repository(self, resource)
        return self._repositories[kind]

    def __getattr__(self, name: str) -> Any:
        # Only for the names not found in the regular ways, i.e. not the accessors.
        if name.startswith('_'):
            raise AttributeError(name)
        raise errors.UnknownKindError(f"No client methods exist with the name: {name}")

    async def send_request(
            self,
            method: str,
            path: str,
            *,
            params: Optional[Mapping[str, str]] = None,
            payload: Optional[object] = None,
            namespace: Union[None, bool, str] = True,
            api_version: Optional[str] = None,
    ) -> Any:
        """
        Send an arbitrary request relative to the API and optionally the namespace.

        The namespace is either a specific name, or ``True`` for the client's
        default namespace, or ``False``/``None`` for the cluster-wide requests.
        The API version is ``None`` for the core API (``/api/v1``), or a group
        with a version for the others, e.g. ``"apps/v1"`` (``/apis/apps/v1``).
        """
        ns = self.namespace if namespace is True else namespace or None
        return await api.send(
            method,
            path,
            context=await self.get_context(),
            settings=self._settings,
            params=params,
            payload=payload,
            namespace=ns,
            api_version=api_version,
        )

    async def send_beta_request(
            self,
            method: str,
            path: str,
            *,
            params: Optional[Mapping[str, str]] = None,
            payload: Optional[object] = None,
            namespace: Union[None, bool, str] = True,
    ) -> Any:
        return await self.send_request(method, path, params=params, payload=payload,
                                       namespace=namespace,
                                       api_version=self._settings.api.beta_version)
