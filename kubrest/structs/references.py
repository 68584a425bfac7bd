"""
References to the resource kinds, and the URLs built from them.

Every supported kind is described once in the `KINDS` table: its plural name
(the URL segment), whether it belongs to the core API or to the "beta" API
group, whether it is namespaced, and which optional capabilities it has.
The actual API group & version of a kind are resolved from the client's
settings, so that the same table serves different API versions.
"""
import enum
import urllib.parse
from typing import FrozenSet, List, Mapping, NamedTuple, Optional, Union

from kubrest.structs import configuration

# An optional namespace: ``None`` for the cluster-scoped objects & requests.
Namespace = Optional[str]

# Optional capabilities of the resource kinds. Not every kind supports them.
WATCH = 'watch'
LOGS = 'logs'


class Kind(str, enum.Enum):
    """
    The resource kinds known to the client, valued by their facade keys.
    """

    # v1
    NODES = 'nodes'
    PODS = 'pods'
    REPLICATION_CONTROLLERS = 'replicationControllers'
    SERVICES = 'services'
    SECRETS = 'secrets'
    EVENTS = 'events'
    CONFIG_MAPS = 'configMaps'
    NAMESPACES = 'namespaces'
    PERSISTENT_VOLUME_CLAIMS = 'persistentVolumeClaims'

    # extensions/v1beta1
    DEPLOYMENTS = 'deployments'
    JOBS = 'jobs'
    INGRESSES = 'ingresses'
    REPLICA_SETS = 'replicaSets'
    DAEMON_SETS = 'daemonSets'

    @property
    def attr(self) -> str:
        """ The name of the client's accessor, e.g. ``replica_sets``. """
        return self.name.lower()

    @classmethod
    def parse(cls, value: Union[str, "Kind"]) -> "Kind":
        """
        Resolve a kind from its key (``replicaSets``), accessor (``replica_sets``),
        or plural (``replicasets``) name. Raises `LookupError` if unknown.
        """
        if isinstance(value, Kind):
            return value
        for kind in cls:
            if value in (kind.value, kind.attr, KINDS[kind].plural):
                return kind
        raise LookupError(f"Unknown resource kind: {value!r}")


class KindInfo(NamedTuple):
    plural: str
    beta: bool = False
    namespaced: bool = True
    capabilities: FrozenSet[str] = frozenset()


KINDS: Mapping[Kind, KindInfo] = {
    Kind.NODES: KindInfo('nodes', namespaced=False, capabilities=frozenset({WATCH})),
    Kind.PODS: KindInfo('pods', capabilities=frozenset({WATCH, LOGS})),
    Kind.REPLICATION_CONTROLLERS: KindInfo('replicationcontrollers'),
    Kind.SERVICES: KindInfo('services', capabilities=frozenset({WATCH})),
    Kind.SECRETS: KindInfo('secrets'),
    Kind.EVENTS: KindInfo('events', capabilities=frozenset({WATCH})),
    Kind.CONFIG_MAPS: KindInfo('configmaps'),
    Kind.NAMESPACES: KindInfo('namespaces', namespaced=False),
    Kind.PERSISTENT_VOLUME_CLAIMS: KindInfo('persistentvolumeclaims'),
    Kind.DEPLOYMENTS: KindInfo('deployments', beta=True, capabilities=frozenset({WATCH})),
    Kind.JOBS: KindInfo('jobs', beta=True, capabilities=frozenset({WATCH})),
    Kind.INGRESSES: KindInfo('ingresses', beta=True),
    Kind.REPLICA_SETS: KindInfo('replicasets', beta=True, capabilities=frozenset({WATCH})),
    Kind.DAEMON_SETS: KindInfo('daemonsets', beta=True),
}


# An immutable reference to a resource kind as served by the API.
class Resource(NamedTuple):
    group: str
    version: str
    plural: str
    namespaced: bool = True
    capabilities: FrozenSet[str] = frozenset()

    def __str__(self) -> str:
        return self.name

    @property
    def name(self) -> str:
        return f'{self.plural}.{self.version}.{self.group}'.strip('.')

    @property
    def api_version(self) -> str:
        # Strip heading/trailing slashes if group is absent (e.g. for pods).
        return f'{self.group}/{self.version}'.strip('/')

    def supports(self, capability: str) -> bool:
        return capability in self.capabilities

    def get_url(
            self,
            *,
            server: Optional[str] = None,
            namespace: Namespace = None,
            name: Optional[str] = None,
            subresource: Optional[str] = None,
            params: Optional[Mapping[str, str]] = None,
    ) -> str:
        if subresource is not None and name is None:
            raise ValueError("Subresources can be used only with specific resources by names.")

        return self._build_url(server, params, [
            '/api' if self.group == '' else '/apis',
            self.group,
            self.version,
            'namespaces' if namespace and self.namespaced else None,
            namespace if namespace and self.namespaced else None,
            self.plural,
            name,
            subresource,
        ])

    def get_version_url(
            self,
            *,
            server: Optional[str] = None,
            params: Optional[Mapping[str, str]] = None,
    ) -> str:
        return self._build_url(server, params, [
            '/api' if self.group == '' else '/apis',
            self.group,
            self.version,
        ])

    def _build_url(
            self,
            server: Optional[str],
            params: Optional[Mapping[str, str]],
            parts: List[Optional[str]],
    ) -> str:
        query = urllib.parse.urlencode(params, encoding='utf-8') if params else ''
        path = '/'.join([part for part in parts if part])
        url = path + ('?' if query else '') + query
        return url if server is None else server.rstrip('/') + '/' + url.lstrip('/')


def split_api_version(api_version: str) -> List[str]:
    """
    Split ``v1`` into ``['', 'v1']``, and ``apps/v1`` into ``['apps', 'v1']``.
    """
    group, _, version = api_version.strip('/').rpartition('/')
    return [group, version]


def resolve_resource(
        kind: Union[str, Kind],
        settings: Optional[configuration.ClientSettings] = None,
) -> Resource:
    """
    Convert a kind into a resource with the API group & version of the settings.
    """
    settings = settings if settings is not None else configuration.ClientSettings()
    info = KINDS[Kind.parse(kind)]
    api_version = settings.api.beta_version if info.beta else settings.api.core_version
    group, version = split_api_version(api_version)
    return Resource(
        group=group,
        version=version,
        plural=info.plural,
        namespaced=info.namespaced,
        capabilities=info.capabilities,
    )
