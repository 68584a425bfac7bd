"""
All the structures coming from/to the Kubernetes API.

For strict type-checking, the raw structures are detailed to the per-field
level (e.g. `TypedDict` instead of just ``Mapping[Any, Any]``). The callers
can use arbitrary fields at runtime, which are not declared in the type
definitions at type-checking time.

The raw structures are wrapped into `Body` for easier typed access
to the well-known fields. The wrapper is a read-only view of the original
dict: it is neither copied nor validated beyond being a JSON object.
"""
import copy
import datetime
from typing import Any, Dict, Iterator, List, Mapping, NamedTuple, Optional, Union, cast

import iso8601
from typing_extensions import Literal, TypedDict

from kubrest.structs import references

Labels = Mapping[str, str]
Annotations = Mapping[str, str]

#
# Everything marked "raw" is a plain unwrapped unprocessed data as JSON-decoded
# from Kubernetes API, usually as retrieved in watching or fetching API calls.
#

RawEventType = Literal['ADDED', 'MODIFIED', 'DELETED', 'BOOKMARK', 'ERROR']


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    generateName: str
    namespace: str
    labels: Labels
    annotations: Annotations
    finalizers: List[str]
    resourceVersion: str
    deletionTimestamp: str
    creationTimestamp: str
    selfLink: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


class RawListMeta(TypedDict, total=False):
    resourceVersion: str
    selfLink: str
    remainingItemCount: int


class RawList(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawListMeta
    items: List[RawBody]


# A special payload for type==ERROR (this is not a connection or client error).
class RawError(TypedDict, total=False):
    apiVersion: str     # usually: Literal['v1']
    kind: str           # usually: Literal['Status']
    metadata: Mapping[Any, Any]
    code: int
    reason: str
    status: str
    message: str


# As received from the watch-stream, one per line.
class RawEvent(TypedDict, total=True):
    type: RawEventType
    object: Union[RawBody, RawError]


#
# Enhanced dict-wrappers for easier typed access to well-known typed fields.
#


class _View(Mapping[str, Any]):
    """ A read-only view of a sub-dict; absent sub-dicts look empty. """

    def __init__(self, __src: Mapping[str, Any], __key: Optional[str] = None) -> None:
        super().__init__()
        self._src = __src
        self._key = __key

    def __repr__(self) -> str:
        return repr(dict(self))

    def __len__(self) -> int:
        return len(self._resolve())

    def __iter__(self) -> Iterator[str]:
        return iter(self._resolve())

    def __getitem__(self, item: str) -> Any:
        return self._resolve()[item]

    def _resolve(self) -> Mapping[str, Any]:
        if self._key is None:
            return self._src
        value = self._src.get(self._key)
        return value if isinstance(value, Mapping) else {}


class Meta(_View):

    def __init__(self, __src: "Body") -> None:
        super().__init__(__src, 'metadata')
        self._labels = _View(self, 'labels')
        self._annotations = _View(self, 'annotations')

    @property
    def labels(self) -> Labels:
        return self._labels

    @property
    def annotations(self) -> Annotations:
        return self._annotations

    @property
    def uid(self) -> Optional[str]:
        return cast(Optional[str], self.get('uid'))

    @property
    def name(self) -> Optional[str]:
        return cast(Optional[str], self.get('name'))

    @property
    def namespace(self) -> references.Namespace:
        return cast(references.Namespace, self.get('namespace'))

    @property
    def resource_version(self) -> Optional[str]:
        return cast(Optional[str], self.get('resourceVersion'))

    @property
    def creation_timestamp(self) -> Optional[datetime.datetime]:
        value = self.get('creationTimestamp')
        return iso8601.parse_date(value) if value else None

    @property
    def deletion_timestamp(self) -> Optional[datetime.datetime]:
        value = self.get('deletionTimestamp')
        return iso8601.parse_date(value) if value else None


class Spec(_View):
    def __init__(self, __src: "Body") -> None:
        super().__init__(__src, 'spec')


class Status(_View):
    def __init__(self, __src: "Body") -> None:
        super().__init__(__src, 'status')


class Body(_View):
    """
    A single object of any resource kind (a pod, a service, a job, etc).
    """

    def __init__(self, __src: Mapping[str, Any]) -> None:
        if not isinstance(__src, Mapping):
            raise TypeError(f"A resource body must be a JSON object, got {type(__src)}.")
        super().__init__(__src)
        self._meta = Meta(self)
        self._spec = Spec(self)
        self._status = Status(self)

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self.kind or "?"} {self.name or "?"}>'

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Body):
            return self._src == other._src
        return super().__eq__(other)

    @property
    def kind(self) -> Optional[str]:
        return cast(Optional[str], self.get('kind'))

    @property
    def api_version(self) -> Optional[str]:
        return cast(Optional[str], self.get('apiVersion'))

    @property
    def name(self) -> Optional[str]:
        return self._meta.name

    @property
    def namespace(self) -> references.Namespace:
        return self._meta.namespace

    @property
    def labels(self) -> Labels:
        return self._meta.labels

    @property
    def metadata(self) -> Meta:
        return self._meta

    @property
    def meta(self) -> Meta:
        return self._meta

    @property
    def spec(self) -> Spec:
        return self._spec

    @property
    def status(self) -> Status:
        return self._status

    def as_dict(self) -> Dict[str, Any]:
        """ A deep copy of the original JSON object, e.g. for sending back. """
        return copy.deepcopy(dict(self._src))


BodyLike = Union[Body, Mapping[str, Any]]


def as_raw(body: BodyLike) -> Dict[str, Any]:
    """
    Get a mutable copy of the raw JSON object from either a body or a mapping.
    """
    return body.as_dict() if isinstance(body, Body) else copy.deepcopy(dict(body))


class ObjectReference(TypedDict, total=False):
    apiVersion: str
    kind: str
    namespace: Optional[str]
    name: str
    uid: str


def build_object_reference(
        body: BodyLike,
) -> ObjectReference:
    """
    Construct an object reference, e.g. for the per-object logging.

    Keep in mind that some fields can be absent: e.g. ``namespace``
    for cluster resources, or e.g. ``apiVersion`` for ``kind: Node``, etc.
    """
    ref = dict(
        apiVersion=body.get('apiVersion'),
        kind=body.get('kind'),
        name=body.get('metadata', {}).get('name'),
        uid=body.get('metadata', {}).get('uid'),
        namespace=body.get('metadata', {}).get('namespace'),
    )
    return cast(ObjectReference, {key: val for key, val in ref.items() if val})


class WatchEvent(NamedTuple):
    """ A single event of a watch-stream with the object wrapped. """
    type: RawEventType
    object: Body

    @classmethod
    def from_raw(cls, raw: RawEvent) -> "WatchEvent":
        return cls(type=raw['type'], object=Body(raw['object']))
