"""
Collections of objects as returned from the list-style API calls.

A collection is constructed once from the parsed API response and is never
modified afterwards: the filtering methods return new collections.
"""
import enum
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Sequence, \
                   TypeVar, Union, overload

from kubrest.structs import bodies, selectors

_T = TypeVar('_T')


class _UNSET(enum.Enum):
    token = enum.auto()


class BodyCollection(Sequence[bodies.Body]):
    """
    An ordered immutable sequence of objects of one resource kind.
    """

    def __init__(
            self,
            __src: Union[None, bodies.RawList, Mapping[str, Any], Iterable[Any]] = None,
    ) -> None:
        super().__init__()
        if __src is None:
            raw_items: Iterable[Any] = []
            kind = api_version = resource_version = None
        elif isinstance(__src, Mapping):
            raw_items = __src.get('items') or []
            kind = __src.get('kind')
            api_version = __src.get('apiVersion')
            resource_version = (__src.get('metadata') or {}).get('resourceVersion')
        else:
            raw_items = __src
            kind = api_version = resource_version = None

        # Individual items in the lists usually have no kind/apiVersion, only the list has them.
        item_kind = kind[:-4] if kind is not None and kind.endswith('List') else kind
        items: List[bodies.Body] = []
        for item in raw_items:
            if not isinstance(item, bodies.Body):
                if item_kind is not None and 'kind' not in item:
                    item = dict(item, kind=item_kind)
                if api_version is not None and 'apiVersion' not in item:
                    item = dict(item, apiVersion=api_version)
                item = bodies.Body(item)
            items.append(item)

        self._items = tuple(items)
        self._kind = kind
        self._resource_version = resource_version

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} {self._kind or ""} names={self.names!r}>'

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[bodies.Body]:
        return iter(self._items)

    @overload
    def __getitem__(self, index: int) -> bodies.Body: ...

    @overload
    def __getitem__(self, index: slice) -> "BodyCollection": ...

    def __getitem__(self, index: Union[int, slice]) -> Union[bodies.Body, "BodyCollection"]:
        if isinstance(index, slice):
            return self._derive(self._items[index])
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BodyCollection):
            return self._items == other._items
        if isinstance(other, Sequence) and not isinstance(other, (str, bytes)):
            return list(self._items) == list(other)
        return NotImplemented

    @property
    def kind(self) -> Optional[str]:
        return self._kind

    @property
    def resource_version(self) -> Optional[str]:
        return self._resource_version

    @property
    def names(self) -> List[Optional[str]]:
        return [item.name for item in self._items]

    def first(self) -> Optional[bodies.Body]:
        return self._items[0] if self._items else None

    def get_by_name(
            self,
            name: str,
            default: Union[_T, _UNSET] = _UNSET.token,
    ) -> Union[bodies.Body, _T]:
        """
        Get the first object with the specified name.

        Raises `KeyError` if there is no such object and no default is given.
        """
        for item in self._items:
            if item.name == name:
                return item
        if not isinstance(default, _UNSET):
            return default
        raise KeyError(name)

    def filter_by_labels(self, labels: selectors.LabelFilter) -> "BodyCollection":
        """
        Get a new collection with only the objects matching the labels' criteria.
        """
        return self._derive(item for item in self._items
                            if selectors.match_labels(item.labels, labels))

    def _derive(self, items: Iterable[bodies.Body]) -> "BodyCollection":
        result = BodyCollection(items)
        result._kind = self._kind
        result._resource_version = self._resource_version
        return result
