"""
Repositories: one per resource kind, all of the same parameterized class.

A repository binds a resource kind (see `references.KINDS`) to the client's
shared connection, settings, and the default namespace, and exposes simple
CRUD-style methods, each of which makes one API request:

.. code-block:: python

    async with kubrest.Client(master='https://localhost:6443') as client:
        pods = await client.pods.find_all(labels={'app': 'nginx'})
        pod = pods.get_by_name('nginx-1')
        await client.pods.delete(pod)

The label & field selectors can be either passed directly, or staged
for the next listing/watching call via `Repository.set_label_selector`
and `Repository.set_field_selector`. The staged selectors are used once
and then cleared, even if the call fails, so that they never leak
into the following calls.
"""
import inspect
import logging
from typing import TYPE_CHECKING, Any, AsyncGenerator, Awaitable, Callable, Optional, \
                   Tuple, Union

from kubrest.clients import creating, deleting, errors, fetching, patching, watching
from kubrest.engines import loggers
from kubrest.structs import bodies, collections, references, selectors

if TYPE_CHECKING:
    from kubrest.client import Client

logger = logging.getLogger(__name__)

# The callbacks can be either regular functions or coroutine functions.
# If they return ``False`` (strictly), the watching stops.
WatchCallback = Callable[[bodies.WatchEvent], Union[Optional[bool], Awaitable[Optional[bool]]]]


class Repository:
    """
    A gateway to the objects of one resource kind.

    Repositories are stateless, except for the staged selectors,
    and are created & cached by the client: see `Client.repository`.
    """

    def __init__(
            self,
            client: "Client",
            resource: references.Resource,
    ) -> None:
        super().__init__()
        self._client = client
        self._resource = resource
        self._labels: Optional[selectors.LabelSelector] = None
        self._fields: Optional[selectors.FieldSelector] = None

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__} for {self._resource}>'

    @property
    def resource(self) -> references.Resource:
        return self._resource

    def set_label_selector(self, labels: Optional[selectors.LabelSelector]) -> "Repository":
        """ Stage the label selector for the next listing or watching call. """
        self._labels = labels
        return self

    def set_field_selector(self, fields: Optional[selectors.FieldSelector]) -> "Repository":
        """ Stage the field selector for the next listing or watching call. """
        self._fields = fields
        return self

    def reset_parameters(self) -> None:
        self._labels = None
        self._fields = None

    async def find_all(
            self,
            labels: Optional[selectors.LabelSelector] = None,
            fields: Optional[selectors.FieldSelector] = None,
            *,
            namespace: references.Namespace = None,
            all_namespaces: bool = False,
            limit: Optional[int] = None,
    ) -> collections.BodyCollection:
        """
        List the objects, optionally filtered by labels & fields server-side.

        The explicitly passed selectors take precedence over the staged ones.
        """
        labels, fields = self._consume_selectors(labels, fields)
        return await fetching.list_objs(
            context=await self._client.get_context(),
            settings=self._client.settings,
            resource=self._resource,
            namespace=None if all_namespaces else self._namespace(namespace),
            labels=labels,
            fields=fields,
            limit=limit,
        )

    async def first(
            self,
            labels: Optional[selectors.LabelSelector] = None,
            fields: Optional[selectors.FieldSelector] = None,
            *,
            namespace: references.Namespace = None,
    ) -> Optional[bodies.Body]:
        objs = await self.find_all(labels, fields, namespace=namespace)
        return objs.first()

    async def find(
            self,
            name: str,
            *,
            namespace: references.Namespace = None,
    ) -> bodies.Body:
        """
        Read one object by its name.

        Raises `errors.APINotFoundError` (a `errors.BadRequestError`) if absent.
        """
        self.reset_parameters()
        return await fetching.read_obj(
            context=await self._client.get_context(),
            settings=self._client.settings,
            resource=self._resource,
            namespace=self._namespace(namespace),
            name=name,
        )

    async def exists(
            self,
            name: str,
            *,
            namespace: references.Namespace = None,
    ) -> bool:
        try:
            await self.find(name, namespace=namespace)
        except errors.APINotFoundError:
            return False
        else:
            return True

    async def create(
            self,
            body: bodies.BodyLike,
            *,
            namespace: references.Namespace = None,
    ) -> bodies.Body:
        self.reset_parameters()
        namespace = self._namespace(namespace, body)
        created = await creating.create_obj(
            context=await self._client.get_context(),
            settings=self._client.settings,
            resource=self._resource,
            namespace=namespace,
            body=body,
        )
        loggers.ObjectLogger(body=created).info(f"Created {self._resource.plural}.")
        return created

    async def update(
            self,
            body: bodies.BodyLike,
            *,
            namespace: references.Namespace = None,
    ) -> bodies.Body:
        """
        Replace the object as a whole with the new body (HTTP PUT).
        """
        self.reset_parameters()
        name = self._name(body)
        replaced = await patching.replace_obj(
            context=await self._client.get_context(),
            settings=self._client.settings,
            resource=self._resource,
            namespace=self._namespace(namespace, body),
            name=name,
            body=body,
        )
        loggers.ObjectLogger(body=replaced).info(f"Updated {self._resource.plural}.")
        return replaced

    async def patch(
            self,
            body_or_name: Union[str, bodies.BodyLike],
            patch: bodies.BodyLike,
            *,
            namespace: references.Namespace = None,
    ) -> bodies.Body:
        """
        Patch the object with a JSON merge-patch (HTTP PATCH).
        """
        self.reset_parameters()
        patched = await patching.patch_obj(
            context=await self._client.get_context(),
            settings=self._client.settings,
            resource=self._resource,
            namespace=self._namespace(namespace, body_or_name),
            name=self._name(body_or_name),
            patch=bodies.as_raw(patch),
        )
        loggers.ObjectLogger(body=patched).info(f"Patched {self._resource.plural}.")
        return patched

    async def delete(
            self,
            body_or_name: Union[str, bodies.BodyLike],
            *,
            namespace: references.Namespace = None,
            propagation_policy: Optional[str] = None,
            grace_period: Optional[int] = None,
    ) -> Any:
        """
        Delete the object. Returns the API's response as is.
        """
        self.reset_parameters()
        namespace = self._namespace(namespace, body_or_name)
        name = self._name(body_or_name)
        result = await deleting.delete_obj(
            context=await self._client.get_context(),
            settings=self._client.settings,
            resource=self._resource,
            namespace=namespace,
            name=name,
            propagation_policy=propagation_policy,
            grace_period=grace_period,
        )
        ref = {'metadata': {'name': name, 'namespace': namespace if self._resource.namespaced else None}}
        loggers.ObjectLogger(body=ref).info(f"Deleted {self._resource.plural}.")
        return result

    async def logs(
            self,
            body_or_name: Union[str, bodies.BodyLike],
            *,
            namespace: references.Namespace = None,
            container: Optional[str] = None,
            tail_lines: Optional[int] = None,
            previous: bool = False,
    ) -> str:
        """
        Read the object's logs as plain text. Only for the kinds with logs (pods).
        """
        if not self._resource.supports(references.LOGS):
            raise TypeError(f"{self._resource.plural} have no logs.")
        self.reset_parameters()
        return await fetching.read_logs(
            context=await self._client.get_context(),
            settings=self._client.settings,
            resource=self._resource,
            namespace=self._namespace(namespace, body_or_name),
            name=self._name(body_or_name),
            container=container,
            tail_lines=tail_lines,
            previous=previous,
        )

    def stream(
            self,
            labels: Optional[selectors.LabelSelector] = None,
            fields: Optional[selectors.FieldSelector] = None,
            *,
            namespace: references.Namespace = None,
            all_namespaces: bool = False,
            since: Optional[str] = None,
            timeout: Optional[float] = None,
    ) -> AsyncGenerator[bodies.WatchEvent, None]:
        """
        Iterate over the watch-events until the stream is closed.
        Only for the kinds with the watching capability.

        The staged selectors are consumed and the capability is checked
        on the call itself, not on the first iteration.
        """
        labels, fields = self._consume_selectors(labels, fields)
        if not self._resource.supports(references.WATCH):
            raise errors.WatchingError(f"Watching is not supported for {self._resource.plural}.")
        return self._iter_events(
            labels=labels,
            fields=fields,
            namespace=None if all_namespaces else self._namespace(namespace),
            since=since,
            timeout=timeout,
        )

    async def _iter_events(
            self,
            *,
            labels: Optional[selectors.LabelSelector],
            fields: Optional[selectors.FieldSelector],
            namespace: references.Namespace,
            since: Optional[str],
            timeout: Optional[float],
    ) -> AsyncGenerator[bodies.WatchEvent, None]:
        raw_events = watching.watch_objs(
            context=await self._client.get_context(),
            settings=self._client.settings,
            resource=self._resource,
            namespace=namespace,
            labels=labels,
            fields=fields,
            since=since,
            timeout=timeout,
        )
        try:
            async for raw_event in raw_events:
                yield bodies.WatchEvent.from_raw(raw_event)
        finally:
            await raw_events.aclose()

    async def watch(
            self,
            callback: WatchCallback,
            labels: Optional[selectors.LabelSelector] = None,
            fields: Optional[selectors.FieldSelector] = None,
            *,
            namespace: references.Namespace = None,
            all_namespaces: bool = False,
            since: Optional[str] = None,
            timeout: Optional[float] = None,
    ) -> int:
        """
        Invoke the callback for every watch-event, one by one, as they arrive.

        The watching stops when the stream is closed, or when the callback
        returns ``False``. Returns the number of events dispatched.
        """
        count = 0
        events = self.stream(labels, fields, namespace=namespace, all_namespaces=all_namespaces,
                             since=since, timeout=timeout)
        try:
            async for event in events:
                count += 1
                result = callback(event)
                if inspect.isawaitable(result):
                    result = await result
                if result is False:
                    logger.debug(f"Watching of {self._resource} is stopped by the callback.")
                    break
        finally:
            await events.aclose()
        return count

    def _consume_selectors(
            self,
            labels: Optional[selectors.LabelSelector],
            fields: Optional[selectors.FieldSelector],
    ) -> Tuple[Optional[selectors.LabelSelector], Optional[selectors.FieldSelector]]:
        labels = labels if labels is not None else self._labels
        fields = fields if fields is not None else self._fields
        self.reset_parameters()
        return labels, fields

    def _namespace(
            self,
            namespace: references.Namespace,
            body_or_name: Union[None, str, bodies.BodyLike] = None,
    ) -> references.Namespace:
        """
        Resolve the namespace: explicit, or of the body, or the client's default.
        """
        if not self._resource.namespaced:
            return None
        if namespace:
            return namespace
        if body_or_name is not None and not isinstance(body_or_name, str):
            body_namespace = (body_or_name.get('metadata') or {}).get('namespace')
            if body_namespace:
                return str(body_namespace)
        return self._client.namespace

    @staticmethod
    def _name(body_or_name: Union[str, bodies.BodyLike]) -> str:
        if isinstance(body_or_name, str):
            return body_or_name
        name = (body_or_name.get('metadata') or {}).get('name')
        if not name:
            raise ValueError("The object has no name in its metadata.")
        return str(name)
