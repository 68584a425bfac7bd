from typing import Any, Dict, Optional, cast

from kubrest.clients import api, auth, errors
from kubrest.structs import bodies, collections, configuration, references, selectors


async def list_objs(
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        resource: references.Resource,
        namespace: references.Namespace,
        labels: Optional[selectors.LabelSelector] = None,
        fields: Optional[selectors.FieldSelector] = None,
        limit: Optional[int] = None,
) -> collections.BodyCollection:
    """
    List the objects of specific resource type.

    The cluster-scoped call is used if the resource itself is cluster-scoped,
    or if no namespace is specified (i.e. all namespaces are listed).
    Otherwise, the namespace-scoped call is used.
    """
    params: Dict[str, str] = {}
    label_selector = selectors.build_label_selector(labels)
    field_selector = selectors.build_field_selector(fields)
    if label_selector:
        params['labelSelector'] = label_selector
    if field_selector:
        params['fieldSelector'] = field_selector
    if limit is not None:
        params['limit'] = str(limit)

    url = resource.get_url(namespace=namespace, params=params)
    rsp = await api.get(url, context=context, settings=settings)
    return collections.BodyCollection(cast(bodies.RawList, as_object(rsp)))


async def read_obj(
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
) -> bodies.Body:
    """
    Read a single object by its name.

    Raises `errors.APINotFoundError` (a kind of `errors.BadRequestError`)
    with the server's message if the object does not exist.
    """
    url = resource.get_url(namespace=namespace, name=name)
    rsp = await api.get(url, context=context, settings=settings)
    return bodies.Body(as_object(rsp))


async def read_logs(
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        container: Optional[str] = None,
        tail_lines: Optional[int] = None,
        previous: bool = False,
) -> str:
    """
    Read the logs of an object (usually a pod) as plain text.
    """
    params: Dict[str, str] = {}
    if container is not None:
        params['container'] = container
    if tail_lines is not None:
        params['tailLines'] = str(tail_lines)
    if previous:
        params['previous'] = 'true'

    url = resource.get_url(namespace=namespace, name=name, subresource='log', params=params)
    response = await api.request('get', url, context=context, settings=settings)

    # Logs are never parsed: some log lines can look like JSON, but they are still logs.
    async with response:
        return await response.text()


def as_object(rsp: object) -> Dict[str, Any]:
    """
    Ensure that the API has returned a JSON object, not an array or plain text.
    """
    if not isinstance(rsp, dict):
        raise errors.APIServerError(None, status=200, message=f"Not a JSON object: {rsp!r:.200}")
    return rsp
