from typing import Optional

from kubrest.clients import api, auth, fetching
from kubrest.structs import bodies, configuration, references


async def create_obj(
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        resource: references.Resource,
        namespace: references.Namespace = None,
        name: Optional[str] = None,
        body: Optional[bodies.BodyLike] = None,
) -> bodies.Body:
    """
    Create an object.

    The name & namespace, if given, are put into the body's metadata unless
    the body has them already. The namespace of the request is taken
    from the body's metadata, so that they never mismatch.
    """
    raw = bodies.as_raw(body) if body is not None else {}
    if namespace and resource.namespaced:
        raw.setdefault('metadata', {}).setdefault('namespace', namespace)
    if name is not None:
        raw.setdefault('metadata', {}).setdefault('name', name)

    namespace = raw.get('metadata', {}).get('namespace') if resource.namespaced else None
    url = resource.get_url(namespace=namespace)
    rsp = await api.post(url, payload=raw, context=context, settings=settings)
    return bodies.Body(fetching.as_object(rsp))
