from typing import Any, Mapping, Optional

from kubrest.clients import api, auth, fetching
from kubrest.structs import bodies, configuration, references


async def replace_obj(
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        body: bodies.BodyLike,
) -> bodies.Body:
    """
    Replace an object as a whole (HTTP PUT).

    The body must contain the ``metadata.resourceVersion`` of the object
    as it was read, unless the unconditional replacement is intended.
    """
    url = resource.get_url(namespace=namespace, name=name)
    rsp = await api.put(url, payload=bodies.as_raw(body), context=context, settings=settings)
    return bodies.Body(fetching.as_object(rsp))


async def patch_obj(
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        patch: Mapping[str, Any],
) -> bodies.Body:
    """
    Patch an object with a JSON merge-patch (RFC 7386).

    Returns the patched body as reported by the server.
    """
    url = resource.get_url(namespace=namespace, name=name)
    rsp = await api.patch(
        url,
        headers={'Content-Type': 'application/merge-patch+json'},
        payload=dict(patch),
        context=context,
        settings=settings,
    )
    return bodies.Body(fetching.as_object(rsp))
