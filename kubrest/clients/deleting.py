from typing import Any, Dict, Optional

from kubrest.clients import api, auth
from kubrest.structs import configuration, references


async def delete_obj(
        *,
        context: auth.APIContext,
        settings: Optional[configuration.ClientSettings] = None,
        resource: references.Resource,
        namespace: references.Namespace,
        name: str,
        propagation_policy: Optional[str] = None,
        grace_period: Optional[int] = None,
) -> Any:
    """
    Delete an object by its name.

    Depending on the resource kind and the API version, the server responds
    either with the deleted object, or with a ``Status`` object. Both are
    returned as is (parsed), or as the raw text if they are not JSON.

    The propagation policy is one of ``Orphan``, ``Background``, ``Foreground``.
    If neither the policy nor the grace period is set, no ``DeleteOptions``
    are sent, and the server's defaults apply.
    """
    options: Optional[Dict[str, Any]] = None
    if propagation_policy is not None or grace_period is not None:
        options = {'kind': 'DeleteOptions', 'apiVersion': 'v1'}
        if propagation_policy is not None:
            options['propagationPolicy'] = propagation_policy
        if grace_period is not None:
            options['gracePeriodSeconds'] = grace_period

    url = resource.get_url(namespace=namespace, name=name)
    return await api.delete(url, payload=options, context=context, settings=settings)
