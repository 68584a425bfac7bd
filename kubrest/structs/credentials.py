"""
Connection-related structures.

Kubrest handles only the rudimentary authentication, i.e. the information
passed to the HTTP protocol and TCP/SSL connection, and nothing more than that:

* TCP server host & port (the "master").
* SSL verification/ignorance flag.
* SSL certificate authority.
* SSL client certificate and its private key.
* HTTP ``Authorization: Bearer token`` (read from a file, e.g. a service account's).
* The default namespace for the namespaced requests.

Obtaining those credentials (kubeconfigs, cloud plugins, token refreshes)
is out of scope: the paths are expected to be provisioned externally.
"""
import dataclasses
from typing import Any, Mapping, Optional

DEFAULT_NAMESPACE = 'default'


class MissingOptionError(Exception):
    """ Raised when a required connection option is not provided. """


@dataclasses.dataclass(frozen=True)
class ConnectionInfo:
    """
    A single endpoint with specific credentials and connection flags to use.
    """
    master: str  # e.g. "https://localhost:443"
    ca_path: Optional[str] = None
    certificate_path: Optional[str] = None
    private_key_path: Optional[str] = None
    token_path: Optional[str] = None
    namespace: str = DEFAULT_NAMESPACE
    insecure: Optional[bool] = None

    def __post_init__(self) -> None:
        if not self.master:
            raise MissingOptionError('You must provide a "master" parameter.')

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "ConnectionInfo":
        """
        Build the connection info from the short option names.

        The recognised options are: ``master``, ``ca_cert``, ``client_cert``,
        ``client_key``, ``token`` (a path to the token file), ``namespace``,
        and ``insecure``. Unset (``None``) options fall back to the defaults.
        """
        if not options.get('master'):
            raise MissingOptionError('You must provide a "master" parameter.')
        return cls(
            master=options['master'],
            ca_path=options.get('ca_cert'),
            certificate_path=options.get('client_cert'),
            private_key_path=options.get('client_key'),
            token_path=options.get('token'),
            namespace=options.get('namespace') or DEFAULT_NAMESPACE,
            insecure=options.get('insecure'),
        )
