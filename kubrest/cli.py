import asyncio
import dataclasses
import functools
import json
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

import click
import yaml

from kubrest.client import Client
from kubrest.clients import errors
from kubrest.engines import loggers
from kubrest.structs import bodies, configuration, credentials, references

_T = TypeVar('_T')


@dataclasses.dataclass()
class CLIControls:
    """ Connection options shared by all commands, and the hooks for testing. """
    options: Dict[str, Any] = dataclasses.field(default_factory=dict)
    settings: Optional[configuration.ClientSettings] = None


class LogFormatParamType(click.Choice):

    def __init__(self) -> None:
        super().__init__(choices=[v.name.lower() for v in loggers.LogFormat])

    def convert(self, value: Any, param: Any, ctx: Any) -> loggers.LogFormat:
        if isinstance(value, loggers.LogFormat):
            return value
        name: str = super().convert(value, param, ctx)
        return loggers.LogFormat[name.upper()]


class KindParamType(click.ParamType):
    name = 'kind'

    def convert(self, value: Any, param: Any, ctx: Any) -> references.Kind:
        try:
            return references.Kind.parse(value)
        except LookupError:
            choices = ', '.join(kind.value for kind in references.Kind)
            self.fail(f"{value!r} is not one of: {choices}.", param, ctx)


def logging_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """ A decorator to configure logging in all commands the same way."""
    @click.option('-v', '--verbose', is_flag=True)
    @click.option('-d', '--debug', is_flag=True)
    @click.option('-q', '--quiet', is_flag=True)
    @click.option('--log-format', type=LogFormatParamType(), default='plain')
    @click.option('--log-refkey', type=str)
    @click.option('--log-prefix/--no-log-prefix', default=None)
    @functools.wraps(fn)  # to preserve other opts/args
    def wrapper(verbose: bool, quiet: bool, debug: bool,
                log_format: loggers.LogFormat = loggers.LogFormat.PLAIN,
                log_prefix: Optional[bool] = None,
                log_refkey: Optional[str] = None,
                *args: Any, **kwargs: Any) -> Any:
        loggers.configure(debug=debug, verbose=verbose, quiet=quiet,
                          log_format=log_format, log_refkey=log_refkey, log_prefix=log_prefix)
        return fn(*args, **kwargs)

    return wrapper


def run_with_client(
        controls: CLIControls,
        fn: Callable[[Client], Awaitable[_T]],
) -> _T:
    """ Run the coroutine with a connected client, and render the API errors. """
    try:
        client = Client(controls.options, settings=controls.settings)
    except credentials.MissingOptionError as e:
        raise click.UsageError(str(e))

    async def _run() -> _T:
        async with client:
            return await fn(client)

    try:
        return asyncio.run(_run())
    except (errors.APIError, errors.WatchingError) as e:
        raise click.ClickException(str(e))


def echo_body(body: Any, output: str) -> None:
    data = body.as_dict() if isinstance(body, bodies.Body) else body
    if output == 'yaml':
        click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False).rstrip())
    elif output == 'json':
        click.echo(json.dumps(data, indent=2))
    elif isinstance(body, bodies.Body):
        click.echo(body.name)
    else:
        click.echo(data)


pass_controls = click.make_pass_decorator(CLIControls, ensure=True)


@click.version_option(prog_name='kubrest')
@click.group(name='kubrest', context_settings=dict(
    auto_envvar_prefix='KUBREST',
))
@click.option('--master', type=str, help="The API server's URL.")
@click.option('--ca-cert', type=str, help="A path to the CA certificate.")
@click.option('--client-cert', type=str, help="A path to the client certificate.")
@click.option('--client-key', type=str, help="A path to the client certificate's key.")
@click.option('--token', type=str, help="A path to the file with a bearer token.")
@click.option('--insecure', is_flag=True, default=None, help="Do not verify the server's certificate.")
@click.option('-n', '--namespace', type=str)
@pass_controls
def main(__controls: CLIControls, **options: Any) -> None:
    __controls.options.update({key: val for key, val in options.items() if val is not None})


@main.command(name='list')
@logging_options
@click.option('-l', '--selector', 'labels', type=str, help="A label selector, e.g. app=nginx.")
@click.option('--field-selector', 'fields', type=str)
@click.option('-A', '--all-namespaces', is_flag=True)
@click.option('-o', '--output', type=click.Choice(['names', 'json', 'yaml']), default='names')
@click.argument('kind', type=KindParamType())
@pass_controls
def list_(
        __controls: CLIControls,
        kind: references.Kind,
        labels: Optional[str],
        fields: Optional[str],
        all_namespaces: bool,
        output: str,
) -> None:
    """ List the objects of a kind. """
    async def fn(client: Client) -> None:
        objs = await client.repository(kind).find_all(labels, fields, all_namespaces=all_namespaces)
        if output == 'names':
            for obj in objs:
                click.echo(obj.name)
        else:
            echo_body({'kind': objs.kind, 'items': [obj.as_dict() for obj in objs]}, output)
    run_with_client(__controls, fn)


@main.command()
@logging_options
@click.option('-o', '--output', type=click.Choice(['json', 'yaml']), default='yaml')
@click.argument('kind', type=KindParamType())
@click.argument('name', type=str)
@pass_controls
def get(
        __controls: CLIControls,
        kind: references.Kind,
        name: str,
        output: str,
) -> None:
    """ Show an object of a kind by its name. """
    async def fn(client: Client) -> None:
        obj = await client.repository(kind).find(name)
        echo_body(obj, output)
    run_with_client(__controls, fn)


@main.command()
@logging_options
@click.option('-f', '--filename', type=click.File('r'), required=True,
              help="A YAML or JSON file with the object's body.")
@click.argument('kind', type=KindParamType())
@pass_controls
def create(
        __controls: CLIControls,
        kind: references.Kind,
        filename: Any,
) -> None:
    """ Create an object of a kind from a file. """
    body = yaml.safe_load(filename)
    if not isinstance(body, dict):
        raise click.BadParameter("The file must contain one object.", param_hint='--filename')

    async def fn(client: Client) -> None:
        obj = await client.repository(kind).create(body)
        click.echo(f"{kind.value}/{obj.name} created")
    run_with_client(__controls, fn)


@main.command()
@logging_options
@click.option('--cascade', 'propagation_policy',
              type=click.Choice(['Orphan', 'Background', 'Foreground']))
@click.argument('kind', type=KindParamType())
@click.argument('name', type=str)
@pass_controls
def delete(
        __controls: CLIControls,
        kind: references.Kind,
        name: str,
        propagation_policy: Optional[str],
) -> None:
    """ Delete an object of a kind by its name. """
    async def fn(client: Client) -> None:
        await client.repository(kind).delete(name, propagation_policy=propagation_policy)
        click.echo(f"{kind.value}/{name} deleted")
    run_with_client(__controls, fn)


@main.command()
@logging_options
@click.option('-l', '--selector', 'labels', type=str)
@click.option('--field-selector', 'fields', type=str)
@click.option('-A', '--all-namespaces', is_flag=True)
@click.option('--since', type=str, help="A resource version to start from.")
@click.option('--timeout', type=float, help="The server-side timeout of the stream.")
@click.argument('kind', type=KindParamType())
@pass_controls
def watch(
        __controls: CLIControls,
        kind: references.Kind,
        labels: Optional[str],
        fields: Optional[str],
        all_namespaces: bool,
        since: Optional[str],
        timeout: Optional[float],
) -> None:
    """ Print the watch-events of a kind as JSON lines. """
    def echo_event(event: bodies.WatchEvent) -> None:
        click.echo(json.dumps({'type': event.type, 'object': event.object.as_dict()}))

    async def fn(client: Client) -> None:
        await client.repository(kind).watch(echo_event, labels, fields,
                                            all_namespaces=all_namespaces,
                                            since=since, timeout=timeout)
    run_with_client(__controls, fn)


@main.command()
@logging_options
@click.option('-c', '--container', type=str)
@click.option('--tail', 'tail_lines', type=int)
@click.option('-p', '--previous', is_flag=True)
@click.argument('name', type=str)
@pass_controls
def logs(
        __controls: CLIControls,
        name: str,
        container: Optional[str],
        tail_lines: Optional[int],
        previous: bool,
) -> None:
    """ Print the logs of a pod. """
    async def fn(client: Client) -> None:
        text = await client.pods.logs(name, container=container, tail_lines=tail_lines,
                                      previous=previous)
        click.echo(text, nl=not text.endswith('\n'))
    run_with_client(__controls, fn)
