import json
import logging
import re
from unittest.mock import AsyncMock, MagicMock

import aresponses as aresponses_module
import pytest

from kubrest.client import Client
from kubrest.clients.auth import APIContext
from kubrest.structs.configuration import ClientSettings
from kubrest.structs.credentials import ConnectionInfo
from kubrest.structs.references import Kind, resolve_resource


@pytest.fixture()
def hostname():
    """ A fake hostname to be used in all aiohttp/aresponses tests. """
    return 'fake-host'


@pytest.fixture()
def settings():
    return ClientSettings()


@pytest.fixture()
def info(hostname):
    return ConnectionInfo(master=f'https://{hostname}', namespace='default')


@pytest.fixture()
def resource(settings):
    """ A namespaced resource of the core API. """
    return resolve_resource(Kind.PODS, settings)


@pytest.fixture()
def beta_resource(settings):
    """ A namespaced resource of the non-core API group. """
    return resolve_resource(Kind.DEPLOYMENTS, settings)


@pytest.fixture()
def cluster_resource(settings):
    """ A cluster-scoped resource of the core API. """
    return resolve_resource(Kind.NODES, settings)


#
# Mocks for the Kubernetes API. No external calls must be made under any circumstances.
# The unit-tests must be fully isolated from the environment.
#

@pytest.fixture()
async def aresponses():
    """ A fake API server for the aiohttp sessions created within a test. """
    async with aresponses_module.ResponsesMockServer() as server:
        yield server


@pytest.fixture()
async def context(info, settings, aresponses):
    """ The session & server info for the low-level functions; closed after the test. """
    async with APIContext(info, settings) as context:
        yield context


@pytest.fixture()
async def client(info, settings, aresponses):
    """ A client with its repositories; the session is created on the first request. """
    async with Client(
        master=info.master,
        namespace=info.namespace,
        settings=settings,
    ) as client:
        yield client


@pytest.fixture()
def resp_mocker(aresponses):
    """
    A factory of server-side callbacks for `aresponses` with mocking/spying.

    The value of the fixture is a function, which return a coroutine mock.
    That coroutine mock should be passed to `aresponses.add` as a response
    callback function. When called, it calls the mock defined by the function's
    arguments (specifically, return_value or side_effects).

    The difference from passing the responses directly to `aresponses.add`
    is that it is possible to assert on whether the response was handled
    by that callback at all (i.e. HTTP URL & method matched), and to assert
    on the requests as they were received by the server.

    Sample usage::

        def test_me(resp_mocker):
            response = aiohttp.web.json_response({'a': 'b'})
            callback = resp_mocker(return_value=response)
            aresponses.add(hostname, '/path/', 'get', callback)
            do_something()
            assert callback.called
            assert callback.call_count == 1
            assert callback.call_args[0][0].query['q'] == '...'
            assert callback.payloads == ['']  # parsed JSON or text, one per request
    """
    def resp_maker(*args, **kwargs):
        actual_response = MagicMock(*args, **kwargs)
        payloads = []

        async def resp_mock_effect(request):
            # The request's content can be read inside of the handler only. We preserve
            # the data into a conventional field, so that they could be asserted later.
            text = await request.text()
            try:
                payloads.append(json.loads(text))
            except json.JSONDecodeError:
                payloads.append(text)

            # Get a response/error as it was intended (via return_value/side_effect).
            return actual_response()

        mock = AsyncMock(side_effect=resp_mock_effect)
        mock.payloads = payloads
        return mock
    return resp_maker


@pytest.fixture()
def assert_logs(caplog):
    """
    A function to assert the logs are present (by pattern).

    The listed message patterns MUST be present, in the order specified.
    Some other log messages can also be present, but they are ignored.
    """
    caplog.set_level(logging.DEBUG)

    def assert_logs_fn(patterns, prohibited=()):
        __traceback_hide__ = True
        remaining_patterns = list(patterns)
        for message in caplog.messages:
            if remaining_patterns and re.search(remaining_patterns[0], message):
                remaining_patterns[:1] = []
            for pattern in prohibited:
                if re.search(pattern, message):
                    raise AssertionError(f"Prohibited log pattern found: {message!r} ~ {pattern!r}")
        if remaining_patterns:
            raise AssertionError(f"Few patterns were missed: {remaining_patterns!r}")

    return assert_logs_fn
