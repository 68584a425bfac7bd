import json

import pytest

from kubrest.clients.errors import APIError, WatchingError
from kubrest.clients.watching import watch_objs
from kubrest.structs.configuration import ClientSettings, WatchingSettings
from kubrest.structs.references import Kind, resolve_resource

STREAM_WITH_NORMAL_EVENTS = [
    {'type': 'ADDED', 'object': {'metadata': {'name': 'name1', 'resourceVersion': '1'}}},
    {'type': 'MODIFIED', 'object': {'metadata': {'name': 'name1', 'resourceVersion': '2'}}},
    {'type': 'DELETED', 'object': {'metadata': {'name': 'name1', 'resourceVersion': '3'}}},
]


def make_stream(events) -> str:
    return '\n'.join(json.dumps(event) for event in events) + '\n'


async def collect(**kwargs):
    events = []
    async for event in watch_objs(**kwargs):
        events.append(event)
    return events


async def test_watching_yields_the_events_in_order(
        resp_mocker, aresponses, hostname, context, resource):

    stream_mock = resp_mocker(return_value=aresponses.Response(
        text=make_stream(STREAM_WITH_NORMAL_EVENTS)))
    aresponses.add(hostname, '/api/v1/namespaces/ns1/pods', 'get', stream_mock)

    events = await collect(context=context, resource=resource, namespace='ns1')

    assert events == STREAM_WITH_NORMAL_EVENTS
    assert stream_mock.call_count == 1
    assert dict(stream_mock.call_args[0][0].query) == {'watch': 'true'}


async def test_watching_cluster_wide(
        resp_mocker, aresponses, hostname, context, resource):

    stream_mock = resp_mocker(return_value=aresponses.Response(text=''))
    aresponses.add(hostname, '/api/v1/pods', 'get', stream_mock)

    events = await collect(context=context, resource=resource, namespace=None)

    assert events == []
    assert stream_mock.call_count == 1


async def test_watching_params_are_sent(
        resp_mocker, aresponses, hostname, context, resource):

    stream_mock = resp_mocker(return_value=aresponses.Response(text=''))
    aresponses.add(hostname, '/api/v1/namespaces/ns1/pods', 'get', stream_mock)

    await collect(context=context, resource=resource, namespace='ns1',
                  labels={'app': 'nginx'}, fields={'spec.nodeName': 'n1'},
                  since='123', timeout=60)

    assert dict(stream_mock.call_args[0][0].query) == {
        'watch': 'true',
        'labelSelector': 'app=nginx',
        'fieldSelector': 'spec.nodeName=n1',
        'resourceVersion': '123',
        'timeoutSeconds': '60',
    }


async def test_server_timeout_from_settings(
        resp_mocker, aresponses, hostname, context, resource):

    settings = ClientSettings(watching=WatchingSettings(server_timeout=300))
    stream_mock = resp_mocker(return_value=aresponses.Response(text=''))
    aresponses.add(hostname, '/api/v1/namespaces/ns1/pods', 'get', stream_mock)

    await collect(context=context, settings=settings, resource=resource, namespace='ns1')

    assert stream_mock.call_args[0][0].query['timeoutSeconds'] == '300'


async def test_bookmarks_and_unknown_events_are_skipped(
        resp_mocker, aresponses, hostname, context, resource, assert_logs):

    stream = [
        {'type': 'BOOKMARK', 'object': {'metadata': {'resourceVersion': '1'}}},
        {'type': 'UNKNOWN', 'object': {}},
        STREAM_WITH_NORMAL_EVENTS[0],
    ]
    stream_mock = resp_mocker(return_value=aresponses.Response(text=make_stream(stream)))
    aresponses.add(hostname, '/api/v1/namespaces/ns1/pods', 'get', stream_mock)

    events = await collect(context=context, resource=resource, namespace='ns1')

    assert events == STREAM_WITH_NORMAL_EVENTS[:1]
    assert_logs([
        r"Starting the watch-stream for pods.v1 in 'ns1'",
        r"Ignoring an unsupported event type: .*UNKNOWN",
        r"Stopping the watch-stream for pods.v1 in 'ns1'",
    ])


async def test_error_events_fail_the_stream(
        resp_mocker, aresponses, hostname, context, resource):

    stream = [
        STREAM_WITH_NORMAL_EVENTS[0],
        {'type': 'ERROR', 'object': {'code': 410, 'message': 'too old resource version'}},
        STREAM_WITH_NORMAL_EVENTS[1],
    ]
    stream_mock = resp_mocker(return_value=aresponses.Response(text=make_stream(stream)))
    aresponses.add(hostname, '/api/v1/namespaces/ns1/pods', 'get', stream_mock)

    events = []
    with pytest.raises(WatchingError, match=r"too old resource version"):
        async for event in watch_objs(context=context, resource=resource, namespace='ns1'):
            events.append(event)

    assert events == STREAM_WITH_NORMAL_EVENTS[:1]


async def test_http_errors_escalate(
        resp_mocker, aresponses, hostname, context, resource):

    stream_mock = resp_mocker(return_value=aresponses.Response(status=403))
    aresponses.add(hostname, '/api/v1/namespaces/ns1/pods', 'get', stream_mock)

    with pytest.raises(APIError) as e:
        await collect(context=context, resource=resource, namespace='ns1')
    assert e.value.status == 403


@pytest.mark.parametrize('kind', [Kind.SECRETS, Kind.CONFIG_MAPS, Kind.NAMESPACES])
async def test_unwatchable_kinds_are_refused(context, kind):
    resource = resolve_resource(kind)
    with pytest.raises(WatchingError, match=r"not supported"):
        await collect(context=context, resource=resource, namespace=None)
