import pytest

from kubrest.structs.bodies import Body
from kubrest.structs.collections import BodyCollection
from kubrest.structs.selectors import ABSENT, PRESENT


@pytest.fixture()
def raw_list():
    return {
        'kind': 'PodList',
        'apiVersion': 'v1',
        'metadata': {'resourceVersion': '123'},
        'items': [
            {'metadata': {'name': 'a', 'labels': {'app': 'nginx', 'tier': 'web'}}},
            {'metadata': {'name': 'b', 'labels': {'app': 'redis'}}},
            {'metadata': {'name': 'c'}},
        ],
    }


def test_items_by_name():
    collection = BodyCollection({'items': [{'metadata': {'name': 'a'}},
                                           {'metadata': {'name': 'b'}}]})
    assert len(collection) == 2
    assert collection.get_by_name('a') is collection[0]
    assert collection.get_by_name('b') is collection[1]


def test_empty_collections():
    for collection in [BodyCollection(), BodyCollection(None), BodyCollection({}),
                       BodyCollection({'items': None}), BodyCollection([])]:
        assert len(collection) == 0
        assert list(collection) == []
        assert collection.first() is None
        assert collection.names == []


def test_collection_fields(raw_list):
    collection = BodyCollection(raw_list)
    assert collection.kind == 'PodList'
    assert collection.resource_version == '123'
    assert collection.names == ['a', 'b', 'c']
    assert all(isinstance(item, Body) for item in collection)


def test_items_inherit_the_kind_and_api_version(raw_list):
    collection = BodyCollection(raw_list)
    assert [item.kind for item in collection] == ['Pod', 'Pod', 'Pod']
    assert [item.api_version for item in collection] == ['v1', 'v1', 'v1']


def test_items_keep_their_own_kind_and_api_version():
    collection = BodyCollection({'kind': 'List', 'apiVersion': 'v1', 'items': [
        {'kind': 'Deployment', 'apiVersion': 'apps/v1', 'metadata': {'name': 'a'}},
    ]})
    assert collection[0].kind == 'Deployment'
    assert collection[0].api_version == 'apps/v1'


def test_collection_from_bodies_and_dicts():
    body = Body({'metadata': {'name': 'a'}})
    collection = BodyCollection([body, {'metadata': {'name': 'b'}}])
    assert collection[0] is body
    assert collection.names == ['a', 'b']


def test_first(raw_list):
    collection = BodyCollection(raw_list)
    assert collection.first() is collection[0]


def test_get_by_name_when_absent(raw_list):
    collection = BodyCollection(raw_list)
    with pytest.raises(KeyError):
        collection.get_by_name('x')
    assert collection.get_by_name('x', None) is None
    assert collection.get_by_name('x', default='z') == 'z'


def test_slicing_keeps_the_collection(raw_list):
    collection = BodyCollection(raw_list)
    sliced = collection[1:]
    assert isinstance(sliced, BodyCollection)
    assert sliced.names == ['b', 'c']
    assert sliced.kind == 'PodList'
    assert sliced.resource_version == '123'


@pytest.mark.parametrize('labels, expected', [
    ({'app': 'nginx'}, ['a']),
    ({'app': PRESENT}, ['a', 'b']),
    ({'app': ABSENT}, ['c']),
    ({'app': ['nginx', 'redis']}, ['a', 'b']),
    ({'app': 'nginx', 'tier': 'db'}, []),
    ({}, ['a', 'b', 'c']),
])
def test_filtering_by_labels(raw_list, labels, expected):
    collection = BodyCollection(raw_list)
    filtered = collection.filter_by_labels(labels)
    assert isinstance(filtered, BodyCollection)
    assert filtered.names == expected
    assert len(collection) == 3  # not modified


def test_equality(raw_list):
    assert BodyCollection(raw_list) == BodyCollection(raw_list)
    assert BodyCollection(raw_list) == list(BodyCollection(raw_list))
    assert BodyCollection(raw_list) != BodyCollection()
