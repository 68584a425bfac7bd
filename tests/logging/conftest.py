import logging.handlers

import pytest

from kubrest.engines.loggers import ObjectFormatter, ObjectLogger
from kubrest.structs.bodies import Body


@pytest.fixture(autouse=True)
def _clear_own_handlers():
    logger = logging.getLogger()
    level = logger.level
    logger.handlers[:] = [
        handler for handler in logger.handlers
        if not isinstance(handler.formatter, ObjectFormatter)
    ]
    original_handlers = logger.handlers[:]
    yield
    logger.handlers[:] = original_handlers
    logger.setLevel(level)


def _make_record(body: Body) -> logging.LogRecord:
    handler = logging.handlers.BufferingHandler(capacity=100)
    logger = ObjectLogger(body=body)
    logger.logger.addHandler(handler)
    try:
        logger.warning("hello")
    finally:
        logger.logger.removeHandler(handler)
    return handler.buffer[0]


@pytest.fixture()
def ns_record():
    return _make_record(Body({
        'kind': 'Pod',
        'apiVersion': 'v1',
        'metadata': {'uid': 'uid1', 'name': 'name1', 'namespace': 'namespace1'},
    }))


@pytest.fixture()
def cluster_record():
    return _make_record(Body({
        'kind': 'Node',
        'apiVersion': 'v1',
        'metadata': {'uid': 'uid1', 'name': 'name1'},
    }))
