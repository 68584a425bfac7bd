import logging
from typing import Collection

import pytest

from kubrest.engines.loggers import LogFormat, ObjectFormatter, ObjectJsonFormatter, \
                                    ObjectPrefixingJsonFormatter, ObjectPrefixingTextFormatter, \
                                    ObjectTextFormatter, configure


def _get_own_handlers(logger: logging.Logger) -> Collection[logging.Handler]:
    return [
        handler for handler in logger.handlers
        if isinstance(handler, logging.StreamHandler) and
           isinstance(handler.formatter, ObjectFormatter)
    ]


def test_own_formatter_is_used():
    configure()
    own_handlers = _get_own_handlers(logging.getLogger())
    assert len(own_handlers) == 1


@pytest.mark.parametrize('log_format', [LogFormat.FULL, LogFormat.PLAIN, '%(message)s'])
@pytest.mark.parametrize('log_prefix, expected_cls', [
    (False, ObjectTextFormatter),
    (True, ObjectPrefixingTextFormatter),
    (None, ObjectPrefixingTextFormatter),
])
def test_text_formatters(log_format, log_prefix, expected_cls):
    configure(log_format=log_format, log_prefix=log_prefix)
    own_handlers = _get_own_handlers(logging.getLogger())
    assert len(own_handlers) == 1
    assert type(own_handlers[0].formatter) is expected_cls


@pytest.mark.parametrize('log_prefix, expected_cls', [
    (False, ObjectJsonFormatter),
    (True, ObjectPrefixingJsonFormatter),
    (None, ObjectJsonFormatter),
])
def test_json_formatters(log_prefix, expected_cls):
    configure(log_format=LogFormat.JSON, log_prefix=log_prefix)
    own_handlers = _get_own_handlers(logging.getLogger())
    assert len(own_handlers) == 1
    assert type(own_handlers[0].formatter) is expected_cls


def test_error_on_unknown_formatter():
    with pytest.raises(ValueError):
        configure(log_format=object())


@pytest.mark.parametrize('verbose, debug, quiet, expected_level', [
    (None, None, None, logging.INFO),
    (True, None, None, logging.DEBUG),
    (None, True, None, logging.DEBUG),
    (True, True, True, logging.DEBUG),
    (None, None, True, logging.WARNING),
])
def test_levels(verbose, debug, quiet, expected_level):
    configure(verbose=verbose, debug=debug, quiet=quiet)
    assert logging.getLogger().level == expected_level


def test_repeated_configuration_replaces_own_handlers():
    foreign = logging.NullHandler()
    logging.getLogger().addHandler(foreign)
    try:
        configure(log_format=LogFormat.PLAIN)
        configure(log_format=LogFormat.JSON)
        own_handlers = _get_own_handlers(logging.getLogger())
        assert len(own_handlers) == 1
        assert type(own_handlers[0].formatter) is ObjectJsonFormatter
        assert foreign in logging.getLogger().handlers
    finally:
        logging.getLogger().removeHandler(foreign)
