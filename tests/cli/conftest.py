import functools
import logging

import click.testing
import pytest

from kubrest.cli import main


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    # The commands configure logging with their own handlers; do not let them leak.
    logger = logging.getLogger()
    handlers = logger.handlers[:]
    level = logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


@pytest.fixture(autouse=True)
def _no_env_options(monkeypatch):
    for name in ['MASTER', 'CA_CERT', 'CLIENT_CERT', 'CLIENT_KEY', 'TOKEN', 'INSECURE', 'NAMESPACE']:
        monkeypatch.delenv(f'KUBREST_{name}', raising=False)


@pytest.fixture()
def runner():
    runner = click.testing.CliRunner()
    return runner


@pytest.fixture()
def invoke(runner):
    return functools.partial(runner.invoke, main)


@pytest.fixture()
def repository(mocker):
    """ A fake repository returned for any kind; its methods are async mocks. """
    repository = mocker.AsyncMock()
    repository.logs = mocker.AsyncMock(return_value='hello\n')
    mocker.patch('kubrest.client.Client.repository', return_value=repository)
    return repository
