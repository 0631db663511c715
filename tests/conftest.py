import logging

import pytest

from src.mz_engine.execute.connection import PooledConnection
from src.mz_engine.provider import ProviderConfig, configure

# Names of fixtures that require a live Materialize instance
_MATERIALIZE_FIXTURE_NAME = "materialize_connection"


def quiet_psycopg() -> None:
    """Turn down pool logging during the test context."""
    logging.getLogger("psycopg.pool").setLevel(logging.WARN)


@pytest.fixture(scope="session")
def materialize_connection():
    quiet_psycopg()

    config = ProviderConfig.from_settings()
    # Local instances and CI containers do not speak TLS.
    if config.self_hosted and config.host in ("localhost", "127.0.0.1"):
        config = ProviderConfig(
            host=config.host,
            port=config.port,
            username=config.username,
            password=config.password,
            database=config.database,
            sslmode="disable",
            application_name_suffix="tests",
        )

    provider = configure(config, connection_factory=PooledConnection)
    connection = provider.connection()

    yield connection

    provider.close()


def _mark_tests_using_materialize_fixture(tests: list[pytest.Item]) -> None:
    """
    Adds the `requires_materialize` marker to tests that use the fixture that
    needs a running instance.

    :param tests: list of tests collected by `pytest`
    """
    for test in tests:
        if _MATERIALIZE_FIXTURE_NAME in getattr(test, "fixturenames", ()):
            test.add_marker(pytest.mark.requires_materialize)


def _skip_materialize_tests(test: pytest.Item) -> None:
    """
    Tell `pytest` to skip tests that require a running instance.

    If the config argument `--include-materialize-tests` is present, this
    shouldn't be invoked.

    :param test: test collected by `pytest`
    """
    if list(test.iter_markers(name="requires_materialize")):
        pytest.skip("Skipped tests that require a Materialize instance")


def pytest_addoption(parser: pytest.Parser):
    parser.addoption(
        "--include-materialize-tests",
        action="store_true",
        default=False,
        help="Run tests against a live Materialize instance (MZ_HOST etc.).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]):
    if not config.getoption("--include-materialize-tests"):
        _mark_tests_using_materialize_fixture(tests=items)


def pytest_runtest_setup(item: pytest.Item):
    if not item.config.getoption("--include-materialize-tests"):
        _skip_materialize_tests(test=item)
