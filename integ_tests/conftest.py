import logging

import pytest

from opensearch_testcontainers.core.logging_wrangler import configure_logging


@pytest.fixture(scope="session", autouse=True)
def package_logging():
    configure_logging(logging.DEBUG)
    yield


@pytest.fixture
def small_heap_env():
    # Keeps each node's heap small enough for several to share a CI runner
    return {"OPENSEARCH_JAVA_OPTS": "-Xms512m -Xmx512m"}
