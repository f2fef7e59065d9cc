import docker
from docker.errors import DockerException
import pytest
from requests.exceptions import RequestException


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: starts real OpenSearch containers and needs a Docker daemon")


def _docker_available() -> bool:
    try:
        docker.from_env().ping()
    except (DockerException, RequestException):
        return False
    return True


def pytest_collection_modifyitems(config, items):
    slow_items = [item for item in items if item.get_closest_marker("slow") is not None]
    if not slow_items or _docker_available():
        return

    skip_slow = pytest.mark.skip(reason="No Docker daemon is reachable")
    for item in slow_items:
        item.add_marker(skip_slow)
