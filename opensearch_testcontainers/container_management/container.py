import logging
import secrets
import warnings
from typing import List, Optional, Tuple, Union

from docker.errors import DockerException
from testcontainers.core.container import DockerContainer
from testcontainers.core.wait_strategies import HttpWaitStrategy

from opensearch_testcontainers.container_management.docker_image import (DEFAULT_IMAGE, DEFAULT_IMAGE_NAME,
                                                                         ECR_IMAGE_NAME, DockerImageName)
import opensearch_testcontainers.core.versions_engine as ve

# Default credentials to connect to an OpenSearch node with the security plugin enabled
DEFAULT_USER = "admin"
DEFAULT_PASSWORD = "admin"
# Images from 2.12.0 on reject "admin"; this one satisfies the password strength check
DEFAULT_STRONG_PASSWORD = "_ad0m#Ns_"

DEFAULT_HTTP_PORT = 9200
# Transport port; deprecated for clients and may be removed in future versions
DEFAULT_TCP_PORT = 9300

DEFAULT_STARTUP_TIMEOUT_SEC = 300

ENV_DISCOVERY_TYPE = "discovery.type"
ENV_DISABLE_SECURITY_PLUGIN = "DISABLE_SECURITY_PLUGIN"
ENV_INITIAL_ADMIN_PASSWORD = "OPENSEARCH_INITIAL_ADMIN_PASSWORD"

STARTUP_LOG_TAIL_LINES = 50
BASE58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"

STATE_NOT_STARTED = "NOT_STARTED"
STATE_RUNNING = "RUNNING"
STATE_STOPPED = "STOPPED"


class ContainerNotRunningException(Exception):
    def __init__(self, name: str):
        super().__init__(f"The OpenSearch container {name} is not currently running")


class ContainerRestartNotAllowedException(Exception):
    def __init__(self, name: str):
        super().__init__(f"The OpenSearch container {name} was stopped and removed; create a new one instead")


def random_network_alias() -> str:
    return "opensearch-" + "".join(secrets.choice(BASE58_ALPHABET) for _ in range(6))


class OpenSearchContainer(DockerContainer):
    """
    A single OpenSearch node running in Docker, exposing ports 9200 (HTTP or HTTPS) and 9300 (transport, deprecated).

    The security plugin is disabled by default.  Once enabled with with_security_enabled(), the node speaks HTTPS with
    its self-signed demo certificates and requires basic auth with get_username() / get_password().

    Example:
        with OpenSearchContainer("opensearchproject/opensearch:2.19.1") as node:
            requests.get(node.get_http_host_address()).json()["version"]["number"]
    """

    def __init__(self, image: Union[str, DockerImageName] = DEFAULT_IMAGE, **kwargs) -> None:
        image_name = DockerImageName.parse(image) if isinstance(image, str) else image
        image_name.assert_compatible_with(DEFAULT_IMAGE_NAME, ECR_IMAGE_NAME)
        super().__init__(str(image_name), **kwargs)
        self.logger = logging.getLogger(__name__)
        self.image_name = image_name

        self._disable_security = True
        self._startup_timeout = DEFAULT_STARTUP_TIMEOUT_SEC
        self._random_alias: Optional[str] = None
        self._state = STATE_NOT_STARTED

        self.with_exposed_ports(DEFAULT_HTTP_PORT, DEFAULT_TCP_PORT)

    @property
    def name(self) -> str:
        if self._container is not None:
            return self._container.name
        return self._name or self.image

    @property
    def network_aliases(self) -> List[str]:
        return list(self._network_aliases or [])

    @property
    def wait_strategy(self) -> Optional[HttpWaitStrategy]:
        return self._wait_strategy

    def with_startup_timeout(self, seconds: float) -> "OpenSearchContainer":
        self._startup_timeout = seconds
        return self

    def with_security_enabled(self) -> "OpenSearchContainer":
        """
        Switches the node to HTTPS with basic auth using the default credentials.
        """
        self._disable_security = False
        return self

    def is_security_enabled(self) -> bool:
        return not self._disable_security

    def _requires_strong_password(self) -> bool:
        return ve.requires_strong_password(self.image_name.version)

    def configure(self):
        """
        Fills in the environment and wait strategy from the options chosen so far.  Values the caller set explicitly
        with with_env() are left alone, which is how multi-node clusters override single-node discovery.
        """
        if self._network is not None:
            if self._random_alias is None:
                self._random_alias = random_network_alias()
            aliases = self.network_aliases
            if self._random_alias not in aliases:
                self.with_network_aliases(*aliases, self._random_alias)

        self.env.setdefault(ENV_DISCOVERY_TYPE, "single-node")
        if self._disable_security:
            self.env[ENV_DISABLE_SECURITY_PLUGIN] = "true"
        else:
            self.env.pop(ENV_DISABLE_SECURITY_PLUGIN, None)
            if self._requires_strong_password():
                self.env.setdefault(ENV_INITIAL_ADMIN_PASSWORD, DEFAULT_STRONG_PASSWORD)

        if self._disable_security:
            wait_strategy = HttpWaitStrategy(DEFAULT_HTTP_PORT).for_status_code(200)
        else:
            # Self-signed demo certificates, so certificate validation is skipped.  A 401 still proves the REST layer
            # and security plugin are up.
            wait_strategy = (HttpWaitStrategy(DEFAULT_HTTP_PORT)
                             .using_tls(insecure=True)
                             .with_basic_credentials(self.get_username(), self.get_password())
                             .for_status_code(200)
                             .for_status_code(401))
        self.waiting_for(wait_strategy.with_startup_timeout(self._startup_timeout))

    def start(self) -> "OpenSearchContainer":
        if self._state == STATE_RUNNING:
            self.logger.debug(f"Container {self.name} is already running")
            return self  # no-op

        if self._state == STATE_STOPPED:
            raise ContainerRestartNotAllowedException(self.name)

        self.configure()
        try:
            super().start()
        except Exception:
            if self._container is not None:
                self._log_startup_failure()
                self._remove_failed_container()
            raise

        self._state = STATE_RUNNING
        self.logger.info(f"OpenSearch node {self.name} is ready at {self.get_http_host_address()}")
        return self

    def _log_startup_failure(self):
        try:
            stdout, stderr = self.get_logs()
        except DockerException as exception:
            self.logger.debug(f"Could not fetch logs of container {self.name}: {exception}")
            return
        lines = (stdout + stderr).decode(errors="replace").splitlines()
        tail = "\n".join(lines[-STARTUP_LOG_TAIL_LINES:])
        self.logger.error(f"OpenSearch node {self.name} failed to start.  Last log lines:\n{tail}")

    def _remove_failed_container(self):
        self._name = self._container.name
        try:
            super().stop()
        except DockerException as exception:
            self.logger.warning(f"Could not remove container {self.name} after its failed start: {exception}")
        finally:
            self._container = None
            self._state = STATE_STOPPED

    def stop(self, force: bool = True, delete_volume: bool = True):
        if self._state != STATE_RUNNING:
            self.logger.debug(f"Container {self.name} is not running")
            return  # no-op

        self.logger.debug(f"Stopping container {self.name}...")
        self._name = self._container.name
        try:
            # Removing with force kills the node first
            super().stop(force=force, delete_volume=delete_volume)
        finally:
            self._container = None
            self._state = STATE_STOPPED

    def is_running(self) -> bool:
        if self._state != STATE_RUNNING:
            return False
        self.reload()
        return self.status == "running"

    def get_mapped_port(self, port: int) -> int:
        if self._state != STATE_RUNNING:
            raise ContainerNotRunningException(self.name)
        return self.get_exposed_port(port)

    def get_http_host_address(self) -> str:
        """
        Returns the HTTP(S) address of the node, in the form "scheme://host:port".
        """
        scheme = "http" if self._disable_security else "https"
        return f"{scheme}://{self.get_container_host_ip()}:{self.get_mapped_port(DEFAULT_HTTP_PORT)}"

    def get_tcp_host(self) -> Tuple[str, int]:
        """
        Returns the (host, port) pair of the transport protocol.  Transport clients are deprecated and may go away in
        future versions.
        """
        warnings.warn("The OpenSearch transport port is deprecated; use get_http_host_address() instead",
                      DeprecationWarning, stacklevel=2)
        return self.get_container_host_ip(), self.get_mapped_port(DEFAULT_TCP_PORT)

    def get_username(self) -> str:
        return DEFAULT_USER

    def get_password(self) -> str:
        if self._requires_strong_password():
            return self.env.get(ENV_INITIAL_ADMIN_PASSWORD, DEFAULT_STRONG_PASSWORD)
        return DEFAULT_PASSWORD
