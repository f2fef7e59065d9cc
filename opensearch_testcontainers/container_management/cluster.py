import logging
import secrets
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List

from docker.errors import DockerException
from testcontainers.core.network import Network
from testcontainers.core.wait_strategies import HttpWaitStrategy

from opensearch_testcontainers.container_management.container import DEFAULT_HTTP_PORT, OpenSearchContainer
from opensearch_testcontainers.core.cluster_config import ClusterConfig
import opensearch_testcontainers.core.versions_engine as ve


class ClusterNotRunningException(Exception):
    def __init__(self, name: str):
        super().__init__(f"The cluster {name} is not currently running")


class ClusterRestartNotAllowedException(Exception):
    def __init__(self, name: str):
        super().__init__(f"The cluster {name} was stopped; restarting stopped clusters is not allowed")


class ClusterStopFailedException(Exception):
    def __init__(self, name: str, failures: List[Exception]):
        super().__init__(f"The cluster {name} was not cleanly stopped; {len(failures)} node(s) or its network could"
                         " not be removed")
        self.failures = failures


STATE_NOT_STARTED = "NOT_STARTED"
STATE_RUNNING = "RUNNING"
STATE_STOPPED = "STOPPED"

"""
A cluster is one manager node plus node_count - 1 data nodes, all attached to a private Docker network and addressable
by their node names on it.  The manager bootstraps the cluster; the other nodes discover it through
discovery.seed_hosts.

The manager is started first so the rest of the nodes have something to join, then the remaining nodes start in
parallel.  start() returns once the manager reports every node as joined.
"""


class OpenSearchCluster:
    def __init__(self, cluster_config: ClusterConfig = None, docker_client_kw: Dict[str, Any] = None):
        self.logger = logging.getLogger(__name__)
        self._cluster_config = cluster_config if cluster_config is not None else ClusterConfig()
        self.name = self._cluster_config.name
        self._docker_client_kw = docker_client_kw
        self._network: Network = None
        self._nodes: Dict[str, OpenSearchContainer] = {}

        self._cluster_state = STATE_NOT_STARTED

    @property
    def manager(self) -> OpenSearchContainer:
        if self._cluster_state != STATE_RUNNING:
            raise ClusterNotRunningException(self.name)
        return self._nodes[self._cluster_config.manager_name]

    @property
    def nodes(self) -> List[OpenSearchContainer]:
        return list(self._nodes.values())

    @property
    def node_names(self) -> List[str]:
        manager_name = self._cluster_config.manager_name
        names = [manager_name]
        number = 1
        while len(names) < self._cluster_config.node_count:
            node_name = self._generate_node_name(number)
            number += 1
            if node_name != manager_name:
                names.append(node_name)
        return names

    def _generate_network_name(self) -> str:
        # Suffixed so clusters sharing a name can run side by side
        return f"{self.name}-network-{secrets.token_hex(4)}"

    def _generate_node_name(self, number: int) -> str:
        return f"node{number}"

    def _create_network(self) -> Network:
        network = Network(docker_client_kw=self._docker_client_kw)
        network.name = self._generate_network_name()
        self.logger.debug(f"Creating network {network.name}...")
        return network.create()

    def node_environment(self, node_name: str) -> Dict[str, str]:
        manager_name = self._cluster_config.manager_name
        tag = self._cluster_config.image_name.version

        env = {
            "cluster.name": self.name,
            "node.name": node_name,
            "discovery.type": "zen",
        }
        if ve.uses_cluster_manager_settings(tag):
            env["cluster.initial_cluster_manager_nodes"] = manager_name
        else:
            env["cluster.initial_master_nodes"] = manager_name
        if node_name != manager_name:
            env["discovery.seed_hosts"] = manager_name

        env.update(self._cluster_config.env)
        return env

    def _create_node(self, node_name: str) -> OpenSearchContainer:
        node = (OpenSearchContainer(self._cluster_config.image_name, docker_client_kw=self._docker_client_kw)
                .with_envs(**self.node_environment(node_name))
                .with_network(self._network)
                .with_network_aliases(node_name)
                .with_startup_timeout(self._cluster_config.startup_timeout))
        if self._cluster_config.security_enabled:
            node.with_security_enabled()
        return node

    def start(self) -> "OpenSearchCluster":
        if self._cluster_state == STATE_RUNNING:
            self.logger.debug(f"Cluster {self.name} is already running")
            return self  # no-op

        if self._cluster_state == STATE_STOPPED:
            raise ClusterRestartNotAllowedException(self.name)

        self._network = self._create_network()
        self._cluster_state = STATE_RUNNING

        try:
            for node_name in self.node_names:
                self._nodes[node_name] = self._create_node(node_name)

            manager = self.manager
            self.logger.debug(f"Starting manager node {self._cluster_config.manager_name} of cluster {self.name}...")
            manager.start()

            other_nodes = [node for node in self._nodes.values() if node is not manager]
            if other_nodes:
                self.logger.debug(f"Starting {len(other_nodes)} more node(s) of cluster {self.name}...")
                with ThreadPoolExecutor(max_workers=len(other_nodes)) as executor:
                    futures = [executor.submit(node.start) for node in other_nodes]
                for future in futures:
                    future.result()

            self.wait_for_nodes_to_join()
        except Exception:
            self.logger.error(f"Cluster {self.name} failed to start; tearing it down")
            try:
                self.stop()
            except ClusterStopFailedException as exception:
                self.logger.warning(str(exception))
            raise

        self.logger.info(f"Cluster {self.name} is up with {len(self._nodes)} node(s) at "
                         f"{self.get_http_host_address()}")
        return self

    def wait_for_nodes_to_join(self):
        node_count = len(self._nodes)
        manager = self.manager
        wait_strategy = (HttpWaitStrategy(DEFAULT_HTTP_PORT, f"/_cluster/health?wait_for_nodes={node_count}&timeout=1s")
                         .with_startup_timeout(self._cluster_config.startup_timeout))
        if manager.is_security_enabled():
            wait_strategy.using_tls(insecure=True).with_basic_credentials(manager.get_username(),
                                                                          manager.get_password())

        self.logger.debug(f"Waiting for {node_count} node(s) to join cluster {self.name}...")
        wait_strategy.wait_until_ready(manager)

    def _stop_nodes(self) -> List[Exception]:
        nodes = list(self._nodes.values())
        if not nodes:
            return []
        with ThreadPoolExecutor(max_workers=len(nodes)) as executor:
            futures = [executor.submit(node.stop) for node in nodes]
        return [future.exception() for future in futures if future.exception() is not None]

    def stop(self):
        if self._cluster_state != STATE_RUNNING:
            self.logger.debug(f"Cluster {self.name} is not running")
            return  # no-op

        self.logger.debug(f"Stopping cluster {self.name}...")
        failures = self._stop_nodes()
        try:
            if self._network is not None:
                self._network.remove()
        except DockerException as exception:
            failures.append(exception)
        finally:
            self._network = None
            self._cluster_state = STATE_STOPPED
            self.logger.debug(f"Stopped cluster {self.name}")

        if failures:
            raise ClusterStopFailedException(self.name, failures) from failures[0]

    def __enter__(self) -> "OpenSearchCluster":
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def is_security_enabled(self) -> bool:
        return self._cluster_config.security_enabled

    def get_http_host_address(self) -> str:
        return self.manager.get_http_host_address()

    def get_username(self) -> str:
        return self.manager.get_username()

    def get_password(self) -> str:
        return self.manager.get_password()
