from opensearch_testcontainers.container_management.cluster import OpenSearchCluster
from opensearch_testcontainers.container_management.container import OpenSearchContainer
from opensearch_testcontainers.container_management.docker_image import DockerImageName, OpenSearchDockerImage
from opensearch_testcontainers.core.cluster_config import ClusterConfig
from opensearch_testcontainers.core.logging_wrangler import configure_logging

__all__ = [
    "ClusterConfig",
    "DockerImageName",
    "OpenSearchCluster",
    "OpenSearchContainer",
    "OpenSearchDockerImage",
    "configure_logging",
]
