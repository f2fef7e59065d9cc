import os
from typing import Dict

from pydantic import BaseModel, Field, ValidationError, field_validator
import yaml

from opensearch_testcontainers.container_management.docker_image import (DEFAULT_IMAGE, DockerImageName,
                                                                         InvalidImageNameException)


class ClusterConfigFileDoesntExistException(Exception):
    def __init__(self, config_path):
        super().__init__(f"There is no file at the path you specified for your cluster config: {config_path}")


class ClusterConfigFileNotYAMLException(Exception):
    def __init__(self, config_path, original_exception):
        super().__init__(f"The cluster config at path {config_path} is not parsable as YAML.  Details: "
                         f"{str(original_exception)}")


class InvalidClusterConfigException(Exception):
    def __init__(self, original_exception: ValidationError):
        self.original_exception = original_exception
        super().__init__(f"Invalid cluster config: {str(original_exception)}")


class ClusterConfig(BaseModel):
    """
    Describes a multi-node cluster.  A YAML file for it looks like:

        name: search-cluster
        image: opensearchproject/opensearch:2.19.1
        node_count: 3
        security_enabled: true
        env:
          OPENSEARCH_JAVA_OPTS: "-Xms512m -Xmx512m"
    """
    name: str = "opensearch-cluster"
    image: str = str(DEFAULT_IMAGE)
    node_count: int = Field(default=3, ge=1)
    security_enabled: bool = False
    manager_name: str = Field(default="master", min_length=1)
    env: Dict[str, str] = Field(default_factory=dict)
    startup_timeout: float = Field(default=5 * 60, gt=0)

    @field_validator("image")
    @classmethod
    def _parsable_image(cls, value: str) -> str:
        try:
            DockerImageName.parse(value)
        except InvalidImageNameException as exception:
            raise ValueError(str(exception))
        return value

    @field_validator("env", mode="before")
    @classmethod
    def _stringify_env(cls, value):
        # YAML turns "true" and "512" into bools and ints; the container only takes strings
        if isinstance(value, dict):
            return {str(k): str(v).lower() if isinstance(v, bool) else str(v) for k, v in value.items()}
        return value

    @property
    def image_name(self) -> DockerImageName:
        return DockerImageName.parse(self.image)

    @classmethod
    def from_dict(cls, raw_config: dict) -> "ClusterConfig":
        try:
            return cls.model_validate(raw_config or {})
        except ValidationError as exception:
            raise InvalidClusterConfigException(exception)

    @classmethod
    def from_file(cls, config_path: str) -> "ClusterConfig":
        config_path_full = os.path.abspath(config_path)
        if not os.path.isfile(config_path_full):
            raise ClusterConfigFileDoesntExistException(config_path_full)

        with open(config_path_full, "r") as config_file:
            try:
                raw_config = yaml.safe_load(config_file)
            except yaml.YAMLError as exception:
                raise ClusterConfigFileNotYAMLException(config_path_full, exception)

        return cls.from_dict(raw_config)
