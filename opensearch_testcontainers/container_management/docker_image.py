from dataclasses import dataclass, replace
from typing import Optional

# What Docker pulls when a reference names neither a tag nor a digest
LATEST_TAG = "latest"
# Release used when no image is given
DEFAULT_TAG = "2.19.1"


class InvalidImageNameException(Exception):
    def __init__(self, name: str):
        super().__init__(f"Could not parse Docker image name: '{name}'.  Expected something like"
                         " 'opensearchproject/opensearch:2.19.1'")


class IncompatibleImageException(Exception):
    def __init__(self, image: "DockerImageName", compatible_images):
        expected = ", ".join(str(other.unversioned_part) for other in compatible_images)
        super().__init__(f"Docker image {image} is not compatible with any of: {expected}")


def _looks_like_registry(component: str) -> bool:
    return "." in component or ":" in component or component == "localhost"


@dataclass(frozen=True)
class DockerImageName:
    """
    A parsed Docker image reference: [registry/]repository[:tag][@digest]
    """
    registry: str
    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    @classmethod
    def parse(cls, name: str) -> "DockerImageName":
        if not name or not name.strip():
            raise InvalidImageNameException(name)
        remote = name.strip()

        digest = None
        if "@" in remote:
            remote, digest = remote.split("@", 1)
            if not digest:
                raise InvalidImageNameException(name)

        registry = ""
        parts = remote.split("/", 1)
        if len(parts) == 2 and _looks_like_registry(parts[0]):
            registry, remote = parts

        tag = None
        # Any remaining colon separates the tag; registry ports were split off above
        if ":" in remote:
            remote, tag = remote.rsplit(":", 1)
            if not tag:
                raise InvalidImageNameException(name)

        if not remote:
            raise InvalidImageNameException(name)

        return cls(registry=registry, repository=remote, tag=tag, digest=digest)

    @property
    def unversioned_part(self) -> str:
        if self.registry:
            return f"{self.registry}/{self.repository}"
        return self.repository

    @property
    def version(self) -> str:
        """
        The tag when one was given, even alongside a digest; otherwise the digest, otherwise "latest".
        """
        if self.tag:
            return self.tag
        if self.digest:
            return self.digest
        return LATEST_TAG

    def with_tag(self, tag: str) -> "DockerImageName":
        return replace(self, tag=tag, digest=None)

    def is_compatible_with(self, *others: "DockerImageName") -> bool:
        return any(self.unversioned_part == other.unversioned_part for other in others)

    def assert_compatible_with(self, *others: "DockerImageName"):
        if not self.is_compatible_with(*others):
            raise IncompatibleImageException(self, others)

    def __str__(self) -> str:
        reference = self.unversioned_part
        if self.tag:
            reference += f":{self.tag}"
        if self.digest:
            reference += f"@{self.digest}"
        elif not self.tag:
            reference += f":{LATEST_TAG}"
        return reference


# Official images of the OpenSearch project: https://hub.docker.com/r/opensearchproject/opensearch
DEFAULT_IMAGE_NAME = DockerImageName.parse("opensearchproject/opensearch")
# The same images mirrored to Amazon ECR Public
ECR_IMAGE_NAME = DockerImageName.parse("public.ecr.aws/opensearchproject/opensearch")


class OpenSearchDockerImage:
    @staticmethod
    def of_version(version: str) -> DockerImageName:
        return OpenSearchDockerImage.of_tag(version)

    @staticmethod
    def of_tag(tag: str) -> DockerImageName:
        return DEFAULT_IMAGE_NAME.with_tag(tag)


DEFAULT_IMAGE = OpenSearchDockerImage.of_tag(DEFAULT_TAG)
