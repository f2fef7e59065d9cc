import pytest

from opensearch_testcontainers.container_management.docker_image import (DEFAULT_IMAGE, DEFAULT_IMAGE_NAME, DEFAULT_TAG,
                                                                         ECR_IMAGE_NAME, DockerImageName,
                                                                         IncompatibleImageException,
                                                                         InvalidImageNameException,
                                                                         OpenSearchDockerImage)


@pytest.mark.parametrize("name,registry,repository,version", [
    ("opensearchproject/opensearch", "", "opensearchproject/opensearch", "latest"),
    ("opensearchproject/opensearch:2.19.1", "", "opensearchproject/opensearch", "2.19.1"),
    ("public.ecr.aws/opensearchproject/opensearch:2.4.1", "public.ecr.aws", "opensearchproject/opensearch", "2.4.1"),
    ("localhost:5000/opensearch:1.3.4", "localhost:5000", "opensearch", "1.3.4"),
    ("localhost/opensearch", "localhost", "opensearch", "latest"),
])
def test_parse_image_names(name, registry, repository, version):
    image = DockerImageName.parse(name)
    assert image.registry == registry
    assert image.repository == repository
    assert image.version == version
    assert image.digest is None


def test_parse_image_with_digest():
    image = DockerImageName.parse("opensearchproject/opensearch@sha256:abcdef")
    assert image.repository == "opensearchproject/opensearch"
    assert image.tag is None
    assert image.version == "sha256:abcdef"
    assert str(image) == "opensearchproject/opensearch@sha256:abcdef"


def test_parse_image_with_tag_and_digest_keeps_tag_as_version():
    image = DockerImageName.parse("opensearchproject/opensearch:2.11.0@sha256:abcdef")
    assert image.tag == "2.11.0"
    assert image.digest == "sha256:abcdef"
    assert image.version == "2.11.0"
    assert str(image) == "opensearchproject/opensearch:2.11.0@sha256:abcdef"


@pytest.mark.parametrize("name", ["", "   ", None, "opensearch:", "opensearch@", ":2.0"])
def test_parse_invalid_image_names_raises(name):
    with pytest.raises(InvalidImageNameException):
        DockerImageName.parse(name)


def test_str_defaults_tag_to_latest():
    assert str(DockerImageName.parse("opensearchproject/opensearch")) == "opensearchproject/opensearch:latest"


def test_with_tag_replaces_tag_and_digest():
    image = DockerImageName.parse("opensearchproject/opensearch@sha256:abcdef").with_tag("2.0.1")
    assert str(image) == "opensearchproject/opensearch:2.0.1"
    assert image.version == "2.0.1"


def test_unversioned_part_includes_registry():
    assert ECR_IMAGE_NAME.unversioned_part == "public.ecr.aws/opensearchproject/opensearch"
    assert DEFAULT_IMAGE_NAME.unversioned_part == "opensearchproject/opensearch"


def test_compatible_images():
    assert DockerImageName.parse("opensearchproject/opensearch:1.3.4").is_compatible_with(DEFAULT_IMAGE_NAME)
    assert DockerImageName.parse("public.ecr.aws/opensearchproject/opensearch:2.4.1").is_compatible_with(
        DEFAULT_IMAGE_NAME, ECR_IMAGE_NAME)
    assert not DockerImageName.parse("elasticsearch:7.10.2").is_compatible_with(DEFAULT_IMAGE_NAME, ECR_IMAGE_NAME)


def test_assert_compatible_with_raises_for_other_images():
    with pytest.raises(IncompatibleImageException) as exc_info:
        DockerImageName.parse("docker.elastic.co/elasticsearch/elasticsearch:7.10.2").assert_compatible_with(
            DEFAULT_IMAGE_NAME, ECR_IMAGE_NAME)
    assert "public.ecr.aws/opensearchproject/opensearch" in str(exc_info.value)


def test_opensearch_docker_image_of_version():
    assert str(OpenSearchDockerImage.of_version("3.1.0")) == "opensearchproject/opensearch:3.1.0"
    assert str(OpenSearchDockerImage.of_tag("latest")) == str(DockerImageName.parse("opensearchproject/opensearch"))


def test_default_image():
    assert DEFAULT_TAG == "2.19.1"
    assert DEFAULT_IMAGE.version == DEFAULT_TAG
    assert str(DEFAULT_IMAGE) == "opensearchproject/opensearch:2.19.1"
