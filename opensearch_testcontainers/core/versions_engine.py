from dataclasses import dataclass
from functools import total_ordering
import re
from typing import Optional

# Tags like "2", "2.19", "2.19.1", "2.11.0-rc1" or "1.3.4-SNAPSHOT"
VERSION_TAG_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:[-+].*)?$")


@dataclass(frozen=True)
@total_ordering
class ImageVersion:
    major: int
    minor: int = 0
    patch: int = 0

    def __lt__(self, other) -> bool:
        return (self.major, self.minor, self.patch) < (other.major, other.minor, other.patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


# OpenSearch 2.12.0 stopped shipping a demo configuration with the "admin" password and refuses to start the security
# plugin unless OPENSEARCH_INITIAL_ADMIN_PASSWORD holds a strong password.
STRONG_PASSWORD_SINCE = ImageVersion(2, 12, 0)

# OpenSearch 2.0.0 renamed "master" to "cluster_manager" in node roles and bootstrap settings.
CLUSTER_MANAGER_RENAME_SINCE = ImageVersion(2, 0, 0)


def parse_image_version(tag: str) -> Optional[ImageVersion]:
    """
    Returns None for tags that don't carry a version, like "latest".
    """
    match = VERSION_TAG_PATTERN.match(tag or "")
    if not match:
        return None

    major, minor, patch = match.groups()
    return ImageVersion(int(major), int(minor or 0), int(patch or 0))


def requires_strong_password(tag: str) -> bool:
    version = parse_image_version(tag)
    # Unversioned tags track recent releases
    if version is None:
        return True
    return version >= STRONG_PASSWORD_SINCE


def uses_cluster_manager_settings(tag: str) -> bool:
    version = parse_image_version(tag)
    if version is None:
        return True
    return version >= CLUSTER_MANAGER_RENAME_SINCE
