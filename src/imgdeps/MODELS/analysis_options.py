"""
Models for the configuration handed to the image analysis backend.
"""
from typing import Dict
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_IMAGE_SERVICE_ENDPOINT = "https://rhda.rhcloud.com"


class AnalysisOptions(BaseModel):
    """
    Read-only snapshot of the analysis configuration.

    Every field is aliased to the environment variable it is loaded from, so
    the snapshot can be built straight from ``os.environ``.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    # Telemetry
    token: str = Field("", alias="RHDA_TOKEN")
    source: str = Field("", alias="RHDA_SOURCE")

    # SBOM tooling
    syft_path: str = Field("syft", alias="EXHORT_SYFT_PATH")
    syft_config_path: str = Field("", alias="EXHORT_SYFT_CONFIG_PATH")
    syft_image_source: str = Field("", alias="EXHORT_SYFT_IMAGE_SOURCE")
    skopeo_path: str = Field("skopeo", alias="EXHORT_SKOPEO_PATH")
    skopeo_config_path: str = Field("", alias="EXHORT_SKOPEO_CONFIG_PATH")
    docker_path: str = Field("docker", alias="EXHORT_DOCKER_PATH")
    podman_path: str = Field("podman", alias="EXHORT_PODMAN_PATH")

    # Backend
    image_service_endpoint: str = Field(
        DEFAULT_IMAGE_SERVICE_ENDPOINT, alias="EXHORT_IMAGE_SERVICE_ENDPOINT"
    )

    # Target platform
    image_platform: str = Field("", alias="EXHORT_IMAGE_PLATFORM")
    image_os: str = Field("", alias="EXHORT_IMAGE_OS")
    image_arch: str = Field("", alias="EXHORT_IMAGE_ARCH")
    image_variant: str = Field("", alias="EXHORT_IMAGE_VARIANT")

    @classmethod
    def env_keys(cls) -> Dict[str, str]:
        """Maps each environment variable name to its field name."""
        return {info.alias: name for name, info in cls.model_fields.items()}
