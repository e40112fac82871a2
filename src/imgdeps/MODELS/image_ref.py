"""
Models for the base image references extracted from a Dockerfile.
"""
from pydantic import BaseModel, ConfigDict, field_validator


class ImageRef(BaseModel):
    """
    A base image named by a FROM instruction, after build argument
    substitution and removal of the stage alias and platform flag.
    """
    model_config = ConfigDict(frozen=True)

    image: str
    platform: str = ""

    @field_validator("image")
    @classmethod
    def image_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("image reference must not be empty")
        return value

    def __str__(self) -> str:
        if self.platform:
            return f"{self.image} ({self.platform})"
        return self.image
