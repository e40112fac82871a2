"""
Exceptions raised while extracting images and running an image analysis.
"""
from typing import Optional


class ImageAnalysisError(Exception):
    """
    Base class for every error raised by imgdeps.
    """


class ManifestReadError(ImageAnalysisError):
    """
    The Dockerfile could not be read from disk or decoded as UTF-8.
    """
    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        message = f"Unable to read manifest {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AnalysisFailedError(ImageAnalysisError):
    """
    The dependency analysis backend rejected or failed the request.
    """
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class SbomGenerationError(AnalysisFailedError):
    """
    syft could not produce an SBOM for an image.
    """
    def __init__(self, image: str, reason: str):
        self.image = image
        super().__init__(f"Failed to generate SBOM for {image}: {reason}")
