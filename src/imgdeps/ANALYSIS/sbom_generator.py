"""
SBOM generation for container images using syft.
"""
import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional

from ..exceptions import SbomGenerationError
from ..MODELS.analysis_options import AnalysisOptions
from ..MODELS.image_ref import ImageRef
from ..REGISTRY.image_reference import ImageReference

logger = logging.getLogger(__name__)

DIGEST_PREFIX = "sha256:"


class SyftSbomGenerator:
    """
    Runs syft against an image and returns its CycloneDX SBOM.
    """
    def __init__(self, options: AnalysisOptions):
        """
        :param options: Analysis options naming the syft, docker and podman executables.
        """
        self.options = options

    def target_platform(self, ref: ImageRef) -> str:
        """
        Resolves the platform to scan: the --platform of the FROM line, then the
        configured platform, then the configured os/arch[/variant].
        """
        if ref.platform:
            return ref.platform
        if self.options.image_platform:
            return self.options.image_platform
        if self.options.image_os and self.options.image_arch:
            parts = [self.options.image_os, self.options.image_arch]
            if self.options.image_variant:
                parts.append(self.options.image_variant)
            return "/".join(parts)
        return ""

    def build_command(self, ref: ImageRef) -> List[str]:
        cmd = [self.options.syft_path, ref.image, "-s", "all-layers", "-o", "cyclonedx-json", "-q"]
        if self.options.syft_image_source:
            cmd += ["--from", self.options.syft_image_source]
        if self.options.syft_config_path:
            cmd += ["-c", self.options.syft_config_path]
        platform = self.target_platform(ref)
        if platform:
            cmd += ["--platform", platform]
        return cmd

    def build_env(self) -> Dict[str, str]:
        """
        Environment for syft, with the docker and podman directories on PATH.
        """
        env = dict(os.environ)
        extra = [
            os.path.dirname(path)
            for path in (self.options.docker_path, self.options.podman_path)
            if os.path.dirname(path)
        ]
        if extra:
            env["PATH"] = os.pathsep.join(extra + [env.get("PATH", "")])
        return env

    async def generate(self, ref: ImageRef) -> Dict[str, Any]:
        """
        Generates the SBOM for an image.

        :param ref: The image to scan.
        :return: The CycloneDX document as a dictionary.
        :raises SbomGenerationError: If syft is missing, fails or prints invalid JSON.
        """
        cmd = self.build_command(ref)
        logger.debug("Running %s", " ".join(cmd))
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=self.build_env(),
            )
        except FileNotFoundError as e:
            raise SbomGenerationError(ref.image, f"{self.options.syft_path} not found") from e

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            reason = stderr.decode("utf-8", errors="replace").strip()
            raise SbomGenerationError(ref.image, reason or f"exit code {process.returncode}")

        try:
            sbom = json.loads(stdout.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SbomGenerationError(ref.image, "syft did not return valid JSON") from e
        if not isinstance(sbom, dict):
            raise SbomGenerationError(ref.image, "syft did not return a CycloneDX document")
        return sbom

    def image_purl(self, ref: ImageRef, sbom: Dict[str, Any]) -> str:
        """
        Package URL identifying an image in the analysis request.
        The digest is taken from the SBOM when syft reports one.
        """
        parsed = ImageReference.parse(ref.image)
        digest = sbom_digest(sbom)

        platform = self.target_platform(ref).split("/")
        os_name = platform[0] if len(platform) > 1 else None
        arch = platform[1] if len(platform) > 1 else None
        variant = platform[2] if len(platform) > 2 else None
        return parsed.purl(digest=digest, arch=arch, os=os_name, variant=variant)


def sbom_digest(sbom: Dict[str, Any]) -> Optional[str]:
    metadata = sbom.get("metadata") or {}
    if not isinstance(metadata, dict):
        return None
    component = metadata.get("component") or {}
    if not isinstance(component, dict):
        return None
    version = component.get("version", "")
    if isinstance(version, str) and version.startswith(DIGEST_PREFIX):
        return version
    return None
