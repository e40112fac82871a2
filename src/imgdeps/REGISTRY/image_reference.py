# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Image reference parsing and package URL generation.
Parses Docker image references like 'nginx:latest' or 'docker.io/library/nginx:1.21'
and renders them as ``pkg:oci`` package URLs for the analysis backend.
"""

from typing import Optional
from dataclasses import dataclass
from urllib.parse import quote


@dataclass
class ImageReference:
    """
    Parsed Docker image reference.

    Examples:
        - nginx -> docker.io/library/nginx:latest
        - nginx:1.21 -> docker.io/library/nginx:1.21
        - myuser/myimage:v1 -> docker.io/myuser/myimage:v1
        - gcr.io/project/image@sha256:abc123... -> gcr.io/project/image@sha256:abc123...
    """

    registry: str
    repository: str
    tag: Optional[str] = None
    digest: Optional[str] = None

    DEFAULT_REGISTRY = "docker.io"
    DEFAULT_TAG = "latest"

    @classmethod
    def parse(cls, reference: str) -> "ImageReference":
        """
        Parse a Docker image reference string.

        Args:
            reference: Image reference string (e.g., 'nginx:latest', 'myuser/myimage:v1')

        Returns:
            Parsed ImageReference object.
        """
        if not reference:
            raise ValueError("Empty image reference")

        # image@sha256:...
        digest = None
        if "@" in reference:
            reference, digest = reference.rsplit("@", 1)

        # image:tag, but not registry:port/image
        tag = None
        last_colon = reference.rfind(":")
        if last_colon != -1:
            after_colon = reference[last_colon + 1 :]
            if "/" not in after_colon:
                tag = after_colon
                reference = reference[:last_colon]

        parts = reference.split("/")
        if len(parts) == 1:
            registry = cls.DEFAULT_REGISTRY
            repository = f"library/{parts[0]}"
        elif "." in parts[0] or ":" in parts[0] or parts[0] == "localhost":
            registry = parts[0]
            repository = "/".join(parts[1:])
        else:
            registry = cls.DEFAULT_REGISTRY
            repository = reference

        if not tag and not digest:
            tag = cls.DEFAULT_TAG

        return cls(registry=registry, repository=repository, tag=tag, digest=digest)

    @property
    def name(self) -> str:
        """Last path component of the repository, as used in package URLs."""
        return self.repository.rsplit("/", 1)[-1].lower()

    @property
    def full_name(self) -> str:
        """Get full image name with registry."""
        name = f"{self.registry}/{self.repository}"
        if self.digest:
            return f"{name}@{self.digest}"
        if self.tag:
            return f"{name}:{self.tag}"
        return name

    def purl(self, digest: Optional[str] = None, arch: Optional[str] = None,
             os: Optional[str] = None, variant: Optional[str] = None) -> str:
        """
        Render the reference as an OCI package URL.

        Args:
            digest: Manifest digest overriding the one in the reference.
            arch: Target architecture qualifier.
            os: Target operating system qualifier.
            variant: Target architecture variant qualifier.

        Returns:
            A ``pkg:oci/<name>[@<digest>]?...`` string.
        """
        digest = digest or self.digest
        purl = f"pkg:oci/{self.name}"
        if digest:
            purl += "@" + quote(digest, safe="")

        qualifiers = {
            "arch": arch,
            "os": os,
            "repository_url": f"{self.registry}/{self.repository}".lower(),
            "tag": self.tag,
            "variant": variant,
        }
        query = "&".join(
            f"{key}={quote(value, safe='/')}"
            for key, value in sorted(qualifiers.items())
            if value
        )
        return f"{purl}?{query}" if query else purl

    def __str__(self) -> str:
        return self.full_name

    def __repr__(self) -> str:
        return f"ImageReference({self.full_name})"
