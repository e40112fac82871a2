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
Unit tests for the registry module.
"""
import pytest
from imgdeps.REGISTRY.image_reference import ImageReference


class TestImageReference:
    """Tests for ImageReference parsing."""

    def test_parse_simple_name(self):
        """Test parsing a simple image name."""
        ref = ImageReference.parse("nginx")
        assert ref.registry == "docker.io"
        assert ref.repository == "library/nginx"
        assert ref.tag == "latest"

    def test_parse_numeric_tag(self):
        """Test parsing image with a numeric tag."""
        ref = ImageReference.parse("node:18")
        assert ref.repository == "library/node"
        assert ref.tag == "18"

    def test_parse_user_image(self):
        """Test parsing user/image format."""
        ref = ImageReference.parse("myuser/myimage:v1")
        assert ref.registry == "docker.io"
        assert ref.repository == "myuser/myimage"
        assert ref.tag == "v1"

    def test_parse_full_reference(self):
        """Test parsing full registry reference."""
        ref = ImageReference.parse("registry.access.redhat.com/ubi9/ubi-minimal:9.3")
        assert ref.registry == "registry.access.redhat.com"
        assert ref.repository == "ubi9/ubi-minimal"
        assert ref.tag == "9.3"

    def test_parse_with_digest(self):
        """Test parsing image with digest."""
        ref = ImageReference.parse("nginx@sha256:abc123")
        assert ref.repository == "library/nginx"
        assert ref.digest == "sha256:abc123"
        assert ref.tag is None

    def test_parse_localhost_registry(self):
        """Test parsing localhost registry with a port."""
        ref = ImageReference.parse("localhost:5000/myimage")
        assert ref.registry == "localhost:5000"
        assert ref.repository == "myimage"
        assert ref.tag == "latest"

    def test_empty_reference_raises(self):
        """Test that empty reference raises error."""
        with pytest.raises(ValueError):
            ImageReference.parse("")

    def test_full_name(self):
        """Test full_name property."""
        assert ImageReference.parse("nginx:1.21").full_name == "docker.io/library/nginx:1.21"


class TestPurl:
    """Tests for package URL rendering."""

    def test_purl_with_digest_and_platform(self):
        ref = ImageReference.parse("alpine:3.18")
        purl = ref.purl(digest="sha256:abc", arch="arm64", os="linux")
        assert purl == (
            "pkg:oci/alpine@sha256%3Aabc"
            "?arch=arm64&os=linux&repository_url=docker.io/library/alpine&tag=3.18"
        )

    def test_purl_without_digest(self):
        ref = ImageReference.parse("quay.io/Org/App:v2")
        assert ref.purl() == "pkg:oci/app?repository_url=quay.io/org/app&tag=v2"

    def test_purl_uses_reference_digest(self):
        ref = ImageReference.parse("nginx@sha256:abc123")
        assert ref.purl().startswith("pkg:oci/nginx@sha256%3Aabc123?")
