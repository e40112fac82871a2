import asyncio
import json

import httpx
import pytest

from imgdeps.ANALYSIS.exhort_client import ImageAnalysisService
from imgdeps.exceptions import AnalysisFailedError, SbomGenerationError
from imgdeps.MODELS.analysis_options import AnalysisOptions
from imgdeps.MODELS.image_ref import ImageRef


class FakeGenerator:
    def __init__(self, fail_on=None):
        self.generated = []
        self.fail_on = fail_on

    async def generate(self, ref):
        if ref.image == self.fail_on:
            raise SbomGenerationError(ref.image, "boom")
        self.generated.append(ref.image)
        return {"metadata": {"component": {"name": ref.image}}}

    def image_purl(self, ref, sbom):
        return f"pkg:oci/{ref.image}"


IMAGES = [ImageRef(image="alpine"), ImageRef(image="ubuntu", platform="linux/amd64")]


def test_analyze_posts_batch():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, text="<html>report</html>")

    options = AnalysisOptions(
        token="tok", source="cli", image_service_endpoint="https://backend.example.com/"
    )
    service = ImageAnalysisService(FakeGenerator(), transport=httpx.MockTransport(handler))
    report = asyncio.run(service.analyze(IMAGES, options))

    assert report == "<html>report</html>"
    request = requests[0]
    assert str(request.url) == "https://backend.example.com/api/v4/batch-analysis"
    assert request.headers["Accept"] == "text/html"
    assert request.headers["Content-Type"] == "application/vnd.cyclonedx+json"
    assert request.headers["rhda-token"] == "tok"
    assert request.headers["rhda-source"] == "cli"
    assert request.headers["rhda-operation-type"] == "image-analysis"
    assert list(json.loads(request.content)) == ["pkg:oci/alpine", "pkg:oci/ubuntu"]

def test_empty_headers_are_omitted():
    headers = ImageAnalysisService().build_headers(AnalysisOptions())
    assert "rhda-token" not in headers
    assert "rhda-source" not in headers

def test_analyze_empty_image_list():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, text="<html></html>")

    service = ImageAnalysisService(FakeGenerator(), transport=httpx.MockTransport(handler))
    assert asyncio.run(service.analyze([], AnalysisOptions())) == "<html></html>"
    assert json.loads(requests[0].content) == {}

def test_analyze_http_error():
    def handler(request):
        return httpx.Response(401, text="unauthorized")

    service = ImageAnalysisService(FakeGenerator(), transport=httpx.MockTransport(handler))
    with pytest.raises(AnalysisFailedError) as excinfo:
        asyncio.run(service.analyze(IMAGES, AnalysisOptions()))
    assert excinfo.value.status_code == 401
    assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)

def test_analyze_connection_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = ImageAnalysisService(FakeGenerator(), transport=httpx.MockTransport(handler))
    with pytest.raises(AnalysisFailedError) as excinfo:
        asyncio.run(service.analyze(IMAGES, AnalysisOptions()))
    assert excinfo.value.status_code is None

def test_sbom_failure_skips_request():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, text="")

    service = ImageAnalysisService(FakeGenerator(fail_on="ubuntu"), transport=httpx.MockTransport(handler))
    with pytest.raises(SbomGenerationError):
        asyncio.run(service.analyze(IMAGES, AnalysisOptions()))
    assert requests == []

def test_repeated_images_are_scanned_once():
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, text="<html></html>")

    generator = FakeGenerator()
    images = [
        ImageRef(image="alpine"),
        ImageRef(image="ubuntu"),
        ImageRef(image="alpine"),
        ImageRef(image="alpine", platform="linux/arm64"),
    ]
    service = ImageAnalysisService(generator, transport=httpx.MockTransport(handler))
    asyncio.run(service.analyze(images, AnalysisOptions()))

    assert generator.generated == ["alpine", "ubuntu", "alpine"]
    assert list(json.loads(requests[0].content)) == ["pkg:oci/alpine", "pkg:oci/ubuntu"]
