"""
Client for the remote dependency analysis backend.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..exceptions import AnalysisFailedError
from ..MODELS.analysis_options import AnalysisOptions
from ..MODELS.image_ref import ImageRef
from .sbom_generator import SyftSbomGenerator

logger = logging.getLogger(__name__)

BATCH_ANALYSIS_PATH = "/api/v4/batch-analysis"
CYCLONEDX_CONTENT_TYPE = "application/vnd.cyclonedx+json"
OPERATION_TYPE = "image-analysis"


class ImageAnalysisService:
    """
    Generates an SBOM for every image and submits them to the backend as a
    single batch, returning the HTML report.
    """
    def __init__(
        self,
        sbom_generator: Optional[SyftSbomGenerator] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        """
        :param sbom_generator: Generator to use; by default one is built from the options.
        :param transport: httpx transport, mostly useful to stub the backend.
        :param timeout: Request timeout in seconds. None waits indefinitely.
        """
        self.sbom_generator = sbom_generator
        self.transport = transport
        self.timeout = httpx.Timeout(timeout)

    def build_headers(self, options: AnalysisOptions) -> Dict[str, str]:
        headers = {
            "Accept": "text/html",
            "Content-Type": CYCLONEDX_CONTENT_TYPE,
            "rhda-operation-type": OPERATION_TYPE,
        }
        if options.token:
            headers["rhda-token"] = options.token
        if options.source:
            headers["rhda-source"] = options.source
        return headers

    async def build_batch(self, images: Sequence[ImageRef], options: AnalysisOptions) -> Dict[str, Any]:
        """
        Maps each image's package URL to its SBOM, in image order.
        Repeated images are scanned once.
        """
        generator = self.sbom_generator or SyftSbomGenerator(options)
        batch: Dict[str, Any] = {}
        seen = set()
        for ref in images:
            if (ref.image, ref.platform) in seen:
                continue
            seen.add((ref.image, ref.platform))
            sbom = await generator.generate(ref)
            batch[generator.image_purl(ref, sbom)] = sbom
        return batch

    async def analyze(self, images: List[ImageRef], options: AnalysisOptions) -> str:
        """
        Runs the image analysis.

        :param images: Images to analyze, in Dockerfile order.
        :param options: Snapshot of the analysis options.
        :return: The HTML report.
        :raises AnalysisFailedError: If an SBOM cannot be generated or the backend fails.
        """
        batch = await self.build_batch(images, options)
        url = options.image_service_endpoint.rstrip("/") + BATCH_ANALYSIS_PATH
        logger.info("Submitting %d image(s) to %s", len(batch), url)

        async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
            try:
                response = await client.post(
                    url, content=json.dumps(batch), headers=self.build_headers(options)
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise AnalysisFailedError(
                    f"Analysis backend returned HTTP {e.response.status_code}: {e.response.text}",
                    status_code=e.response.status_code,
                ) from e
            except httpx.RequestError as e:
                raise AnalysisFailedError(f"Could not reach analysis backend at {url}: {e}") from e

        return response.text
