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
Orchestration of a single image analysis: parsing the Dockerfile, calling the
analysis backend and notifying the progress and display collaborators.
"""
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol, Union

from ..ANALYSIS.exhort_client import ImageAnalysisService
from ..ANALYSIS.sinks import (
    ERROR_MARKER,
    DisplaySink,
    ProgressSink,
    RecordingDisplay,
    RecordingProgress,
    StatusMessages,
)
from ..CONFIG.settings import load_options
from ..MODELS.analysis_options import AnalysisOptions
from ..MODELS.image_ref import ImageRef
from ..PARSERS.dockerfile_parser import DockerfileParser

logger = logging.getLogger(__name__)


class ImageAnalyzer(Protocol):
    async def analyze(self, images: List[ImageRef], options: AnalysisOptions) -> str:
        ...


AnalyzeFunction = Callable[[List[ImageRef], AnalysisOptions], Awaitable[str]]


class AnalysisState(str, Enum):
    """Lifecycle of one analysis run."""

    PARSING = "parsing"
    AWAITING_ANALYSIS = "awaiting_analysis"
    SUCCESS = "success"
    FAILURE = "failure"


class ImageAnalysisOrchestrator:
    """
    Runs one image analysis for one Dockerfile.

    The Dockerfile is parsed on construction. Each instance runs at most one
    analysis; build a new one per run.
    """
    def __init__(
        self,
        manifest_path: str,
        options: AnalysisOptions,
        analyzer: Union[ImageAnalyzer, AnalyzeFunction],
        progress: ProgressSink,
        display: DisplaySink,
    ):
        """
        Initializes the orchestrator and parses the Dockerfile.

        :param manifest_path: Path to the Dockerfile.
        :param options: Options snapshot handed to the analyzer.
        :param analyzer: Object with an async analyze(images, options), or such a function.
        :param progress: Receives the progress messages.
        :param display: Receives the report, or ERROR_MARKER on failure.
        :raises ManifestReadError: If the Dockerfile cannot be read.
        """
        self.manifest_path = manifest_path
        self.options = options
        self.analyzer = analyzer
        self.progress = progress
        self.display = display
        self.report_html = ""
        self.state = AnalysisState.PARSING
        try:
            self.images: List[ImageRef] = DockerfileParser().parse(manifest_path)
        except Exception:
            self.state = AnalysisState.FAILURE
            self.display.display(ERROR_MARKER)
            raise
        logger.info("Found %d image(s) in %s", len(self.images), manifest_path)

    async def _analyze(self) -> str:
        analyze = getattr(self.analyzer, "analyze", self.analyzer)
        self.state = AnalysisState.AWAITING_ANALYSIS
        try:
            return await analyze(list(self.images), self.options)
        except Exception:
            self.state = AnalysisState.FAILURE
            self.progress.report(StatusMessages.FAILURE)
            raise

    async def run(self) -> str:
        """
        Runs the analysis and hands the report to the display collaborator.

        :return: The HTML report.
        :raises Exception: Whatever the analyzer raised, after the display
            collaborator received ERROR_MARKER.
        """
        try:
            self.progress.report(StatusMessages.ANALYZING)
            report = await self._analyze()

            self.progress.report(StatusMessages.GENERATING)
            self.display.display(report)
            self.progress.report(StatusMessages.SUCCESS)

            self.report_html = report
            self.state = AnalysisState.SUCCESS
            return report
        except Exception as e:
            logger.error("Image analysis of %s failed: %s", self.manifest_path, e)
            self.state = AnalysisState.FAILURE
            self.display.display(ERROR_MARKER)
            raise


async def execute_image_analysis(
    manifest_path: str,
    options: Optional[AnalysisOptions] = None,
    analyzer: Optional[Union[ImageAnalyzer, AnalyzeFunction]] = None,
    progress: Optional[ProgressSink] = None,
    display: Optional[DisplaySink] = None,
) -> str:
    """
    Analyzes the base images of a Dockerfile and returns the HTML report.

    :param manifest_path: Path to the Dockerfile.
    :param options: Options snapshot; loaded from the environment by default.
    :param analyzer: Analysis capability; the remote backend by default.
    :param progress: Progress collaborator; messages are discarded by default.
    :param display: Display collaborator; payloads are discarded by default.
    :return: The HTML report.
    """
    orchestrator = ImageAnalysisOrchestrator(
        manifest_path,
        options if options is not None else load_options(),
        analyzer if analyzer is not None else ImageAnalysisService(),
        progress if progress is not None else RecordingProgress(),
        display if display is not None else RecordingDisplay(),
    )
    return await orchestrator.run()
