"""
Progress and display collaborators notified while an image analysis runs.
"""
import os
from abc import ABC, abstractmethod
from typing import List

import click
from jinja2 import Template

ERROR_MARKER = "error"


class StatusMessages:
    """
    Progress messages reported during an analysis, in the order they occur.
    """
    ANALYZING = "Analyzing Dependencies..."
    GENERATING = "Generating Red Hat Dependency Analytics Report..."
    SUCCESS = "Dependency analysis completed successfully"
    FAILURE = "Dependency analysis failed"


class ProgressSink(ABC):
    @abstractmethod
    def report(self, message: str) -> None:
        pass


class DisplaySink(ABC):
    @abstractmethod
    def display(self, payload: str) -> None:
        """
        Receives the report HTML, or ERROR_MARKER when the analysis failed.
        """


class RecordingProgress(ProgressSink):
    """Keeps every reported message in order."""

    def __init__(self):
        self.messages: List[str] = []

    def report(self, message: str) -> None:
        self.messages.append(message)


class RecordingDisplay(DisplaySink):
    """Keeps every displayed payload in order."""

    def __init__(self):
        self.payloads: List[str] = []

    def display(self, payload: str) -> None:
        self.payloads.append(payload)


class EchoProgress(ProgressSink):
    """
    Writes progress messages to stderr, leaving stdout for the report.
    """
    def __init__(self, title: str = "imgdeps"):
        self.title = title

    def report(self, message: str) -> None:
        click.echo(f"{self.title}: {message}", err=True)


class EchoDisplay(DisplaySink):
    """
    Writes the report to stdout. Failures are reported on stderr.
    """
    def display(self, payload: str) -> None:
        if payload == ERROR_MARKER:
            click.echo("Image analysis failed, no report generated.", err=True)
            return
        click.echo(payload)


ERROR_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head><title>{{ title }}</title></head>
<body>
<h1>{{ title }}</h1>
<p>The dependency analysis for {{ manifest or 'the manifest' }} could not be completed.</p>
</body>
</html>
"""


class HtmlFileDisplay(DisplaySink):
    """
    Writes the report to an HTML file, or an error page when the analysis failed.
    """
    def __init__(self, path: str, manifest: str = ""):
        """
        :param path: File the report is written to.
        :param manifest: Dockerfile path shown on the error page.
        """
        self.path = path
        self.manifest = manifest
        self.template = Template(ERROR_PAGE_TEMPLATE)

    def display(self, payload: str) -> None:
        if payload == ERROR_MARKER:
            payload = self.template.render(
                title="Image Analysis Failed", manifest=self.manifest
            )

        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(payload)
