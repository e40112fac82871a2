"""
Command Line Interface for imgdeps.
"""
import asyncio
import json
import logging

import click

from ..ANALYSIS.exhort_client import ImageAnalysisService
from ..ANALYSIS.sinks import EchoDisplay, EchoProgress, HtmlFileDisplay
from ..CONFIG.settings import load_options
from ..exceptions import ImageAnalysisError
from ..MANAGERS.image_analysis_orchestrator import ImageAnalysisOrchestrator
from ..PARSERS.dockerfile_parser import DockerfileParser

@click.group()
@click.option('--env-file', default=None, help='.env file with analysis options')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, env_file, verbose):
    """
    imgdeps - Image dependency analysis.

    Finds the base images of a Dockerfile and analyzes their dependencies.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj['env_file'] = env_file

@cli.command()
@click.argument('dockerfile')
@click.option('--json', 'as_json', is_flag=True, help='Print the images as JSON')
def images(dockerfile, as_json):
    """List the base images of a Dockerfile."""
    try:
        refs = DockerfileParser().parse(dockerfile)
    except ImageAnalysisError as e:
        click.echo(f"Error: {e}")
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps([ref.model_dump() for ref in refs], indent=2))
        return

    click.echo(f"{'IMAGE':40} {'PLATFORM':20}")
    click.echo("-" * 61)
    for ref in refs:
        click.echo(f"{ref.image:40} {ref.platform:20}")

@cli.command()
@click.argument('dockerfile')
@click.option('--out', '-o', default=None, help='Write the HTML report to this file')
@click.option('--timeout', type=float, default=None, help='Backend request timeout in seconds')
@click.pass_context
def analyze(ctx, dockerfile, out, timeout):
    """Analyze the dependencies of the base images of a Dockerfile."""
    display = HtmlFileDisplay(out, manifest=dockerfile) if out else EchoDisplay()
    try:
        orchestrator = ImageAnalysisOrchestrator(
            dockerfile,
            load_options(ctx.obj.get('env_file')),
            ImageAnalysisService(timeout=timeout),
            EchoProgress(),
            display,
        )
        asyncio.run(orchestrator.run())
    except ImageAnalysisError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    if out:
        click.echo(f"Report written to {out}", err=True)

def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
