"""
Parsers for Dockerfiles, extracting the base images named by FROM instructions.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Tuple

from ..exceptions import ManifestReadError
from ..MODELS.image_ref import ImageRef
from ..UTILS.string_interpolation import ArgumentInterpolator

logger = logging.getLogger(__name__)

FROM_PATTERN = re.compile(r'^\s*FROM\s+(.*)')
ARG_PATTERN = re.compile(r'^\s*ARG\s+(.*)')
PLATFORM_PATTERN = re.compile(r'--platform=(\S+)')
ALIAS_PATTERN = re.compile(r'\s+AS\s+\S+', re.IGNORECASE)

SCRATCH_IMAGE = "scratch"


@dataclass(frozen=True)
class ParseState:
    """
    State threaded through the lines of a Dockerfile: the build arguments
    declared so far and the images collected so far.
    """
    args: Mapping[str, str] = field(default_factory=dict)
    images: Tuple[ImageRef, ...] = ()

    def with_arg(self, name: str, value: str) -> "ParseState":
        args = dict(self.args)
        args[name] = value
        return ParseState(args=args, images=self.images)

    def with_image(self, image: ImageRef) -> "ParseState":
        return ParseState(args=self.args, images=self.images + (image,))


def parse_line(line: str, state: ParseState) -> Tuple[ParseState, Optional[ImageRef]]:
    """
    Interprets a single Dockerfile line.

    ARG is evaluated before FROM, so an argument declared on a line is
    visible to a FROM match on that same line.

    :param line: One line of the Dockerfile.
    :param state: State after every previous line.
    :return: The updated state and the image named on this line, if any.
    """
    arg_match = ARG_PATTERN.match(line)
    if arg_match:
        name, _, value = arg_match.group(1).strip().partition('=')
        state = state.with_arg(name, value)

    from_match = FROM_PATTERN.match(line)
    if not from_match:
        return state, None

    image = ArgumentInterpolator.interpolate(from_match.group(1), state.args)
    image = PLATFORM_PATTERN.sub('', image)
    image = ALIAS_PATTERN.sub('', image)
    image = image.strip()

    if image == SCRATCH_IMAGE or not image:
        return state, None

    # The platform is read from the raw line, before substitution.
    platform = ''
    platform_match = PLATFORM_PATTERN.search(line)
    if platform_match:
        platform = platform_match.group(1)

    ref = ImageRef(image=image, platform=platform)
    return state.with_image(ref), ref


def split_lines(content: str) -> List[str]:
    """
    Splits Dockerfile content on line feeds. Carriage returns are kept.
    """
    return content.split('\n')


def collect_images(lines: Iterable[str]) -> List[ImageRef]:
    """
    Collects the images named by FROM instructions, in document order.

    :param lines: Lines of the Dockerfile.
    :return: One ImageRef per FROM line that names an analyzable image.
    """
    state = ParseState()
    for line in lines:
        state, _ = parse_line(line, state)
    return list(state.images)


class DockerfileParser:
    """
    Parser for the base images of a Dockerfile.
    """
    def parse(self, dockerfile_path: str) -> List[ImageRef]:
        """
        Parses a Dockerfile from a file path.

        Args:
            dockerfile_path (str): Path to the Dockerfile.

        Returns:
            List[ImageRef]: Base images in document order.

        Raises:
            ManifestReadError: If the file cannot be read or is not UTF-8.
        """
        try:
            with open(dockerfile_path, 'r', encoding='utf-8', newline='') as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestReadError(dockerfile_path, str(e)) from e
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> List[ImageRef]:
        """
        Parses a Dockerfile from a string content.

        Args:
            content (str): Content of the Dockerfile.

        Returns:
            List[ImageRef]: Base images in document order.
        """
        images = collect_images(split_lines(content))
        logger.debug("Found %d base image(s)", len(images))
        return images
