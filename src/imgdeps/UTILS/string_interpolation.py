"""
Utilities for substituting Dockerfile build arguments into strings.
"""
import re
from typing import Mapping

ARG_REFERENCE = re.compile(r'\$\{([^{}]+)\}')


class ArgumentInterpolator:
    """
    Substitutes ``${NAME}`` references with build argument values.
    """
    @staticmethod
    def interpolate(template: str, args: Mapping[str, str]) -> str:
        """
        Replaces every ``${NAME}`` in the template with its value in args.

        Unlike ``docker build``, default and alternate value modifiers are not
        interpreted: the whole text between the braces is the argument name.
        Unknown arguments resolve to the empty string.

        :param template: The string containing ${NAME} placeholders.
        :param args: Build arguments declared so far.
        :return: The interpolated string.
        """
        def replace(match):
            return args.get(match.group(1)) or ''

        return ARG_REFERENCE.sub(replace, template)
