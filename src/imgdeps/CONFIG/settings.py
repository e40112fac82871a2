"""
Loading of the analysis options from the environment and .env files.
"""
import logging
import os
from typing import Mapping, Optional

from dotenv import dotenv_values

from ..MODELS.analysis_options import AnalysisOptions

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"


def load_options(env_file: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None) -> AnalysisOptions:
    """
    Builds an AnalysisOptions snapshot.

    Values from the environment take precedence over the .env file. Keys that
    are not analysis options are ignored.

    :param env_file: .env file to read; defaults to ./.env when it exists.
    :param environ: Environment to read; defaults to os.environ.
    :return: The options snapshot.
    """
    if environ is None:
        environ = os.environ

    if env_file is None and os.path.isfile(DEFAULT_ENV_FILE):
        env_file = DEFAULT_ENV_FILE

    values = {}
    if env_file:
        logger.debug("Loading analysis options from %s", env_file)
        values.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})

    for key in AnalysisOptions.env_keys():
        if key in environ:
            values[key] = environ[key]

    return AnalysisOptions.model_validate(
        {k: v for k, v in values.items() if k in AnalysisOptions.env_keys()}
    )
