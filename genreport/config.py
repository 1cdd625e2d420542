"""
genreport/config.py

Process configuration for the report processor.

Environment Variables
---------------------
INPUT_FOLDER
    Directory watched for incoming generation reports (required).
OUTPUT_FOLDER
    Directory receiving the `-Result.xml` documents (required).
REFERENCE_DATA
    Path of the reference factors file. Defaults to "ReferenceData.xml".
LOG_LEVEL
    Standard logging level name. Defaults to "INFO".

Values given on the command line take precedence over the environment. The
resulting `Settings` object is passed explicitly into the pipeline.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load `.env` for local development so shells do not need to export
# environment variables manually.
load_dotenv()

DEFAULT_REFERENCE_DATA = "ReferenceData.xml"
DEFAULT_LOG_LEVEL = "INFO"


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_folder: Path
    output_folder: Path
    reference_data: Path = Path(DEFAULT_REFERENCE_DATA)
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings(
    input_folder: str | None = None,
    output_folder: str | None = None,
    reference_data: str | None = None,
    log_level: str | None = None,
) -> Settings:
    """Build `Settings` from explicit overrides and the environment.

    Side Effects:
        Exits the process with status 2 if the input or output folder is
        configured nowhere.
    """
    input_folder = input_folder or os.environ.get("INPUT_FOLDER")
    output_folder = output_folder or os.environ.get("OUTPUT_FOLDER")

    for env_name, value in (("INPUT_FOLDER", input_folder), ("OUTPUT_FOLDER", output_folder)):
        if not value:
            print(f"ERROR: {env_name} is not set", file=sys.stderr)
            sys.exit(2)

    return Settings(
        input_folder=input_folder,
        output_folder=output_folder,
        reference_data=reference_data
        or os.environ.get("REFERENCE_DATA", DEFAULT_REFERENCE_DATA),
        log_level=(log_level or os.environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL)).upper(),
    )
