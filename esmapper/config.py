"""
esmapper Configuration

We read configuration from 2 sources, in order of precedence (higher is more priority)
- Environment variables
- A .env file, either in the current working directory or in a location specified
  by the ESMAPPER_ENV_FILE environment variable
"""

import functools
from pathlib import Path
from typing import Annotated

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "esmapper_"


class Settings(BaseSettings):
    env_file: Annotated[
        Path,
        Field(
            description="Location of a .env file (if used) relative to working directory",
        ),
    ] = Path(".env")

    max_depth: Annotated[
        int,
        Field(
            ge=1,
            description=(
                "Maximum nesting depth of components. Only a direct reference back to the enclosing class is skipped, "
                "so longer reference cycles recurse until this depth is reached and then fail"
            ),
        ),
    ] = 32

    require_id: Annotated[
        bool,
        Field(
            description="Fail if a document type has no member marked with IndexableId",
        ),
    ] = False

    json_indent: Annotated[
        int | None,
        Field(
            description="Indentation of the JSON printed by the command line tool. Default: compact output",
        ),
    ] = None

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)


@functools.lru_cache()
def get_settings() -> Settings:
    temp = Settings()
    load_dotenv(temp.env_file, override=False)
    return Settings()
