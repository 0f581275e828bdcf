"""Runtime settings read from the environment (and a .env file, if present).

    CHEF_FROGGY_PROVIDER_URL     base URL of the generation backend
    CHEF_FROGGY_API_KEY          bearer token (falls back to EDENAI_API_KEY)
    CHEF_FROGGY_PROVIDER_FORMAT  edenai | openai | koboldcpp
    CHEF_FROGGY_PROVIDER         provider id passed on every call
    CHEF_FROGGY_MODEL            model name, openai format only
    CHEF_FROGGY_TIMEOUT          HTTP timeout in seconds
    CHEF_FROGGY_CHEF_NAME        speaker label used in prompts
    CHEF_FROGGY_CATALOG          path to a JSON recipe catalog
    CHEF_FROGGY_LOG_LEVEL        logging level name
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from chef_froggy.catalog import DEFAULT_CATALOG, Catalog, load_catalog
from chef_froggy.generator import ResponseGenerator
from chef_froggy.llm import HttpLLM, ProviderFormat
from chef_froggy.prompts import DEFAULT_CHEF

ENV_PREFIX = "CHEF_FROGGY_"


class Settings(BaseModel):
    provider_url: str = "https://api.edenai.run"
    api_key: str = ""
    provider_format: ProviderFormat = "edenai"
    provider: str = "openai"
    model: str = ""
    timeout: float = Field(default=120.0, gt=0)
    chef_name: str = DEFAULT_CHEF
    catalog_path: Path | None = None
    log_level: str = "INFO"


_ENV_FIELDS = {
    "PROVIDER_URL": "provider_url",
    "API_KEY": "api_key",
    "PROVIDER_FORMAT": "provider_format",
    "PROVIDER": "provider",
    "MODEL": "model",
    "TIMEOUT": "timeout",
    "CHEF_NAME": "chef_name",
    "CATALOG": "catalog_path",
    "LOG_LEVEL": "log_level",
}


def load_settings(env: Mapping[str, str] | None = None, dotenv_path: Path | None = None) -> Settings:
    """Build Settings from `env` (default: os.environ after loading .env).

    Raises pydantic.ValidationError on bad values.
    """
    if env is None:
        load_dotenv(dotenv_path or Path.cwd() / ".env")
        env = os.environ

    values: dict[str, str] = {}
    for suffix, field in _ENV_FIELDS.items():
        raw = env.get(ENV_PREFIX + suffix, "")
        if raw:
            values[field] = raw
    if "api_key" not in values and env.get("EDENAI_API_KEY"):
        values["api_key"] = env["EDENAI_API_KEY"]
    return Settings.model_validate(values)


def build_llm(settings: Settings) -> HttpLLM:
    return HttpLLM(
        provider_url=settings.provider_url,
        api_key=settings.api_key,
        provider_format=settings.provider_format,
        model=settings.model,
        timeout=settings.timeout,
    )


def build_catalog(settings: Settings) -> Catalog:
    if settings.catalog_path is None:
        return DEFAULT_CATALOG
    return load_catalog(settings.catalog_path)


def build_generator(settings: Settings, llm=None) -> ResponseGenerator:
    """Generator wired to `llm`, or to an HttpLLM built from settings."""
    return ResponseGenerator(
        llm if llm is not None else build_llm(settings),
        provider=settings.provider,
        chef=settings.chef_name,
    )
