"""Runtime settings: YAML file, environment overrides, Pydantic validation."""

import logging
import os
from pathlib import Path
from typing import Optional

import ollama
import yaml
from pydantic import BaseModel, Field, model_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "settings.yaml"

# env var -> settings field
_ENV_OVERRIDES = {
    "ASXIV_CHAT_MODEL": "chat_model",
    "ASXIV_INSIGHTS_MODEL": "insights_model",
    "ASXIV_DATA_ROOT": "data_root",
    "OLLAMA_HOST": "ollama_host",
}


# ── Settings ─────────────────────────────────────────────────────────


class Settings(BaseModel):
    """Everything the search client, PDF pipeline and agents need to run."""

    arxiv_api_url: str = "http://export.arxiv.org/api/query"
    user_agent: str = "asXiv/1.0 (https://github.com/montanaflynn/asxiv)"
    request_timeout: float = Field(default=30.0, gt=0)
    pdf_timeout: float = Field(default=60.0, gt=0)
    max_pdf_mb: float = Field(default=100.0, gt=0)

    ollama_host: Optional[str] = None
    chat_model: str = "qwen3:8b"
    insights_model: str = "qwen3:8b"
    vision_model: str = "minicpm-v"
    allowed_chat_models: list[str] = Field(
        default_factory=lambda: ["qwen3:8b", "qwen3:14b", "qwen3:32b"]
    )
    max_context_chars: int = Field(
        default=200_000,
        gt=0,
        description="Paper text beyond this many characters is cut from prompts",
    )

    data_root: Path = Path("data")

    @model_validator(mode="after")
    def chat_model_allowed(self) -> "Settings":
        if self.chat_model not in self.allowed_chat_models:
            raise ValueError(
                f"Invalid chat model: {self.chat_model}. "
                f"Valid options are: {', '.join(self.allowed_chat_models)}"
            )
        return self


# ── Loading ──────────────────────────────────────────────────────────


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from YAML, then apply environment overrides.

    Resolution order for the file: explicit ``path``, ``$ASXIV_CONFIG``,
    the bundled ``config/settings.yaml``. An explicitly requested file must
    exist; a missing default file just means built-in defaults.
    """
    explicit = path or os.environ.get("ASXIV_CONFIG")
    config_path = Path(explicit) if explicit else DEFAULT_CONFIG_PATH

    raw: dict = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
        logger.debug("Loaded settings from %s", config_path)
    elif explicit:
        raise FileNotFoundError(f"Settings file not found: {config_path}")

    for env_name, field_name in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            raw[field_name] = value

    return Settings.model_validate(raw)


def build_ollama_client(settings: Settings) -> ollama.Client:
    """Construct the LLM client the agents receive."""
    return ollama.Client(host=settings.ollama_host)
