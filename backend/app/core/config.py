import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from openai import OpenAI

load_dotenv()


def _env_enabled(name: str, default: str = "1") -> bool:
    raw = os.getenv(name, default)
    return raw not in {"0", "false", "False", ""}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return float(raw)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return int(raw)


@dataclass(frozen=True)
class Settings:
    app_title: str = "Study Notes Transform API"
    app_version: str = "1.0.0"
    hf_token: Optional[str] = os.getenv("HF_TOKEN")
    inference_base_url: str = os.getenv(
        "INFERENCE_BASE_URL", "https://router.huggingface.co/v1"
    )
    transform_model: str = os.getenv(
        "TRANSFORM_MODEL", "meta-llama/Llama-3.3-70B-Instruct"
    )
    definition_model: str = os.getenv(
        "DEFINITION_MODEL", "deepseek-ai/DeepSeek-V3-0324"
    )
    # Low temperatures keep the structured output stable between runs
    transform_temperature: float = _env_float("TRANSFORM_TEMPERATURE", 0.5)
    transform_max_tokens: int = _env_int("TRANSFORM_MAX_TOKENS", 4096)
    definition_temperature: float = _env_float("DEFINITION_TEMPERATURE", 0.3)
    definition_max_tokens: int = _env_int("DEFINITION_MAX_TOKENS", 300)
    database_url: str = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./notes.db")
    enable_database: bool = _env_enabled("ENABLE_DATABASE")
    llm_log_dir: str = os.getenv("LLM_LOG_DIR", "logs")
    enable_llm_call_log: bool = _env_enabled("ENABLE_LLM_CALL_LOG")
    frontend_origins: tuple[str, ...] = (
        "http://localhost:3000",
        "http://localhost:3001",
    )


settings = Settings()


def get_inference_token() -> Optional[str]:
    """Return the configured inference credential, or None when unset/blank."""
    token = settings.hf_token
    if token is None or not token.strip():
        return None
    return token.strip()


def create_inference_sdk_client(logger) -> Optional[OpenAI]:
    """Initialise the OpenAI-compatible SDK client for the inference router."""
    token = get_inference_token()
    if not token:
        logger.warning("⚠️ HF_TOKEN not found in environment variables")
        return None

    try:
        client = OpenAI(base_url=settings.inference_base_url, api_key=token)
        logger.info("✅ Inference API configured (%s)", settings.inference_base_url)
        return client
    except Exception as e:
        logger.error(f"❌ Failed to initialize inference client: {e}")
        return None
