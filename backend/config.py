# config.py
import os
from dataclasses import dataclass

from dotenv import load_dotenv, find_dotenv

from backend.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Settings:
    default_csv_url: str = ""
    form_url: str = ""
    db_path: str = "dashboard.db"
    llm_provider: str = "ollama"
    model_name: str = "llama3.2:1b"
    groq_api_key: str = ""
    language: str = "English"
    timezone: str = "Europe/Madrid"
    fetch_timeout: float = 30.0
    log_level: str = "INFO"


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("invalid_setting", name=name, value=raw, default=default)
        return default


def load_settings(use_dotenv: bool = True) -> Settings:
    """
    Lee la configuración del entorno (y del .env si existe).
    Las variables de entorno ya definidas tienen prioridad sobre el .env.
    """
    if use_dotenv:
        load_dotenv(find_dotenv())

    return Settings(
        default_csv_url=os.getenv("SHEET_CSV_URL", "").strip(),
        form_url=os.getenv("GOOGLE_FORM_URL", "").strip(),
        db_path=os.getenv("DASHBOARD_DB_PATH", "dashboard.db"),
        llm_provider=os.getenv("LLM_PROVIDER", "ollama").strip().lower(),
        model_name=os.getenv("LLM_MODEL", "llama3.2:1b"),
        groq_api_key=os.getenv("GROQ_API_KEY", ""),
        language=os.getenv("ASSISTANT_LANGUAGE", "English"),
        timezone=os.getenv("TIMEZONE", "Europe/Madrid"),
        fetch_timeout=_float_env("FETCH_TIMEOUT", 30.0),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
