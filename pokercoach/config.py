"""
Configuration - Environment-driven settings.

Required values fail fast: the process must not start without the app
identity and the three service credentials. Everything else has a default.

Values may come from the process environment or a `.env` file in the
working directory (loaded with python-dotenv, environment wins).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping
import os

from dotenv import load_dotenv

from .errors import ConfigurationError


REQUIRED_VARS = (
    "PACKAGE_NAME",
    "MENTRAOS_API_KEY",
    "OPENAI_API_KEY",
    "ROBOFLOW_API_KEY",
)

DEFAULT_PORT = 3000
DEFAULT_ANALYSIS_MODEL = "o3-mini"
DEFAULT_ANALYSIS_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_ROBOFLOW_MODEL_URL = "https://pokerclass.roboflow.cloud/playing-cards-ow27d/4"
DEFAULT_CHIME_URL = (
    "https://raw.githubusercontent.com/VictorChenCA/MentraLiveApp/main/assets/chime-sound.mp3"
)


@dataclass(frozen=True)
class Settings:
    """
    Effective configuration for one process.

    Secrets are excluded from repr so settings can be logged.
    """
    package_name: str
    mentraos_api_key: str
    openai_api_key: str
    roboflow_api_key: str
    port: int = DEFAULT_PORT
    public_url: str = ""

    analysis_model: str = DEFAULT_ANALYSIS_MODEL
    analysis_url: str = DEFAULT_ANALYSIS_URL
    roboflow_model_url: str = DEFAULT_ROBOFLOW_MODEL_URL
    chime_url: str = DEFAULT_CHIME_URL

    # Per suspension point, in seconds
    capture_timeout: float = 15.0
    detect_timeout: float = 20.0
    analyze_timeout: float = 60.0
    speak_timeout: float = 30.0

    log_level: str = "INFO"
    voice_id: str = "WdZjiN0nNcik2LBjOHiv"
    voice_model_id: str = "eleven_flash_v2_5"

    def __post_init__(self):
        if not self.public_url:
            object.__setattr__(self, "public_url", f"http://localhost:{self.port}")
        object.__setattr__(self, "public_url", self.public_url.rstrip("/"))

    def __repr__(self) -> str:
        return (
            f"Settings(package_name={self.package_name!r}, port={self.port}, "
            f"public_url={self.public_url!r}, analysis_model={self.analysis_model!r})"
        )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        load_env_file: bool = True,
    ) -> Settings:
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            load_env_file: Load `.env` first (ignored when environ is given)

        Raises:
            ConfigurationError: A required value is missing or a value
                cannot be parsed
        """
        if environ is None:
            if load_env_file:
                load_dotenv()
            environ = os.environ

        missing = [name for name in REQUIRED_VARS if not environ.get(name)]
        if missing:
            raise ConfigurationError(
                f"{', '.join(missing)} is not set in the environment or .env file"
            )

        port = _parse_int(environ, "PORT", DEFAULT_PORT)
        if not 1 <= port <= 65535:
            raise ConfigurationError(f"PORT out of range: {port}")

        return cls(
            package_name=environ["PACKAGE_NAME"],
            mentraos_api_key=environ["MENTRAOS_API_KEY"],
            openai_api_key=environ["OPENAI_API_KEY"],
            roboflow_api_key=environ["ROBOFLOW_API_KEY"],
            port=port,
            public_url=environ.get("PUBLIC_URL", ""),
            analysis_model=environ.get("ANALYSIS_MODEL") or DEFAULT_ANALYSIS_MODEL,
            analysis_url=environ.get("ANALYSIS_URL") or DEFAULT_ANALYSIS_URL,
            roboflow_model_url=(
                environ.get("ROBOFLOW_MODEL_URL") or DEFAULT_ROBOFLOW_MODEL_URL
            ),
            chime_url=environ.get("CHIME_URL", DEFAULT_CHIME_URL),
            capture_timeout=_parse_float(environ, "CAPTURE_TIMEOUT", 15.0),
            detect_timeout=_parse_float(environ, "DETECT_TIMEOUT", 20.0),
            analyze_timeout=_parse_float(environ, "ANALYZE_TIMEOUT", 60.0),
            speak_timeout=_parse_float(environ, "SPEAK_TIMEOUT", 30.0),
            log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
            voice_id=environ.get("VOICE_ID") or "WdZjiN0nNcik2LBjOHiv",
            voice_model_id=environ.get("VOICE_MODEL_ID") or "eleven_flash_v2_5",
        )


def _parse_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def _parse_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value
