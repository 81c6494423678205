# settings.py
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel

from prompts import default_system_instruction_path

load_dotenv(override=True)


class Settings(BaseModel):
    API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    MODEL_NAME: str = os.getenv("MODEL_NAME", "gemini-2.0-flash")
    # sampling
    TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
    TOP_K: int = int(os.getenv("TOP_K", "40"))
    TOP_P: float = float(os.getenv("TOP_P", "0.95"))
    MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "1024"))
    # conversation knobs
    CONTEXT_WINDOW: int = int(os.getenv("CONTEXT_WINDOW", "10"))
    MAX_MESSAGE_LENGTH: int = int(os.getenv("MAX_MESSAGE_LENGTH", "4000"))
    SYSTEM_INSTRUCTION_PATH: str = os.getenv(
        "SYSTEM_INSTRUCTION_PATH", default_system_instruction_path()
    )
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "*")
    # logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "text")
    LOG_DIR: str = os.getenv("LOG_DIR", "")

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]


def load_system_instruction(path: str) -> str:
    """Read the fixed system instruction once; raises if the file is missing."""
    text = Path(path).read_text(encoding="utf-8").strip()
    if not text:
        raise ValueError(f"System instruction file is empty: {path}")
    return text
