"""設定モジュール — 環境変数・定数定義."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from altfinder.errors import ConfigError

logger = logging.getLogger(__name__)

# .env はプロジェクトルートに配置
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# --- Supabase ---
PROVIDERS_TABLE = "providers"
CACHE_RESULT_LIMIT = 10

# --- Hugging Face (OpenAI 互換エンドポイント) ---
DEFAULT_MODEL = "Qwen/Qwen2.5-Coder-32B-Instruct"
DEFAULT_BASE_URL = "https://router.huggingface.co/v1"
MAX_TOKENS = 2000
TEMPERATURE = 0.7

# --- レコード ---
SHORT_DESCRIPTION_MAX_LENGTH = 100

# --- サーバー ---
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001

# --- ログ ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = Path(__file__).resolve().parent.parent / "logs"

# 必須環境変数: (正式名, 旧フロントエンド互換名)
_REQUIRED_ENV = {
    "supabase_url": ("SUPABASE_URL", "VITE_SUPABASE_URL"),
    "supabase_service_key": ("SUPABASE_SERVICE_KEY", "VITE_SUPABASE_SERVICE_KEY"),
    "huggingface_api_key": ("HUGGINGFACE_API_KEY", "VITE_HUGGINGFACE_API_KEY"),
}


@dataclass(frozen=True)
class Settings:
    """起動時に確定する実行設定."""

    supabase_url: str
    supabase_service_key: str
    huggingface_api_key: str
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    cache_limit: int = CACHE_RESULT_LIMIT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT


def _lookup(names: tuple[str, ...]) -> str | None:
    for name in names:
        value = os.environ.get(name)
        if value:
            return value
    return None


def load_settings() -> Settings:
    """環境変数から Settings を組み立てる.

    必須変数ごとに設定有無をログに出し、欠けているものがあれば
    まとめて ConfigError を送出する.

    Raises:
        ConfigError: 必須環境変数が未設定の場合
    """
    values: dict[str, str] = {}
    missing: list[str] = []
    for field_name, names in _REQUIRED_ENV.items():
        value = _lookup(names)
        logger.info("%s: %s", names[0], "set" if value else "MISSING")
        if value:
            values[field_name] = value
        else:
            missing.append(names[0])

    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    return Settings(
        **values,
        model=os.environ.get("HF_MODEL", DEFAULT_MODEL),
        base_url=os.environ.get("HF_BASE_URL", DEFAULT_BASE_URL),
        cache_limit=int(os.environ.get("CACHE_RESULT_LIMIT", CACHE_RESULT_LIMIT)),
        host=os.environ.get("HOST", DEFAULT_HOST),
        port=int(os.environ.get("PORT", DEFAULT_PORT)),
    )
