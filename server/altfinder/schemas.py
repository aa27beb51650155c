"""HTTP リクエスト・レスポンスの Pydantic モデル."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class SearchRequest(BaseModel):
    """POST /api/search のリクエスト. 型チェックは QueryRouter 側で行う."""

    query: Any = Field(default=None, description="代替を探したい有料ソフト名")


class SearchResponse(BaseModel):
    """POST /api/search の成功レスポンス."""

    results: list[dict[str, Any]] = Field(default_factory=list, description="代替ソフトの行")
    source: str = Field(description="'cache' or 'ai'")
    message: str = Field(description="件数を含む表示用メッセージ")


class ErrorResponse(BaseModel):
    """400 / 500 のレスポンス."""

    error: str
    details: str | None = None


class HealthResponse(BaseModel):
    status: str
    ai: str  # 設定中のモデル ID
