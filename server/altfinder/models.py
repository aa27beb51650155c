"""データモデル定義."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


@dataclass
class Alternative:
    """無料・OSS の代替ソフト 1 件 (providers テーブルの 1 行)."""

    name: str  # upsert の競合キー
    url: str | None = None
    category: str | None = None
    short_description: str | None = None
    tags: list[str] = field(default_factory=list)  # 小文字、検索語を必ず含む

    def to_record(self) -> dict:
        """DB に書き込む dict に変換する."""
        return asdict(self)


@dataclass
class SearchOutcome:
    """/api/search のレスポンス本体."""

    results: list[dict]
    source: str  # "cache" or "ai"
    message: str
