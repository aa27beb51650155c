"""検索リクエストの処理フロー.

処理フロー:
  1. 検索語のバリデーション
  2. providers テーブルからキャッシュ検索 (ヒットすれば即返却)
  3. LLM に代替ソフト候補を生成させる
  4. 生成テキストから JSON 配列を抽出・レコード化
  5. name をキーに upsert (失敗してもリクエストは継続)
"""

from __future__ import annotations

import asyncio
import logging

from altfinder.config import CACHE_RESULT_LIMIT
from altfinder.db import AlternativeStore
from altfinder.errors import PersistenceError, ValidationError
from altfinder.generator import GenerationClient
from altfinder.models import SearchOutcome
from altfinder.parser import build_records, extract_json_array

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No free alternatives found"


class QueryRouter:
    """キャッシュ → 生成 → 保存 の順で代替ソフトを探す."""

    def __init__(
        self,
        store: AlternativeStore,
        generator: GenerationClient,
        cache_limit: int = CACHE_RESULT_LIMIT,
    ):
        self.store = store
        self.generator = generator
        self.cache_limit = cache_limit

    async def handle_search(self, query) -> SearchOutcome:
        """検索語に対する代替ソフト一覧を返す.

        Raises:
            ValidationError: 検索語が空の場合 (I/O の前に送出)
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Query is required")
        query = query.strip()
        logger.info('検索: "%s"', query)

        cached = await asyncio.to_thread(self.store.find_matches, query, self.cache_limit)
        if cached:
            logger.info("キャッシュヒット: %d 件", len(cached))
            return SearchOutcome(
                results=cached,
                source="cache",
                message=f"Found {len(cached)} cached alternatives",
            )

        logger.info("キャッシュなし。生成を開始")
        text = await self.generator.generate_alternatives(query)

        entries = extract_json_array(text)
        if entries is None:
            logger.warning("JSON 配列が見つかりません。先頭: %r", text[:200])
            return self._empty()

        records = build_records(entries, query)
        logger.info("生成結果: %d 件", len(records))
        if not records:
            return self._empty()

        try:
            saved = await asyncio.to_thread(self.store.upsert_alternatives, records)
        except PersistenceError as e:
            logger.error("DB 保存失敗: %s", e)
            saved = []

        return SearchOutcome(
            results=saved or [r.to_record() for r in records],
            source="ai",
            message=f"Found {len(records)} new alternatives",
        )

    @staticmethod
    def _empty() -> SearchOutcome:
        return SearchOutcome(results=[], source="ai", message=NO_RESULTS_MESSAGE)
