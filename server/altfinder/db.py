"""Supabase データベース操作モジュール.

代替ソフトは public スキーマの providers テーブルに保存する。
name カラムにユニーク制約があり、upsert の競合キーとして使う。
"""

from __future__ import annotations

import logging

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from altfinder.config import CACHE_RESULT_LIMIT, PROVIDERS_TABLE, Settings
from altfinder.errors import PersistenceError
from altfinder.models import Alternative

logger = logging.getLogger(__name__)

# PostgREST のフィルタ構文で意味を持つ文字
_RESERVED_CHARS = set(',.:()"\\{} ')


def _quote(value: str) -> str:
    """予約文字を含む値をダブルクォートで囲む."""
    if not any(c in _RESERVED_CHARS for c in value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def build_match_filter(query: str) -> str:
    """name の部分一致 (大文字小文字無視) または tags の包含で検索する or フィルタを組み立てる.

    例: "Photoshop" -> "name.ilike.%Photoshop%,tags.cs.{photoshop}"
    """
    return f"name.ilike.{_quote(f'%{query}%')},tags.cs.{{{_quote(query.lower())}}}"


class AlternativeStore:
    """providers テーブルへの読み書き."""

    def __init__(self, client: Client, table: str = PROVIDERS_TABLE):
        self._client = client
        self._table_name = table

    def _table(self):
        return self._client.table(self._table_name)

    def find_matches(self, query: str, limit: int = CACHE_RESULT_LIMIT) -> list[dict]:
        """キャッシュ済みの代替ソフトを検索する.

        Args:
            query: 検索語 (前後空白除去済み)
            limit: 最大取得件数

        Returns:
            providers の行リスト。該当なしなら空リスト。
        """
        resp = (
            self._table()
            .select("*")
            .or_(build_match_filter(query))
            .limit(limit)
            .execute()
        )
        return resp.data or []

    def upsert_alternatives(self, records: list[Alternative]) -> list[dict]:
        """代替ソフトを name をキーに一括 upsert する.

        Returns:
            upsert 後の行リスト

        Raises:
            PersistenceError: Supabase がエラーを返した・通信に失敗した場合
        """
        if not records:
            return []
        payload = [r.to_record() for r in records]
        try:
            resp = (
                self._table()
                .upsert(payload, on_conflict="name", ignore_duplicates=False)
                .execute()
            )
        except APIError as e:
            raise PersistenceError(f"upsert into {self._table_name} failed: {e.message}") from e
        except httpx.HTTPError as e:
            raise PersistenceError(f"upsert into {self._table_name} failed: {e}") from e
        logger.info("%s に %d 件 upsert", self._table_name, len(payload))
        return resp.data or []


def create_store(settings: Settings) -> AlternativeStore:
    """設定から Supabase クライアントを生成して AlternativeStore を返す."""
    client = create_client(settings.supabase_url, settings.supabase_service_key)
    return AlternativeStore(client)
