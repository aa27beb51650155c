"""生成テキストのパースモジュール.

LLM の出力は「JSON のみ」と指示していても前置きやコードフェンスが付くことがあるため、
最初の "[" から最後の "]" までを切り出して JSON 配列として読む。
"""

from __future__ import annotations

import json
import logging
import re

from altfinder.config import SHORT_DESCRIPTION_MAX_LENGTH
from altfinder.models import Alternative

logger = logging.getLogger(__name__)

_CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\n?")
_JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def strip_code_fences(text: str) -> str:
    """```json / ``` のフェンス記号を取り除く."""
    return _CODE_FENCE_PATTERN.sub("", text.strip())


def extract_json_array(text: str) -> list | None:
    """テキストから最初の "[" 〜最後の "]" を JSON 配列としてパースする.

    Returns:
        パース済みのリスト。配列が見つからない・パース失敗・配列以外の場合は None。
    """
    if not text:
        return None

    match = _JSON_ARRAY_PATTERN.search(strip_code_fences(text))
    if not match:
        return None

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.warning("JSON パースエラー: %s", e)
        return None

    if not isinstance(parsed, list):
        return None
    return parsed


def _clean_str(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _truncate(text: str | None, limit: int = SHORT_DESCRIPTION_MAX_LENGTH) -> str | None:
    if text is None or len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def _normalize_tags(raw_tags, query: str) -> list[str]:
    """タグを小文字化・重複除去し、最後に検索語を加える."""
    if isinstance(raw_tags, str):
        raw_tags = [raw_tags]
    elif not isinstance(raw_tags, list):
        raw_tags = []

    query_tag = query.strip().lower()
    tags: list[str] = []
    for tag in raw_tags:
        t = _clean_str(tag)
        if t is None:
            continue
        t = t.lower()
        if t != query_tag and t not in tags:
            tags.append(t)
    tags.append(query_tag)
    return tags


def build_alternative(entry, query: str) -> Alternative | None:
    """生成結果の 1 要素を Alternative に変換する.

    Returns:
        Alternative。dict でない・name が空の場合は None。
    """
    if not isinstance(entry, dict):
        return None
    name = _clean_str(entry.get("name"))
    if name is None:
        return None

    return Alternative(
        name=name,
        url=_clean_str(entry.get("url")),
        category=_clean_str(entry.get("category")),
        short_description=_truncate(_clean_str(entry.get("description"))),
        tags=_normalize_tags(entry.get("tags"), query),
    )


def build_records(entries: list, query: str) -> list[Alternative]:
    """生成結果のリストを upsert 用の Alternative リストに変換する.

    同一バッチ内で name が重複した場合は後勝ち (1 回の upsert で同じ行を
    2 度更新できないため)。
    """
    by_name: dict[str, Alternative] = {}
    for entry in entries:
        alt = build_alternative(entry, query)
        if alt is None:
            logger.warning("不正な要素をスキップ: %r", entry)
            continue
        by_name.pop(alt.name, None)
        by_name[alt.name] = alt
    return list(by_name.values())
