"""代替ソフト候補の生成モジュール.

Hugging Face の OpenAI 互換エンドポイントにストリーミングでチャット補完を投げ、
テキスト差分を到着順に連結して返す。
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

from openai import AsyncOpenAI

from altfinder.config import MAX_TOKENS, TEMPERATURE, Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that finds free and open-source software. "
    "Always respond with valid JSON only, no markdown, no extra text."
)

_PROMPT_TEMPLATE = """Find 5-8 truly free or open-source alternatives to "{query}".

CRITICAL REQUIREMENTS:
- Must be 100% FREE (no trials, no freemium, no subscriptions, no paid tiers)
- Must be actively maintained
- Must have a real, accessible website
- Only PERMANENTLY free or open-source software

Return ONLY valid JSON array, nothing else:
[
  {{
    "name": "Tool Name",
    "url": "https://example.com",
    "category": "Category Name",
    "description": "Brief description under 100 chars",
    "tags": ["tag1", "tag2", "tag3"]
  }}
]"""


def build_prompt(query: str) -> str:
    """検索語から生成用プロンプトを組み立てる."""
    return _PROMPT_TEMPLATE.format(query=query)


class GenerationClient:
    """ストリーミングのチャット補完クライアント."""

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str,
        max_tokens: int = MAX_TOKENS,
        temperature: float = TEMPERATURE,
    ):
        self._client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def stream(self, prompt: str, system: str = SYSTEM_PROMPT) -> AsyncIterator[str]:
        """テキスト差分を到着順に yield する."""
        response = await self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            stream=True,
        )
        async for chunk in response:
            if chunk.choices and chunk.choices[0].delta.content:
                yield chunk.choices[0].delta.content

    async def complete(self, prompt: str, system: str = SYSTEM_PROMPT) -> str:
        """ストリームを最後まで読み、全文を返す."""
        parts: list[str] = []
        async for delta in self.stream(prompt, system):
            parts.append(delta)
        text = "".join(parts)
        logger.info("生成完了: %d 文字 (model=%s)", len(text), self.model)
        return text

    async def generate_alternatives(self, query: str) -> str:
        """検索語に対する代替ソフト候補の生テキストを取得する."""
        return await self.complete(build_prompt(query))


def create_generator(settings: Settings) -> GenerationClient:
    """設定から GenerationClient を生成する."""
    # 失敗時は再試行せずそのまま 500 として返す
    client = AsyncOpenAI(
        api_key=settings.huggingface_api_key,
        base_url=settings.base_url,
        max_retries=0,
    )
    return GenerationClient(client, model=settings.model)
