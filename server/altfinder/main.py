"""無料代替ソフト検索 API — メインエントリーポイント.

エンドポイント:
  POST /api/search  検索語に対する無料・OSS の代替ソフトを返す
  GET  /api/health  稼働確認

起動:
  altfinder
  # or
  uvicorn altfinder.main:create_app --factory --port 3001
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from altfinder.config import LOG_DIR, LOG_LEVEL, Settings, load_settings
from altfinder.db import create_store
from altfinder.errors import ConfigError, ValidationError
from altfinder.generator import create_generator
from altfinder.router import QueryRouter
from altfinder.schemas import ErrorResponse, HealthResponse, SearchRequest, SearchResponse

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    """ロギングの初期設定."""
    LOG_DIR.mkdir(exist_ok=True)
    log_file = LOG_DIR / f"altfinder_{datetime.now().strftime('%Y%m%d')}.log"
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file, encoding="utf-8"),
        ],
    )


def build_router(settings: Settings) -> QueryRouter:
    """設定から Supabase・生成クライアントを組み立てる."""
    router = QueryRouter(
        store=create_store(settings),
        generator=create_generator(settings),
        cache_limit=settings.cache_limit,
    )
    logger.info("Supabase クライアント初期化完了")
    logger.info("生成クライアント初期化完了 (model=%s)", settings.model)
    return router


def create_app(router: QueryRouter | None = None) -> FastAPI:
    """FastAPI アプリを生成する. router 未指定時は環境変数から組み立てる.

    Raises:
        ConfigError: router 未指定かつ必須環境変数が未設定の場合
    """
    if router is None:
        # uvicorn --factory 経由の起動
        setup_logging()
        router = build_router(load_settings())

    app = FastAPI(
        title="Free Alternative Finder API",
        description="Find free and open-source alternatives to paid software",
        version="1.0.0",
    )
    app.state.router = router

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Query is required"})

    @app.post(
        "/api/search",
        response_model=SearchResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def search(req: SearchRequest):
        try:
            outcome = await app.state.router.handle_search(req.query)
        except ValidationError as e:
            return JSONResponse(status_code=400, content={"error": str(e)})
        except Exception as e:
            logger.exception("検索エラー: %s", e)
            return JSONResponse(
                status_code=500,
                content={"error": "Search failed", "details": str(e)},
            )
        return SearchResponse(
            results=outcome.results,
            source=outcome.source,
            message=outcome.message,
        )

    @app.get("/api/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="ok", ai=app.state.router.generator.model)

    return app


def run() -> None:
    """API サーバーを起動する."""
    setup_logging()
    try:
        settings = load_settings()
        app = create_app(build_router(settings))
    except ConfigError as e:
        logger.error("起動失敗: %s", e)
        sys.exit(1)

    logger.info("API サーバー起動: http://localhost:%d", settings.port)
    logger.info("エンドポイント: http://localhost:%d/api/search", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
