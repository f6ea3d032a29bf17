"""HTTP 인터페이스 - FastAPI 앱 생성

엔드포인트:
    GET  /rss/{name}   저장된 SDD로 생성한 RSS 피드
    GET  /             서버 상태
    POST /add-sdd      SDD 등록 (인증 필요)
    GET  /list         등록된 피드 목록 (인증 필요)
    POST /read-later   나중에 읽기 항목 추가 (인증 필요)
    GET  /read-later   나중에 읽기 RSS 피드 (인증 필요)
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from sitefeed.config import Settings
from sitefeed.errors import ConfigError, SiteNotFoundError
from sitefeed.logger import get_logger
from sitefeed.pipeline import FeedPipeline

logger = get_logger("api")

APP_NAME = "sitefeed"
THE_VERSION = "0.3.0"

AUTH_ERROR = (
    "Invalid or missing ADD_KEY. "
    "Please provide key via X-Add-Key header or ?key=xxx query parameter"
)
RSS_MEDIA_TYPE = "application/xml"


def create_app(settings: Settings, pipeline: FeedPipeline | None = None) -> FastAPI:
    """설정으로 FastAPI 앱을 만듭니다. 저장소는 앱 수명 주기에 맞춰 열고 닫습니다."""
    pipeline = pipeline or FeedPipeline(settings)
    add_key = settings.server.add_key

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await pipeline.initialize()
        try:
            yield
        finally:
            await pipeline.cleanup()

    app = FastAPI(title="SiteFeed", version=THE_VERSION, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Add-Key"],
    )

    def authorized(request: Request) -> bool:
        # 키가 설정되지 않았으면 모두 거부
        if not add_key:
            return False
        if request.headers.get("X-Add-Key") == add_key:
            return True
        return request.query_params.get("key") == add_key

    def forbidden() -> JSONResponse:
        return JSONResponse({"error": AUTH_ERROR}, status_code=403)

    @app.get("/rss/{name}")
    async def rss(name: str):
        try:
            feed = await pipeline.get_feed(name)
        except SiteNotFoundError as e:
            logger.warning("피드 없음: %s", name)
            return PlainTextResponse(str(e), status_code=404)
        except ConfigError as e:
            logger.error("잘못된 SDD (%s): %s", name, e)
            return PlainTextResponse(str(e), status_code=400)
        except Exception as e:
            logger.error("피드 생성 실패 (%s): %s", name, e, exc_info=True)
            return PlainTextResponse("Error generating RSS feed", status_code=500)
        return Response(content=feed, media_type=RSS_MEDIA_TYPE)

    @app.get("/")
    async def status():
        return {
            "app_name": APP_NAME,
            "version": THE_VERSION,
            "add_key_configured": bool(add_key),
            "storage_backend": settings.storage.backend,
            "cache_minutes": settings.cache.minutes,
        }

    @app.post("/add-sdd")
    async def add_sdd(request: Request):
        if not authorized(request):
            return forbidden()

        body = await _json_body(request)
        if not isinstance(body, dict) or not isinstance(body.get("sdd"), dict):
            return JSONResponse({"error": "Invalid SDD format"}, status_code=400)

        try:
            key = await pipeline.add_site(body["sdd"])
        except ConfigError as e:
            return JSONResponse(
                {"error": f"Invalid SDD format: {e}"}, status_code=400
            )
        except Exception as e:
            logger.error("SDD 저장 실패: %s", e, exc_info=True)
            return JSONResponse({"error": str(e)}, status_code=500)

        return {"success": True, "key": key, "rss_url": f"/rss/{key}"}

    @app.get("/list")
    async def list_sites(request: Request):
        if not authorized(request):
            return forbidden()

        origin = _origin(request)
        try:
            summaries = await pipeline.sites.list()
        except Exception as e:
            logger.error("SDD 목록 조회 실패: %s", e, exc_info=True)
            return JSONResponse({"error": str(e)}, status_code=500)

        read_later_url = f"{origin}/read-later?key={add_key}"
        items = [
            {
                "key": "read-later",
                "title": "나중에 읽기",
                "url": read_later_url,
                "rss_url": read_later_url,
                "favicon": f"{origin}/favicon.ico",
            }
        ]
        items.extend(
            {
                "key": s.key,
                "title": s.title,
                "url": s.url,
                "rss_url": f"{origin}/rss/{s.key}",
                "favicon": s.favicon,
            }
            for s in summaries
        )
        return {"success": True, "total": len(items), "items": items}

    @app.post("/read-later")
    async def add_read_later(request: Request):
        if not authorized(request):
            return forbidden()

        body = await _json_body(request)
        if not isinstance(body, dict):
            body = {}
        try:
            item_id = await pipeline.read_later.add(
                body.get("url"),
                text=body.get("text") or "",
                title=body.get("title"),
            )
        except ConfigError as e:
            return JSONResponse(
                {
                    "error": "Invalid format. URL is required and must be a valid HTTP URL",
                    "detail": str(e),
                },
                status_code=400,
            )
        except Exception as e:
            logger.error("나중에 읽기 저장 실패: %s", e, exc_info=True)
            return JSONResponse({"error": str(e)}, status_code=500)

        return {"success": True, "id": item_id}

    @app.get("/read-later")
    async def read_later_feed(request: Request):
        if not authorized(request):
            return forbidden()

        try:
            items = await pipeline.read_later.list()
            feed = pipeline.read_later.render_feed(items, _origin(request))
        except Exception as e:
            logger.error("나중에 읽기 피드 생성 실패: %s", e, exc_info=True)
            return PlainTextResponse("Error generating RSS feed", status_code=500)
        return Response(content=feed, media_type=RSS_MEDIA_TYPE)

    return app


async def _json_body(request: Request):
    """요청 본문을 JSON으로 읽습니다. 해석할 수 없으면 None."""
    try:
        return await request.json()
    except ValueError:
        return None


def _origin(request: Request) -> str:
    """프록시 헤더를 고려한 요청 origin"""
    protocol = request.headers.get("x-forwarded-proto") or request.url.scheme
    host = request.headers.get("host") or request.url.netloc
    return f"{protocol}://{host}"
