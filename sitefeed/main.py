"""SiteFeed - 메인 엔트리포인트

Usage:
    python -m sitefeed.main                      # HTTP 서버 실행
    python -m sitefeed.main --feed a1b2c3d4      # 피드 하나를 생성하여 표준 출력
    python -m sitefeed.main --feed a1b2c3d4 --no-cache
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

import uvicorn

from sitefeed.api import create_app
from sitefeed.config import Settings
from sitefeed.errors import SiteFeedError
from sitefeed.logger import get_logger, setup_logger
from sitefeed.pipeline import FeedPipeline

logger = get_logger("main")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """CLI 인자를 파싱합니다."""
    parser = argparse.ArgumentParser(
        description="SiteFeed - 선언적 사이트 정의로 웹 페이지를 RSS 피드로 변환",
    )
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="설정 파일 경로 (기본: config/settings.yaml)",
    )
    parser.add_argument(
        "--env",
        default="config/.env",
        help="환경 변수 파일 경로 (기본: config/.env)",
    )
    parser.add_argument(
        "--feed",
        metavar="NAME",
        help="서버 대신 지정한 피드 하나를 생성하여 출력",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="--feed 사용 시 캐시를 건너뜀",
    )
    parser.add_argument("--host", help="서버 주소 (설정 파일 값 대신 사용)")
    parser.add_argument("--port", type=int, help="서버 포트 (설정 파일 값 대신 사용)")
    return parser.parse_args(argv)


async def render_feed(settings: Settings, name: str, use_cache: bool = True) -> str:
    """파이프라인을 열고 피드 하나를 생성한 뒤 정리합니다."""
    pipeline = FeedPipeline(settings)
    await pipeline.initialize()
    try:
        return await pipeline.get_feed(name, use_cache=use_cache)
    finally:
        await pipeline.cleanup()


def main(argv: list[str] | None = None) -> int:
    """메인 엔트리포인트"""
    args = parse_args(argv)

    # 설정 로드
    settings = Settings.load(config_path=args.config, env_path=args.env)

    # 로거 설정
    log_level = os.getenv("LOG_LEVEL", "INFO")
    setup_logger(level=log_level, log_dir=os.getenv("LOG_DIR") or None)

    # 설정 검증
    for w in settings.validate():
        logger.warning("설정 경고: %s", w)

    if args.feed:
        try:
            feed = asyncio.run(
                render_feed(settings, args.feed, use_cache=not args.no_cache)
            )
        except SiteFeedError as e:
            logger.error("피드 생성 실패: %s", e)
            return 1
        sys.stdout.write(feed)
        return 0

    host = args.host or settings.server.host
    port = args.port or settings.server.port
    logger.info("서버 시작: http://%s:%d", host, port)
    uvicorn.run(create_app(settings), host=host, port=port, log_level=log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
