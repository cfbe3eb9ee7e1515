"""
api/app.py — FastAPI 앱 팩토리

- 세션 미들웨어: 쿠키 세션마다 ExamController 1개
- lifespan: 만료 세션 정리 스레드 시작, 서버 종료 시 모든 세션 타이머 정지
- static/index.html이 있으면 루트에서 서빙
"""

import logging
import os
import threading
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from config import STATIC_DIR, SESSION_CLEANUP_INTERVAL
from api.routes import router
import api.session as session

SESSION_COOKIE = "cbt_session"

logger = logging.getLogger(__name__)


def _cleanup_loop(stop: threading.Event) -> None:
    """만료 세션을 주기적으로 정리한다. stop이 설정되면 종료."""
    while not stop.wait(SESSION_CLEANUP_INTERVAL):
        removed = session.cleanup_expired()
        if removed:
            logger.info(f"만료 세션 {removed}개 정리")


def create_app(start_cleanup: bool = True) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        stop = threading.Event()
        if start_cleanup:
            threading.Thread(target=_cleanup_loop, args=(stop,), daemon=True).start()
        try:
            yield
        finally:
            stop.set()
            # 진행 중인 시험 타이머가 서버 종료 후에도 틱하지 않도록 정리
            session.close_all()

    app = FastAPI(title="CBT Exam Runner", docs_url=None, redoc_url=None, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 쿠키의 세션 ID가 없거나 만료됐으면 새 세션(새 컨트롤러) 발급
    @app.middleware("http")
    async def session_middleware(request: Request, call_next):
        sid = request.cookies.get(SESSION_COOKIE)
        if not sid or session.get_session(sid) is None:
            sid = session.create_session()

        request.state.session_id = sid
        response: Response = await call_next(request)
        response.set_cookie(
            key=SESSION_COOKIE,
            value=sid,
            httponly=True,
            samesite="lax",
            max_age=session.SESSION_TTL,
        )
        return response

    app.include_router(router)

    if os.path.isdir(STATIC_DIR):
        app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/")
    async def serve_index():
        index_path = os.path.join(STATIC_DIR, "index.html")
        if os.path.exists(index_path):
            return FileResponse(index_path)
        return {"error": "index.html not found"}

    return app
