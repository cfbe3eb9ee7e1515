"""
api/session.py — 멀티유저 인메모리 세션 (쿠키 기반)

각 사용자에게 UUID 세션 ID를 발급하고, 세션별로 독립된 ExamController를 유지.
TTL(기본 1시간) 경과 시 자동 만료. 만료/초기화 시 컨트롤러 타이머도 정지.
"""

import logging
import threading
import time
import uuid
from typing import Any, Callable, Optional

from config import SESSION_TTL
from api.listener import PollingListener
from cbt_exam.models.errors import QuestionLoadError
from cbt_exam.services.exam_controller import ExamController
from cbt_exam.services.question_loader import fetch_questions_with_source

logger = logging.getLogger(__name__)

_lock = threading.Lock()
_sessions: dict[str, dict[str, Any]] = {}
_timestamps: dict[str, float] = {}

# 테스트에서 가짜 스케줄러를 주입할 때 사용
SCHEDULER_FACTORY: Optional[Callable[[], Any]] = None


def _new_state() -> dict[str, Any]:
    state: dict[str, Any] = {
        "controller": None,
        "listener": None,
        "question_source": "",
        "load_error": "",
    }
    try:
        bank, source = fetch_questions_with_source()
    except QuestionLoadError as e:
        logger.error(f"문제 은행 로드 실패: {e}")
        state["load_error"] = str(e)
        return state

    scheduler = SCHEDULER_FACTORY() if SCHEDULER_FACTORY else None
    controller = ExamController(bank, scheduler=scheduler)
    listener = PollingListener()
    controller.subscribe(listener)

    state.update({"controller": controller, "listener": listener, "question_source": source})
    return state


def _release(state: dict[str, Any]) -> None:
    controller: Optional[ExamController] = state.get("controller")
    if controller is not None:
        controller.close()


def create_session() -> str:
    """새 세션을 생성하고 세션 ID를 반환."""
    sid = uuid.uuid4().hex
    state = _new_state()
    with _lock:
        _sessions[sid] = state
        _timestamps[sid] = time.time()
    return sid


def get_session(sid: str) -> dict[str, Any] | None:
    """세션 ID로 세션 데이터를 가져옴. 만료되었거나 없으면 None."""
    expired_state = None
    with _lock:
        if sid not in _sessions:
            return None
        if time.time() - _timestamps[sid] > SESSION_TTL:
            expired_state = _sessions.pop(sid)
            del _timestamps[sid]
        else:
            _timestamps[sid] = time.time()  # 접근 시 갱신
            return _sessions[sid]
    _release(expired_state)
    return None


def reset(sid: str) -> None:
    """세션 초기화 (문제 은행 다시 로드, 새 컨트롤러)."""
    with _lock:
        if sid not in _sessions:
            return
    new_state = _new_state()
    with _lock:
        old_state = _sessions.get(sid)
        _sessions[sid] = new_state
        _timestamps[sid] = time.time()
    if old_state is not None:
        _release(old_state)


def cleanup_expired() -> int:
    """만료된 세션을 정리. 제거된 수 반환."""
    now = time.time()
    removed = []
    with _lock:
        expired = [sid for sid, ts in _timestamps.items() if now - ts > SESSION_TTL]
        for sid in expired:
            removed.append(_sessions.pop(sid))
            del _timestamps[sid]
    for state in removed:
        _release(state)
    return len(removed)


def close_all() -> int:
    """서버 종료 시 모든 세션 정리 (컨트롤러 타이머 정지). 제거된 수 반환."""
    with _lock:
        states = list(_sessions.values())
        _sessions.clear()
        _timestamps.clear()
    for state in states:
        _release(state)
    if states:
        logger.info(f"세션 {len(states)}개 종료")
    return len(states)
