"""
api/listener.py — 브라우저 폴링용 세션 리스너

컨트롤러 이벤트를 받아 마지막 틱/만료 여부를 보관한다.
브라우저는 /api/exam-state를 주기적으로 조회해 타이머를 그린다.
"""

import threading
from typing import Optional

from cbt_exam.models.session_state import Lifecycle, SessionSnapshot
from cbt_exam.services.exam_controller import SessionListener


class PollingListener(SessionListener):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.last_snapshot: Optional[SessionSnapshot] = None
        self.remaining_seconds = 0
        self.is_low_time = False
        self.expired = False

    def on_state_changed(self, snapshot: SessionSnapshot) -> None:
        with self._lock:
            self.last_snapshot = snapshot
            if snapshot.lifecycle == Lifecycle.NOT_STARTED:
                self.expired = False
                self.remaining_seconds = snapshot.remaining_seconds
                self.is_low_time = False

    def on_tick(self, remaining_seconds: int, is_low_time: bool) -> None:
        with self._lock:
            self.remaining_seconds = remaining_seconds
            self.is_low_time = is_low_time
            if remaining_seconds > 0:
                self.expired = False

    def on_expired(self) -> None:
        with self._lock:
            self.expired = True

    def to_dict(self) -> dict:
        with self._lock:
            return {
                "remaining_seconds": self.remaining_seconds,
                "is_low_time": self.is_low_time,
                "expired": self.expired,
            }
