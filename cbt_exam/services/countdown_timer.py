"""
services/countdown_timer.py

시험 제한 시간 카운트다운 타이머.

설계 원칙:
- 1초(TICK_INTERVAL_SECONDS)마다 남은 시간을 1씩 감소, 0에서 멈춤
- 틱/만료 이벤트는 콜백으로 전달 (on_tick, on_expired)
- 예약된 콜백마다 세대 번호(generation)를 묶어 둔다
  → stop()/재시작 후 이미 예약된 틱은 아무 일도 하지 않는다
- 모든 상태 변경은 lock 안에서 직렬화 (컨트롤러와 같은 RLock 공유 가능)
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from config import LOW_TIME_PERCENT, TICK_INTERVAL_SECONDS
from cbt_exam.models.errors import InvalidDurationError

logger = logging.getLogger(__name__)

TickCallback = Callable[[int, bool], None]
ExpiredCallback = Callable[[], None]


class TimerStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    EXPIRED = "expired"


class ThreadingScheduler:
    """threading.Timer 기반 스케줄러. 콜백 1회 예약, 반환값의 cancel()로 취소."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        t = threading.Timer(delay, callback)
        t.daemon = True
        t.start()
        return t


def low_time_threshold(total_seconds: int, percent: int = LOW_TIME_PERCENT) -> int:
    """
    경고 기준 시간 = ceil(설정 시간 × 30%).
    부동소수 오차 없이 정수 연산으로 올림한다. (10초 → 3초, 100초 → 30초)
    """
    return -(-(total_seconds * percent) // 100)


class CountdownTimer:
    """
    카운트다운 타이머 상태 머신: IDLE → RUNNING → EXPIRED.

    Args:
        on_tick:    틱마다 (남은 초, 시간 부족 여부)로 호출.
        on_expired: 0초 도달 시 start() 1회당 정확히 한 번 호출.
        scheduler:  call_later(delay, callback) 제공 객체. 기본 ThreadingScheduler.
        lock:       상태 변경 직렬화용 락. 컨트롤러와 공유하면 틱과 사용자 조작이 섞이지 않는다.
        interval:   틱 간격 (초).
    """

    def __init__(
        self,
        on_tick: Optional[TickCallback] = None,
        on_expired: Optional[ExpiredCallback] = None,
        scheduler=None,
        lock=None,
        interval: float = TICK_INTERVAL_SECONDS,
    ) -> None:
        self._on_tick = on_tick
        self._on_expired = on_expired
        self._scheduler = scheduler or ThreadingScheduler()
        self._lock = lock or threading.RLock()
        self._interval = interval

        self._generation = 0
        self._handle = None

        self.status = TimerStatus.IDLE
        self.total_seconds = 0
        self.remaining_seconds = 0

    # ── 조회 ─────────────────────────────────────────────────────────────────

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def low_time_threshold(self) -> int:
        return low_time_threshold(self.total_seconds)

    @property
    def is_low_time(self) -> bool:
        if self.total_seconds <= 0:
            return False
        return self.remaining_seconds <= self.low_time_threshold

    # ── 제어 ─────────────────────────────────────────────────────────────────

    def start(self, total_seconds: int) -> None:
        """
        카운트다운 시작. 시작 직후 남은 시간=설정 시간으로 틱 이벤트를 한 번 보낸다.

        Raises:
            InvalidDurationError: total_seconds가 0 이하인 경우 (타이머 상태 변경 없음).
        """
        if total_seconds <= 0:
            raise InvalidDurationError(f"시험 시간은 0초보다 커야 합니다 (입력값: {total_seconds}초).")

        with self._lock:
            self._cancel_pending()
            self._generation += 1
            generation = self._generation

            self.total_seconds = total_seconds
            self.remaining_seconds = total_seconds
            self.status = TimerStatus.RUNNING
            logger.info(f"타이머 시작: {total_seconds}초 (경고 기준 {self.low_time_threshold}초)")

            self._emit_tick()
            if self._generation == generation:
                self._schedule(generation)

    def stop(self, clear: bool = False) -> None:
        """
        어느 상태에서든 즉시 정지 → IDLE. 이미 예약된 틱은 무효화된다.
        clear=True이면 설정 시간/남은 시간도 0으로 되돌린다.
        """
        with self._lock:
            self._cancel_pending()
            self._generation += 1
            if self.status != TimerStatus.IDLE:
                logger.info(f"타이머 정지 (남은 시간 {self.remaining_seconds}초)")
            self.status = TimerStatus.IDLE
            if clear:
                self.total_seconds = 0
                self.remaining_seconds = 0

    # ── 내부 ─────────────────────────────────────────────────────────────────

    def _schedule(self, generation: int) -> None:
        self._handle = self._scheduler.call_later(self._interval, lambda: self._tick(generation))

    def _cancel_pending(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self.status != TimerStatus.RUNNING:
                logger.debug(f"무효화된 틱 무시 (세대 {generation}, 현재 {self._generation})")
                return
            self._handle = None

            self.remaining_seconds -= 1
            if self.remaining_seconds <= 0:
                self.remaining_seconds = 0
                self.status = TimerStatus.EXPIRED
                # 마지막 표시 갱신 (0초)
                self._emit_tick()
                if self._generation != generation:
                    return  # on_tick 안에서 stop()/start()된 경우
                self._generation += 1
                logger.info("시험 시간 종료")
                if self._on_expired:
                    self._on_expired()
                return

            self._emit_tick()
            if self._generation == generation:
                self._schedule(generation)

    def _emit_tick(self) -> None:
        if self._on_tick:
            self._on_tick(self.remaining_seconds, self.is_low_time)
