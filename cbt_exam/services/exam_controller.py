"""
services/exam_controller.py

시험 세션 컨트롤러 (상태 머신).

  NOT_STARTED --start--> RUNNING --submit/시간 종료--> ENDED
  (모든 단계) --reset/restart--> NOT_STARTED

- 문제 이동/답안 선택은 RUNNING에서만 반영, 그 외 단계에서는 조용히 무시
- 범위를 벗어난 인덱스는 보정하지 않고 예외 발생 (렌더러 연동 버그를 숨기지 않음)
- 타이머 틱과 사용자 조작은 하나의 RLock으로 직렬화
- 렌더러는 SessionListener를 subscribe()해서 상태 변경을 받는다
"""

import logging
import threading
from typing import Any, List, Optional

from config import TICK_INTERVAL_SECONDS
from cbt_exam.models.answer_sheet import AnswerSheet
from cbt_exam.models.errors import InvalidDurationError, QuestionIndexError
from cbt_exam.models.question_model import Question, QuestionBank, load_question_bank
from cbt_exam.models.score_report import ScoreReport
from cbt_exam.models.session_state import Lifecycle, SessionSnapshot
from cbt_exam.services.countdown_timer import CountdownTimer
from cbt_exam.services.exam_service import calculate_score

logger = logging.getLogger(__name__)


class SessionListener:
    """렌더러 콜백 인터페이스. 필요한 메서드만 오버라이드한다."""

    def on_state_changed(self, snapshot: SessionSnapshot) -> None:
        pass

    def on_tick(self, remaining_seconds: int, is_low_time: bool) -> None:
        pass

    def on_expired(self) -> None:
        pass


def combine_duration(minutes: int, seconds: int) -> int:
    """
    분/초 입력 → 총 초.

    Raises:
        InvalidDurationError: 음수 입력.
    """
    if minutes < 0 or seconds < 0:
        raise InvalidDurationError(f"시간 입력은 음수일 수 없습니다 ({minutes}분 {seconds}초).")
    return minutes * 60 + seconds


class ExamController:
    """
    시험 1회분 세션을 소유하고 조작하는 컨트롤러.

    Args:
        bank:      문제 은행 (QuestionBank 또는 검증 전 원시 리스트).
        scheduler: 타이머 스케줄러 (테스트에서 교체).
        interval:  타이머 틱 간격 (초).

    Raises:
        QuestionLoadError: 문제 은행이 비었거나 형식이 잘못된 경우. 세션은 만들어지지 않는다.
    """

    def __init__(self, bank: Any, scheduler=None, interval: float = TICK_INTERVAL_SECONDS) -> None:
        self.bank: QuestionBank = load_question_bank(bank)
        self.answer_sheet = AnswerSheet.for_bank(self.bank)
        self.lifecycle = Lifecycle.NOT_STARTED
        self.current_index = 0
        self.last_submit_manual: Optional[bool] = None

        self._lock = threading.RLock()
        self._listeners: List[SessionListener] = []
        self.timer = CountdownTimer(
            on_tick=self._handle_tick,
            on_expired=self._handle_expired,
            scheduler=scheduler,
            lock=self._lock,
            interval=interval,
        )

    # ── 구독 ─────────────────────────────────────────────────────────────────

    def subscribe(self, listener: SessionListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # ── 조회 ─────────────────────────────────────────────────────────────────

    @property
    def is_running(self) -> bool:
        return self.lifecycle == Lifecycle.RUNNING

    @property
    def current_question(self) -> Question:
        return self.bank[self.current_index]

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            answered = self.answer_sheet.answered_count()
            return SessionSnapshot(
                lifecycle=self.lifecycle,
                current_index=self.current_index,
                total_questions=len(self.bank),
                answers=list(self.answer_sheet.answers),
                answered_count=answered,
                unanswered_count=len(self.bank) - answered,
                total_seconds=self.timer.total_seconds,
                remaining_seconds=self.timer.remaining_seconds,
                is_low_time=self.timer.is_low_time,
            )

    def score_report(self) -> Optional[ScoreReport]:
        """종료된 세션의 채점 결과. 종료 전이면 None. 요청할 때마다 다시 계산한다."""
        with self._lock:
            if self.lifecycle != Lifecycle.ENDED:
                return None
            return calculate_score(self.bank, self.answer_sheet)

    # ── 단계 전환 ─────────────────────────────────────────────────────────────

    def start(self, total_seconds: int) -> bool:
        """
        시험 시작. 답안지 초기화, 1번 문제로 이동, 타이머 시작.
        이미 진행 중이면 무시하고 False 반환.

        Raises:
            InvalidDurationError: total_seconds가 0 이하 (상태 변경 없음).
        """
        if isinstance(total_seconds, bool) or not isinstance(total_seconds, int):
            raise InvalidDurationError(f"시험 시간은 정수(초)여야 합니다 (입력값: {total_seconds!r}).")
        if total_seconds <= 0:
            raise InvalidDurationError("시험 시간은 0초보다 커야 합니다.")

        with self._lock:
            if self.lifecycle == Lifecycle.RUNNING:
                logger.debug("start 무시: 이미 시험 진행 중")
                return False

            self.answer_sheet.reset()
            self.current_index = 0
            self.last_submit_manual = None
            self.lifecycle = Lifecycle.RUNNING
            logger.info(f"시험 시작: {len(self.bank)}문제, 제한 시간 {total_seconds}초")

            self.timer.start(total_seconds)
            self._notify_state_changed()
            return True

    def submit(self, manual: bool = True) -> ScoreReport:
        """
        시험 제출 → ENDED. 타이머 정지, 답안지 잠금, 채점.
        시작 전 제출도 허용 (전부 미응답으로 채점). 이미 종료됐으면 기존 결과 반환.
        제출 확인 대화상자는 렌더러 책임.
        """
        with self._lock:
            if self.lifecycle == Lifecycle.ENDED:
                logger.debug("submit 무시: 이미 제출됨")
                return self.score_report()

            self.timer.stop()
            self.answer_sheet.lock()
            self.lifecycle = Lifecycle.ENDED
            self.last_submit_manual = manual

            report = self.score_report()
            kind = "수동 제출" if manual else "시간 종료 자동 제출"
            logger.info(f"{kind}: {report.correct_count}/{report.total} ({report.percent}%)")

            self._notify_state_changed()
            return report

    def reset(self) -> None:
        """어느 단계에서든 시작 전 상태로 되돌린다. 타이머 정지, 답안지 초기화."""
        self._reinitialize("reset")

    def restart(self) -> None:
        """reset()과 같은 전환. 렌더러가 다른 후속 화면을 띄울 수 있도록 이름만 분리."""
        self._reinitialize("restart")

    def close(self) -> None:
        """세션 폐기 시 호출. 타이머를 멈추고 구독을 해제한다."""
        with self._lock:
            self.timer.stop()
            self._listeners.clear()

    # ── 진행 중 조작 ──────────────────────────────────────────────────────────

    def navigate(self, index: int) -> bool:
        """
        문제 이동. 답안지는 건드리지 않는다.

        Returns:
            True — 이동함 / False — 진행 중이 아니라 무시됨

        Raises:
            QuestionIndexError: index가 [0, 문제 수) 범위 밖.
        """
        with self._lock:
            if self.lifecycle != Lifecycle.RUNNING:
                logger.debug(f"navigate({index}) 무시: {self.lifecycle.value}")
                return False
            if not 0 <= index < len(self.bank):
                raise QuestionIndexError(
                    f"문제 인덱스 {index}가 범위(0~{len(self.bank) - 1})를 벗어났습니다."
                )
            self.current_index = index
            self._notify_state_changed()
            return True

    def next_question(self) -> bool:
        with self._lock:
            if self.current_index >= len(self.bank) - 1:
                return False
            return self.navigate(self.current_index + 1)

    def previous_question(self) -> bool:
        with self._lock:
            if self.current_index <= 0:
                return False
            return self.navigate(self.current_index - 1)

    def select_answer(self, choice_index: int) -> bool:
        """
        현재 문제에 답안 기록 (기존 선택 덮어쓰기).

        Raises:
            AnswerIndexError: 보기 인덱스가 범위 밖.
        """
        with self._lock:
            if self.lifecycle != Lifecycle.RUNNING:
                logger.debug(f"select_answer({choice_index}) 무시: {self.lifecycle.value}")
                return False
            recorded = self.answer_sheet.record_answer(self.current_index, choice_index)
            if recorded:
                self._notify_state_changed()
            return recorded

    # ── 내부 ─────────────────────────────────────────────────────────────────

    def _reinitialize(self, action: str) -> None:
        with self._lock:
            self.timer.stop(clear=True)
            self.answer_sheet.reset()
            self.current_index = 0
            self.last_submit_manual = None
            self.lifecycle = Lifecycle.NOT_STARTED
            logger.info(f"시험 {action}: 시작 전 상태로 초기화")
            self._notify_state_changed()

    def _handle_tick(self, remaining_seconds: int, is_low_time: bool) -> None:
        for listener in list(self._listeners):
            self._safe_call(listener.on_tick, remaining_seconds, is_low_time)

    def _handle_expired(self) -> None:
        generation = self.timer.generation
        for listener in list(self._listeners):
            self._safe_call(listener.on_expired)
        # 만료된 회차가 아직 진행 중일 때만 자동 제출
        if self.lifecycle != Lifecycle.RUNNING or self.timer.generation != generation:
            logger.info("자동 제출 생략: 만료 처리 중 세션이 초기화됨")
            return
        self.submit(manual=False)

    def _notify_state_changed(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            self._safe_call(listener.on_state_changed, snapshot)

    @staticmethod
    def _safe_call(fn, *args) -> None:
        try:
            fn(*args)
        except Exception:
            logger.exception(f"렌더러 콜백 오류: {getattr(fn, '__qualname__', fn)}")
