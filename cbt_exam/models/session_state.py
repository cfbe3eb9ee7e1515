"""
models/session_state.py

시험 진행 상태 스냅샷 모델.
Pydantic BaseModel 기반 — 렌더러에 넘겨지는 읽기 전용 값.
UI 코드 없음.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Lifecycle(str, Enum):
    """시험 세션의 큰 단계."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    ENDED = "ended"


class SessionSnapshot(BaseModel):
    """
    특정 시점의 시험 세션 전체 상태.

    Attributes:
        lifecycle:         시험 단계 (시작 전 / 진행 중 / 종료).
        current_index:     현재 보고 있는 문제 인덱스 (0-based).
        total_questions:   전체 문제 수.
        answers:           문제별 선택한 보기 인덱스. None이면 미응답.
        answered_count:    응답한 문제 수 (진행률 표시용).
        unanswered_count:  미응답 문제 수 (제출 확인 안내용).
        total_seconds:     설정된 시험 시간 (초). 시작 전이면 0.
        remaining_seconds: 남은 시간 (초).
        is_low_time:       남은 시간이 설정 시간의 30% 이하인지 여부.
    """

    model_config = ConfigDict(frozen=True)

    lifecycle: Lifecycle = Field(
        default=Lifecycle.NOT_STARTED,
        description="시험 단계"
    )
    current_index: int = Field(
        default=0,
        ge=0,
        description="현재 풀고 있는 문제 인덱스 (0-based)"
    )
    total_questions: int = Field(
        ...,
        ge=1,
        description="전체 문제 수"
    )
    answers: List[Optional[int]] = Field(
        default_factory=list,
        description="답안 리스트. index: 문제 인덱스, value: 보기 인덱스 또는 None"
    )
    answered_count: int = Field(default=0, ge=0)
    unanswered_count: int = Field(default=0, ge=0)
    total_seconds: int = Field(default=0, ge=0)
    remaining_seconds: int = Field(default=0, ge=0)
    is_low_time: bool = Field(default=False)
