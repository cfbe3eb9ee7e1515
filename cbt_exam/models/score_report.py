from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class AnswerKeyEntry(BaseModel):
    """정답표 한 줄. 문제 은행 + 답안지에서 파생된 읽기 전용 값."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0, description="문제 인덱스 (0-based)")
    question_text: str
    choices: Tuple[str, ...]
    user_choice_index: Optional[int] = Field(None, description="선택한 보기 인덱스 (미응답이면 None)")
    user_answer: str = Field(..., description="선택한 보기 표시 문자열 또는 미응답 표시")
    correct_choice_index: int
    correct_answer: str
    is_correct: bool
    explanation: Optional[str] = None


class ScoreReport(BaseModel):
    """
    채점 결과.
    저장하지 않고 요청할 때마다 문제 은행 + 답안지로부터 다시 계산한다.
    """
    model_config = ConfigDict(frozen=True)

    correct_count: int = Field(..., ge=0)
    total: int = Field(..., ge=1)
    percent: int = Field(..., ge=0, le=100, description="정답률 (정수 %, 0.5는 올림)")
    answer_key: List[AnswerKeyEntry] = Field(default_factory=list)

    @property
    def unanswered_count(self) -> int:
        return sum(1 for e in self.answer_key if e.user_choice_index is None)
