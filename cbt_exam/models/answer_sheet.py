"""
models/answer_sheet.py

문제별 선택 답안을 기록하는 OMR 답안지 모델.
Pydantic BaseModel 기반 — UI 코드 없음.
"""

from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from cbt_exam.models.errors import AnswerIndexError
from cbt_exam.models.question_model import QuestionBank


class AnswerSheet(BaseModel):
    """
    사용자 답안지.

    Attributes:
        choice_counts: 문제별 보기 개수. 답안 범위 검증용, 생성 후 고정.
        answers:       문제 인덱스별 선택한 보기 인덱스. None이면 미응답.
        is_locked:     제출 후 잠금 여부. 잠긴 답안지는 변경되지 않는다.
    """

    choice_counts: Tuple[int, ...] = Field(
        ...,
        min_length=1,
        description="문제별 보기 개수"
    )
    answers: List[Optional[int]] = Field(
        default_factory=list,
        description="답안 리스트. index: 문제 인덱스, value: 보기 인덱스 또는 None"
    )
    is_locked: bool = Field(
        default=False,
        description="제출 후 잠금 여부"
    )

    def model_post_init(self, __context) -> None:
        if len(self.answers) != len(self.choice_counts):
            self.answers = [None] * len(self.choice_counts)

    @classmethod
    def for_bank(cls, bank: QuestionBank) -> "AnswerSheet":
        """문제 은행 크기에 맞춘 빈 답안지를 만든다."""
        return cls(choice_counts=tuple(len(q.choices) for q in bank.questions))

    def __len__(self) -> int:
        return len(self.answers)

    def record_answer(self, question_index: int, choice_index: int) -> bool:
        """
        답안을 기록한다 (단일 선택, 기존 값 덮어쓰기).

        Returns:
            True  — 기록됨 (같은 값 재선택 포함)
            False — 잠긴 답안지라 무시됨

        Raises:
            AnswerIndexError: 문제 또는 보기 인덱스가 범위를 벗어난 경우.
        """
        if not 0 <= question_index < len(self.choice_counts):
            raise AnswerIndexError(
                f"문제 인덱스 {question_index}가 범위(0~{len(self.choice_counts) - 1})를 벗어났습니다."
            )
        n_choices = self.choice_counts[question_index]
        if not 0 <= choice_index < n_choices:
            raise AnswerIndexError(
                f"보기 인덱스 {choice_index}가 문제 {question_index}의 범위(0~{n_choices - 1})를 벗어났습니다."
            )
        if self.is_locked:
            return False
        self.answers[question_index] = choice_index
        return True

    def get(self, question_index: int) -> Optional[int]:
        return self.answers[question_index]

    def answered_count(self) -> int:
        return sum(1 for a in self.answers if a is not None)

    def lock(self) -> None:
        self.is_locked = True

    def reset(self) -> None:
        """모든 문제를 미응답으로 되돌리고 잠금을 해제한다."""
        self.answers = [None] * len(self.choice_counts)
        self.is_locked = False
