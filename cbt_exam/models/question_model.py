from collections.abc import Sequence
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from cbt_exam.models.errors import QuestionLoadError


class Question(BaseModel):
    """
    객관식 CBT 문제 모델
    Pydantic v2 적용, 로드 후 변경 불가 (frozen)

    questions.json 원본 키(question, answerIndex)도 별칭으로 허용한다.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str = Field(
        ...,
        alias="question",
        min_length=1,
        description="발문/문제 내용"
    )
    choices: Tuple[str, ...] = Field(
        ...,
        description="보기 리스트 (객관식 선지, 순서 유지)"
    )
    correct_choice_index: int = Field(
        ...,
        alias="answerIndex",
        ge=0,
        strict=True,
        description="정답 보기 인덱스 (0-based)"
    )
    explanation: Optional[str] = Field(
        None,
        description="해설 (없으면 None)"
    )

    @field_validator('choices')
    @classmethod
    def validate_choices_length(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        """
        검증 로직 1: 보기는 최소 2개 이상이어야 한다.
        """
        if len(v) < 2:
            raise ValueError("보기(choices)는 최소 2개 이상의 항목이 필요합니다.")
        return v

    @model_validator(mode='after')
    def validate_answer_in_choices(self) -> 'Question':
        """
        검증 로직 2: 정답 인덱스는 반드시 보기 범위 안에 있어야 한다.
        """
        if self.correct_choice_index >= len(self.choices):
            raise ValueError(
                f"정답 인덱스({self.correct_choice_index})가 보기 범위(0~{len(self.choices) - 1})를 벗어났습니다."
            )
        return self

    @property
    def correct_choice(self) -> str:
        return self.choices[self.correct_choice_index]


class QuestionBank(BaseModel):
    """시험 1회분 문제 묶음. 최소 1문제, 로드 후 변경 불가."""
    model_config = ConfigDict(frozen=True)

    questions: Tuple[Question, ...] = Field(
        ...,
        min_length=1,
        description="출제 순서대로 정렬된 문제 리스트"
    )

    def __len__(self) -> int:
        return len(self.questions)

    def __getitem__(self, index: int) -> Question:
        return self.questions[index]


def load_question_bank(raw: Any) -> QuestionBank:
    """
    원시 데이터(JSON 파싱 결과) → QuestionBank.

    Raises:
        QuestionLoadError: 리스트가 아니거나, 비어 있거나, 형식이 잘못된 문제가 있는 경우.
                           부분 로드는 하지 않는다.
    """
    if isinstance(raw, QuestionBank):
        return raw
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Sequence):
        raise QuestionLoadError(f"문제 데이터는 리스트여야 합니다 (받은 타입: {type(raw).__name__}).")
    if not raw:
        raise QuestionLoadError("문제 데이터가 비어 있습니다.")

    questions = []
    for idx, item in enumerate(raw):
        try:
            questions.append(item if isinstance(item, Question) else Question.model_validate(item))
        except ValidationError as e:
            raise QuestionLoadError(f"item[{idx}]: Question 생성 실패 — {e}") from e

    return QuestionBank(questions=tuple(questions))
