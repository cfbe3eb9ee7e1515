"""
services/exam_service.py

시험 채점 및 정답표 생성 비즈니스 로직.
순수 Python 함수로 구성 — UI 코드, 전역 상태 변경 없음.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import List

from cbt_exam.models.answer_sheet import AnswerSheet
from cbt_exam.models.question_model import QuestionBank
from cbt_exam.models.score_report import AnswerKeyEntry, ScoreReport

NO_ANSWER = "미응답"


def format_choice(choice_index: int, text: str) -> str:
    """보기 표시 문자열. 0 → "A. text", 1 → "B. text" ..."""
    return f"{chr(65 + choice_index)}. {text}"


def calculate_percent(correct_count: int, total: int) -> int:
    """
    정답률을 정수 %로 반환한다. x.5는 올림 (ROUND_HALF_UP).
    """
    if total <= 0:
        return 0
    ratio = Decimal(correct_count * 100) / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_answer_key(
    bank: QuestionBank,
    answer_sheet: AnswerSheet,
) -> List[AnswerKeyEntry]:
    """
    문제별 정답표를 만든다 (결과 화면용).

    미응답 문제는 user_answer에 NO_ANSWER 표시를 넣는다.
    해설이 없는 문제는 explanation=None.
    """
    entries: List[AnswerKeyEntry] = []

    for i, q in enumerate(bank.questions):
        user_idx = answer_sheet.get(i)
        user_answer = NO_ANSWER if user_idx is None else format_choice(user_idx, q.choices[user_idx])
        entries.append(
            AnswerKeyEntry(
                index=i,
                question_text=q.text,
                choices=q.choices,
                user_choice_index=user_idx,
                user_answer=user_answer,
                correct_choice_index=q.correct_choice_index,
                correct_answer=format_choice(q.correct_choice_index, q.correct_choice),
                is_correct=user_idx == q.correct_choice_index,
                explanation=q.explanation or None,
            )
        )

    return entries


def calculate_score(
    bank: QuestionBank,
    answer_sheet: AnswerSheet,
) -> ScoreReport:
    """
    사용자 답안을 채점한다.

    정답 판정 기준: answer_sheet.get(i) == bank[i].correct_choice_index
    응답하지 않은 문제(None)는 오답으로 처리.

    Args:
        bank:         채점 대상 문제 은행.
        answer_sheet: 사용자 답안지. 크기는 문제 은행과 같아야 한다.

    Returns:
        ScoreReport (정답 수, 전체 수, 정수 정답률, 정답표).
    """
    if len(answer_sheet) != len(bank):
        raise ValueError(
            f"답안지 크기({len(answer_sheet)})와 문제 수({len(bank)})가 다릅니다."
        )

    answer_key = build_answer_key(bank, answer_sheet)
    correct_count = sum(1 for e in answer_key if e.is_correct)
    total = len(bank)

    return ScoreReport(
        correct_count=correct_count,
        total=total,
        percent=calculate_percent(correct_count, total),
        answer_key=answer_key,
    )
