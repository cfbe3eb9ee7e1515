"""
models/errors.py

시험 세션 코어의 예외 정의.
값 오류 계열(ValueError)은 사용자 입력/데이터 문제, IndexError 계열은 렌더러 연동 버그.
"""


class QuestionLoadError(ValueError):
    """문제 은행이 비어 있거나 형식이 잘못된 경우. 세션 생성 불가."""


class InvalidDurationError(ValueError):
    """시험 시간이 0초 이하인 경우. 세션 상태는 변경되지 않는다."""


class QuestionIndexError(IndexError):
    """범위를 벗어난 문제 인덱스로 이동을 시도한 경우."""


class AnswerIndexError(IndexError):
    """범위를 벗어난 문제/보기 인덱스로 답안을 기록하려 한 경우."""
