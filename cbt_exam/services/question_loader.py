"""
services/question_loader.py

문제 은행 로더.
Public API:
  - fetch_questions(path) -> QuestionBank : questions.json 로드, 실패 시 내장 샘플로 폴백

설계 원칙:
- 1차 저장소(JSON 파일)가 없거나, 읽기 실패, JSON 파싱 실패, 형식 검증 실패 → 내장 샘플 사용
- 내장 샘플까지 잘못된 경우에만 QuestionLoadError 전파
- 컨트롤러는 최종 QuestionBank만 본다 (폴백 과정은 모름)
"""

import json
import logging
import os
from typing import Any, Optional

from config import QUESTIONS_FILE
from cbt_exam.models.errors import QuestionLoadError
from cbt_exam.models.question_model import QuestionBank, load_question_bank
from cbt_exam.services.sample_questions import SAMPLE_QUESTIONS

logger = logging.getLogger(__name__)

SOURCE_FILE = "file"
SOURCE_EMBEDDED = "embedded"


def fetch_questions(path: Optional[str] = None, fallback: Any = None) -> QuestionBank:
    """문제 은행만 필요할 때 쓰는 단축 함수."""
    bank, _ = fetch_questions_with_source(path, fallback)
    return bank


def fetch_questions_with_source(
    path: Optional[str] = None,
    fallback: Any = None,
) -> tuple[QuestionBank, str]:
    """
    문제 은행과 출처("file" | "embedded")를 함께 반환한다.

    Args:
        path:     1차 저장소 JSON 경로 (기본 config.QUESTIONS_FILE).
        fallback: 내장 문제 원시 데이터 (기본 SAMPLE_QUESTIONS).

    Raises:
        QuestionLoadError: 폴백 데이터까지 검증에 실패한 경우.
    """
    path = path or QUESTIONS_FILE
    try:
        bank = load_question_bank(_read_json(path))
        logger.info(f"외부 문제 파일 로드 완료: {path} ({len(bank)}문제)")
        return bank, SOURCE_FILE
    except FileNotFoundError:
        logger.info(f"문제 파일 없음 ({path}) → 내장 샘플 문제 사용")
    except (OSError, UnicodeDecodeError, json.JSONDecodeError, QuestionLoadError) as e:
        logger.warning(f"문제 파일 로드 실패 ({path}): {e} → 내장 샘플 문제 사용")

    bank = load_question_bank(SAMPLE_QUESTIONS if fallback is None else fallback)
    logger.info(f"내장 샘플 문제 로드 완료 ({len(bank)}문제)")
    return bank, SOURCE_EMBEDDED


def _read_json(path: str) -> Any:
    if not os.path.isfile(path):
        raise FileNotFoundError(path)
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
