"""
api/routes.py — FastAPI 엔드포인트

브라우저(렌더러)가 호출하는 시험 조작 API.
세션별 ExamController에 그대로 위임하고, 코어 예외를 HTTP 오류로 변환한다.
"""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

import api.session as session
from config import DEFAULT_DURATION_SECONDS
from cbt_exam.models.errors import AnswerIndexError, InvalidDurationError, QuestionIndexError
from cbt_exam.models.question_model import Question
from cbt_exam.models.session_state import Lifecycle
from cbt_exam.services.exam_controller import ExamController, combine_duration

router = APIRouter()

# ── Pydantic request bodies ──────────────────────────────────────────────────

class StartExamBody(BaseModel):
    minutes: int = 0
    seconds: int = 0

class SaveAnswerBody(BaseModel):
    choice_index: int

class NavigateBody(BaseModel):
    index: int = 0


# ── 헬퍼 ─────────────────────────────────────────────────────────────────────

def _state(request: Request) -> dict:
    state = session.get_session(request.state.session_id)
    if state is None:
        raise HTTPException(status_code=404, detail="세션이 없습니다.")
    return state


def _controller(request: Request) -> ExamController:
    state = _state(request)
    if state["controller"] is None:
        raise HTTPException(
            status_code=503,
            detail=f"문제를 불러오지 못했습니다: {state['load_error']}",
        )
    return state["controller"]


def _question_to_dict(q: Question, reveal: bool) -> dict:
    d = {
        "text": q.text,
        "choices": list(q.choices),
    }
    # 정답/해설은 제출 후에만 공개
    if reveal:
        d.update({"correct_choice_index": q.correct_choice_index, "explanation": q.explanation})
    return d


def _question_payload(controller: ExamController, index: int, q: Question) -> dict:
    d = _question_to_dict(q, reveal=controller.lifecycle == Lifecycle.ENDED)
    d.update({
        "saved_answer": controller.answer_sheet.get(index),
        "index": index,
        "total": len(controller.bank),
        "is_current": index == controller.current_index,
    })
    return d


def _state_response(controller: ExamController, request: Request) -> dict:
    d = controller.snapshot().model_dump(mode="json")
    d["ok"] = True
    listener = _state(request).get("listener")
    if listener is not None:
        d["timer"] = listener.to_dict()
    return d


# ── 엔드포인트 ───────────────────────────────────────────────────────────────

@router.get("/api/session-status")
async def session_status(request: Request):
    state = _state(request)
    controller: ExamController | None = state["controller"]
    return {
        "question_count": len(controller.bank) if controller else 0,
        "lifecycle": controller.lifecycle.value if controller else None,
        "question_source": state["question_source"],
        "load_error": state["load_error"],
        "default_duration_seconds": DEFAULT_DURATION_SECONDS,
    }


@router.post("/api/start-exam")
async def start_exam(body: StartExamBody, request: Request):
    controller = _controller(request)
    try:
        total_seconds = combine_duration(body.minutes, body.seconds)
        started = controller.start(total_seconds)
    except InvalidDurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not started:
        raise HTTPException(status_code=409, detail="이미 시험이 진행 중입니다.")
    return {"total": len(controller.bank), "total_seconds": total_seconds, "ok": True}


@router.get("/api/question/{index}")
async def get_question(index: int, request: Request):
    controller = _controller(request)
    if not 0 <= index < len(controller.bank):
        raise HTTPException(status_code=404, detail="문제를 찾을 수 없습니다.")

    return _question_payload(controller, index, controller.bank[index])


@router.get("/api/current-question")
async def get_current_question(request: Request):
    controller = _controller(request)
    return _question_payload(controller, controller.current_index, controller.current_question)


@router.get("/api/exam-state")
async def get_exam_state(request: Request):
    controller = _controller(request)
    d = _state_response(controller, request)
    d["last_submit_manual"] = controller.last_submit_manual
    return d


@router.post("/api/navigate")
async def navigate(body: NavigateBody, request: Request):
    controller = _controller(request)
    try:
        moved = controller.navigate(body.index)
    except QuestionIndexError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {"index": controller.current_index, "moved": moved, "ok": True}


@router.post("/api/next")
async def next_question(request: Request):
    controller = _controller(request)
    moved = controller.next_question()
    return {"index": controller.current_index, "moved": moved, "ok": True}


@router.post("/api/previous")
async def previous_question(request: Request):
    controller = _controller(request)
    moved = controller.previous_question()
    return {"index": controller.current_index, "moved": moved, "ok": True}


@router.post("/api/save-answer")
async def save_answer(body: SaveAnswerBody, request: Request):
    controller = _controller(request)
    try:
        saved = controller.select_answer(body.choice_index)
    except AnswerIndexError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return {
        "ok": True,
        "saved": saved,
        "answered_count": controller.answer_sheet.answered_count(),
    }


@router.post("/api/submit-exam")
async def submit_exam(request: Request):
    # 자동 제출(manual=False)은 타이머 만료 경로에서만 발생
    controller = _controller(request)
    report = controller.submit(manual=True)
    return {
        "correct_count": report.correct_count,
        "total": report.total,
        "percent": report.percent,
        "ok": True,
    }


@router.get("/api/results")
async def get_results(request: Request):
    controller = _controller(request)
    report = controller.score_report()
    if report is None:
        raise HTTPException(status_code=400, detail="시험이 아직 제출되지 않았습니다.")

    d = report.model_dump(mode="json")
    d["unanswered_count"] = report.unanswered_count
    d["auto_submitted"] = controller.last_submit_manual is False
    return d


@router.post("/api/reset")
async def reset_exam(request: Request):
    controller = _controller(request)
    controller.reset()
    return _state_response(controller, request)


@router.post("/api/restart")
async def restart_exam(request: Request):
    controller = _controller(request)
    controller.restart()
    return _state_response(controller, request)


@router.post("/api/reload-questions")
async def reload_questions(request: Request):
    session.reset(request.state.session_id)
    state = _state(request)
    if state["controller"] is None:
        raise HTTPException(status_code=503, detail=f"문제를 불러오지 못했습니다: {state['load_error']}")
    return {"total": len(state["controller"].bank), "question_source": state["question_source"], "ok": True}
