"""Shared fixtures: deterministic scheduler, question banks, recording listener."""

import pytest

from cbt_exam.models.question_model import load_question_bank
from cbt_exam.services.exam_controller import ExamController, SessionListener


class FakeHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Collects scheduled callbacks; advance() fires them one tick at a time."""

    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback):
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle

    @property
    def pending(self):
        return [h for h in self.handles if not h.cancelled and not h.fired]

    def advance(self, ticks=1):
        for _ in range(ticks):
            pending = self.pending
            if not pending:
                return
            handle = pending[0]
            handle.fired = True
            handle.callback()


class RecordingListener(SessionListener):
    def __init__(self):
        self.events = []

    def on_state_changed(self, snapshot):
        self.events.append(("state", snapshot))

    def on_tick(self, remaining_seconds, is_low_time):
        self.events.append(("tick", remaining_seconds, is_low_time))

    def on_expired(self):
        self.events.append(("expired",))

    def of(self, kind):
        return [e for e in self.events if e[0] == kind]


def make_raw_questions(n=5):
    return [
        {
            "question": f"Question {i + 1}?",
            "choices": ["A", "B", "C", "D"],
            "answerIndex": i % 4,
            "explanation": f"Because {i % 4}." if i % 2 == 0 else None,
        }
        for i in range(n)
    ]


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def bank():
    return load_question_bank(make_raw_questions(5))


@pytest.fixture
def two_question_bank():
    return load_question_bank(
        [
            {"question": "Q1", "choices": ["yes", "no"], "answerIndex": 0},
            {"question": "Q2", "choices": ["red", "blue", "green"], "answerIndex": 1, "explanation": "Sky."},
        ]
    )


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def controller(bank, scheduler, listener):
    ctrl = ExamController(bank, scheduler=scheduler)
    ctrl.subscribe(listener)
    yield ctrl
    ctrl.close()
