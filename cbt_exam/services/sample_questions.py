"""
services/sample_questions.py

questions.json이 없거나 깨졌을 때 쓰는 내장 샘플 문제 (원본 JSON 키 형식).
"""

SAMPLE_QUESTIONS = [
    {
        "question": "HTTP 상태 코드 404의 의미는?",
        "choices": ["요청 성공", "리소스를 찾을 수 없음", "서버 내부 오류", "권한 없음"],
        "answerIndex": 1,
        "explanation": "404 Not Found — 요청한 리소스가 서버에 존재하지 않는다.",
    },
    {
        "question": "다음 중 관계형 데이터베이스가 아닌 것은?",
        "choices": ["PostgreSQL", "MySQL", "MongoDB", "SQLite"],
        "answerIndex": 2,
        "explanation": "MongoDB는 문서 지향(NoSQL) 데이터베이스이다.",
    },
    {
        "question": "2진수 1011을 10진수로 바꾸면?",
        "choices": ["9", "10", "11", "13"],
        "answerIndex": 2,
        "explanation": "8 + 0 + 2 + 1 = 11",
    },
    {
        "question": "스택(Stack)의 데이터 처리 방식은?",
        "choices": ["FIFO", "LIFO", "우선순위 순", "무작위"],
        "answerIndex": 1,
    },
    {
        "question": "TCP와 비교한 UDP의 특징으로 옳은 것은?",
        "choices": ["연결 지향", "전송 순서 보장", "비연결형, 낮은 오버헤드", "흐름 제어 제공"],
        "answerIndex": 2,
        "explanation": "UDP는 연결 설정 없이 데이터그램을 보내며 신뢰성 보장 기능이 없다.",
    },
]
