import os
import sys

# 기본 디렉토리 설정
IF_FROZEN = getattr(sys, "frozen", False)
BASE_DIR = sys._MEIPASS if IF_FROZEN else os.path.dirname(os.path.abspath(__file__))

# 경로 설정
STATIC_DIR = os.path.join(BASE_DIR, "static")
LOG_FILE = os.path.join(BASE_DIR, "launch.log")
QUESTIONS_FILE = os.getenv("CBT_QUESTIONS_FILE", os.path.join(BASE_DIR, "questions.json"))

# 서버 설정
DEFAULT_HOST = os.getenv("HOST", "127.0.0.1")
DEFAULT_TIMEOUT = 15.0

# 세션 설정
SESSION_TTL = 3600              # 1시간
SESSION_CLEANUP_INTERVAL = 300  # 5분마다 만료 세션 정리

# 시험 설정
DEFAULT_DURATION_SECONDS = int(os.getenv("CBT_DEFAULT_MINUTES", "10")) * 60
TICK_INTERVAL_SECONDS = 1.0     # 타이머 틱 간격 (실시간 1초)
LOW_TIME_PERCENT = 30           # 남은 시간이 설정 시간의 30% 이하이면 경고
