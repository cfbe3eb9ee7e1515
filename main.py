"""
main.py — CBT 시험 러너 진입점

uvicorn 서버를 빈 포트에 띄우고 브라우저 창으로 시험 화면을 연다.
"""

import os
import socket
import sys
import threading
import time
import logging
import traceback
import webbrowser

# ── 패키지 경로 설정 (반드시 최상단) ──────────────────────────────────────────
_BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if _BASE_DIR not in sys.path:
    sys.path.insert(0, _BASE_DIR)

from config import BASE_DIR, LOG_FILE, DEFAULT_HOST, DEFAULT_TIMEOUT

# ── 로깅 설정 ────────────────────────────────────────────────────────────────
try:
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(LOG_FILE, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )
except PermissionError:
    # 로그 파일 점유 시 콘솔 출력만 사용
    logging.basicConfig(level=logging.INFO)

logger = logging.getLogger(__name__)

# ── 서버 및 네트워크 유틸 ───────────────────────────────────────────────────

def _find_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((DEFAULT_HOST, 0))
        return s.getsockname()[1]

def _wait_for_server(port: int, timeout: float = DEFAULT_TIMEOUT) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        try:
            with socket.create_connection((DEFAULT_HOST, port), timeout=0.5):
                return True
        except OSError:
            time.sleep(0.1)
    return False

def _check_questions() -> bool:
    """서버를 띄우기 전에 문제 은행을 한 번 검증한다 (세션마다 다시 로드됨)."""
    from cbt_exam.models.errors import QuestionLoadError
    from cbt_exam.services.question_loader import fetch_questions_with_source

    try:
        bank, source = fetch_questions_with_source()
    except QuestionLoadError as e:
        logger.error(f"문제 은행을 불러올 수 없습니다: {e}")
        return False
    logger.info(f"문제 은행 확인: {len(bank)}문제 (출처: {source})")
    return True

def _start_server(port: int) -> None:
    try:
        import uvicorn
        from api.app import create_app
        logger.info(f"Uvicorn 서버 시작 - Port: {port}")
        app = create_app()
        uvicorn.run(app, host=DEFAULT_HOST, port=port, log_level="error")
    except Exception:
        logger.error(f"서버 오류 발생:\n{traceback.format_exc()}")

# ── 메인 실행 ────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    logger.info("=== CBT Exam Runner Started ===")
    os.chdir(BASE_DIR)

    if not _check_questions():
        sys.exit(1)

    port = _find_free_port()
    server_thread = threading.Thread(target=_start_server, args=(port,), daemon=True)
    server_thread.start()

    if _wait_for_server(port):
        logger.info("서버 준비 완료. 브라우저를 엽니다.")
        webbrowser.open(f"http://{DEFAULT_HOST}:{port}")

        # 메인 스레드 유지
        try:
            while True:
                time.sleep(10)
        except KeyboardInterrupt:
            logger.info("사용자에 의해 종료되었습니다.")
    else:
        logger.error("서버 시작 제한 시간을 초과했습니다. 기존 프로세스를 종료한 뒤 다시 시도해 보세요.")
        sys.exit(1)
