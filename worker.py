from __future__ import annotations

import argparse
import logging
import os
import signal
import sys
from typing import List

from redis import Redis
from rq import Queue, Worker
from rq.logutils import setup_loghandlers

from serenity.core.config import settings

# ────────────────────────────────────────────────────────────────────────────
# Graceful shutdown (SIGINT/SIGTERM): 현재 생성 잡은 끝까지 진행
# ────────────────────────────────────────────────────────────────────────────
_SHOULD_STOP = False


def _signal_handler(signum, frame):
    global _SHOULD_STOP
    logging.warning("Received signal %s. Will stop after current generation job.", signum)
    _SHOULD_STOP = True


def _install_signal_handlers():
    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Serenity generation worker (RQ)")
    p.add_argument(
        "--queues",
        default=settings.RQ_QUEUE,
        help="Comma-separated queue names (default: settings.RQ_QUEUE)",
    )
    p.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log verbosity",
    )
    p.add_argument(
        "--burst",
        action="store_true",
        help="Burst mode: exit when queues are empty",
    )
    return p.parse_args(argv)


def main(argv: List[str] | None = None):
    args = parse_args(argv)

    setup_loghandlers(level=args.log_level)
    logging.getLogger().setLevel(args.log_level)
    logging.getLogger("serenity").setLevel(args.log_level)

    if settings.CHANGE_FEED != "redis":
        # 워커의 상태 변경이 API 구독자에게 전달되지 않음
        logging.warning("CHANGE_FEED=%s: live updates from this worker will not reach clients", settings.CHANGE_FEED)
    if not settings.SUNO_API_KEY:
        logging.info("SUNO_API_KEY not set, using demo provider")

    redis_url = settings.REDIS_URL
    if not redis_url:
        logging.error("REDIS_URL is empty. Check environment.")
        sys.exit(1)
    redis_conn = Redis.from_url(redis_url)

    qnames: List[str] = [q.strip() for q in str(args.queues).split(",") if q.strip()]
    if not qnames:
        logging.error("No queues specified")
        sys.exit(1)
    queues = [Queue(name, connection=redis_conn) for name in qnames]

    worker_name = os.environ.get("WORKER_NAME")
    _install_signal_handlers()

    worker = Worker(queues, connection=redis_conn, name=worker_name)
    logging.info("Worker started. queues=%s, burst=%s, name=%s", qnames, args.burst, worker_name)
    worker.work(with_scheduler=False, burst=args.burst)

    logging.info("Worker stopped by signal." if _SHOULD_STOP else "Worker exited.")


if __name__ == "__main__":
    main()
