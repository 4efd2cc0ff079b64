"""Send pending notifications whose scheduled time has arrived."""

from __future__ import annotations

import argparse
import logging
import sys

from chon.db import database
from chon.db.repositories import notifications as notification_repo
from chon.utils.feature_flags import scheduled_notifications_enabled
from chon.workers import jobs
from chon.workers.notification_jobs import send_scheduled_notification


logger = logging.getLogger("chon.scripts.process_scheduled_notifications")


# Access SessionLocal dynamically so test fixtures that rebind the
# sessionmaker are respected.
SessionLocal = lambda: database.SessionLocal()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dispatch scheduled notifications that are due")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List due notifications without sending them",
    )
    return parser.parse_args(argv)


def process(dry_run: bool) -> int:
    """Send every due notification in this process and return how many failed.

    Sends run inline with the job retry policy; a daemon thread would be
    killed when the command exits.
    """
    session = SessionLocal()
    try:
        due_ids = [notification.id for notification in notification_repo.list_ready_to_send(session)]
    finally:
        session.close()

    logger.info("scheduled_notifications_due: count=%d dry_run=%s", len(due_ids), dry_run)
    if dry_run:
        for notification_id in due_ids:
            logger.info("scheduled_notification_pending: notification_id=%s", notification_id)
        return 0

    failed = []
    for notification_id in due_ids:
        try:
            sent = jobs.run_with_retries(send_scheduled_notification, notification_id)
        except Exception:
            # final attempt already logged by run_with_retries
            failed.append(notification_id)
            continue
        if not sent:
            failed.append(notification_id)

    logger.info("scheduled_notifications_done: sent=%d failed=%d", len(due_ids) - len(failed), len(failed))
    return len(failed)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO)

    if not scheduled_notifications_enabled():
        logger.info("scheduled_notifications_disabled")
        return 0

    try:
        failed = process(dry_run=args.dry_run)
    except Exception:
        logger.exception("Scheduled notification run failed")
        return 1
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
