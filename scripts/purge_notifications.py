"""Delete notifications older than the configured retention window."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from app.application.use_cases.notifications import purge_expired_notifications
from app.infrastructure.database import SessionLocal, initialize_database


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Purge notifications older than the retention window.",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Retention in days (default: NOTIFICATION_RETENTION_DAYS, 0 disables purging)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only report how many notifications would be deleted.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.days is not None and args.days < 0:
        raise SystemExit("--days must be zero or positive")

    initialize_database()

    session = SessionLocal()
    try:
        count = purge_expired_notifications(
            session, retention_days=args.days, dry_run=args.dry_run
        )
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not purge notifications: {exc}") from exc
    finally:
        session.close()

    action = "would be deleted" if args.dry_run else "deleted"
    print(f"{count} notifications {action}.")
    return count


if __name__ == "__main__":
    main()
