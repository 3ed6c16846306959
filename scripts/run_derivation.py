"""Run one notification derivation pass for a user from the command line."""

from __future__ import annotations

import argparse
import asyncio
import logging

from nutrition_alerts.application.notifications import (
    NotificationsState,
    build_notification_engine,
    type_label,
)
from nutrition_alerts.infrastructure.database import initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for the derivation run."""

    parser = argparse.ArgumentParser(
        description="Derive meal and goal reminders for a user and print the notification list.",
    )
    parser.add_argument("--user-id", required=True, help="Supabase user id (UUID)")
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Also run the on-demand goal check used by the notification panel.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args()


async def run(user_id: str, *, refresh: bool) -> NotificationsState:
    engine = build_notification_engine(user_id, publish=False)
    try:
        await engine.sign_in(user_id)
        if refresh:
            await engine.fetch_notifications()
        return engine.state()
    finally:
        await engine.close()


def main() -> None:
    """Derive notifications using the provided command line arguments."""

    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    initialize_database()
    state = asyncio.run(run(args.user_id, refresh=args.refresh))

    print(f"Unread: {state.unread_count}")
    for notification in state.notifications:
        marker = " " if notification.is_read else "*"
        due = f" (due {notification.time})" if notification.time else ""
        print(
            f"{marker} [{type_label(notification.type)}] {notification.message}{due}\n"
            f"    id={notification.id} created={notification.created_at.isoformat()}"
        )


if __name__ == "__main__":
    main()
