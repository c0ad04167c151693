"""Utility CLI for inspecting stored bookings and guest profiles."""
from __future__ import annotations

import argparse
import asyncio
import json
from typing import Sequence

from hotel_booking.booking import UserProfile
from hotel_booking.booking.models import BOOKING_STATUSES
from hotel_booking.config.settings import Settings
from hotel_booking.storage import BookingSummaryRow, SqliteStore


def _format_row(row: BookingSummaryRow) -> str:
    total = f"{row.total_amount:.2f} {row.currency}"
    return (
        f"{row.booking_reference:18} | {row.status:10} | {row.hotel_name[:35]:35} | "
        f"{row.check_in} -> {row.check_out} | {total:>14} | {row.id}"
    )


def _print_table(rows: Sequence[BookingSummaryRow]) -> None:
    for row in rows:
        print(_format_row(row))


async def _list(store: SqliteStore, args: argparse.Namespace) -> int:
    rows = await store.list_user_bookings(args.user)
    if not rows:
        print(f"No bookings for user {args.user}")
        return 0
    _print_table(rows)
    return 0


async def _show(store: SqliteStore, args: argparse.Namespace) -> int:
    record = await store.fetch_booking(args.booking)
    if record is None:
        record = await store.fetch_booking_by_reference(args.booking)
    if record is None:
        print(f"Booking {args.booking} not found")
        return 1
    print(json.dumps(record.to_dict(), indent=2, default=str))
    return 0


async def _status(store: SqliteStore, args: argparse.Namespace) -> int:
    booking_id = args.booking
    record = await store.fetch_booking_by_reference(booking_id)
    if record is not None and record.id:
        booking_id = record.id
    if not await store.update_booking_status(booking_id, args.status):
        print(f"Booking {args.booking} not found")
        return 1
    print(f"Booking {args.booking} marked {args.status}")
    return 0


async def _profile_set(store: SqliteStore, args: argparse.Namespace) -> int:
    existing = await store.fetch_profile(args.user) or UserProfile()
    merged = existing.to_dict()
    for key in ("date_of_birth", "nationality", "id_number", "id_expiry", "phone_number"):
        value = getattr(args, key)
        if value is not None:
            merged[key] = value
    await store.save_profile(args.user, UserProfile.from_dict(merged))
    print(json.dumps(merged, indent=2))
    return 0


async def _profile_show(store: SqliteStore, args: argparse.Namespace) -> int:
    profile = await store.fetch_profile(args.user)
    if profile is None:
        print(f"No profile stored for user {args.user}")
        return 1
    print(json.dumps(profile.to_dict(), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    list_cmd = sub.add_parser("list", help="List bookings for a user")
    list_cmd.add_argument("--user", required=True, help="User id")
    list_cmd.set_defaults(handler=_list)

    show_cmd = sub.add_parser("show", help="Show one booking by id or reference")
    show_cmd.add_argument("booking", help="Booking id or booking reference")
    show_cmd.set_defaults(handler=_show)

    status_cmd = sub.add_parser("status", help="Change the status of a booking")
    status_cmd.add_argument("booking", help="Booking id or booking reference")
    status_cmd.add_argument("status", choices=sorted(BOOKING_STATUSES))
    status_cmd.set_defaults(handler=_status)

    profile_set = sub.add_parser("profile-set", help="Create or update a guest profile")
    profile_set.add_argument("--user", required=True, help="User id")
    profile_set.add_argument("--date-of-birth", dest="date_of_birth")
    profile_set.add_argument("--nationality")
    profile_set.add_argument("--id-number", dest="id_number")
    profile_set.add_argument("--id-expiry", dest="id_expiry")
    profile_set.add_argument("--phone", dest="phone_number")
    profile_set.set_defaults(handler=_profile_set)

    profile_show = sub.add_parser("profile-show", help="Print a stored guest profile")
    profile_show.add_argument("--user", required=True, help="User id")
    profile_show.set_defaults(handler=_profile_show)
    return parser


async def run(settings: Settings, args: argparse.Namespace) -> int:
    async with SqliteStore.from_settings(settings) as store:
        return await args.handler(store, args)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    settings = Settings()
    settings.ensure_directories()
    raise SystemExit(asyncio.run(run(settings, args)))


if __name__ == "__main__":
    main()
