"""Dynamic reply construction for read-backs, summaries and listings."""

from datetime import date, datetime
from typing import Optional

from rental_bot.prompts.markup import MISSING, bold, esc, field, fmt_date, fmt_time
from rental_bot.schemas.booking_schema import Booking, BookingDetails, BookingStats, ClientSummary
from rental_bot.schemas.session_schema import BookingDraft
from rental_bot.store.services import service_emoji

NOT_SPECIFIED = "Not specified"


def _draft_lines(draft: BookingDraft) -> list[str]:
    return [
        field("Service", draft.service_name),
        field("Date", fmt_date(draft.booking_date)),
        field("Client", draft.client_name),
        field("Phone", draft.client_phone),
        field("Address", draft.client_address or NOT_SPECIFIED),
    ]


def _details_lines(details: BookingDetails) -> list[str]:
    booking = details.booking
    lines = [
        field("Service", booking.service_name),
        field("Date", fmt_date(booking.booking_date)),
        field("Client", details.client_name),
        field("Phone", details.client_phone),
    ]
    if booking.address:
        lines.append(field("Address", booking.address))
    lines.append(field("ID", booking.id))
    return lines


def build_confirmation_prompt(draft: BookingDraft) -> str:
    """Read back the draft before the operator confirms it."""
    return (
        "📋 " + bold("Check the details:") + "\n\n"
        + "\n".join(_draft_lines(draft)) + "\n\n"
        + esc("Is everything correct?")
    )


def build_booking_created(draft: BookingDraft, booking: Booking) -> str:
    return (
        "✅ " + bold("Booking created!") + "\n\n"
        + "\n".join(_draft_lines(draft)) + "\n"
        + field("Booking ID", booking.id)
    )


def build_booking_failed(detail: str) -> str:
    return "❌ " + esc("Error while creating the booking:") + "\n" + esc(detail)


def build_booking_not_found(booking_id: int) -> str:
    return "❌ " + esc("Booking with ID ") + bold(booking_id) + esc(" not found")


def build_delete_prompt(details: BookingDetails) -> str:
    return (
        "⚠️ " + bold("Confirm deletion:") + "\n\n"
        + "\n".join(_details_lines(details)) + "\n\n"
        + esc("Delete this booking?")
    )


def build_booking_deleted(details: BookingDetails) -> str:
    return (
        "✅ " + bold("Booking deleted!") + "\n\n"
        + "\n".join(_details_lines(details)) + "\n\n"
        + esc("Reload the website page to see the updated data.")
    )


def build_all_bookings(rows: list[BookingDetails]) -> str:
    """Bookings grouped by service.

    Each service appears once, at the position of its first row; rows keep
    the order the store returned them in.
    """
    groups: dict[str, list[BookingDetails]] = {}
    for details in rows:
        groups.setdefault(details.booking.service_name, []).append(details)

    parts = ["📋 " + bold("All bookings by service:") + "\n"]
    for service_name, group in groups.items():
        parts.append(f"{service_emoji(service_name)} " + bold(f"{service_name}:"))
        for index, details in enumerate(group, start=1):
            booking = details.booking
            parts.append(
                esc(
                    f" {index}. 📅 {fmt_date(booking.booking_date)}"
                    f" | 👤 {details.client_name or MISSING}"
                    f" | 📞 {details.client_phone or MISSING}"
                    f" | 🆔 "
                )
                + bold(booking.id)
            )
            if booking.address:
                parts.append(esc(f"    📍 {booking.address}"))
        parts.append("")
    return "\n".join(parts).rstrip() + "\n"


def build_no_bookings_today(day: date) -> str:
    return "📅 " + bold(f"No bookings today ({day.isoformat()})")


def build_today_bookings(day: date, rows: list[BookingDetails]) -> str:
    parts = ["📅 " + bold(f"Bookings for today ({day.isoformat()}):") + "\n"]
    for index, details in enumerate(rows, start=1):
        booking = details.booking
        parts.append(bold(f"{index}. {service_emoji(booking.service_name)} {booking.service_name}"))
        parts.append(esc(f" 🕒 {fmt_time(booking.booking_date)}"))
        parts.append(esc(f" 👤 {details.client_name or MISSING}"))
        parts.append(esc(f" 📞 {details.client_phone or MISSING}"))
        if booking.address:
            parts.append(esc(f" 📍 {booking.address}"))
        parts.append(" 🆔 " + bold(f"ID: {booking.id}") + "\n")
    return "\n".join(parts)


def build_recent_clients(rows: list[ClientSummary]) -> str:
    parts = ["👥 " + bold("Latest clients:") + "\n"]
    for index, summary in enumerate(rows, start=1):
        client = summary.client
        parts.append(bold(f"{index}. {client.full_name}"))
        parts.append(esc(f"   📞 {client.phone_number or MISSING}"))
        parts.append(esc(f"   📧 {client.email or MISSING}"))
        parts.append(esc(f"   📊 Bookings: {summary.booking_count}"))
        parts.append(esc(f"   🆔 ID: {client.id}") + "\n")
    return "\n".join(parts)


def build_stats(stats: BookingStats) -> str:
    lines = [
        "📊 " + bold("Booking statistics:") + "\n",
        "📅 " + field("Today", stats.today),
        "📈 " + field("This month", stats.this_month),
        "👥 " + field("Total clients", stats.total_clients) + "\n",
        bold("Popular services:"),
    ]
    for index, entry in enumerate(stats.popular_services, start=1):
        lines.append(esc(f"{index}. {entry.service_name}: {entry.count}"))
    return "\n".join(lines)


def build_new_booking_notice(details: BookingDetails, announced_at: Optional[datetime] = None) -> str:
    """Admin-chat announcement for a freshly created booking."""
    booking = details.booking
    announced_at = announced_at or datetime.now()
    return (
        "🆕 " + bold("New booking!") + "\n\n"
        + "\n".join([
            field("Service", booking.service_name),
            field("Date", fmt_date(booking.booking_date)),
            field("Client", details.client_name or NOT_SPECIFIED),
            field("Phone", details.client_phone or NOT_SPECIFIED),
            field("Address", booking.address or NOT_SPECIFIED),
            field("Created at", announced_at.strftime("%H:%M:%S")),
            field("ID", booking.id),
        ])
    )
