"""Tests for reply construction and canned texts."""

from datetime import date, datetime

import pytest

from rental_bot.prompts import message_texts as texts
from rental_bot.prompts.markup import bold, field, fmt_date, fmt_time
from rental_bot.prompts.message_templates import (
    NOT_SPECIFIED,
    build_all_bookings,
    build_booking_created,
    build_booking_deleted,
    build_booking_failed,
    build_booking_not_found,
    build_confirmation_prompt,
    build_delete_prompt,
    build_new_booking_notice,
    build_no_bookings_today,
    build_recent_clients,
    build_stats,
    build_today_bookings,
)
from rental_bot.schemas.booking_schema import (
    Booking,
    BookingDetails,
    BookingStats,
    Client,
    ClientSummary,
    ServiceCount,
)
from rental_bot.schemas.session_schema import BookingDraft

from tests.conftest import STEAM, VACUUM, WASHER, assert_markdown_safe


def make_details(
    booking_id: int = 7,
    service_name: str = VACUUM,
    when: datetime = datetime(2025, 3, 5, 14, 30),
    first_name: str = "Ivan",
    last_name=None,
    phone: str = "+375291112233",
    address="Minsk, Lenina 1",
) -> BookingDetails:
    client = Client(
        id=booking_id * 10,
        first_name=first_name,
        last_name=last_name,
        phone_number=phone,
        email=f"client_{booking_id}@clients.test",
        password_hash="x",
    )
    booking = Booking(
        id=booking_id,
        client_id=client.id,
        service_name=service_name,
        booking_date=when,
        address=address,
    )
    return BookingDetails(booking=booking, client=client)


def make_draft(**overrides) -> BookingDraft:
    values = dict(
        service_name=STEAM,
        booking_date=datetime(2025, 12, 25),
        client_name="Anna (VIP)",
        client_phone="+375 29 111-22-33",
        client_address="St. 5, apt. #2",
    )
    values.update(overrides)
    return BookingDraft(**values)


class TestMarkup:
    def test_bold_escapes_content(self):
        assert bold("a.b") == "*a\\.b*"

    def test_field_shows_dash_when_empty(self):
        assert field("Phone", None) == "*Phone:* \\-"
        assert field("Phone", "") == "*Phone:* \\-"

    def test_field_keeps_zero(self):
        assert field("Today", 0) == "*Today:* 0"

    def test_date_and_time_formats(self):
        moment = datetime(2025, 3, 5, 9, 7)
        assert fmt_date(moment) == "05.03.2025"
        assert fmt_time(moment) == "09:07"
        assert fmt_date(None) == "-"


class TestCannedTexts:
    @pytest.mark.parametrize("name", [
        n for n in dir(texts) if n.isupper() and n not in ("DATE_EXAMPLE", "DATE_FORMAT_HINT")
    ])
    def test_all_constants_are_markdown_safe(self, name):
        assert_markdown_safe(getattr(texts, name))


class TestCreationReplies:
    def test_confirmation_prompt_lists_every_field(self):
        text = build_confirmation_prompt(make_draft())
        assert "Steam cleaner rental Karcher SC 4 Deluxe" in text
        assert "25\\.12\\.2025" in text
        assert "Anna \\(VIP\\)" in text
        assert "\\+375 29 111\\-22\\-33" in text
        assert "St\\. 5, apt\\. \\#2" in text
        assert_markdown_safe(text)

    def test_empty_address_shows_not_specified(self):
        text = build_confirmation_prompt(make_draft(client_address=""))
        assert NOT_SPECIFIED in text

    def test_created_reply_carries_booking_id(self):
        booking = make_details(booking_id=123).booking
        text = build_booking_created(make_draft(), booking)
        assert "*Booking ID:* 123" in text
        assert_markdown_safe(text)

    def test_failure_detail_is_escaped(self):
        text = build_booking_failed('duplicate key value violates "clients_email_key"')
        assert "clients\\_email\\_key" in text
        assert_markdown_safe(text)


class TestDeletionReplies:
    def test_not_found_names_the_id(self):
        assert "*42*" in build_booking_not_found(42)
        assert "*\\-1*" in build_booking_not_found(-1)

    def test_delete_prompt_and_result(self):
        details = make_details(last_name="Petrov")
        prompt = build_delete_prompt(details)
        deleted = build_booking_deleted(details)
        assert "Ivan Petrov" in prompt
        assert "*ID:* 7" in prompt
        assert "Booking deleted" in deleted
        assert_markdown_safe(prompt)
        assert_markdown_safe(deleted)

    def test_missing_address_line_omitted(self):
        text = build_delete_prompt(make_details(address=None))
        assert "Address" not in text


class TestListings:
    def test_all_bookings_grouped_by_service(self):
        rows = [
            make_details(1, VACUUM),
            make_details(2, VACUUM),
            make_details(3, WASHER, address=None),
            make_details(4, "Trailer rental"),
        ]
        text = build_all_bookings(rows)
        assert text.index("Vacuum cleaner") < text.index("Pressure washer") < text.index("Trailer")
        assert text.count("🧹") == 1
        assert "📦" in text
        assert " 2\\. 📅" in text
        assert_markdown_safe(text)

    def test_same_rank_services_are_not_split(self):
        other_vacuum = "Vacuum cleaner rental Karcher Puzzi 10/1"
        rows = [
            make_details(1, VACUUM, when=datetime(2025, 3, 9)),
            make_details(2, other_vacuum, when=datetime(2025, 3, 8)),
            make_details(3, VACUUM, when=datetime(2025, 3, 7)),
        ]
        text = build_all_bookings(rows)
        assert text.count(bold(f"{VACUUM}:")) == 1
        assert text.count(bold(f"{other_vacuum}:")) == 1
        assert text.index(bold(f"{VACUUM}:")) < text.index(bold(f"{other_vacuum}:"))
        assert " 2\\. 📅 07\\.03\\.2025" in text
        assert_markdown_safe(text)

    def test_booking_without_client(self):
        details = BookingDetails(booking=make_details().booking, client=None)
        text = build_all_bookings([details])
        assert "👤 \\-" in text

    def test_today(self):
        day = date(2025, 3, 5)
        text = build_today_bookings(day, [make_details()])
        assert "2025\\-03\\-05" in text
        assert "🕒 14:30" in text
        assert_markdown_safe(text)
        assert_markdown_safe(build_no_bookings_today(day))

    def test_recent_clients(self):
        details = make_details(last_name="Petrov")
        text = build_recent_clients([ClientSummary(client=details.client, booking_count=3)])
        assert "Ivan Petrov" in text
        assert "Bookings: 3" in text
        assert "client\\_7@clients\\.test" in text
        assert_markdown_safe(text)

    def test_stats(self):
        stats = BookingStats(
            today=1,
            this_month=4,
            total_clients=3,
            popular_services=[ServiceCount(service_name=VACUUM, count=3)],
        )
        text = build_stats(stats)
        assert "*This month:* 4" in text
        assert "1\\. Vacuum cleaner rental Karcher Puzzi 8/1 C: 3" in text
        assert_markdown_safe(text)


class TestNewBookingNotice:
    def test_notice_contents(self):
        text = build_new_booking_notice(make_details(), announced_at=datetime(2025, 3, 5, 12, 30, 5))
        assert "New booking" in text
        assert "*Created at:* 12:30:05" in text
        assert "*ID:* 7" in text
        assert_markdown_safe(text)

    def test_missing_client_fields(self):
        details = BookingDetails(booking=make_details(address=None).booking, client=None)
        text = build_new_booking_notice(details)
        assert text.count(NOT_SPECIFIED) == 3
