"""Per-user dialogue session state and engine replies."""

import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from rental_bot.schemas.booking_schema import BookingDetails


class DialogueStep(str, Enum):
    """Where a user's dialogue currently stands. IDLE means no session."""
    IDLE = "idle"
    AWAITING_SERVICE = "awaiting_service"
    AWAITING_DATE = "awaiting_date"
    AWAITING_CLIENT_NAME = "awaiting_client_name"
    AWAITING_CLIENT_PHONE = "awaiting_client_phone"
    AWAITING_CLIENT_ADDRESS = "awaiting_client_address"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    AWAITING_DELETE_ID = "awaiting_delete_id"
    AWAITING_DELETE_CONFIRMATION = "awaiting_delete_confirmation"


@dataclass
class BookingDraft:
    """Booking-creation payload accumulated across steps before commit."""
    service_name: Optional[str] = None
    booking_date: Optional[datetime] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_address: Optional[str] = None

    def is_complete(self) -> bool:
        return all(
            value is not None
            for value in (
                self.service_name,
                self.booking_date,
                self.client_name,
                self.client_phone,
                self.client_address,
            )
        )


@dataclass
class Session:
    """
    Ephemeral dialogue state for one chat user.

    Lives only in the session store; created by a flow-starting command and
    destroyed on completion, cancel, back, or idle expiry.
    """
    user_id: str
    step: DialogueStep
    draft: BookingDraft = field(default_factory=BookingDraft)
    delete_candidate: Optional[BookingDetails] = None
    created_at: float = field(default_factory=time.monotonic)
    updated_at: float = field(default_factory=time.monotonic)

    def advance(self, step: DialogueStep) -> None:
        self.step = step
        self.touch()

    def touch(self) -> None:
        self.updated_at = time.monotonic()


class Keyboard(str, Enum):
    """Which canned button set the transport should present next."""
    MAIN_MENU = "main_menu"
    SERVICE_PICKER = "service_picker"
    CONFIRM_CANCEL = "confirm_cancel"
    YES_NO = "yes_no"
    BACK_ONLY = "back_only"
    NONE = "none"


class ParseMode(str, Enum):
    MARKDOWN_V2 = "MarkdownV2"
    PLAIN = "plain"


class Reply(BaseModel):
    """One engine response: text plus a keyboard affordance hint."""
    text: str
    keyboard: Keyboard = Keyboard.NONE
    parse_mode: ParseMode = ParseMode.MARKDOWN_V2
