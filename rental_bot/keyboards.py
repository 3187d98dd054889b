"""Telegram reply-keyboard markup for each engine keyboard hint."""

from typing import Union

from aiogram.types import KeyboardButton, ReplyKeyboardMarkup, ReplyKeyboardRemove

from rental_bot.conversation.intents import (
    BUTTON_ADD_BOOKING,
    BUTTON_ALL_BOOKINGS,
    BUTTON_BACK,
    BUTTON_CANCEL,
    BUTTON_CLIENTS,
    BUTTON_CONFIRM,
    BUTTON_DELETE_BOOKING,
    BUTTON_NO,
    BUTTON_STATS,
    BUTTON_TODAY,
    BUTTON_YES,
)
from rental_bot.schemas.session_schema import Keyboard
from rental_bot.store.services import get_service_labels

_labels = get_service_labels()

KEYBOARD_LAYOUTS: dict[Keyboard, list[list[str]]] = {
    Keyboard.MAIN_MENU: [
        [BUTTON_ALL_BOOKINGS, BUTTON_TODAY],
        [BUTTON_ADD_BOOKING, BUTTON_DELETE_BOOKING],
        [BUTTON_CLIENTS, BUTTON_STATS],
    ],
    Keyboard.SERVICE_PICKER: [
        _labels[:2],
        _labels[2:] + [BUTTON_BACK],
    ],
    Keyboard.CONFIRM_CANCEL: [[BUTTON_CONFIRM, BUTTON_CANCEL]],
    Keyboard.YES_NO: [[BUTTON_YES, BUTTON_NO]],
    Keyboard.BACK_ONLY: [[BUTTON_BACK]],
}


def build_keyboard(hint: Keyboard) -> Union[ReplyKeyboardMarkup, ReplyKeyboardRemove]:
    """Map an engine keyboard hint onto Telegram markup.

    ``Keyboard.NONE`` hides the keyboard so the operator types free text.
    """
    layout = KEYBOARD_LAYOUTS.get(hint)
    if layout is None:
        return ReplyKeyboardRemove()
    return ReplyKeyboardMarkup(
        keyboard=[[KeyboardButton(text=label) for label in row] for row in layout],
        resize_keyboard=True,
    )
