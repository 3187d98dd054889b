"""
Canned reply texts.

All constants are already MarkdownV2-safe; dynamic replies are assembled in
``message_templates``.
"""

from rental_bot.conversation.validators import DATE_EXAMPLE, DATE_FORMAT_HINT
from rental_bot.prompts.markup import bold, esc, italic

GREETING_OPERATOR = (
    "👋 " + bold("Welcome to the booking control panel!") + "\n\n"
    + esc("Choose an action on the keyboard below.")
)

GREETING_GUEST = (
    "👋 " + esc("Hi! I am the booking management bot.") + "\n\n"
    + esc("To get access, please contact the administrator.")
)

MAIN_MENU = esc("Main menu:")

ACCESS_DENIED = "⛔ " + esc("No access")

CHOOSE_SERVICE = "🎯 " + bold("Choose a service to book:")

CHOOSE_SERVICE_AGAIN = esc("Please pick one of the services on the keyboard.")

SERVICE_OUT_OF_FLOW = esc('Start with "➕ Add booking" first.')

ASK_DATE = (
    "📅 " + bold("Enter the booking date:") + "\n\n"
    + italic(f"Format: {DATE_FORMAT_HINT} (for example: {DATE_EXAMPLE})")
)

BAD_DATE_FORMAT = (
    "❌ " + bold("Wrong date format!") + "\n\n"
    + esc("Use the format: ") + bold(DATE_FORMAT_HINT) + "\n"
    + esc("Example: ") + bold(DATE_EXAMPLE)
)

BAD_CALENDAR_DATE = (
    "❌ " + bold("That date does not exist!") + "\n\n"
    + esc("Check the day and month and enter it again as ") + bold(DATE_FORMAT_HINT)
)

ASK_CLIENT_NAME = "👤 " + bold("Enter the client's name:")

ASK_CLIENT_PHONE = (
    "📞 " + bold("Enter the client's phone:") + "\n\n"
    + italic("Example: +375291234567")
)

ASK_CLIENT_ADDRESS = (
    "📍 " + bold("Enter the delivery address:") + "\n\n"
    + italic("Example: Minsk, Pushkin st. 10, apt. 5")
)

CONFIRM_OR_CANCEL = esc("Please press ✅ Confirm or ❌ Cancel.")

SESSION_EXPIRED = esc("Session expired. Start again from the main menu.")

ACTION_CANCELLED = "❌ " + esc("Action cancelled")

ASK_DELETE_ID = (
    "🗑️ " + bold("Enter the booking ID to delete:") + "\n\n"
    + italic("The ID is shown in the booking lists")
)

DELETE_ID_NOT_NUMERIC = "❌ " + esc("Enter a number (the booking ID)")

NOT_FOUND_AT_DELETION = "❌ " + esc("Booking was not found when deleting")

DELETE_KEPT = "❌ " + esc("Deletion cancelled")

YES_OR_NO = esc("Please press ✅ Yes or ❌ No.")

LOOKUP_FAILED = "❌ " + esc("Error while checking the booking")

DELETE_FAILED = "❌ " + esc("Error while deleting the booking")

FETCH_FAILED = "❌ " + esc("Error while fetching data")

UNEXPECTED_FAILURE = "❌ " + esc("Something went wrong. The current action was discarded.")

NO_BOOKINGS = "📭 " + esc("No active bookings")

NO_CLIENTS = "👥 " + bold("No clients in the database")
