from rental_bot.notifications.dispatcher import NotificationDispatcher
from rental_bot.notifications.notifier import LoggingNotifier, Notifier, TelegramNotifier

__all__ = [
    "NotificationDispatcher",
    "Notifier",
    "LoggingNotifier",
    "TelegramNotifier",
]
