"""Notifications: threshold rules, batch generator, dismissal."""

from rtw_checker.notifications.generator import GenerationSummary, NotificationGenerator
from rtw_checker.notifications.rules import NOTIFICATION_RULES, NotificationRule
from rtw_checker.notifications.service import NotificationService

__all__ = [
    "GenerationSummary",
    "NotificationGenerator",
    "NOTIFICATION_RULES",
    "NotificationRule",
    "NotificationService",
]
