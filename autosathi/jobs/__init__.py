"""Background jobs"""
from .reminders import ReminderScheduler, check_expiry_reminders

__all__ = ["ReminderScheduler", "check_expiry_reminders"]
