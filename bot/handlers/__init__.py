"""
Handlers.

Bot command and message handlers.
"""

from bot.handlers import password_recovery

__all__ = [
    "password_recovery",
]
