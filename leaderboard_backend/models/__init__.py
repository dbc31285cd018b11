"""
Leaderboards Models Package
"""

from leaderboard_backend.models.user import AccountConfirmation, AccountRecovery, User, UserRole
from leaderboard_backend.models.leaderboard import (
    Category, Leaderboard, Run,
    RunType, SortDirection
)

__all__ = [
    "User", "UserRole", "AccountConfirmation", "AccountRecovery",
    "Leaderboard", "Category", "Run",
    "RunType", "SortDirection"
]
