from .models import (
    MAX_PASSWORD_BYTES,
    Budget,
    Expense,
    ExpenseCategory,
    Hostel,
    Match,
    MatchStatus,
    Player,
    PlayerStatus,
    RegistrationLink,
    Revenue,
    RevenueType,
    Sponsor,
    SportType,
    Team,
    TimestampedBase,
    TShirtSize,
    User,
    Volunteer,
)

__all__ = [
    "MAX_PASSWORD_BYTES",
    "Budget",
    "Expense",
    "ExpenseCategory",
    "Hostel",
    "Match",
    "MatchStatus",
    "Player",
    "PlayerStatus",
    "RegistrationLink",
    "Revenue",
    "RevenueType",
    "Sponsor",
    "SportType",
    "Team",
    "TimestampedBase",
    "TShirtSize",
    "User",
    "Volunteer",
]
