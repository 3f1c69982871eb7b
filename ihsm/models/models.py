from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, declared_attr, mapped_column, relationship
from sqlalchemy.sql import func

from ihsm.extensions import db, bcrypt

Money = Numeric(12, 2)

# bcrypt only hashes the first 72 bytes of a password
MAX_PASSWORD_BYTES = 72


def _hash_password(password: str) -> str:
    encoded = password.encode('utf-8')
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode('utf-8')


# SQLite's CURRENT_TIMESTAMP only has second precision
def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampedBase(db.Model):
    """Abstract base providing id/created/updated columns."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        onupdate=_utcnow,
        nullable=False,
    )


class OwnedMixin:
    """Records carry the id of the authenticated user that created them."""

    @declared_attr
    def owner_id(cls) -> Mapped[str | None]:
        return mapped_column(
            String(36),
            ForeignKey("user.id", ondelete="SET NULL"),
            index=True,
        )


class SportType(Enum):
    CRICKET = "cricket"
    VOLLEYBALL = "volleyball"
    KABADDI = "kabaddi"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class PlayerStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TShirtSize(Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"


class MatchStatus(Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ExpenseCategory(Enum):
    EQUIPMENT = "equipment"
    VENUE = "venue"
    REFRESHMENTS = "refreshments"
    PRIZES = "prizes"
    TRANSPORT = "transport"
    OTHER = "other"


class RevenueType(Enum):
    TICKET_SALES = "ticket_sales"
    SPONSORSHIP = "sponsorship"
    OTHER = "other"


class User(TimestampedBase):
    __tablename__ = "user"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255))
    active: Mapped[bool] = mapped_column('is_active', Boolean, nullable=False, default=True)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def set_password(self, password: str) -> None:
        self.password_hash = _hash_password(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_active(self) -> bool:  # Flask-Login compatibility
        return bool(self.active)

    @property
    def is_anonymous(self) -> bool:
        return False

    def get_id(self) -> str:
        return self.id


class Hostel(OwnedMixin, TimestampedBase):
    __tablename__ = "hostel"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    total_students: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # bcrypt hash of the dashboard password; the plain secret is never stored
    access_secret_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    plays_cricket: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    plays_volleyball: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    plays_kabaddi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    teams: Mapped[list["Team"]] = relationship(
        back_populates="hostel",
        cascade="all, delete-orphan",
    )

    def set_access_secret(self, secret: str) -> None:
        self.access_secret_hash = _hash_password(secret)

    def plays(self, sport: SportType) -> bool:
        return bool(getattr(self, f"plays_{sport.value}"))

    @property
    def sports(self) -> dict[str, bool]:
        return {sport.value: self.plays(sport) for sport in SportType}

    def set_sports(self, sports: dict[str, bool]) -> None:
        for sport in SportType:
            setattr(self, f"plays_{sport.value}", bool(sports.get(sport.value, False)))


class Team(OwnedMixin, TimestampedBase):
    __tablename__ = "team"
    __table_args__ = (
        UniqueConstraint("hostel_id", "sport", name="uq_team_hostel_sport"),
        CheckConstraint("max_players > 0", name="ck_team_max_players_positive"),
    )

    hostel_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("hostel.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sport: Mapped[SportType] = mapped_column(
        SqlEnum(SportType, name="sport_type", native_enum=False),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    max_players: Mapped[int] = mapped_column(Integer, nullable=False, default=15)
    matches_played: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    hostel: Mapped[Hostel] = relationship(back_populates="teams")
    players: Mapped[list["Player"]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="Player.created_at",
    )
    registration_links: Mapped[list["RegistrationLink"]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
    )

    @property
    def roster(self) -> list["Player"]:
        return [p for p in self.players if p.status == PlayerStatus.APPROVED]

    @property
    def pending_players(self) -> list["Player"]:
        return [p for p in self.players if p.status == PlayerStatus.PENDING]

    @property
    def is_full(self) -> bool:
        return len(self.roster) >= self.max_players


class Player(OwnedMixin, TimestampedBase):
    __tablename__ = "player"
    __table_args__ = (
        Index("ix_player_team_status", "team_id", "status"),
    )

    team_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("team.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    registration_link_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("registration_link.id", ondelete="SET NULL"),
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    jersey_number: Mapped[int] = mapped_column(Integer, nullable=False)
    mobile_number: Mapped[str] = mapped_column(String(10), nullable=False)
    tshirt_size: Mapped[TShirtSize] = mapped_column(
        SqlEnum(TShirtSize, name="tshirt_size", native_enum=False),
        nullable=False,
        default=TShirtSize.M,
    )
    photo_url: Mapped[str | None] = mapped_column(String(512))
    status: Mapped[PlayerStatus] = mapped_column(
        SqlEnum(PlayerStatus, name="player_status", native_enum=False),
        nullable=False,
        default=PlayerStatus.PENDING,
    )
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    team: Mapped[Team] = relationship(back_populates="players")
    registration_link: Mapped["RegistrationLink | None"] = relationship()


class Match(OwnedMixin, TimestampedBase):
    __tablename__ = "match"
    __table_args__ = (
        Index("ix_match_sport_date", "sport", "match_date"),
        CheckConstraint("team1_id != team2_id", name="ck_match_distinct_teams"),
    )

    sport: Mapped[SportType] = mapped_column(
        SqlEnum(SportType, name="sport_type", native_enum=False),
        nullable=False,
    )
    team1_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("team.id", ondelete="SET NULL"),
        index=True,
    )
    team2_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("team.id", ondelete="SET NULL"),
        index=True,
    )
    team1_name: Mapped[str] = mapped_column(String(255), nullable=False)
    team2_name: Mapped[str] = mapped_column(String(255), nullable=False)
    match_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:MM
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    venue: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[MatchStatus] = mapped_column(
        SqlEnum(MatchStatus, name="match_status", native_enum=False),
        nullable=False,
        default=MatchStatus.SCHEDULED,
    )
    winner: Mapped[str | None] = mapped_column(String(255))
    notes: Mapped[str | None] = mapped_column(Text)
    round_number: Mapped[int | None] = mapped_column(Integer)
    match_number: Mapped[int | None] = mapped_column(Integer)

    team1: Mapped[Team | None] = relationship(foreign_keys=[team1_id])
    team2: Mapped[Team | None] = relationship(foreign_keys=[team2_id])


class Volunteer(OwnedMixin, TimestampedBase):
    __tablename__ = "volunteer"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(100), nullable=False)
    contact_number: Mapped[str | None] = mapped_column(String(32))
    email: Mapped[str | None] = mapped_column(String(255))
    assigned_sport: Mapped[SportType | None] = mapped_column(
        SqlEnum(SportType, name="sport_type", native_enum=False),
    )


class Expense(OwnedMixin, TimestampedBase):
    __tablename__ = "expense"
    __table_args__ = (
        Index("ix_expense_owner_date", "owner_id", "expense_date"),
        CheckConstraint("amount >= 0", name="ck_expense_amount_non_negative"),
    )

    description: Mapped[str] = mapped_column(String(500), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    category: Mapped[ExpenseCategory] = mapped_column(
        SqlEnum(ExpenseCategory, name="expense_category", native_enum=False),
        nullable=False,
        default=ExpenseCategory.OTHER,
    )
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)


class Sponsor(OwnedMixin, TimestampedBase):
    __tablename__ = "sponsor"
    __table_args__ = (
        Index("ix_sponsor_owner_date", "owner_id", "sponsor_date"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    sponsor_date: Mapped[date] = mapped_column(Date, nullable=False)


class Budget(OwnedMixin, TimestampedBase):
    """Singleton per owner; the unique constraint rules out duplicates."""

    __tablename__ = "budget"
    __table_args__ = (
        UniqueConstraint("owner_id", name="uq_budget_owner"),
    )

    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    sponsorship_amount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)


class RegistrationLink(OwnedMixin, TimestampedBase):
    __tablename__ = "registration_link"

    team_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("team.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sport: Mapped[SportType] = mapped_column(
        SqlEnum(SportType, name="sport_type", native_enum=False),
        nullable=False,
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    team: Mapped[Team] = relationship(back_populates="registration_links")

    def is_usable(self, now: datetime | None = None) -> bool:
        if not self.active:
            return False
        if self.expires_at is None:
            return True
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        # SQLite drops tzinfo on the way back
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now < expires_at


class Revenue(OwnedMixin, TimestampedBase):
    __tablename__ = "revenue"

    event_name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    revenue_type: Mapped[RevenueType] = mapped_column(
        SqlEnum(RevenueType, name="revenue_type", native_enum=False),
        nullable=False,
        default=RevenueType.OTHER,
    )
    revenue_date: Mapped[date] = mapped_column(Date, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text)
