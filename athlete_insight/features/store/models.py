"""
Local cache database models.

Models:
- SettingsRow: OAuth credentials (single row)
- AthleteRow: Cached athlete profile (single row)
- ActivityRow: Activity summaries
- ActivityDetailRow: Activity details with optional streams

Each activity/athlete row keeps the full provider record in `data`;
the other columns are indexed copies used for ordering and lookup.
"""

from sqlalchemy import Column, String, Integer, BigInteger, JSON, Text

from athlete_insight.db.base import Base


class SettingsRow(Base):
    """
    Strava OAuth credential storage.

    Tokens are stored in plain text; the cache is local to one user.
    """

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, autoincrement=True)

    client_id = Column(String(64), nullable=True)
    client_secret = Column(String(255), nullable=True)

    access_token = Column(Text, nullable=True)
    refresh_token = Column(Text, nullable=True)
    expires_at = Column(BigInteger, nullable=True)  # epoch milliseconds
    scope = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<SettingsRow id={self.id} client_id={self.client_id}>"


class AthleteRow(Base):
    """Cached athlete profile including local-only fields."""

    __tablename__ = "athlete"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    firstname = Column(String(255), nullable=True)
    lastname = Column(String(255), nullable=True)
    data = Column(JSON, nullable=False)

    def __repr__(self):
        return f"<AthleteRow {self.id} {self.firstname} {self.lastname}>"


class ActivityRow(Base):
    """Cached activity summary."""

    __tablename__ = "activities"

    id = Column(BigInteger, primary_key=True, autoincrement=False)  # Strava activity ID
    name = Column(String(255), nullable=True)
    activity_type = Column(String(50), nullable=True, index=True)
    start_date_local = Column(String(32), nullable=True, index=True)
    data = Column(JSON, nullable=False)

    def __repr__(self):
        return f"<ActivityRow {self.id} {self.activity_type} {self.start_date_local}>"


class ActivityDetailRow(Base):
    """
    Cached activity detail.

    `has_streams` is 1 when the stream bundle is stored (complete detail).
    """

    __tablename__ = "activity_details"

    id = Column(BigInteger, primary_key=True, autoincrement=False)
    name = Column(String(255), nullable=True)
    activity_type = Column(String(50), nullable=True, index=True)
    start_date_local = Column(String(32), nullable=True, index=True)
    has_streams = Column(Integer, default=0)  # Boolean as int for SQLite
    data = Column(JSON, nullable=False)

    def __repr__(self):
        return f"<ActivityDetailRow {self.id} streams={self.has_streams}>"
