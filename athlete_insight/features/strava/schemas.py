"""
Strava data schemas.

Pydantic models for the records cached locally: credentials, athlete,
activity summaries, activity details and their sensor streams.

Provider fields that are not declared here are kept as extras so a
cached record round-trips through export/import unchanged.
"""

from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from athlete_insight.shared.constants import StreamKind

Number = Union[int, float]


def parse_strava_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a Strava ISO timestamp.

    `start_date_local` carries a 'Z' suffix although it is wall-clock
    local time; the returned datetime is naive in that case.
    """
    if not value:
        return None
    if value.endswith("Z"):
        return datetime.fromisoformat(value[:-1])
    return datetime.fromisoformat(value)


class CacheRecord(BaseModel):
    """Base for records persisted in the local cache."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict as stored and exported."""
        return self.model_dump(mode="json", exclude_none=True, by_alias=True)


# =============================================================================
# Credentials
# =============================================================================

class StravaCredentials(CacheRecord):
    """
    OAuth credentials for the Strava API.

    At most one record exists. Exported with the camelCase keys of the
    cache document format.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: Optional[int] = None
    client_id: Optional[str] = Field(default=None, alias="clientId")
    client_secret: Optional[str] = Field(default=None, alias="clientSecret")
    access_token: Optional[str] = Field(default=None, alias="accessToken")
    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")
    expires_at: Optional[int] = Field(default=None, alias="expiresAt")  # epoch ms
    scope: Optional[str] = None

    @property
    def can_refresh(self) -> bool:
        return bool(self.client_id and self.client_secret and self.refresh_token)


class TokenResponse(BaseModel):
    """Strava token endpoint response."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    refresh_token: str
    expires_at: int  # epoch seconds
    expires_in: Optional[int] = None
    scope: Optional[str] = None
    athlete: Optional[dict[str, Any]] = None

    @property
    def expires_at_ms(self) -> int:
        return self.expires_at * 1000


# =============================================================================
# Athlete
# =============================================================================

class Athlete(CacheRecord):
    """
    Authenticated athlete profile.

    `birth_year` and `llm_summary_prefix` are local-only fields; Strava
    never returns them.
    """

    id: int
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    sex: Optional[str] = None
    premium: Optional[bool] = None
    weight: Optional[float] = None
    ftp: Optional[int] = None
    profile: Optional[str] = None
    profile_medium: Optional[str] = None
    measurement_preference: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    # Local extensions
    birth_year: Optional[int] = None
    llm_summary_prefix: Optional[str] = None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.firstname, self.lastname) if p)


# =============================================================================
# Activities
# =============================================================================

class Activity(CacheRecord):
    """Activity summary as returned by /athlete/activities."""

    id: int
    name: str = ""
    type: str = "Unknown"
    sport_type: Optional[str] = None
    start_date: Optional[str] = None
    start_date_local: Optional[str] = None
    timezone: Optional[str] = None

    distance: float = 0.0  # meters
    moving_time: int = 0  # seconds
    elapsed_time: int = 0  # seconds
    total_elevation_gain: float = 0.0  # meters
    elev_high: Optional[float] = None
    elev_low: Optional[float] = None

    average_speed: float = 0.0  # m/s
    max_speed: float = 0.0  # m/s

    has_heartrate: bool = False
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    average_cadence: Optional[float] = None
    average_watts: Optional[float] = None
    max_watts: Optional[float] = None
    kilojoules: Optional[float] = None
    device_watts: Optional[bool] = None
    suffer_score: Optional[float] = None

    kudos_count: int = 0
    comment_count: int = 0
    athlete_count: int = 0
    photo_count: int = 0
    pr_count: Optional[int] = None
    achievement_count: Optional[int] = None

    trainer: Optional[bool] = None
    commute: Optional[bool] = None
    manual: Optional[bool] = None
    private: Optional[bool] = None
    gear_id: Optional[str] = None

    def __repr__(self):
        return f"<Activity {self.id} {self.type} {self.distance}m>"

    @property
    def start_local(self) -> Optional[datetime]:
        """Local start time as naive datetime."""
        return parse_strava_datetime(self.start_date_local or self.start_date)

    @property
    def distance_km(self) -> float:
        return round(self.distance / 1000, 2) if self.distance else 0


class StreamData(BaseModel):
    """
    Sensor streams of one activity, index-aligned to `time`.

    A missing kind means the device did not report it.
    """

    model_config = ConfigDict(extra="ignore")

    time: Optional[list[Number]] = None
    distance: Optional[list[Number]] = None
    latlng: Optional[list[list[float]]] = None
    altitude: Optional[list[Number]] = None
    velocity_smooth: Optional[list[Number]] = None
    heartrate: Optional[list[Optional[Number]]] = None
    cadence: Optional[list[Optional[Number]]] = None
    watts: Optional[list[Optional[Number]]] = None
    temp: Optional[list[Optional[Number]]] = None
    moving: Optional[list[bool]] = None
    grade_smooth: Optional[list[Number]] = None

    @classmethod
    def from_key_by_type(cls, payload: dict[str, Any]) -> "StreamData":
        """
        Unpack Strava's key_by_type envelope.

        Unknown kinds and kinds without a `data` array are dropped.
        """
        streams: dict[str, list] = {}
        for kind in StreamKind:
            entry = payload.get(kind.value)
            if isinstance(entry, dict) and isinstance(entry.get("data"), list):
                streams[kind.value] = entry["data"]
        return cls(**streams)

    def get(self, kind: StreamKind) -> Optional[list]:
        return getattr(self, kind.value)

    @property
    def kinds(self) -> list[StreamKind]:
        """Kinds present in this bundle."""
        return [kind for kind in StreamKind if self.get(kind) is not None]


class ActivityDetail(Activity):
    """
    Detailed activity from /activities/{id}, optionally with streams.

    A detail is complete once `streams` is present. `streams_error` is
    only set on a freshly fetched detail whose streams could not be
    loaded; it is never persisted.
    """

    description: Optional[str] = None
    calories: Optional[float] = None
    device_name: Optional[str] = None
    splits_metric: Optional[list[dict[str, Any]]] = None
    laps: Optional[list[dict[str, Any]]] = None
    best_efforts: Optional[list[dict[str, Any]]] = None

    streams: Optional[StreamData] = None
    streams_error: Optional[str] = Field(default=None, exclude=True)

    @property
    def is_complete(self) -> bool:
        return self.streams is not None

    @property
    def streams_unavailable(self) -> bool:
        return self.streams is None and self.streams_error is not None


# =============================================================================
# Operation results
# =============================================================================

class BackfillResult(BaseModel):
    """Outcome of a bulk stream backfill."""
    total: int
    success_count: int = 0
    error_count: int = 0
    cancelled: bool = False
    failed_ids: list[int] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.success_count + self.error_count


class ActivityPage(BaseModel):
    """One step of the paginated activity feed."""
    activities: list[Activity]
    page: int
    has_more: bool
    from_cache: bool = False
