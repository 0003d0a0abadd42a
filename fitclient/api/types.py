"""Payload models for the fitness REST service.

Optional server fields are explicit `| None` with defaults, so a missing
field is a typed absence rather than a runtime surprise.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fitclient.calendar.reconciler import DayRecord


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class LoginResponse(_Payload):
    access_token: str
    refresh_token: str


class MessageResponse(_Payload):
    message: str = ""


class ConfirmEmailResponse(_Payload):
    message: str = ""
    access_token: str | None = None
    refresh_token: str | None = None
    success: bool | None = None


class Exercise(_Payload):
    id: str
    title: str
    thumbnail_url: str = ""
    body_parts: list[str] = Field(default_factory=list)
    dif_level: str = ""
    calories: float = 0
    description: str | None = None
    video_url: str | None = None
    repeats: int | None = None
    steps: list[str] | None = None
    tips: str | None = None


class Program(_Payload):
    id: str
    title: str
    img_url: str = ""
    weeks: int = 0
    calories: float = 0
    category_description: str = ""
    cardio_level: str | None = None
    strength_level: str | None = None


class Workout(_Payload):
    id: str
    title: str
    body_img: str = ""
    calories: str = ""
    total_minutes: int = 0
    type: str = ""
    workout_desc_img: str = ""
    dif_level: str = ""
    body_parts: list[str] = Field(default_factory=list)
    description: str = ""


class AvailableContentResponse(_Payload):
    workouts: list[Workout] = Field(default_factory=list)
    plans: list[Program] = Field(default_factory=list)


class OnboardingWorkoutResponse(_Payload):
    """Workouts suggested for a goal/level pair during onboarding."""

    workouts: list[Workout] = Field(default_factory=list)


class WorkoutHistoryItem(_Payload):
    user_id: int
    trained_date: str
    title: str
    body_img: str = ""
    calories: str = ""
    total_minutes: int = 0
    type: str = ""
    workout_desc_img: str = ""
    dif_level: str = ""


class UserProfile(_Payload):
    id: int
    full_name: str
    email: str
    age: int | None = None
    height: float | None = None
    weight: float | None = None
    muscle_groups: list[str] | None = None
    language: str | None = None
    goal_weight: float | None = None
    goal_id: int | None = None
    level_id: int | None = None
    total_calories: float | None = None
    total_minutes: float | None = None
    completed_workouts: int | None = None
    started_workouts: int | None = None
    completed_exercises: int | None = None
    created_at: str | None = None


class SocialUser(_Payload):
    id: int
    email: str = ""
    name: str = ""


class SocialAuthResponse(_Payload):
    """Token exchange result for Google and Apple sign-in."""

    access_token: str | None = None
    refresh_token: str | None = None
    user: SocialUser | None = None


class WorkoutOptionsResponse(_Payload):
    message: str = ""
    profile: UserProfile
    plan: Program | None = None


class CalendarServerItem(_Payload):
    """One calendar entry as the server sends it."""

    date: dt.date
    title: str = ""
    workout_title: str = ""
    workout_id: str | None = None
    trained: bool = False
    canceled: bool = False

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, value: object) -> object:
        """Accept plain dates and ISO timestamps; only the civil date is kept."""
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    @field_validator("workout_id", mode="before")
    @classmethod
    def empty_workout_id(cls, value: object) -> object:
        if value is None or value == "":
            return None
        return str(value)

    def to_day_record(self) -> DayRecord:
        return DayRecord(
            calendar_date=self.date,
            label=self.title,
            workout_title=self.workout_title,
            workout_id=self.workout_id,
            trained=self.trained,
            canceled=self.canceled,
        )
