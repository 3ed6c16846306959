"""Shared fixtures: fake collaborators, a controllable clock and a fake cache."""

from __future__ import annotations

import os
import pathlib
import sys
from datetime import date, datetime, timedelta, timezone

import pytest
from jose import jwt

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_TIMEZONE", "UTC")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

from nutrition_alerts.application.notifications import (  # noqa: E402
    DerivationEngine,
    NotificationEngine,
    NotificationStore,
    RemoteGoalCheck,
)
from nutrition_alerts.config import get_settings  # noqa: E402
from nutrition_alerts.domain.entities import MealPlan, NutritionProgress  # noqa: E402
from nutrition_alerts.infrastructure.errors import (  # noqa: E402
    LocalStorageError,
    StoreReadError,
)


class FakeStorage:
    """Dictionary-backed stand-in for browser local storage."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.fail_writes = False
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise LocalStorageError("quota exceeded")
        self.writes += 1
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


class FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def at(self, hour: int, minute: int = 0) -> datetime:
        self.now = self.now.replace(hour=hour, minute=minute)
        return self.now


class FakeMealPlans:
    def __init__(self) -> None:
        self.plan: MealPlan | None = None
        self.error: Exception | None = None
        self.calls = 0

    async def latest_for_user(self, user_id: str) -> MealPlan | None:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.plan


class FakeNutrition:
    def __init__(self) -> None:
        self.progress: NutritionProgress | None = None
        self.error: Exception | None = None
        self.requested_days: list[date] = []

    async def for_day(self, user_id: str, day: date) -> NutritionProgress | None:
        self.requested_days.append(day)
        if self.error is not None:
            raise self.error
        return self.progress


class FakeGoals:
    def __init__(self) -> None:
        self.has_any = True
        self.error: Exception | None = None
        self.calls = 0

    async def has_goals(self, user_id: str) -> bool:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.has_any


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 1, 8, 15, tzinfo=timezone.utc))


@pytest.fixture
def meal_plans() -> FakeMealPlans:
    return FakeMealPlans()


@pytest.fixture
def nutrition() -> FakeNutrition:
    return FakeNutrition()


@pytest.fixture
def goals() -> FakeGoals:
    return FakeGoals()


@pytest.fixture
def read_error() -> StoreReadError:
    return StoreReadError("connection reset")


@pytest.fixture
def store(storage: FakeStorage, clock: FakeClock) -> NotificationStore:
    return NotificationStore(storage, clock=clock)


@pytest.fixture
def derivation(
    store: NotificationStore, meal_plans: FakeMealPlans, nutrition: FakeNutrition
) -> DerivationEngine:
    return DerivationEngine(store, meal_plans, nutrition)


@pytest.fixture
def goal_check(store: NotificationStore, goals: FakeGoals) -> RemoteGoalCheck:
    return RemoteGoalCheck(store, goals)


@pytest.fixture
def notification_engine(
    store: NotificationStore,
    derivation: DerivationEngine,
    goal_check: RemoteGoalCheck,
    clock: FakeClock,
) -> NotificationEngine:
    return NotificationEngine(store, derivation, goal_check, clock=clock)


@pytest.fixture
def issue_token():
    """Return a helper that signs tokens the way Supabase auth does."""

    def issue(
        user_id: str, *, email: str | None = None, expires_in: timedelta = timedelta(hours=1)
    ) -> str:
        claims = {
            "sub": user_id,
            "aud": "authenticated",
            "role": "authenticated",
            "exp": datetime.now(tz=timezone.utc) + expires_in,
        }
        if email:
            claims["email"] = email
        return jwt.encode(claims, get_settings().supabase_jwt_secret, algorithm="HS256")

    return issue
