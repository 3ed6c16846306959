"""Session lifecycle, scheduling and the public contract of the engine."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest

from nutrition_alerts.application.notifications import (
    CREATE_MEAL_PLAN_MESSAGE,
    TRACK_FOOD_MESSAGE,
    DerivationEngine,
    NotificationEngine,
    NotificationEngineRegistry,
    RemoteGoalCheck,
)
from nutrition_alerts.domain.entities import NotificationType

pytestmark = pytest.mark.anyio


class BlockingMealPlans:
    """Meal plan store whose reads stay in flight until released."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def latest_for_user(self, user_id):
        self.started.set()
        await self.release.wait()
        return None


class BlockingGoals:
    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def has_goals(self, user_id):
        self.started.set()
        await self.release.wait()
        return True


async def test_engine_is_inert_without_a_user(notification_engine, goals, meal_plans):
    state = await notification_engine.fetch_notifications()

    assert state.notifications == ()
    assert await notification_engine.run_derivation_pass() == []
    assert goals.calls == 0
    assert meal_plans.calls == 0


async def test_sign_in_runs_a_pass_immediately(notification_engine, clock):
    clock.at(8, 0)

    await notification_engine.sign_in("user-1")
    try:
        ids = [n.id for n in notification_engine.notifications]
        assert "meal-reminder-breakfast-2024-05-01" in ids
        assert notification_engine.unread_count == 2
        assert notification_engine.is_signed_in
    finally:
        await notification_engine.close()


async def test_periodic_passes_stop_after_sign_out(store, derivation, goal_check, clock):
    engine = NotificationEngine(
        store, derivation, goal_check, clock=clock, refresh_interval=timedelta(milliseconds=10)
    )
    clock.at(3, 0)
    await engine.sign_in("user-1")

    clock.at(12, 0)
    await asyncio.sleep(0.1)
    assert store.has_id("meal-reminder-lunch-2024-05-01")

    await engine.sign_out()
    clock.at(18, 0)
    await asyncio.sleep(0.1)

    assert not store.has_id("meal-reminder-dinner-2024-05-01")
    assert engine.notifications, "notifications are kept after sign-out"
    assert not engine.is_signed_in


async def test_signing_back_in_resumes_derivation(notification_engine, clock, store):
    clock.at(3, 0)
    await notification_engine.sign_in("user-1")
    await notification_engine.sign_out()

    clock.at(18, 30)
    await notification_engine.sign_in("user-1")
    try:
        assert store.has_id("meal-reminder-dinner-2024-05-01")
    finally:
        await notification_engine.close()


async def test_failed_pass_does_not_break_sign_in(notification_engine, meal_plans, clock, caplog):
    meal_plans.error = RuntimeError("unexpected payload")
    clock.at(8, 0)

    with caplog.at_level("ERROR"):
        await notification_engine.sign_in("user-1")
    try:
        assert "derivation pass failed" in caplog.text
        assert notification_engine.is_signed_in
    finally:
        await notification_engine.close()


async def test_fetch_notifications_is_idempotent(notification_engine, clock):
    clock.at(3, 0)
    await notification_engine.sign_in("user-1")
    try:
        # the sign-in pass already produced the daily goal nudge
        assert notification_engine.notifications[0].message == CREATE_MEAL_PLAN_MESSAGE

        first = await notification_engine.fetch_notifications()
        second = await notification_engine.fetch_notifications()
        assert first == second
        assert len(second.notifications) == 1
    finally:
        await notification_engine.close()


async def test_mutations_return_the_derived_state(notification_engine):
    state = notification_engine.add_notification("Payment received")
    assert state.unread_count == 1
    notification_id = state.notifications[0].id

    state = notification_engine.mark_as_read("unknown")
    assert state.unread_count == 1

    state = notification_engine.mark_as_read(notification_id)
    assert state.unread_count == 0
    assert state.notifications[0].is_read

    notification_engine.add_notification("Log your snack", NotificationType.MEAL, "4:00 PM")
    state = notification_engine.mark_all_as_read()
    assert state.unread_count == 0
    assert len(state.notifications) == 2


async def test_subscribers_see_each_accepted_notification_once(notification_engine):
    received = []
    notification_engine.subscribe(received.append)

    notification_engine.add_notification("Log your snack", NotificationType.MEAL)
    notification_engine.add_notification("Log your snack", NotificationType.MEAL)

    assert [n.message for n in received] == ["Log your snack"]


async def test_sign_out_during_read_drops_the_candidate(store, nutrition, goal_check, clock):
    meal_plans = BlockingMealPlans()
    engine = NotificationEngine(
        store, DerivationEngine(store, meal_plans, nutrition), goal_check, clock=clock
    )
    clock.at(8, 0)

    sign_in = asyncio.create_task(engine.sign_in("user-1"))
    await meal_plans.started.wait()
    await engine.sign_out()
    meal_plans.release.set()
    await sign_in

    assert store.get_all() == ()
    await engine.close()


def _refresh_loops():
    return [
        task
        for task in asyncio.all_tasks()
        if not task.done()
        and task.get_coro().__qualname__ == "NotificationEngine._refresh_periodically"
    ]


async def test_sign_in_overlapping_a_sign_out_keeps_a_single_refresh_loop(
    store, nutrition, goal_check, clock
):
    meal_plans = BlockingMealPlans()
    engine = NotificationEngine(
        store, DerivationEngine(store, meal_plans, nutrition), goal_check, clock=clock
    )
    clock.at(3, 0)

    stale = asyncio.create_task(engine.sign_in("user-1"))
    await meal_plans.started.wait()
    await engine.sign_out()
    current = asyncio.create_task(engine.sign_in("user-1"))
    await asyncio.sleep(0)
    meal_plans.release.set()
    await asyncio.gather(stale, current)

    assert len(_refresh_loops()) == 1

    await engine.sign_out()
    assert _refresh_loops() == []

    await engine.sign_in("user-1")
    assert len(_refresh_loops()) == 1

    await engine.close()
    assert _refresh_loops() == []


async def test_overlapping_goal_paths_can_both_fire(store, derivation, clock):
    goals = BlockingGoals()
    goal_check = RemoteGoalCheck(store, goals)
    clock.at(3, 0)

    refresh = asyncio.create_task(goal_check.run("user-1", clock.now))
    await goals.started.wait()
    await derivation.goal_reminder("user-1", clock.now)
    goals.release.set()
    await refresh

    messages = {n.message for n in store.get_all() if n.type is NotificationType.GOAL}
    assert messages == {CREATE_MEAL_PLAN_MESSAGE, TRACK_FOOD_MESSAGE}


async def test_goal_rule_still_fires_when_the_refresh_lands_first(store, nutrition, goals, clock):
    meal_plans = BlockingMealPlans()
    derivation = DerivationEngine(store, meal_plans, nutrition)
    goal_check = RemoteGoalCheck(store, goals)
    clock.at(3, 0)

    rule = asyncio.create_task(derivation.goal_reminder("user-1", clock.now))
    await meal_plans.started.wait()
    await goal_check.run("user-1", clock.now)
    meal_plans.release.set()
    await rule

    messages = {n.message for n in store.get_all() if n.type is NotificationType.GOAL}
    assert messages == {CREATE_MEAL_PLAN_MESSAGE, TRACK_FOOD_MESSAGE}


async def test_registry_creates_one_engine_per_user(store, derivation, goal_check, clock):
    built = []

    def factory(user_id):
        engine = NotificationEngine(store, derivation, goal_check, clock=clock)
        built.append(user_id)
        return engine

    registry = NotificationEngineRegistry(factory)
    clock.at(3, 0)

    first = await registry.ensure_signed_in("user-1")
    second = await registry.ensure_signed_in("user-1")
    assert first is second
    assert built == ["user-1"]
    assert registry.get("user-1") is first

    await registry.sign_out("user-1")
    assert not first.is_signed_in
    assert await registry.sign_out("someone-else") is None

    again = await registry.ensure_signed_in("user-1")
    assert again is first and again.is_signed_in

    await registry.close_all()
    assert registry.get("user-1") is None
    assert not first.is_signed_in
