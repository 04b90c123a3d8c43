"""
Integration tests for the periodic scheduler and the simulation context

Tests cover:
- Independent periods for the weather and mission tasks
- Cancellation and error isolation of periodic callbacks
- A full mission flown by the scheduler on a manual clock
"""

import logging

import pytest

from drone_pathfinder.models import MissionStatus
from drone_pathfinder.scheduler import ManualClock, Scheduler
from drone_pathfinder.session import SimulationContext
from tests.helpers import center, rect


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def sched(clock):
    return Scheduler(clock)


class TestScheduler:
    def test_independent_periods(self, clock, sched):
        weather = sched.every(2.0, lambda: None, name="weather")
        mission = sched.every(1.0, lambda: None, name="mission")
        sched.run_for(10.0, sleep=clock.sleep)
        assert weather.runs == 5
        assert mission.runs == 10
        assert clock() == pytest.approx(10.0)

    def test_cancelled_task_never_runs(self, clock, sched):
        calls = []
        task = sched.every(1.0, lambda: calls.append(1))
        task.cancel()
        sched.run_for(5.0, sleep=clock.sleep)
        assert calls == []
        assert sched.pending() == []
        assert sched.next_due() is None

    def test_failing_callback_keeps_its_schedule(self, clock, sched, caplog):
        def boom():
            raise RuntimeError("tick failed")

        task = sched.every(1.0, boom, name="boom")
        with caplog.at_level(logging.ERROR):
            sched.run_for(3.0, sleep=clock.sleep)
        assert task.runs == 3
        assert "Task 'boom' failed" in caplog.text

    def test_lagging_task_runs_once(self, clock, sched):
        task = sched.every(1.0, lambda: None)
        clock.advance(5.5)
        assert sched.run_pending() == 1
        assert task.next_run == pytest.approx(6.5)

    def test_run_now(self, sched):
        task = sched.every(3.0, lambda: None, run_now=True)
        assert sched.run_pending() == 1
        assert task.next_run == pytest.approx(3.0)

    def test_callback_can_cancel_another_task(self, sched, clock):
        later = sched.every(1.0, lambda: None, name="later")
        sched.every(1.0, later.cancel, name="canceller", run_now=True)
        clock.advance(1.0)
        sched.run_pending()
        assert later.runs == 0

    def test_interval_must_be_positive(self, sched):
        with pytest.raises(ValueError):
            sched.every(0.0, lambda: None)

    def test_cancel_all(self, sched):
        sched.every(1.0, lambda: None)
        sched.every(2.0, lambda: None)
        sched.cancel_all()
        assert sched.pending() == []


class TestSimulationContext:
    @pytest.fixture
    def ctx(self, grid20, quiet_params, calm_weather, clock):
        return SimulationContext(grid20, quiet_params, weather=calm_weather, clock=clock)

    def task_names(self, ctx):
        return sorted(t.name for t in ctx.scheduler.pending())

    def test_mission_flown_by_the_scheduler(self, ctx, clock, events):
        route = ctx.plan(center(0, 0), center(5, 0))
        assert len(route) == 6
        ctx.start_mission(route, listener=events.append)
        ctx.start_clock()
        assert self.task_names(ctx) == ["mission", "weather"]

        ctx.scheduler.run_for(120.0, sleep=clock.sleep)
        assert ctx.driver.status is MissionStatus.COMPLETE
        assert self.task_names(ctx) == ["weather"]
        assert ctx.weather.time == pytest.approx(6.0)
        assert events[-1].status is MissionStatus.COMPLETE

    def test_abort_cancels_only_the_mission_task(self, ctx, clock):
        ctx.start_clock()
        ctx.start_mission(ctx.plan(center(0, 0), center(9, 9)))
        assert self.task_names(ctx) == ["mission", "weather"]
        ctx.scheduler.run_for(3.0, sleep=clock.sleep)
        ctx.driver.abort()
        assert self.task_names(ctx) == ["weather"]

    def test_no_mission_task_before_the_clock_starts(self, ctx):
        ctx.start_mission(ctx.plan(center(0, 0), center(3, 0)))
        assert ctx.scheduler.pending() == []
        ctx.start_clock()
        assert self.task_names(ctx) == ["mission", "weather"]

    def test_new_mission_replaces_the_old_task(self, ctx):
        ctx.start_clock()
        ctx.start_mission(ctx.plan(center(0, 0), center(3, 0)))
        ctx.start_mission(ctx.plan(center(0, 0), center(4, 0)))
        assert self.task_names(ctx) == ["mission", "weather"]

    def test_stop(self, ctx):
        ctx.start_clock()
        ctx.stop()
        assert ctx.scheduler.pending() == []

    def test_mission_tick_without_mission(self, ctx):
        assert ctx.mission_tick() is MissionStatus.INACTIVE

    def test_obstacles_and_analysis(self, ctx):
        ctx.set_obstacles([rect(-1.0, 21.0, 9.0, 12.0)])
        assert ctx.plan(center(0, 0), center(19, 0)) == []
        route = ctx.plan(center(0, 0), center(5, 0))
        report = ctx.analyze(route, battery_range_km=10_000.0)
        assert report.within_range
        assert report.mean_risk == pytest.approx(10.0)
        assert ctx.sample_risk(center(10, 3)) == 100.0
        assert ctx.sample_weather(center(0, 0)).risk == 0.0

    def test_create_syncs_grid_size(self):
        ctx = SimulationContext.create(0.0, 1.0, 0.0, 1.0, size=12, seed=1)
        assert ctx.grid.size == 12
        assert ctx.params.grid_size == 12
        assert ctx.terrain.risk.shape == (12, 12)
