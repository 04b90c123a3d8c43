"""
Unit tests for the weather hazard field

Tests cover:
- Risk formula bands
- Radial falloff of a single storm
- Additive accumulation and channel clamping
- Toroidal drift
- Random generation bounds and the wind perturbation
"""

import numpy as np
import pytest

from drone_pathfinder.config import SimParams
from drone_pathfinder.models import HazardCell, WeatherKind, WeatherSystem
from drone_pathfinder.weather import HazardField, generate_systems, weather_risk
from tests.helpers import center


QUIET = SimParams(wind_noise=0.0)


class TestRiskFormula:
    def test_calm_conditions_have_no_risk(self):
        assert weather_risk(20.0, 10.0, 80.0) == 0.0

    def test_each_channel_contributes(self):
        # 1.5 * 20 + 2 * 10 + 1.5 * 30
        assert weather_risk(40.0, 20.0, 50.0) == pytest.approx(95.0)

    def test_capped_at_100(self):
        assert weather_risk(100.0, 50.0, 0.0) == 100.0

    def test_vectorised(self):
        out = weather_risk(np.array([0.0, 60.0]), np.zeros(2), np.full(2, 100.0))
        assert out.tolist() == [0.0, 60.0]


class TestSingleStorm:
    def test_risk_falls_off_with_distance(self, grid10, storm_at_center):
        field = HazardField(grid10, QUIET, systems=[storm_at_center])
        samples = []
        for y in range(10):
            for x in range(10):
                d = float(np.hypot(x - 5, y - 5))
                samples.append((d, field.sample_cell((x, y)).risk))
        samples.sort()
        for (d1, r1), (d2, r2) in zip(samples, samples[1:]):
            if d2 > d1:
                assert r2 <= r1 + 1e-9
        assert all(r == 0.0 for d, r in samples if d >= 5.0)
        assert field.sample_cell((5, 5)).risk == 100.0

    def test_unsaturated_band_strictly_decreasing(self, grid10, storm_at_center):
        field = HazardField(grid10, QUIET, systems=[storm_at_center])
        r2 = field.sample_cell((7, 5)).risk
        r3 = field.sample_cell((8, 5)).risk
        r4 = field.sample_cell((9, 5)).risk
        assert r2 == pytest.approx(94.0)
        assert r3 == pytest.approx(36.0)
        assert r4 == 0.0
        assert r2 > r3 > r4

    def test_storm_channels_at_center(self, grid10, storm_at_center):
        cell = HazardField(grid10, QUIET, systems=[storm_at_center]).sample_cell((5, 5))
        assert cell.wind == pytest.approx(60.0)
        assert cell.rain == pytest.approx(40.0)
        assert cell.visibility == pytest.approx(20.0)

    def test_outside_radius_is_clear(self, grid10, storm_at_center):
        cell = HazardField(grid10, QUIET, systems=[storm_at_center]).sample_cell((0, 5))
        assert cell == HazardCell.CLEAR


class TestWindSystems:
    def test_wind_system_profile(self, grid10):
        wind = WeatherSystem(x=5.0, y=5.0, radius=5.0, kind=WeatherKind.WIND, intensity=1.0)
        cell = HazardField(grid10, QUIET, systems=[wind]).sample_cell((5, 5))
        assert cell.wind == pytest.approx(80.0)
        assert cell.rain == 0.0
        assert cell.visibility == pytest.approx(80.0)
        assert cell.risk == pytest.approx(90.0)

    def test_overlapping_systems_add_then_clamp(self, grid10):
        systems = [
            WeatherSystem(x=5.0, y=5.0, radius=5.0, kind=WeatherKind.WIND, intensity=1.0),
            WeatherSystem(x=5.0, y=5.0, radius=5.0, kind=WeatherKind.WIND, intensity=1.0),
        ]
        cell = HazardField(grid10, QUIET, systems=systems).sample_cell((5, 5))
        assert cell.wind == 100.0
        assert cell.visibility == pytest.approx(60.0)
        assert cell.risk == 100.0

    def test_intensity_scales_contribution(self, grid10):
        half = WeatherSystem(x=5.0, y=5.0, radius=5.0, kind=WeatherKind.WIND, intensity=0.5)
        cell = HazardField(grid10, QUIET, systems=[half]).sample_cell((5, 5))
        assert cell.wind == pytest.approx(40.0)


class TestDrift:
    def test_wraps_past_max_x(self, grid10):
        s = WeatherSystem(x=9.99, y=3.0, radius=2.0, kind=WeatherKind.WIND, intensity=1.0, drift_x=0.05)
        field = HazardField(grid10, QUIET, systems=[s])
        field.advance(1.0)
        assert s.x == pytest.approx(0.04)
        assert s.y == 3.0

    def test_wraps_below_zero(self, grid10):
        s = WeatherSystem(x=0.01, y=0.02, radius=2.0, kind=WeatherKind.STORM, intensity=1.0,
                          drift_x=-0.05, drift_y=-0.05)
        HazardField(grid10, QUIET, systems=[s]).advance(1.0)
        assert s.x == pytest.approx(9.96)
        assert s.y == pytest.approx(9.97)
        assert 0.0 <= s.x < 10.0

    def test_advance_accumulates_time_and_rerenders(self, grid10):
        s = WeatherSystem(x=2.0, y=5.0, radius=2.0, kind=WeatherKind.STORM, intensity=1.0, drift_x=1.0)
        field = HazardField(grid10, QUIET, systems=[s])
        assert field.sample_cell((2, 5)).risk > 0
        assert field.advance(3.0) == pytest.approx(3.0)
        assert field.sample_cell((5, 5)).risk > 0
        assert field.sample_cell((2, 5)).risk == 0.0


class TestGeneration:
    def test_generated_systems_within_bounds(self):
        rng = np.random.default_rng(11)
        for _ in range(20):
            systems = generate_systems(60, rng)
            assert 3 <= len(systems) <= 5
            for s in systems:
                assert 0.0 <= s.x < 60 and 0.0 <= s.y < 60
                assert 5.0 <= s.radius <= 15.0
                assert 0.5 <= s.intensity <= 1.0
                assert abs(s.drift_x) <= 0.05 and abs(s.drift_y) <= 0.05
                assert s.kind in (WeatherKind.STORM, WeatherKind.WIND)

    def test_seed_is_reproducible(self, grid20):
        a = HazardField(grid20, seed=3)
        b = HazardField(grid20, seed=3)
        assert a.systems == b.systems
        assert np.array_equal(a.risk_grid(), b.risk_grid())

    def test_reset_regenerates(self, grid20):
        field = HazardField(grid20, seed=3)
        field.advance(5.0)
        field.reset(seed=4)
        assert field.time == 0.0
        assert 3 <= len(field.systems) <= 5


class TestSampling:
    def test_noise_is_bounded_and_harmless(self, grid20):
        field = HazardField(grid20, SimParams(wind_noise=5.0), seed=1, systems=[])
        for y in range(20):
            for x in range(20):
                cell = field.sample_cell((x, y))
                assert 0.0 <= cell.wind < 5.0
                assert cell.risk == 0.0

    def test_sampling_is_stable_between_ticks(self, grid20):
        field = HazardField(grid20, seed=9)
        p = center(4, 4)
        assert field.sample_at(p) == field.sample_at(p)

    def test_risk_grid_is_read_only(self, grid20):
        grid = HazardField(grid20, seed=9).risk_grid()
        with pytest.raises(ValueError):
            grid[0, 0] = 1.0

    def test_all_channels_in_range(self, grid20):
        field = HazardField(grid20, seed=5)
        for _ in range(3):
            field.advance(10.0)
            risk = field.risk_grid()
            assert risk.min() >= 0.0 and risk.max() <= 100.0

    def test_to_dict(self):
        assert HazardCell.CLEAR.to_dict() == {"wind": 0.0, "rain": 0.0, "visibility": 100.0, "risk": 0.0}
