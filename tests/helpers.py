"""Plain helpers shared by test modules (fixtures live in conftest.py)."""

from drone_pathfinder.models import LatLng


def center(x: int, y: int) -> LatLng:
    """Centre of cell (x, y) on the one-degree test grids."""
    return LatLng(y + 0.5, x + 0.5)


def rect(lat0: float, lat1: float, lng0: float, lng1: float):
    return [LatLng(lat0, lng0), LatLng(lat0, lng1), LatLng(lat1, lng1), LatLng(lat1, lng0)]


def is_8_connected(cells) -> bool:
    return all(
        max(abs(a[0] - b[0]), abs(a[1] - b[1])) == 1
        for a, b in zip(cells, cells[1:])
    )


class StubPlanner:
    """Records find_path calls and returns a canned route"""

    def __init__(self, route=None, risk=0.0, on_call=None):
        self.route = list(route or [])
        self.risk = risk
        self.calls = []
        self.on_call = on_call

    def find_path(self, start, goal, risk_tolerance=50.0):
        self.calls.append((start, goal, risk_tolerance))
        if self.on_call is not None:
            self.on_call()
        return list(self.route)

    def sample_risk(self, point):
        return self.risk
