# region Imports and Typing
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Set, Tuple
import heapq
# endregion

Cell = Tuple[int, int]


# region Node Record
@dataclass
class PlannerNode:
    cell: Cell
    g: float                     # accumulated cost from start
    f: float                     # g + heuristic
    parent: Optional["PlannerNode"] = None
# endregion


# region Neighbor Generation
def neighbors_8(u: Cell, size: int):
    x, y = u
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            xx, yy = x + dx, y + dy
            if 0 <= xx < size and 0 <= yy < size:
                yield (xx, yy)
# endregion


# region Path Reconstruction
def reconstruct(node: PlannerNode) -> List[Cell]:
    path = []
    v: Optional[PlannerNode] = node
    while v is not None:
        path.append(v.cell)
        v = v.parent
    path.reverse()
    return path
# endregion


# region A* Algorithm
def astar(
    start: Cell,
    goal: Cell,
    neighbors_fn: Callable[[Cell], Any],
    edge_cost_fn: Callable[[Cell, Cell], Optional[float]],
    heuristic_fn: Callable[[Cell, Cell], float],
    *,
    max_expansions: Optional[int] = None,
):
    """
    Returns:
      path (or None), total_cost, expansions

    Frontier is a binary heap of (f, h, counter, cell); counter keeps equal-f
    entries in insertion order. edge_cost_fn returning None marks v as a wall.
    Hitting max_expansions is a failure, never a partial path.
    """
    if start == goal:
        return [start], 0.0, 0

    counter = 0
    openh: List[Tuple[float, float, int, Cell]] = []
    h0 = heuristic_fn(start, goal)
    nodes: Dict[Cell, PlannerNode] = {start: PlannerNode(start, 0.0, h0)}
    heapq.heappush(openh, (h0, h0, counter, start))
    closed: Set[Cell] = set()
    expansions = 0

    while openh:
        _, _, _, u = heapq.heappop(openh)
        if u in closed:
            continue  # stale entry
        node = nodes[u]
        if u == goal:
            return reconstruct(node), node.g, expansions

        closed.add(u)
        expansions += 1
        if max_expansions is not None and expansions > max_expansions:
            return None, float("inf"), expansions

        # region Neighbor Loop
        for v in neighbors_fn(u):
            if v in closed:
                continue
            c = edge_cost_fn(u, v)
            if c is None:
                continue
            alt = node.g + c
            known = nodes.get(v)
            if known is None or alt < known.g - 1e-12:
                hv = heuristic_fn(v, goal)
                nodes[v] = PlannerNode(v, alt, alt + hv, node)
                counter += 1
                heapq.heappush(openh, (alt + hv, hv, counter, v))
        # endregion

    return None, float("inf"), expansions
# endregion
