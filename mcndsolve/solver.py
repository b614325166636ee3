"""LP-based branch and bound for the network design MIP with pluggable branching rules."""

from __future__ import annotations

import heapq
import itertools
import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol, Sequence

import numpy as np
from scipy.optimize import linprog

from .branching import StrongBranch, is_integer
from .instance import Instance
from .model import build_model

DEFAULT_TIME_LIMIT = 3600.0
_LP_OPTIMAL = 0
_LP_UNBOUNDED = 3


class SolveStatus(Enum):
    OPTIMAL = "optimal"
    FEASIBLE = "feasible"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    UNKNOWN = "unknown"


class BranchingRule(Protocol):
    def choose(
        self,
        values: Sequence[float],
        depth: int,
        node_objective: float,
        strong_branch: Optional[StrongBranch],
    ) -> Optional[int]: ...


@dataclass
class SolveResult:
    """Outcome of a search: ``objective`` is the incumbent, ``best_bound`` the proven lower bound."""

    status: SolveStatus
    objective: Optional[float]
    best_bound: float
    gap: float
    nodes: int
    time: float
    x: Optional[np.ndarray] = None
    y: Optional[np.ndarray] = None

    @property
    def has_solution(self) -> bool:
        return self.status in (SolveStatus.OPTIMAL, SolveStatus.FEASIBLE)


@dataclass(order=True)
class _Node:
    bound: float
    order: int
    lower: np.ndarray = field(compare=False)
    upper: np.ndarray = field(compare=False)
    depth: int = field(compare=False)


@dataclass
class _Relaxation:
    status: int
    objective: float
    values: np.ndarray


class BranchAndBound:
    """Best-first branch and bound; ``rule`` picks among the design variables."""

    def __init__(
        self,
        instance: Instance,
        rule: Optional[BranchingRule] = None,
        time_limit: float = DEFAULT_TIME_LIMIT,
    ) -> None:
        if time_limit < 0:
            raise ValueError("time limit must not be negative")
        self.instance = instance
        self.rule = rule
        self.time_limit = time_limit
        self.model = build_model(instance)

    def _relax(self, lower: np.ndarray, upper: np.ndarray) -> _Relaxation:
        model = self.model
        if model.variable_count == 0:
            feasible = np.all(model.eq_rhs == 0) and np.all(model.ub_rhs >= 0)
            return _Relaxation(_LP_OPTIMAL if feasible else 2, 0.0, np.zeros(0))
        has_eq = model.eq_matrix.shape[0] > 0
        has_ub = model.ub_matrix.shape[0] > 0
        result = linprog(
            model.objective,
            A_ub=model.ub_matrix if has_ub else None,
            b_ub=model.ub_rhs if has_ub else None,
            A_eq=model.eq_matrix if has_eq else None,
            b_eq=model.eq_rhs if has_eq else None,
            bounds=np.column_stack((lower, upper)),
            method="highs",
        )
        if result.status != _LP_OPTIMAL:
            return _Relaxation(result.status, math.inf, np.zeros(0))
        return _Relaxation(_LP_OPTIMAL, float(result.fun), np.asarray(result.x, dtype=float))

    def _child_bound(self, lower: np.ndarray, upper: np.ndarray) -> float:
        relaxation = self._relax(lower, upper)
        return relaxation.objective if relaxation.status == _LP_OPTIMAL else math.inf

    def _strong_brancher(self, node: _Node, values: np.ndarray) -> StrongBranch:
        def strong_branch(candidates: Sequence[int]) -> list[tuple[float, float]]:
            outcomes = []
            for j in candidates:
                i = self.model.y_index(j)
                down_upper = node.upper.copy()
                down_upper[i] = math.floor(values[i])
                up_lower = node.lower.copy()
                up_lower[i] = math.ceil(values[i])
                outcomes.append(
                    (
                        self._child_bound(node.lower, down_upper),
                        self._child_bound(up_lower, node.upper),
                    )
                )
            return outcomes

        return strong_branch

    def _branch_index(
        self, node: _Node, values: np.ndarray, objective: float, fractional: list[int]
    ) -> int:
        if self.rule is not None:
            y = values[self.model.x_count:]
            choice = self.rule.choose(
                y, node.depth, objective, self._strong_brancher(node, values)
            )
            if choice is not None and 0 <= choice < self.model.y_count and not is_integer(y[choice]):
                return self.model.y_index(choice)
        return max(
            fractional,
            key=lambda i: min(values[i] - math.floor(values[i]), math.ceil(values[i]) - values[i]),
        )

    def solve(self) -> SolveResult:
        """Run the search until it is exhausted or the CPU time limit is reached."""
        start = time.process_time()
        n = self.model.variable_count
        counter = itertools.count()
        heap = [_Node(-math.inf, next(counter), np.zeros(n), np.ones(n), 0)]
        incumbent: Optional[np.ndarray] = None
        incumbent_obj = math.inf
        nodes = 0
        timed_out = False
        unbounded = False

        def cutoff() -> float:
            if math.isinf(incumbent_obj):
                return math.inf
            return incumbent_obj - 1e-9 * max(1.0, abs(incumbent_obj))

        while heap:
            if time.process_time() - start >= self.time_limit:
                timed_out = True
                break
            node = heapq.heappop(heap)
            if node.bound >= cutoff():
                continue
            nodes += 1
            relaxation = self._relax(node.lower, node.upper)
            if relaxation.status == _LP_UNBOUNDED:
                unbounded = True
                break
            if relaxation.status != _LP_OPTIMAL or relaxation.objective >= cutoff():
                continue
            values = relaxation.values
            fractional = [i for i, v in enumerate(values) if not is_integer(v)]
            if not fractional:
                incumbent = np.round(values) + 0.0
                incumbent_obj = float(self.model.objective @ incumbent)
                continue
            index = self._branch_index(node, values, relaxation.objective, fractional)
            up_lower = node.lower.copy()
            up_lower[index] = math.ceil(values[index])
            down_upper = node.upper.copy()
            down_upper[index] = math.floor(values[index])
            for lower, upper in ((up_lower, node.upper), (node.lower, down_upper)):
                heapq.heappush(
                    heap,
                    _Node(relaxation.objective, next(counter), lower, upper, node.depth + 1),
                )

        elapsed = time.process_time() - start
        if unbounded:
            return SolveResult(SolveStatus.UNBOUNDED, None, -math.inf, math.inf, nodes, elapsed)

        if timed_out:
            open_bound = min((n.bound for n in heap), default=math.inf)
            best_bound = min(open_bound, incumbent_obj)
            status = SolveStatus.FEASIBLE if incumbent is not None else SolveStatus.UNKNOWN
        else:
            best_bound = incumbent_obj
            status = SolveStatus.OPTIMAL if incumbent is not None else SolveStatus.INFEASIBLE

        if incumbent is None:
            return SolveResult(status, None, best_bound, math.inf, nodes, elapsed)
        if math.isinf(best_bound):
            gap = math.inf
        else:
            gap = abs(incumbent_obj - best_bound) / (1e-10 + abs(incumbent_obj))
        x, y = self.model.split(incumbent)
        return SolveResult(status, incumbent_obj, best_bound, gap, nodes, elapsed, x, y)


def solve(
    instance: Instance,
    rule: Optional[BranchingRule] = None,
    time_limit: float = DEFAULT_TIME_LIMIT,
) -> SolveResult:
    """Solve ``instance`` by branch and bound."""
    return BranchAndBound(instance, rule, time_limit).solve()