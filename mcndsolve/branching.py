"""Branching-variable selection rules for branch and bound on design variables."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

INTEGRALITY_TOLERANCE = 1e-5
FRACTIONALITY_TOLERANCE = 1e-6
INFINITE_BOUND = 1e19
INFEASIBLE_PENALTY = 1e7
NEGLIGIBLE = sys.float_info.max

StrongBranch = Callable[[Sequence[int]], Optional[Sequence[tuple[float, float]]]]


def is_integer(value: float) -> bool:
    """True when ``value`` is within the integrality tolerance of an integer."""
    return abs(value - round(value)) <= INTEGRALITY_TOLERANCE


def combined_score(down_gain: float, up_gain: float, mu: float) -> float:
    """Weighted mix of the smaller and larger of two gains."""
    return (1.0 - mu) * min(down_gain, up_gain) + mu * max(down_gain, up_gain)


def capped_gain(branch_objective: float, node_objective: float) -> float:
    """Objective gain of a child; an infeasible child counts as a large fixed penalty."""
    if branch_objective >= INFINITE_BOUND:
        branch_objective = node_objective + INFEASIBLE_PENALTY
    return branch_objective - node_objective


def _fractional(values: Sequence[float]) -> list[int]:
    return [j for j, value in enumerate(values) if not is_integer(value)]


@dataclass
class Pseudocost:
    """Running average of per-unit objective gains in each branching direction."""

    up_score: float = 0.0
    down_score: float = 0.0
    up_count: int = 0
    down_count: int = 0


class PseudocostTable:
    """Pseudocosts of a fixed number of variables."""

    def __init__(self, size: int) -> None:
        self._entries = [Pseudocost() for _ in range(size)]

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> Pseudocost:
        return self._entries[index]

    def update(self, index: int, value: float, down_gain: float, up_gain: float) -> None:
        """Fold the gains observed when branching on ``index`` at ``value`` into the averages."""
        if not 0 <= index < len(self._entries):
            return
        entry = self._entries[index]
        frac_down = value - math.floor(value)
        frac_up = math.ceil(value) - value
        if frac_down > FRACTIONALITY_TOLERANCE:
            entry.down_score = (entry.down_count * entry.down_score + down_gain / frac_down) / (
                entry.down_count + 1.0
            )
            entry.down_count += 1
        if frac_up > FRACTIONALITY_TOLERANCE:
            entry.up_score = (entry.up_count * entry.up_score + up_gain / frac_up) / (
                entry.up_count + 1.0
            )
            entry.up_count += 1

    def averages(self) -> tuple[float, float]:
        """Mean (down, up) pseudocost over initialised entries, 1.0 where none are."""
        downs = [e.down_score for e in self._entries if e.down_count > 0]
        ups = [e.up_score for e in self._entries if e.up_count > 0]
        return (
            sum(downs) / len(downs) if downs else 1.0,
            sum(ups) / len(ups) if ups else 1.0,
        )

    def estimate(self, index: int, value: float, averages: tuple[float, float]) -> tuple[float, float]:
        """Estimated (down, up) degradations; a negligible direction gives the float maximum."""
        entry = self._entries[index]
        avg_down, avg_up = averages
        psi_down = entry.down_score if entry.down_count > 0 else avg_down
        psi_up = entry.up_score if entry.up_count > 0 else avg_up
        f_down = value - math.floor(value)
        f_up = math.ceil(value) - value
        q_down = f_down * psi_down if f_down > FRACTIONALITY_TOLERANCE else NEGLIGIBLE
        q_up = f_up * psi_up if f_up > FRACTIONALITY_TOLERANCE else NEGLIGIBLE
        return q_down, q_up


@dataclass
class MostInfeasibleRule:
    """Branch on the most fractional variable, ties broken by larger objective coefficient."""

    objective: Sequence[float]

    def choose(
        self,
        values: Sequence[float],
        depth: int,
        node_objective: float,
        strong_branch: StrongBranch | None,
    ) -> int | None:
        best = None
        max_inf = 0.0
        max_obj = 0.0
        for j in _fractional(values):
            inf = values[j] - math.floor(values[j])
            if inf > 0.5:
                inf = 1.0 - inf
            coef = abs(self.objective[j])
            if inf >= max_inf and (inf > max_inf or coef >= max_obj):
                best, max_inf, max_obj = j, inf, coef
        return best


@dataclass
class HybridRule:
    """Strong branching down to ``max_depth``, pseudocost estimates below it."""

    pseudocosts: PseudocostTable
    max_depth: int = 10
    mu: float = 1.0 / 6.0

    def choose(
        self,
        values: Sequence[float],
        depth: int,
        node_objective: float,
        strong_branch: StrongBranch | None,
    ) -> int | None:
        if depth <= self.max_depth:
            return self._strong(values, node_objective, strong_branch)
        return self._by_pseudocost(values)

    def _strong(
        self, values: Sequence[float], node_objective: float, strong_branch: StrongBranch | None
    ) -> int | None:
        candidates = _fractional(values)
        if not candidates or strong_branch is None:
            return None
        outcomes = strong_branch(candidates)
        if outcomes is None:
            return None
        best, best_score = None, -math.inf
        for j, (down_obj, up_obj) in zip(candidates, outcomes):
            down_gain = capped_gain(down_obj, node_objective)
            up_gain = capped_gain(up_obj, node_objective)
            score = combined_score(down_gain, up_gain, self.mu)
            self.pseudocosts.update(j, values[j], down_gain, up_gain)
            if score > best_score:
                best, best_score = j, score
        return best

    def _by_pseudocost(self, values: Sequence[float]) -> int | None:
        averages = self.pseudocosts.averages()
        best, best_score = None, -math.inf
        for j in _fractional(values):
            if j >= len(self.pseudocosts):
                continue
            q_down, q_up = self.pseudocosts.estimate(j, values[j], averages)
            if q_down == NEGLIGIBLE and q_up == NEGLIGIBLE:
                continue
            score = combined_score(q_down, q_up, self.mu)
            if score > best_score:
                best, best_score = j, score
        return best


@dataclass
class DataCollectionRule:
    """Strong branching that records (value, depth, score) of every chosen variable."""

    samples: list[tuple[float, int, float]] = field(default_factory=list)
    mu: float = 0.6

    def choose(
        self,
        values: Sequence[float],
        depth: int,
        node_objective: float,
        strong_branch: StrongBranch | None,
    ) -> int | None:
        candidates = _fractional(values)
        if not candidates or strong_branch is None:
            return None
        outcomes = strong_branch(candidates)
        if outcomes is None:
            return None
        best, best_score = None, -1e100
        for j, (down_obj, up_obj) in zip(candidates, outcomes):
            score = combined_score(
                capped_gain(down_obj, node_objective), capped_gain(up_obj, node_objective), self.mu
            )
            if score > best_score:
                best, best_score = j, score
        if best is not None:
            self.samples.append((values[best], depth, best_score))
        return best