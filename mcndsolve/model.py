"""Mixed-integer formulation of the multicommodity capacitated network design problem."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from scipy import sparse

from .instance import Instance


@dataclass(frozen=True, eq=False)
class MipModel:
    """A minimisation MIP over binary flow variables ``x`` followed by binary design variables ``y``.

    ``x[k * arc_count + a]`` is the fraction of commodity ``k`` routed on arc ``a``;
    ``y[a]`` opens arc ``a``. Constraints read ``eq_matrix @ v == eq_rhs`` and
    ``ub_matrix @ v <= ub_rhs``; every variable lies in [0, 1] and is integer.
    """

    objective: np.ndarray
    eq_matrix: sparse.csr_matrix
    eq_rhs: np.ndarray
    ub_matrix: sparse.csr_matrix
    ub_rhs: np.ndarray
    x_count: int
    y_count: int

    @property
    def variable_count(self) -> int:
        return self.x_count + self.y_count

    @property
    def y_objective(self) -> np.ndarray:
        """Objective coefficients of the design variables."""
        return self.objective[self.x_count:]

    def y_index(self, a: int) -> int:
        """Position of the design variable of arc ``a`` in the full variable vector."""
        if not 0 <= a < self.y_count:
            raise IndexError(f"arc index {a} out of range")
        return self.x_count + a

    def split(self, values: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
        """Split a full variable vector into its ``x`` and ``y`` parts."""
        vector = np.asarray(values, dtype=float)
        if vector.shape != (self.variable_count,):
            raise ValueError(
                f"expected {self.variable_count} values, got shape {vector.shape}"
            )
        return vector[: self.x_count], vector[self.x_count:]

    def join(self, x: Sequence[float], y: Sequence[float]) -> np.ndarray:
        """Concatenate ``x`` and ``y`` into a full variable vector."""
        x_arr = np.asarray(x, dtype=float)
        y_arr = np.asarray(y, dtype=float)
        if x_arr.shape != (self.x_count,) or y_arr.shape != (self.y_count,):
            raise ValueError("x or y has the wrong length")
        return np.concatenate((x_arr, y_arr))


def _flow_costs(instance: Instance) -> np.ndarray:
    """Objective coefficients of the flow variables, ordered commodity by commodity."""
    costs = np.array([arc.costs for arc in instance.arcs], dtype=float).reshape(
        instance.arc_count, instance.demand_count
    )
    quantities = np.array([d.quantity for d in instance.demands], dtype=float)
    return (costs.T * quantities[:, None]).ravel()


def _fixed_costs(instance: Instance) -> np.ndarray:
    return np.array([arc.fixed_cost for arc in instance.arcs], dtype=float)


class _Rows:
    def __init__(self) -> None:
        self.rows: list[int] = []
        self.cols: list[int] = []
        self.vals: list[float] = []
        self.rhs: list[float] = []

    def add(self, terms: list[tuple[int, float]], rhs: float) -> None:
        row = len(self.rhs)
        for col, val in terms:
            self.rows.append(row)
            self.cols.append(col)
            self.vals.append(val)
        self.rhs.append(rhs)

    def matrix(self, width: int) -> sparse.csr_matrix:
        return sparse.coo_matrix(
            (self.vals, (self.rows, self.cols)), shape=(len(self.rhs), width)
        ).tocsr()

    def vector(self) -> np.ndarray:
        return np.array(self.rhs, dtype=float)


def build_model(instance: Instance) -> MipModel:
    """Build flow conservation, joint capacity and per-commodity bound constraints."""
    x_count = instance.arc_count * instance.demand_count
    y_count = instance.arc_count
    width = x_count + y_count
    objective = np.concatenate((_flow_costs(instance), _fixed_costs(instance)))

    equalities = _Rows()
    for k, demand in enumerate(instance.demands):
        for node in range(1, instance.node_count + 1):
            terms = []
            for a, arc in enumerate(instance.arcs):
                if arc.tail == node:
                    terms.append((instance.x_index(k, a), 1.0))
                elif arc.head == node:
                    terms.append((instance.x_index(k, a), -1.0))
            if node == demand.destination:
                rhs = -1.0
            elif node == demand.origin:
                rhs = 1.0
            else:
                rhs = 0.0
            equalities.add(terms, rhs)

    inequalities = _Rows()
    for a, arc in enumerate(instance.arcs):
        terms = [
            (instance.x_index(k, a), demand.quantity)
            for k, demand in enumerate(instance.demands)
        ]
        terms.append((x_count + a, -arc.capacity))
        inequalities.add(terms, 0.0)
    for k, demand in enumerate(instance.demands):
        for a, arc in enumerate(instance.arcs):
            inequalities.add(
                [(instance.x_index(k, a), demand.quantity), (x_count + a, -arc.bounds[k])],
                0.0,
            )

    return MipModel(
        objective=objective,
        eq_matrix=equalities.matrix(width),
        eq_rhs=equalities.vector(),
        ub_matrix=inequalities.matrix(width),
        ub_rhs=inequalities.vector(),
        x_count=x_count,
        y_count=y_count,
    )


def total_cost(instance: Instance, x: Sequence[float], y: Sequence[float]) -> float:
    """Design plus routing cost of a solution given as flow fractions and arc openings."""
    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    if x_arr.shape != (instance.arc_count * instance.demand_count,):
        raise ValueError(f"x has shape {x_arr.shape}, expected one value per arc and demand")
    if y_arr.shape != (instance.arc_count,):
        raise ValueError(f"y has shape {y_arr.shape}, expected one value per arc")
    return float(_fixed_costs(instance) @ y_arr + _flow_costs(instance) @ x_arr)