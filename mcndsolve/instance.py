"""Multicommodity capacitated network design instances and their two text formats."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

MULTIGEN_HEADERS = ("MULTIGEN.DAT:", " MULTIGEN.DAT:")


@dataclass
class Arc:
    """A directed arc with fixed design cost, capacity and per-commodity data."""

    tail: int
    head: int
    capacity: float
    fixed_cost: float
    costs: list[float] = field(default_factory=list)
    bounds: list[float] = field(default_factory=list)


@dataclass
class Demand:
    """A commodity to route from ``origin`` to ``destination``."""

    origin: int = 0
    destination: int = 0
    quantity: float = 0.0


@dataclass
class Instance:
    """A network design instance: nodes are numbered from 1."""

    node_count: int
    arcs: list[Arc]
    demands: list[Demand]

    @property
    def arc_count(self) -> int:
        return len(self.arcs)

    @property
    def demand_count(self) -> int:
        return len(self.demands)

    def x_index(self, k: int, a: int) -> int:
        """Position of the flow variable of commodity ``k`` on arc ``a``."""
        if not 0 <= k < self.demand_count:
            raise IndexError(f"demand index {k} out of range")
        if not 0 <= a < self.arc_count:
            raise IndexError(f"arc index {a} out of range")
        return k * self.arc_count + a


class _Lines:
    def __init__(self, lines: list[str]) -> None:
        self._iter: Iterator[tuple[int, str]] = iter(enumerate(lines, start=1))

    def fields(self, what: str, count: int) -> list[str]:
        try:
            number, line = next(self._iter)
        except StopIteration:
            raise ValueError(f"unexpected end of data while reading {what}") from None
        tokens = line.split()
        if len(tokens) < count:
            raise ValueError(
                f"line {number}: expected {count} fields for {what}, got {len(tokens)}"
            )
        return tokens


def _int(token: str, what: str) -> int:
    try:
        return int(token)
    except ValueError:
        raise ValueError(f"invalid integer {token!r} for {what}") from None


def _float(token: str, what: str) -> float:
    try:
        return float(token)
    except ValueError:
        raise ValueError(f"invalid number {token!r} for {what}") from None


def _parse_multigen(lines: _Lines, arc_count: int, demand_count: int) -> tuple[list[Arc], list[Demand]]:
    arcs = []
    for _ in range(arc_count):
        tail, head, cost, capa, fixed = lines.fields("arc", 5)[:5]
        capacity = _float(capa, "arc capacity")
        arcs.append(
            Arc(
                tail=_int(tail, "arc tail"),
                head=_int(head, "arc head"),
                capacity=capacity,
                fixed_cost=_float(fixed, "arc fixed cost"),
                costs=[_float(cost, "arc unit cost")] * demand_count,
                bounds=[capacity] * demand_count,
            )
        )
    demands = []
    for _ in range(demand_count):
        origin, destination, quantity = lines.fields("demand", 3)[:3]
        demands.append(
            Demand(
                origin=_int(origin, "demand origin"),
                destination=_int(destination, "demand destination"),
                quantity=_float(quantity, "demand quantity"),
            )
        )
    for k, demand in enumerate(demands):
        for arc in arcs:
            arc.bounds[k] = min(arc.bounds[k], demand.quantity)
    return arcs, demands


def _commodity_index(token: str, demand_count: int) -> int:
    index = _int(token, "commodity number") - 1
    if not 0 <= index < demand_count:
        raise ValueError(f"commodity number {token} out of range 1..{demand_count}")
    return index


def _parse_standard(lines: _Lines, arc_count: int, demand_count: int) -> tuple[list[Arc], list[Demand]]:
    arcs = []
    for _ in range(arc_count):
        tail, head, fixed, capa = lines.fields("arc", 4)[:4]
        arc = Arc(
            tail=_int(tail, "arc tail"),
            head=_int(head, "arc head"),
            capacity=_float(capa, "arc capacity"),
            fixed_cost=_float(fixed, "arc fixed cost"),
            costs=[0.0] * demand_count,
            bounds=[0.0] * demand_count,
        )
        for _ in range(demand_count):
            number, cost, bound = lines.fields("arc commodity data", 3)[:3]
            k = _commodity_index(number, demand_count)
            arc.costs[k] = _float(cost, "commodity unit cost")
            arc.bounds[k] = _float(bound, "commodity bound")
        arcs.append(arc)
    demands = [Demand() for _ in range(demand_count)]
    for _ in range(2 * demand_count):
        number, node, supply = lines.fields("demand node", 3)[:3]
        demand = demands[_commodity_index(number, demand_count)]
        amount = _float(supply, "supply")
        if amount < 0:
            demand.destination = _int(node, "demand node")
        else:
            demand.origin = _int(node, "demand node")
            demand.quantity = amount
    return arcs, demands


def parse_instance(text: str) -> Instance:
    """Parse an instance in either the MULTIGEN or the per-commodity format."""
    raw = text.splitlines()
    if not raw:
        raise ValueError("empty instance")
    multigen = raw[0] in MULTIGEN_HEADERS
    lines = _Lines(raw[1:] if multigen else raw)
    node_count, arc_count, demand_count = (
        _int(token, "header") for token in lines.fields("header", 3)[:3]
    )
    if node_count < 0 or arc_count < 0 or demand_count < 0:
        raise ValueError("header counts must not be negative")
    parser = _parse_multigen if multigen else _parse_standard
    arcs, demands = parser(lines, arc_count, demand_count)
    return Instance(node_count=node_count, arcs=arcs, demands=demands)


def read_instance(path: str | Path) -> Instance:
    """Read and parse an instance file."""
    return parse_instance(Path(path).read_text())