import pytest

from mcndsolve.branching import (
    DataCollectionRule,
    HybridRule,
    MostInfeasibleRule,
    PseudocostTable,
    is_integer,
)
from mcndsolve.instance import Arc, Demand, Instance
from mcndsolve.model import build_model, total_cost
from mcndsolve.solver import BranchAndBound, SolveStatus, solve


def _instance(quantity: float = 5.0) -> Instance:
    arcs = [
        Arc(tail=1, head=2, capacity=10.0, fixed_cost=100.0, costs=[1.0], bounds=[10.0]),
        Arc(tail=1, head=3, capacity=10.0, fixed_cost=10.0, costs=[1.0], bounds=[10.0]),
        Arc(tail=3, head=2, capacity=10.0, fixed_cost=10.0, costs=[1.0], bounds=[10.0]),
    ]
    return Instance(node_count=3, arcs=arcs, demands=[Demand(1, 2, quantity)])


class _OutOfRangeRule:
    def choose(self, values, depth, node_objective, strong_branch):
        return 99


RULES = {
    "default": lambda inst: None,
    "most_infeasible": lambda inst: MostInfeasibleRule(list(build_model(inst).y_objective)),
    "hybrid": lambda inst: HybridRule(PseudocostTable(inst.arc_count)),
    "pseudocost_only": lambda inst: HybridRule(PseudocostTable(inst.arc_count), max_depth=-1),
    "data_collection": lambda inst: DataCollectionRule(),
    "out_of_range": lambda inst: _OutOfRangeRule(),
}


@pytest.mark.parametrize("name", sorted(RULES))
def test_every_rule_finds_the_optimum(name):
    inst = _instance()
    result = solve(inst, RULES[name](inst), 60.0)
    assert result.status is SolveStatus.OPTIMAL
    assert result.objective == pytest.approx(30.0)
    assert list(result.y) == [0.0, 1.0, 1.0]


def test_result_is_consistent():
    inst = _instance()
    result = solve(inst)
    assert result.has_solution
    assert total_cost(inst, result.x, result.y) == pytest.approx(result.objective)
    assert result.best_bound == pytest.approx(result.objective)
    assert result.gap == pytest.approx(0.0, abs=1e-9)
    assert result.nodes >= 1
    assert all(is_integer(v) for v in result.x)


def test_infeasible_instance():
    result = solve(_instance(quantity=20.0))
    assert result.status is SolveStatus.INFEASIBLE
    assert result.objective is None
    assert result.x is None and result.y is None
    assert not result.has_solution


def test_unreachable_destination_is_infeasible():
    inst = _instance()
    inst.demands[0].destination = 4
    inst.node_count = 4
    assert solve(inst).status is SolveStatus.INFEASIBLE


def test_zero_time_limit_gives_no_solution():
    result = solve(_instance(), None, 0.0)
    assert result.status is SolveStatus.UNKNOWN
    assert result.objective is None
    assert result.nodes == 0


def test_negative_time_limit_rejected():
    with pytest.raises(ValueError):
        BranchAndBound(_instance(), None, -1.0)


def test_data_collection_records_fractional_choices():
    inst = _instance()
    rule = DataCollectionRule()
    BranchAndBound(inst, rule, 60.0).solve()
    assert rule.samples
    for value, depth, _score in rule.samples:
        assert not is_integer(value)
        assert depth >= 0


def test_hybrid_rule_learns_pseudocosts():
    inst = _instance()
    table = PseudocostTable(inst.arc_count)
    solve(inst, HybridRule(table), 60.0)
    assert sum(table[j].up_count + table[j].down_count for j in range(len(table))) > 0


def test_solver_exposes_model():
    inst = _instance()
    solver = BranchAndBound(inst)
    assert solver.model.y_count == inst.arc_count