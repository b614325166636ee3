import numpy as np
import pytest

from mcndsolve.instance import Arc, Demand, Instance
from mcndsolve.model import build_model, total_cost


def _instance() -> Instance:
    arcs = [
        Arc(tail=1, head=2, capacity=10.0, fixed_cost=100.0, costs=[1.0], bounds=[10.0]),
        Arc(tail=1, head=3, capacity=10.0, fixed_cost=10.0, costs=[1.0], bounds=[10.0]),
        Arc(tail=3, head=2, capacity=10.0, fixed_cost=10.0, costs=[1.0], bounds=[10.0]),
    ]
    return Instance(node_count=3, arcs=arcs, demands=[Demand(1, 2, 5.0)])


def test_dimensions():
    inst = _instance()
    model = build_model(inst)
    assert model.x_count == inst.arc_count * inst.demand_count
    assert model.y_count == inst.arc_count
    assert model.eq_matrix.shape == (inst.demand_count * inst.node_count, model.variable_count)
    assert model.ub_matrix.shape == (
        inst.arc_count * (1 + inst.demand_count),
        model.variable_count,
    )


def test_conservation_right_hand_side():
    model = build_model(_instance())
    assert list(model.eq_rhs) == [1.0, -1.0, 0.0]


def test_design_objective_is_fixed_cost():
    inst = _instance()
    model = build_model(inst)
    assert list(model.y_objective) == [arc.fixed_cost for arc in inst.arcs]


def test_path_solution_is_feasible():
    model = build_model(_instance())
    v = model.join([0.0, 1.0, 1.0], [0.0, 1.0, 1.0])
    assert np.allclose(model.eq_matrix @ v, model.eq_rhs)
    assert np.all(model.ub_matrix @ v <= model.ub_rhs + 1e-9)


def test_closed_arc_violates_capacity():
    model = build_model(_instance())
    v = model.join([1.0, 0.0, 0.0], [0.0, 0.0, 0.0])
    violated = int(np.sum(model.ub_matrix @ v > model.ub_rhs + 1e-9))
    # The global and the per-demand capacity rows of the closed arc both fail.
    assert violated == 2


def test_broken_path_violates_conservation():
    model = build_model(_instance())
    v = model.join([0.0, 1.0, 0.0], [0.0, 1.0, 0.0])
    assert not np.allclose(model.eq_matrix @ v, model.eq_rhs)


def test_objective_agrees_with_total_cost():
    inst = _instance()
    model = build_model(inst)
    x, y = [0.3, 0.7, 0.7], [0.5, 1.0, 0.2]
    assert model.objective @ model.join(x, y) == pytest.approx(total_cost(inst, x, y))


def test_total_cost_of_open_arcs_only():
    inst = _instance()
    cost = total_cost(inst, [0.0, 0.0, 0.0], [1.0, 1.0, 1.0])
    assert cost == pytest.approx(sum(arc.fixed_cost for arc in inst.arcs))


def test_total_cost_rejects_wrong_lengths():
    inst = _instance()
    with pytest.raises(ValueError):
        total_cost(inst, [0.0, 0.0], [1.0, 1.0, 1.0])
    with pytest.raises(ValueError):
        total_cost(inst, [0.0, 0.0, 0.0], [1.0])


def test_split_join_round_trip():
    model = build_model(_instance())
    x, y = model.split(model.join([0.1, 0.2, 0.3], [0.4, 0.5, 0.6]))
    assert list(x) == [0.1, 0.2, 0.3]
    assert list(y) == [0.4, 0.5, 0.6]


def test_split_rejects_wrong_length():
    model = build_model(_instance())
    with pytest.raises(ValueError):
        model.split([0.0, 1.0])


def test_y_index_bounds():
    model = build_model(_instance())
    assert model.y_index(0) == model.x_count
    with pytest.raises(IndexError):
        model.y_index(model.y_count)