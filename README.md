# mcndsolve

`mcndsolve` solves the multicommodity capacitated fixed-charge network design
problem exactly. Each arc has a fixed cost for being opened, a capacity, and
for each commodity a per-unit cost and a flow bound. Each demand ships its
whole quantity from its origin to its destination along a single path. The
goal is to choose which arcs to open and how to route the demands so that the
total cost is as small as possible.

The problem is written as a binary linear program (binary flow variables `x`
followed by binary design variables `y`) and solved by a best-first
branch-and-bound search. LP relaxations are solved with SciPy's HiGHS
interface (`scipy.optimize.linprog`). The branching variable is picked by one
of these rules:

- `MostInfeasibleRule(objective)`: branch on the design variable whose
  fractional part is closest to one half. Ties go to the larger absolute
  objective coefficient taken from `objective`.
- `HybridRule(pseudocosts, max_depth=10, mu=1/6)`: at nodes of depth up to
  `max_depth`, strong branching. Each fractional design variable gets both
  children's LP bounds, and the gains update a `PseudocostTable`. Deeper
  nodes use pseudocost estimates instead, falling back to the table's
  averages (or 1.0) for variables with no history.
- `DataCollectionRule(mu=0.6)`: strong branching at every node. For each
  chosen variable it records `(value, depth, score)` in its `samples` list.

With no rule, or when a rule makes no choice, the search branches on the
most fractional variable.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Command line

```
mcnd-solve path/to/instance.dat
```

The command reads the instance and solves it with `HybridRule`. If a solution
is found, it prints the opened arcs, the flow each demand sends over each arc,
and the total cost. It also writes:

- `fileout`: the command appends one line for the run, giving the instance
  path, the lower bound, the upper bound, the relative gap in percent, the
  number of nodes explored and the CPU time in seconds.
- `RESULTAT/<instance name>.txt`: the number of active arcs and the active
  arcs themselves, numbered from 1. Then, for each demand, its path length
  and the arcs it uses, and at the end the total cost.

If the instance is infeasible or unbounded, the command says so and writes no
files. If it is not given exactly one instance, it prints a usage message.

Options:

| Option | Default | Meaning |
| --- | --- | --- |
| `--time-limit SECONDS` | `3600` | CPU time limit of the search |
| `--max-depth N` | `10` | deepest node that uses strong branching |
| `--summary FILE` | `fileout` | file the summary line is appended to |
| `--output-dir DIR` | `RESULTAT` | directory of the solution file |
| `--collect` | off | run `DataCollectionRule` instead and write its samples |
| `--data FILE` | `branching_data.csv` | file the samples are written to with `--collect` |

With `--collect` the command writes a CSV file with the header
`y_value,node_depth,score_strong_branching` and one row per branching
decision. It then reports whether a solution was found. It writes no summary
line and no solution file.

## Instance formats

Two plain-text formats are read. The first line of the file decides which
one applies.

**MULTIGEN format.** The first line reads `MULTIGEN.DAT:`. The next line holds
the number of nodes, arcs and demands. Then comes one line per arc:

```
origin destination unit_cost capacity fixed_cost
```

and one line per demand:

```
origin destination quantity
```

The unit cost applies to every commodity. The bound of a commodity on an arc
is the smaller of the arc capacity and the demand quantity.

**Per-commodity format.** The first line holds the number of nodes, arcs and
demands. Each arc is given as one line:

```
origin destination fixed_cost capacity count
```

followed by one line per demand:

```
commodity unit_cost bound
```

Last come two lines per demand, `commodity node supply`. A non-negative
supply marks the origin and gives the quantity. A negative supply marks the
destination.

Nodes and commodities are numbered from 1. Malformed or truncated files raise
`ValueError`.

## Library use

```python
from mcndsolve.instance import read_instance
from mcndsolve.model import build_model
from mcndsolve.branching import MostInfeasibleRule
from mcndsolve.solver import solve
from mcndsolve.report import format_solution

instance = read_instance("network.dat")
rule = MostInfeasibleRule(build_model(instance).y_objective)
result = solve(instance, rule, 60.0)
print(result.status)
if result.has_solution:
    print(format_solution(instance, result))
```

The modules are:

- `mcndsolve.instance`: `parse_instance` and `read_instance` build an
  `Instance` of `Arc` and `Demand` records. `Instance.x_index(k, a)` gives
  the position of a flow variable.
- `mcndsolve.model`: `build_model` turns an instance into a `MipModel`, with
  sparse equality and inequality matrices. `total_cost` prices a given
  design and flow.
- `mcndsolve.branching`: the three rules, `Pseudocost` and
  `PseudocostTable`, and the helpers `is_integer`, `combined_score` and
  `capped_gain`.
- `mcndsolve.solver`: `BranchAndBound` and the `solve` shortcut. Both return
  a `SolveResult`, whose `SolveStatus` is `OPTIMAL`, `FEASIBLE` (time limit
  reached with an incumbent), `INFEASIBLE`, `UNBOUNDED` or `UNKNOWN` (time
  limit reached without one).
- `mcndsolve.report`: `active_arcs`, `path_lengths`, `summary_line`,
  `append_summary`, `format_solution`, `solution_text` and `write_solution`.
- `mcndsolve.cli`: `main`, the `mcnd-solve` command.

## What it does not do

The samples recorded by `DataCollectionRule` and by `mcnd-solve --collect`
are only written out. The package does not train a scoring model on them,
and it has no branching rule that uses such a model.