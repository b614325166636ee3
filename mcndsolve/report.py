"""Text reports of solved network design instances."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from .instance import Instance
from .model import total_cost
from .solver import SolveResult

ACTIVE_THRESHOLD = 0.5
FLOW_THRESHOLD = 1e-6
DEFAULT_RESULT_DIRECTORY = "RESULTAT"


def _require_solution(result: SolveResult) -> None:
    if not result.has_solution or result.x is None or result.y is None:
        raise ValueError(f"no solution to report (status {result.status.value})")


def active_arcs(y: Sequence[float]) -> list[int]:
    """Zero-based indices of the arcs whose design variable is open."""
    return [a for a, value in enumerate(y) if value > ACTIVE_THRESHOLD]


def _used_arcs(instance: Instance, x: Sequence[float], k: int) -> list[int]:
    return [
        a
        for a in range(instance.arc_count)
        if x[instance.x_index(k, a)] > FLOW_THRESHOLD
    ]


def path_lengths(instance: Instance, x: Sequence[float]) -> list[int]:
    """Number of arcs carrying flow of each commodity."""
    if len(x) != instance.arc_count * instance.demand_count:
        raise ValueError("x must hold one value per arc and demand")
    return [len(_used_arcs(instance, x, k)) for k in range(instance.demand_count)]


def summary_line(instance_path: str, result: SolveResult) -> str:
    """One-line record of bounds, gap, node count and time of a solve."""
    _require_solution(result)
    return (
        f"{instance_path} lb: {result.best_bound:.10g} ub: {result.objective:.10g}"
        f" gap: {result.gap * 100:.10g} nodes: {result.nodes} t: {result.time:.10g}"
    )


def append_summary(path: str | Path, instance_path: str, result: SolveResult) -> None:
    """Append the summary line of a solve to ``path``."""
    line = summary_line(instance_path, result)
    with open(path, "a", encoding="utf-8") as handle:
        handle.write(line + "\n")


def format_solution(instance: Instance, result: SolveResult) -> str:
    """Human-readable listing of the open arcs, the routed flows and the total cost."""
    _require_solution(result)
    x, y = result.x, result.y
    lines = ["Arcs activés:"]
    for a in active_arcs(y):
        arc = instance.arcs[a]
        lines.append(f"Arc activé : {arc.tail} -> {arc.head}")
    lines.append("")
    lines.append("Demandes transportées:")
    for k, demand in enumerate(instance.demands):
        lines.append(f"Demande {k + 1} :")
        for a in _used_arcs(instance, x, k):
            arc = instance.arcs[a]
            flow = x[instance.x_index(k, a)] * demand.quantity
            lines.append(f"  Arc {arc.tail} -> {arc.head} : flot = {flow:g}")
    lines.append(f"{total_cost(instance, x, y):.8g}")
    return "\n".join(lines) + "\n"


def solution_text(instance: Instance, result: SolveResult) -> str:
    """Contents of a solution file: open arcs and each commodity's arcs, numbered from 1."""
    _require_solution(result)
    x, y = result.x, result.y
    opened = active_arcs(y)
    lengths = path_lengths(instance, x)
    lines = [f"Nombre d'arcs actifs: {len(opened)}"]
    lines.extend(str(a + 1) for a in opened)
    for k, length in enumerate(lengths):
        lines.append(f"Demande {k + 1} (Taille: {length})")
        lines.extend(str(a + 1) for a in _used_arcs(instance, x, k))
    lines.append(f"Valeur totale: {total_cost(instance, x, y):.8g}")
    return "\n".join(lines) + "\n"


def _base_name(instance_path: str) -> str:
    start = max(instance_path.rfind("/"), instance_path.rfind("\\")) + 1
    dot = instance_path.rfind(".")
    if dot >= start:
        return instance_path[start:dot]
    return instance_path[start:]


def write_solution(
    instance_path: str,
    instance: Instance,
    result: SolveResult,
    directory: str | Path = DEFAULT_RESULT_DIRECTORY,
) -> Path:
    """Write the solution file named after the instance into ``directory``; return its path."""
    text = solution_text(instance, result)
    folder = Path(directory)
    folder.mkdir(parents=True, exist_ok=True)
    target = folder / f"{_base_name(instance_path)}.txt"
    target.write_text(text, encoding="utf-8")
    return target