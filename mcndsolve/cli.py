"""Command line entry point: solve a network design instance and report the result."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from .branching import DataCollectionRule, HybridRule, PseudocostTable
from .instance import Instance, read_instance
from .report import (
    DEFAULT_RESULT_DIRECTORY,
    append_summary,
    format_solution,
    write_solution,
)
from .solver import DEFAULT_TIME_LIMIT, SolveStatus, solve

USAGE_MESSAGE = "Nombre de parametre non valide\n Ex: ./prog instance_base"
DATA_HEADER = "y_value,node_depth,score_strong_branching"


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcndsolve",
        description="Solve a multicommodity capacitated network design instance.",
    )
    parser.add_argument("instance", nargs="*", help="instance file")
    parser.add_argument("--time-limit", type=float, default=DEFAULT_TIME_LIMIT)
    parser.add_argument("--max-depth", type=int, default=10,
                        help="deepest node that uses strong branching")
    parser.add_argument("--summary", default="fileout", help="file the summary line is appended to")
    parser.add_argument("--output-dir", default=DEFAULT_RESULT_DIRECTORY)
    parser.add_argument("--collect", action="store_true",
                        help="record strong branching samples instead of reporting a solution")
    parser.add_argument("--data", default="branching_data.csv",
                        help="file the branching samples are written to")
    return parser


def _solve_and_report(instance_path: str, instance: Instance, args: argparse.Namespace) -> int:
    rule = HybridRule(PseudocostTable(instance.arc_count), max_depth=args.max_depth)
    result = solve(instance, rule, args.time_limit)
    if result.status is SolveStatus.INFEASIBLE:
        print("Le problème est infaisable : aucune solution trouvée.")
        return 0
    if result.status is SolveStatus.UNBOUNDED:
        print("Le problème est non borné : aucune solution trouvée.")
        return 0
    if not result.has_solution:
        return 0
    print("Une solution a été trouvée.")
    append_summary(args.summary, instance_path, result)
    sys.stdout.write(format_solution(instance, result))
    try:
        write_solution(instance_path, instance, result, args.output_dir)
    except OSError as error:
        print(f"Impossible d'ouvrir le fichier: {error}")
    return 0


def _collect(instance_path: str, instance: Instance, args: argparse.Namespace) -> int:
    print(f"Phase 1: Collecte des données pour l'instance {instance_path}")
    rule = DataCollectionRule()
    try:
        handle = open(args.data, "w", encoding="utf-8")
    except OSError:
        print(f"Erreur: Impossible d'ouvrir {args.data} pour écriture.", file=sys.stderr)
        return 1
    with handle:
        handle.write(DATA_HEADER + "\n")
        print("Début de la résolution pour la collecte de données...")
        result = solve(instance, rule, args.time_limit)
        for value, depth, score in rule.samples:
            handle.write(f"{value:g},{depth},{score:g}\n")
    if result.has_solution:
        print(f"Collecte de données terminée. Statut: Succès. Objectif: {result.objective:g}")
    else:
        print(
            "Collecte de données terminée. Statut: Échec ou pas de solution trouvée. "
            f"Statut: {result.status.value}"
        )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the solver on the single instance named on the command line."""
    args = _parser().parse_args(argv)
    if len(args.instance) != 1:
        print(USAGE_MESSAGE)
        return 0
    instance_path = args.instance[0]
    try:
        instance = read_instance(Path(instance_path))
    except OSError:
        print(f"Failure to open datafile: {instance_path}", file=sys.stderr)
        return 1
    except ValueError as error:
        print(f"Invalid datafile {instance_path}: {error}", file=sys.stderr)
        return 1
    if args.collect:
        return _collect(instance_path, instance, args)
    return _solve_and_report(instance_path, instance, args)


if __name__ == "__main__":
    sys.exit(main())