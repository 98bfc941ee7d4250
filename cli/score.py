"""CLI utility for claim viability - scores every claim of a case graph."""

import argparse
import json
import logging
import sys

from justinianus.cases import CaseManager
from justinianus.config_loader import get_settings
from justinianus.errors import JustinianusError
from justinianus.graph.analysis import analyze_graph
from justinianus.graph.entities import NODE_KIND_LABELS, NodeKind
from justinianus.graph.scoring import ClaimScore, ScoringPolicy, case_probability_of_success, score_claims


def format_score(result: ClaimScore, index: int) -> str:
    """Format a claim score for display.

    Args:
        result: Score of one claim
        index: Claim index (1-based)

    Returns:
        Formatted string
    """
    return "\n".join([
        f"{index}. {result.title or result.claim_id}",
        f"   Score: {result.score:.2f} ({result.band}) | Support: {result.support:.2f} | Risk: {result.risk:.2f}",
    ])


def main(argv=None):
    """Main entry point for score CLI."""
    parser = argparse.ArgumentParser(
        description="Score the claims of a case evidence graph"
    )
    parser.add_argument("case_id", type=str, help="Case ID")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config.yaml (default: config/config.yaml)",
    )
    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Data directory holding cases/ (default: paths.data from config)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON",
    )
    parser.add_argument(
        "--analyze",
        action="store_true",
        help="Also print gaps and recommendations",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show verbose output",
    )

    args = parser.parse_args(argv)

    settings = get_settings(args.config)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.logging.level,
        format=settings.logging.format,
    )

    try:
        manager = CaseManager(args.data_dir or settings.paths.data, settings=settings)
        nodes = manager.list_nodes_for_case(args.case_id)
        edges = manager.list_edges_for_case(args.case_id)
    except JustinianusError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    policy = ScoringPolicy.from_settings(settings)
    results = score_claims(nodes, edges, policy)
    probability = case_probability_of_success(nodes, edges, policy.risk_dampening)

    if args.json:
        print(json.dumps({
            "case_id": args.case_id,
            "probability_of_success": probability,
            "claims": [r.model_dump() for r in results],
        }, indent=2))
        return

    print("=" * 60)
    print(f"Case {args.case_id}: {len(results)} claim(s)")
    print("=" * 60)
    print()

    if not results:
        print("No claims in this case graph.")
    for i, result in enumerate(results, 1):
        print(format_score(result, i))

    print()
    print(f"Probability of success: {probability:.0%}")

    if args.analyze:
        analysis = analyze_graph(
            nodes,
            edges,
            top_n=settings.graph.top_nodes,
            high_risk_threshold=settings.graph.high_risk_threshold,
        )
        stats = manager.graph_for(args.case_id).stats(
            strong_threshold=settings.graph.strong_node_threshold,
            weak_threshold=settings.graph.weak_node_threshold,
        )
        print()
        print(
            f"Nodes: {stats['node_count']} ({stats['strong_nodes']} strong, {stats['weak_nodes']} weak) | "
            f"Edges: {stats['edge_count']} | Mean strength: {stats['mean_strength']:.2f}"
        )
        by_kind = [
            f"{NODE_KIND_LABELS[NodeKind(kind)]} {count}"
            for kind, count in stats["nodes_by_kind"].items()
            if count
        ]
        print(f"By kind: {', '.join(by_kind) or 'none'}")
        print("Gaps:")
        for gap in analysis.gaps or ["none"]:
            print(f"  - {gap}")
        print("Recommendations:")
        for rec in analysis.recommendations or ["none"]:
            print(f"  - {rec}")


if __name__ == "__main__":
    main()
