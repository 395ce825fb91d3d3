"""CLI entry point: python -m keyword_clusters.cli {preview,commit}"""

import argparse
import asyncio
import sys
from collections.abc import Sequence
from datetime import datetime, timezone
from pathlib import Path

import structlog

from keyword_clusters.clustering.clusterer import preview
from keyword_clusters.clustering.config import load_clustering_config
from keyword_clusters.clustering.types import Cluster, ClusteringParams, ClusteringResult
from keyword_clusters.config.settings import get_settings
from keyword_clusters.db.session import close_db, get_session_factory
from keyword_clusters.exceptions import ClusteringError
from keyword_clusters.export.service import export_clusters, generate_export_filename
from keyword_clusters.ingestion.json_loader import load_keyword_file
from keyword_clusters.logging_config import configure_logging
from keyword_clusters.persistence import commit_clusters, with_ids


def _write_exports(clusters: Sequence[Cluster], output_dir: Path, prefix: str) -> list[Path]:
    """Write CSV and JSON exports of ``clusters`` under one timestamp."""
    log = structlog.get_logger()
    output_dir.mkdir(parents=True, exist_ok=True)
    now = datetime.now(timezone.utc)

    written = []
    for fmt in ("csv", "json"):
        filepath = output_dir / generate_export_filename(prefix, fmt, now=now)
        filepath.write_text(export_clusters(clusters, fmt), encoding="utf-8")
        log.info("export_file_written", path=str(filepath), clusters=len(clusters))
        written.append(filepath)
    return written


async def run_preview(
    input_path: Path, params: ClusteringParams, output_dir: Path, prefix: str
) -> ClusteringResult:
    """Cluster a keyword file and write CSV and JSON exports to output_dir."""
    log = structlog.get_logger()
    keywords = load_keyword_file(input_path)
    result = await preview(keywords, params)

    _write_exports(result.clusters, output_dir, prefix)

    log.info(
        "preview_complete",
        clusters=len(result.clusters),
        unclustered=len(result.unclustered),
        directory=str(output_dir),
    )
    return result


async def run_commit(
    input_path: Path,
    params: ClusteringParams,
    project_id: str,
    operator: str,
    output_dir: Path,
    prefix: str,
) -> list[str]:
    """Cluster a keyword file, persist it for a project and export the result.

    The exports are written after the commit so they carry the stored
    cluster ids.
    """
    log = structlog.get_logger()
    keywords = load_keyword_file(input_path)
    result = await preview(keywords, params)

    session_factory = get_session_factory()
    try:
        async with session_factory() as session:
            cluster_ids = await commit_clusters(
                session, project_id, result.clusters, result.params, operator=operator
            )
    finally:
        await close_db()

    committed = with_ids(result.clusters, cluster_ids)
    for cluster in committed:
        log.info("cluster_committed", id=cluster.id, name=cluster.name, members=len(cluster.members))
    _write_exports(committed, output_dir, prefix)
    return cluster_ids


def _add_param_arguments(parser: argparse.ArgumentParser, defaults: ClusteringParams) -> None:
    parser.add_argument("input", type=str, help="Keyword JSON file")
    parser.add_argument(
        "--overlap-threshold",
        type=int,
        default=defaults.overlap_threshold,
        help=f"Minimum shared SERP URLs, 0-10 (default: {defaults.overlap_threshold})",
    )
    parser.add_argument(
        "--distance-threshold",
        type=float,
        default=defaults.distance_threshold,
        help=f"Maximum cosine distance, 0-1 (default: {defaults.distance_threshold})",
    )
    parser.add_argument(
        "--min-cluster-size",
        type=int,
        default=defaults.min_cluster_size,
        help=f"Smallest group kept as a cluster (default: {defaults.min_cluster_size})",
    )
    parser.add_argument(
        "--semantic-provider",
        choices=["none", "external"],
        default=defaults.semantic_provider.value,
        help="Semantic similarity backend",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default="./export",
        help="Output directory for CSV/JSON exports (default: ./export)",
    )


def _params_from_args(args: argparse.Namespace) -> ClusteringParams:
    return ClusteringParams(
        overlap_threshold=args.overlap_threshold,
        distance_threshold=args.distance_threshold,
        min_cluster_size=args.min_cluster_size,
        semantic_provider=args.semantic_provider,
    )


def main() -> None:
    settings = get_settings()
    config = load_clustering_config(settings.clustering_config_path)
    defaults = config.defaults.to_params()

    parser = argparse.ArgumentParser(
        prog="keyword_clusters.cli",
        description="Keyword Clustering CLI",
    )
    subparsers = parser.add_subparsers(dest="command")

    preview_parser = subparsers.add_parser("preview", help="Cluster keywords and export CSV/JSON")
    _add_param_arguments(preview_parser, defaults)

    commit_parser = subparsers.add_parser(
        "commit", help="Cluster keywords, persist them and export CSV/JSON with their ids"
    )
    _add_param_arguments(commit_parser, defaults)
    commit_parser.add_argument("--project-id", type=str, required=True, help="Project identifier")
    commit_parser.add_argument("--operator", type=str, default="cli", help="Recorded operator")

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    configure_logging(json_output=settings.log_json, log_level=settings.log_level)
    log = structlog.get_logger()

    try:
        params = _params_from_args(args)
        if args.command == "preview":
            asyncio.run(
                run_preview(
                    Path(args.input),
                    params,
                    Path(args.output_dir),
                    config.export.filename_prefix,
                )
            )
        elif args.command == "commit":
            asyncio.run(
                run_commit(
                    Path(args.input),
                    params,
                    args.project_id,
                    args.operator,
                    Path(args.output_dir),
                    config.export.filename_prefix,
                )
            )
    except ClusteringError as e:
        log.error("command_failed", command=args.command, error=str(e), error_type=type(e).__name__)
        sys.exit(2)


if __name__ == "__main__":
    main()
