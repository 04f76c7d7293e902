"""Command-line interface for lshdedup."""

import argparse
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from lshdedup import __version__
from lshdedup.documents import read_documents
from lshdedup.exceptions import handle_error
from lshdedup.index import IndexStats, LSHIndex
from lshdedup.logging import StructuredLogger, setup_logging
from lshdedup.models import CLIConfig
from lshdedup.report import DuplicateGraph
from lshdedup.types import DuplicatePair

__all__ = [
    "parse_args",
    "run_dedup",
    "render_report",
    "main",
]


@dataclass
class DedupReport:
    """Outcome of streaming documents through one index."""

    graph: DuplicateGraph
    stats: IndexStats
    duplicates: List[DuplicatePair] = field(default_factory=list)

    @property
    def documents(self) -> int:
        return self.graph.document_count


def parse_args(argv: Optional[List[str]] = None) -> CLIConfig:
    """Parse command line arguments into unified config."""
    parser = argparse.ArgumentParser(
        description="Detect near-duplicate text documents with MinHash LSH."
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"lshdedup {__version__}",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        help="Files or directories to read documents from",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.9,
        help="Estimated similarity at which documents are duplicates (default: 0.9)",
    )
    parser.add_argument(
        "--tokens-in-word",
        type=int,
        default=5,
        help="Number of tokens per shingle (default: 5)",
    )
    parser.add_argument(
        "--num-hash-functions",
        type=int,
        default=400,
        help="Sketch length; must equal bands * rows (default: 400)",
    )
    parser.add_argument(
        "--bands",
        type=int,
        default=20,
        help="Number of LSH bands (default: 20)",
    )
    parser.add_argument(
        "--rows",
        type=int,
        default=20,
        help="Number of rows per LSH band (default: 20)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for the hash family, for reproducible runs",
    )
    parser.add_argument(
        "--per-line",
        action="store_true",
        help="Treat every non-blank line as a separate document",
    )
    parser.add_argument(
        "--min-printable-ratio",
        type=float,
        default=0.8,
        help="Minimum ratio of printable characters for text detection (default: 0.8)",
    )
    parser.add_argument(
        "--show-unique",
        action="store_true",
        help="Also list documents without any near-duplicate",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        help="Path to log file (if not specified, only log to console)",
    )
    parser.add_argument(
        "--json-log",
        action="store_true",
        help="Write the log file as JSON lines",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    return CLIConfig(
        paths=args.paths,
        threshold=args.threshold,
        tokens_in_word=args.tokens_in_word,
        num_hash_functions=args.num_hash_functions,
        bands=args.bands,
        rows=args.rows,
        seed=args.seed,
        per_line=args.per_line,
        min_printable_ratio=args.min_printable_ratio,
        show_unique=args.show_unique,
        log_file=args.log_file,
        json_log=args.json_log,
        verbose=args.verbose,
    )


def run_dedup(
    config: CLIConfig,
    console: Console,
    logger: StructuredLogger,
) -> DedupReport:
    """Stream every document through a fresh index."""
    index = LSHIndex.from_config(config.index_config)
    graph = DuplicateGraph()
    duplicates: List[DuplicatePair] = []

    logger.info_with_fields(
        "Starting scan",
        operation="scan_start",
        paths=config.paths,
        per_line=config.per_line,
        threshold=config.threshold,
        bands=config.bands,
        rows=config.rows,
    )

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Indexing documents...", total=None)
        for document in read_documents(
            config.paths,
            per_line=config.per_line,
            min_printable_ratio=config.min_printable_ratio,
        ):
            graph.add_document(document.key)
            match = index.check_document(document.text, key=document.key)
            if match is not None and match.key is not None:
                pair = DuplicatePair(
                    duplicate=document.key,
                    original=match.key,
                    similarity=match.similarity,
                )
                duplicates.append(pair)
                graph.add_pair(pair)
            progress.advance(task)

    stats = index.stats()
    logger.info_with_fields(
        "Scan completed",
        operation="scan_complete",
        documents=graph.document_count,
        duplicates=len(duplicates),
        buckets=stats.buckets,
        comparisons=stats.comparisons,
    )
    return DedupReport(graph=graph, stats=stats, duplicates=duplicates)


def render_report(
    console: Console, report: DedupReport, show_unique: bool = False
) -> None:
    """Print duplicate groups and a summary."""
    groups = report.graph.get_groups()
    if not groups:
        console.print("[yellow]No near-duplicate documents found[/yellow]")
    else:
        table = Table(title="Near-duplicate groups")
        table.add_column("Group", justify="right")
        table.add_column("Documents")
        table.add_column("Similarity", justify="right")
        for group in groups:
            table.add_row(
                str(group.id), "\n".join(group.keys), f"{group.similarity:.2%}"
            )
        console.print(table)

    if show_unique:
        for key in report.graph.unique_keys():
            console.print(f"[dim]unique[/dim] {key}")

    console.print(
        f"{report.documents} documents, {len(report.duplicates)} duplicates, "
        f"{len(groups)} groups ({report.stats.comparisons} sketch comparisons)"
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    console = Console()
    try:
        config = parse_args(argv)
        logger = setup_logging(config.log_file, config.verbose, config.json_log)

        report = run_dedup(config, console, logger)
        render_report(console, report, show_unique=config.show_unique)
        return 0
    except Exception as e:
        return handle_error(console, e)


if __name__ == "__main__":
    sys.exit(main())
