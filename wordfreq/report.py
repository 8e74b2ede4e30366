"""
Rendering and export of aggregation results.
"""

import json
import os
from typing import Any, Dict, Iterator, TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from wordfreq.counting.aggregator import AggregationResult


def iter_count_lines(counts: Dict[str, int]) -> Iterator[str]:
    """Yields `word: count` lines in the table's own (arbitrary) order."""
    for word, count in counts.items():
        yield f"{word}: {count}"


def write_counts(result: AggregationResult, out: TextIO) -> int:
    """Writes one `word: count` line per word. Returns the number of lines."""
    written = 0
    for line in iter_count_lines(result.counts):
        out.write(line + "\n")
        written += 1
    return written


def display_failures(result: AggregationResult, console: Console) -> None:
    """Displays the sources that were skipped, and why, in a rich table."""
    if result.timed_out:
        console.print(
            f"[bold yellow]Deadline exceeded after {result.elapsed_seconds:.1f}s; "
            f"counts are partial.[/]"
        )

    failures = result.failures
    if not failures:
        return

    table = Table(
        title=f"Skipped sources ({len(failures)}/{len(result.outcomes)})",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Kind", style="cyan")
    table.add_column("Source", style="bold")
    table.add_column("Reason", no_wrap=False)

    for outcome in failures:
        table.add_row(
            str(outcome.position + 1),
            outcome.source.kind,
            Text(outcome.source.label),
            Text(outcome.error or "unknown error"),
        )

    console.print(table)


def result_to_dict(result: AggregationResult) -> Dict[str, Any]:
    return {
        "counts": result.counts,
        "timed_out": result.timed_out,
        "elapsed_seconds": round(result.elapsed_seconds, 3),
        "sources": [
            {
                "position": outcome.position,
                "kind": outcome.source.kind,
                "source": outcome.source.label,
                "ok": outcome.ok,
                "distinct_words": outcome.distinct_words,
                "tokens": outcome.tokens,
                "error": outcome.error,
                "timed_out": outcome.timed_out,
            }
            for outcome in result.outcomes
        ],
    }


def export_json(result: AggregationResult, output_file: str) -> None:
    """Writes the counts and per-source outcomes to a JSON file."""
    directory = os.path.dirname(output_file)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, ensure_ascii=False, indent=2)
