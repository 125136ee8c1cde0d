import csv
import logging
from pathlib import Path
from typing import Iterable, Iterator

from .models import ReportLine, ScanSummary, Status

GREEN = "\x1b[32;107m"
RED = "\x1b[31;107m"
RESET = "\x1b[0m"

TAGS = {
    Status.UNIQUE: "[ OK ]",
    Status.DUPLICATE: "[ KO ]",
    Status.SIMILAR: "[SIM ]",
    Status.DISSIMILAR: "[DIFF]",
}

COLORS = {
    Status.UNIQUE: GREEN,
    Status.DUPLICATE: RED,
    Status.SIMILAR: GREEN,
    Status.DISSIMILAR: RED,
}


def format_fingerprint(value: int, width: int) -> str:
    return f"{value:0{width // 4}x}"


def format_line(line: ReportLine, color: bool = False) -> str:
    tag = TAGS[line.status]
    if color:
        tag = f"{COLORS[line.status]}{tag}{RESET}"

    text = f"{tag} {format_fingerprint(line.fingerprint, line.width)}  {line.size:>12}  {line.path}"
    if line.other_path is not None:
        text += f" <-> {line.other_path} ({line.score * 100:.2f}%)"
    return text


def format_summary(summary: ScanSummary) -> str:
    return str(summary)


def render(lines: Iterable[ReportLine], summary: ScanSummary, color: bool = False) -> Iterator[str]:
    for line in lines:
        yield format_line(line, color=color)
    yield format_summary(summary)


def write_csv(lines: Iterable[ReportLine], output_csv: Path) -> int:
    """Exports report lines to CSV. Returns the number of rows written."""
    headers = ["Status", "Fingerprint", "Size", "Path", "Other Path", "Similarity"]

    count = 0
    with open(output_csv, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(headers)
        for line in lines:
            writer.writerow([
                line.status.value,
                format_fingerprint(line.fingerprint, line.width),
                line.size,
                line.path,
                line.other_path or "",
                f"{line.score * 100:.2f}" if line.score is not None else "",
            ])
            count += 1

    logging.info(f"Wrote {count} report rows to {output_csv}")
    return count
