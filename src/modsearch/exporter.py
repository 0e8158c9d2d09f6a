"""Plain-text and Markdown reports of search results."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from typing import List, Literal

from modsearch.models import FileResult, MatchRecord, SearchResult

ExportFormat = Literal["text", "markdown"]

_FORMAT_ALIASES = {
    "text": "text",
    "txt": "text",
    "markdown": "markdown",
    "md": "markdown",
}

FILE_SUFFIXES = {"text": ".txt", "markdown": ".md"}


def normalize_format(fmt: str) -> ExportFormat:
    try:
        return _FORMAT_ALIASES[fmt.lower()]  # type: ignore[return-value]
    except KeyError:
        raise ValueError(f"Unsupported export format: {fmt!r}") from None


def _options_json(result: SearchResult) -> str:
    return json.dumps(asdict(result.options), indent=2)


def _statistics(result: SearchResult) -> List[str]:
    lines = [
        f"- Total files: {result.total_files}",
        f"- Matched files: {result.matched_files}",
        f"- Total matches: {result.total_matches}",
        f"- Execution time: {result.execution_time_ms:g}ms",
    ]
    if result.cancelled:
        lines.append("- Cancelled: yes (partial results)")
    return lines


def _numbered(match: MatchRecord, *, marker: str = "", plain: str = "") -> List[str]:
    lines = []
    if match.context.before is not None:
        lines.append(f"{plain}{match.line_number - 1}: {match.context.before}")
    lines.append(f"{marker}{match.line_number}: {match.line}")
    if match.context.after is not None:
        lines.append(f"{plain}{match.line_number + 1}: {match.context.after}")
    return lines


def _text_file(file: FileResult) -> List[str]:
    out = [f"File: {file.path}", "=" * (len(file.path) + 6), ""]
    for match in file.matches:
        if match.is_limit_warning:
            out.extend([f"Note: {match.line}", ""])
            continue
        out.append(f"Line {match.line_number}:")
        out.extend(_numbered(match, marker="> ", plain="  "))
        out.append("")
    out.append("")
    return out


def _markdown_file(file: FileResult) -> List[str]:
    out = [f"## {file.name}", "", f"**Path:** `{file.path}`", ""]
    for match in file.matches:
        if match.is_limit_warning:
            out.extend([f"> {match.line}", ""])
            continue
        out.extend([f"### Line {match.line_number}", "", "```text"])
        out.extend(_numbered(match))
        out.extend(["```", ""])
    return out


def export_result(
    result: SearchResult,
    fmt: str = "text",
    *,
    exported_at: datetime | None = None,
) -> str:
    """Serialize ``result`` as a text or Markdown report.

    Output depends only on the arguments; pass ``exported_at`` to stamp the
    report with an export time.
    """
    kind = normalize_format(fmt)
    stamp = exported_at.strftime("%Y-%m-%d %H:%M:%S") if exported_at else None

    if kind == "text":
        out = ["Search Results", "=" * 14, "", f"Query: {result.query}", f"Options: {_options_json(result)}"]
        if stamp:
            out.append(f"Exported at: {stamp}")
        out.extend(["", "Statistics:", *_statistics(result), ""])
        for file in result.files:
            out.extend(_text_file(file))
    else:
        out = [
            "# Search Results",
            "",
            f"**Query:** `{result.query}`",
            "",
            "**Options:**",
            "```json",
            _options_json(result),
            "```",
            "",
        ]
        if stamp:
            out.extend([f"**Exported at:** {stamp}", ""])
        out.extend(["## Statistics", "", *_statistics(result), ""])
        for file in result.files:
            out.extend(_markdown_file(file))

    return "\n".join(out).rstrip("\n") + "\n"
