"""Usage documentation and report tables.

Every function takes the writer explicitly; ``None`` means ``sys.stdout``
looked up at call time, which keeps pytest's ``capsys`` working.
"""
from __future__ import annotations

import sys
from typing import IO, TYPE_CHECKING, Any, Dict, Iterable, List, Optional, Sequence

from envbind.converters import describe_type
from envbind.errors import UsageFormatError
from envbind.fields import FieldDescriptor, gather_descriptors

if TYPE_CHECKING:  # pragma: no cover
    from envbind.resolver import Report

USAGE_HEADER = (
    "This application is configured via the environment. The following environment\n"
    "variables can be used:\n"
)

TABLE_FORMAT = "table"
LIST_FORMAT = "list"

LIST_ENTRY = "\n{key}\n  [comment]     {comment}\n  [type]        {type}\n  [default]     {default}"

OK_MARK = "ok"


def _writer(out: Optional[IO[str]]) -> IO[str]:
    return out if out is not None else sys.stdout


def align_columns(
    rows: Sequence[Sequence[str]],
    *,
    padding: int = 4,
    min_width: int = 1,
    indent: str = "",
) -> List[str]:
    """Left-align cells into columns; the last column is never padded."""

    if not rows:
        return []
    columns = max(len(row) for row in rows)
    widths = [min_width] * columns
    for row in rows:
        for index, cell in enumerate(row[:-1]):
            widths[index] = max(widths[index], len(cell) + padding)
    lines: List[str] = []
    for row in rows:
        cells = [cell.ljust(widths[index]) for index, cell in enumerate(row[:-1])]
        cells.append(row[-1])
        lines.append((indent + "".join(cells)).rstrip())
    return lines


def usage_entry(descriptor: FieldDescriptor) -> Dict[str, str]:
    """Template fields available for one descriptor."""

    return {
        "key": descriptor.key,
        "type": descriptor.converter.describe(),
        "default": descriptor.default,
        "comment": descriptor.comment,
        "name": descriptor.name,
    }


def _render_table(entries: Iterable[Dict[str, str]]) -> str:
    rows = [["KEY", "TYPE", "DEFAULT", "COMMENT"]]
    rows.extend([entry["key"], entry["type"], entry["default"], entry["comment"]] for entry in entries)
    return USAGE_HEADER + "\n" + "\n".join(align_columns(rows)) + "\n"


def _render_template(entries: Iterable[Dict[str, str]], template: str) -> str:
    rendered: List[str] = []
    for entry in entries:
        try:
            rendered.append(template.format_map(entry))
        except (KeyError, IndexError, ValueError) as exc:
            raise UsageFormatError(f"invalid usage template {template!r}: {exc}") from exc
    return "".join(rendered)


def usagef(spec: Any, out: Optional[IO[str]], fmt: str) -> None:
    """Write usage for ``spec``.

    ``fmt`` is ``"table"``, ``"list"`` or a per-field template using the
    ``{key}``, ``{type}``, ``{default}``, ``{comment}`` and ``{name}``
    placeholders.
    """

    entries = [usage_entry(descriptor) for descriptor in gather_descriptors(spec)]
    if fmt == TABLE_FORMAT:
        text = _render_table(entries)
    elif fmt == LIST_FORMAT:
        text = USAGE_HEADER + _render_template(entries, LIST_ENTRY) + "\n"
    else:
        text = _render_template(entries, fmt)
    _writer(out).write(text)


def print_usage(spec: Any, out: Optional[IO[str]] = None) -> None:
    """Write the default usage table."""

    usagef(spec, out, TABLE_FORMAT)


def pretty_print(report: "Report", out: Optional[IO[str]] = None) -> None:
    """Write one row per outcome with its status or error message."""

    rows = [["Env Variable", "Type", "OK"], ["----", "----", "----"]]
    for outcome in report:
        rows.append(
            [
                outcome.key,
                outcome.type_name,
                OK_MARK if outcome.error is None else str(outcome.error),
            ]
        )
    writer = _writer(out)
    for line in align_columns(rows, min_width=8, indent=" "):
        writer.write(line + "\n")
    if report.failure is not None:
        writer.write(f" {report.failure}\n")


__all__ = [
    "LIST_FORMAT",
    "OK_MARK",
    "TABLE_FORMAT",
    "USAGE_HEADER",
    "align_columns",
    "describe_type",
    "pretty_print",
    "print_usage",
    "usage_entry",
    "usagef",
]
