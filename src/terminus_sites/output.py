"""Rendering of record lists as table, JSON or YAML.

Example:
    >>> print(format_table([{"name": "a", "frozen": "no"}], {"name": "Name", "frozen": "Frozen"}))
    Name  Frozen
    ----  ------
    a     no
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from terminus_sites.schemas.status import ENVIRONMENT_LABELS, SITE_LABELS, StatusReport

OUTPUT_FORMATS = ("table", "json", "yaml")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def format_table(records: Sequence[Mapping[str, Any]], labels: Mapping[str, str]) -> str:
    """Format records as a left-aligned text table.

    Columns follow the order of ``labels``; keys missing from a record
    render as empty cells.

    Args:
        records: Rows keyed by field name.
        labels: Field name to column header, in display order.

    Returns:
        Table text without a trailing newline.
    """
    keys = list(labels)
    rows = [[_cell(record.get(key)) for key in keys] for record in records]
    widths = [
        max([len(labels[key])] + [len(row[i]) for row in rows]) for i, key in enumerate(keys)
    ]

    lines = [
        "  ".join(f"{labels[key]:<{widths[i]}}" for i, key in enumerate(keys)).rstrip(),
        "  ".join("-" * width for width in widths),
    ]
    for row in rows:
        lines.append("  ".join(f"{cell:<{widths[i]}}" for i, cell in enumerate(row)).rstrip())
    return "\n".join(lines)


def format_report_table(report: StatusReport) -> str:
    """Render the site table followed by the environment table."""
    sites = format_table([row.model_dump(mode="json") for row in report.sites], SITE_LABELS)
    environments = format_table(
        [row.model_dump(mode="json") for row in report.environments],
        ENVIRONMENT_LABELS,
    )
    return f"{sites}\n\n{environments}"


def format_report_json(report: StatusReport) -> str:
    """Render the report as JSON."""
    return json.dumps(report.model_dump(mode="json"), indent=2)


def format_report_yaml(report: StatusReport) -> str:
    """Render the report as YAML."""
    import yaml

    data = report.model_dump(mode="json")
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def format_report(report: StatusReport, output_format: str = "table") -> str:
    """Render the report in one of OUTPUT_FORMATS.

    Raises:
        ValueError: If the format is unknown.
    """
    if output_format == "json":
        return format_report_json(report)
    if output_format == "yaml":
        return format_report_yaml(report)
    if output_format == "table":
        return format_report_table(report)
    msg = f"Unknown output format: {output_format}"
    raise ValueError(msg)


__all__: list[str] = [
    "OUTPUT_FORMATS",
    "format_report",
    "format_report_json",
    "format_report_table",
    "format_report_yaml",
    "format_table",
]
