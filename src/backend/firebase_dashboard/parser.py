"""
Parsing for Firebase Analytics CSV exports.

A single export file can hold several tables. Each one is introduced by a
block of ``#`` comment lines (the block that starts a new table always carries
a ``Start date:`` line) followed by its own header row, and the tables do not
share a column count. ``parse_section`` cuts one table out of the file and
returns its rows as plain ``{column: raw string}`` mappings; typed conversion
is left to the loaders.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
SECTION_BOUNDARY = "Start date:"

Row = Dict[str, str]


def _is_skippable(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith(COMMENT_PREFIX)


def _find_section(lines: Sequence[str], section_marker: Optional[str]) -> Optional[Tuple[int, int]]:
    """Return ``(header_index, end_index)`` for the requested section."""

    header_index = None
    for index, line in enumerate(lines):
        if _is_skippable(line):
            continue
        if section_marker:
            if section_marker in line:
                header_index = index
                break
        elif "," in line:
            header_index = index
            break

    if header_index is None:
        return None

    end_index = len(lines)
    for index in range(header_index + 1, len(lines)):
        line = lines[index]
        if line.strip().startswith(COMMENT_PREFIX) and SECTION_BOUNDARY in line:
            end_index = index
            break
    return header_index, end_index


def _split_fields(line: str) -> List[str]:
    return [value.strip() for value in line.split(",")]


def _read_fields(line: str, section_marker: Optional[str]) -> List[str]:
    """One line's fields. A line the ``csv`` module rejects is split on bare commas."""

    # One reader per line, so an unbalanced quote cannot swallow the rows after it.
    try:
        values = next(csv.reader([line], skipinitialspace=True, strict=True), [])
    except csv.Error as exc:
        logger.warning(
            "CSV parsing failed for a row in section %r, falling back to plain comma split: %s",
            section_marker,
            exc,
        )
        return _split_fields(line)
    return [value.strip() for value in values]


def parse_section(content: str, section_marker: Optional[str] = None) -> List[Row]:
    """
    Extract one table from an export.

    With ``section_marker`` the header is the first non-comment line that
    contains it; without one it is the first non-comment line that contains a
    comma. Rows end at the next comment line carrying ``Start date:``.
    Rows shorter than the header get ``""`` for the missing columns. A line
    the ``csv`` module rejects (an unclosed quote, say) is split on bare
    commas instead, so a malformed row yields (partially empty) fields and the
    rows around it are unaffected. An absent header or an empty section gives
    ``[]``.
    """

    lines = content.splitlines()
    bounds = _find_section(lines, section_marker)
    if bounds is None:
        return []

    header_index, end_index = bounds
    data_lines = [line for line in lines[header_index + 1 : end_index] if not _is_skippable(line)]
    if not data_lines:
        return []

    columns = _read_fields(lines[header_index], section_marker)
    rows: List[Row] = []
    for line in data_lines:
        values = _read_fields(line, section_marker)
        rows.append(
            {
                column: values[position] if position < len(values) else ""
                for position, column in enumerate(columns)
            }
        )
    return rows


def read_section(path: Union[str, Path], section_marker: Optional[str] = None) -> List[Row]:
    content = Path(path).read_text(encoding="utf-8-sig")
    return parse_section(content, section_marker)
