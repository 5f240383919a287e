"""Marker-delimited extraction of diagnostics from build console output."""

from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple


@dataclass(frozen=True)
class RegionRule:
    """Start/end triggers bounding a region of console output.

    Attributes:
        start: Pattern of the line right before the region (matched at line start)
        end: Pattern of the line right after the region
        end_min_offset: Minimum number of region lines before ``end`` may close it
    """

    start: Pattern[str]
    end: Pattern[str]
    end_min_offset: int = 0


def find_region(lines: Sequence[str], rule: RegionRule) -> Optional[Tuple[int, int]]:
    """Return the [start, end) indexes of the first complete region, or None.

    A later start trigger restarts an open region; a region whose end is never
    found is not reported.
    """
    start_idx = -1
    for idx, line in enumerate(lines):
        if rule.start.match(line):
            start_idx = idx + 1
        elif start_idx >= 0 and idx >= start_idx + rule.end_min_offset and rule.end.match(line):
            return start_idx, idx
    return None


def extract_region(lines: Sequence[str], rule: RegionRule) -> List[str]:
    """Return the lines of the first complete region, or an empty list."""
    bounds = find_region(lines, rule)
    if bounds is None:
        return []
    start_idx, end_idx = bounds
    return list(lines[start_idx:end_idx])


def any_line_matches(lines: Sequence[str], pattern: Pattern[str]) -> bool:
    return any(pattern.match(line) for line in lines)


def strip_prefixes(line: str, replacements: Sequence[Tuple[str, str]]) -> str:
    """Apply (old, new) prefix replacements; the first one that applies wins."""
    for old, new in replacements:
        if old and old in line:
            return line.replace(old, new)
    return line
