"""
Label/count histograms over photo attributes, and their merging.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .apex import format_fnumber, shutter_speed_to_exposure_time

DAY_FORMAT = "%Y-%m-%d"


@dataclass
class DistributionEntry:
    id: int
    label: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'label': self.label, 'count': self.count}


# Turns one grouped-count row into an entry
DistributionConvertor = Callable[[Sequence[Any]], DistributionEntry]


class DistributionList(list):
    """A histogram: at most one entry per label."""

    def merge(self, *others: Iterable[DistributionEntry]) -> 'DistributionList':
        return merge_distributions(self, *others)

    def total(self) -> int:
        return sum(entry.count for entry in self)

    def counts(self) -> Dict[str, int]:
        return {entry.label: entry.count for entry in self}

    def sort_by_label(self) -> 'DistributionList':
        self.sort(key=lambda entry: entry.label)
        return self

    def to_list(self) -> List[Dict[str, Any]]:
        return [entry.to_dict() for entry in self]


def merge_distributions(*dists: Iterable[DistributionEntry]) -> DistributionList:
    """
    Merge histograms by summing the counts of entries with the same
    label. The first entry seen for a label keeps its id. The result is
    sorted by label; dimension-specific orderings (by count, by raw
    aperture value) are not restored. Inputs are left untouched.
    """
    merged: Dict[str, DistributionEntry] = {}
    for dist in dists:
        for entry in dist:
            target = merged.get(entry.label)
            if target is None:
                merged[entry.label] = replace(entry)
            else:
                target.count += entry.count
    return DistributionList(merged.values()).sort_by_label()


def format_label(value: Any) -> str:
    """
    Render a raw stored value as a label. NULL becomes "", integral
    floats drop their fractional part (50.0 -> "50").
    """
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def default_convertor(row: Sequence[Any]) -> DistributionEntry:
    """Convert an (id, label, count) row."""
    row_id, label, count = row
    return DistributionEntry(id=row_id or 0, label=format_label(label), count=count)


def aperture_convertor(row: Sequence[Any]) -> DistributionEntry:
    """Convert an (apex aperture, count) row, labelled as an f-number."""
    aperture, count = row
    return DistributionEntry(id=0, label=format_fnumber(float(aperture)), count=count)


def exposure_time_convertor(row: Sequence[Any]) -> DistributionEntry:
    """Convert an (apex shutter speed, count) row, labelled as 1/n seconds."""
    shutter, count = row
    return DistributionEntry(id=0, label=shutter_speed_to_exposure_time(float(shutter)), count=count)


def convert_distribution(rows: Iterable[Sequence[Any]],
                         convertor: Optional[DistributionConvertor] = None) -> DistributionList:
    """
    Convert grouped-count rows into a histogram, keeping row order.
    Rows that end up with the same label (two raw aperture values that
    round to the same f-number) are folded into the first.
    """
    convertor = convertor or default_convertor
    entries = DistributionList()
    by_label: Dict[str, DistributionEntry] = {}
    for row in rows:
        entry = convertor(row)
        existing = by_label.get(entry.label)
        if existing is not None:
            existing.count += entry.count
            continue
        by_label[entry.label] = entry
        entries.append(entry)
    return entries
