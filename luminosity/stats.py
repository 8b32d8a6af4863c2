"""
Composite statistics for a catalog.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict

from .distribution import DistributionList


@dataclass
class Stats:
    by_date: DistributionList = field(default_factory=DistributionList)
    by_camera: DistributionList = field(default_factory=DistributionList)
    by_lens: DistributionList = field(default_factory=DistributionList)
    by_focal_length: DistributionList = field(default_factory=DistributionList)
    by_aperture: DistributionList = field(default_factory=DistributionList)
    by_exposure_time: DistributionList = field(default_factory=DistributionList)
    by_edit_count: DistributionList = field(default_factory=DistributionList)
    by_keyword: DistributionList = field(default_factory=DistributionList)

    def merge(self, other: 'Stats') -> None:
        """
        Merge another set of stats into this one. Every dimension comes
        out ordered by label; for by_date that is chronological order.
        """
        if other is None:
            return
        for f in fields(self):
            merged = getattr(self, f.name).merge(getattr(other, f.name))
            setattr(self, f.name, merged)
        # by_date is kept chronological explicitly; the other dimensions
        # stay in merge (label) order rather than their query order.
        self.by_date.sort_by_label()

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name).to_list() for f in fields(self)}
