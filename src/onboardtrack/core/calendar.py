"""Fixed cohort start-date calendar."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Mapping, Sequence

from ..schemas import Candidate

DEFAULT_START_DATES: dict[str, tuple[str, ...]] = {
    "AGENT": (
        "2025-07-21",
        "2025-08-18",
        "2025-09-22",
        "2025-10-20",
        "2025-11-17",
        "2025-12-15",
        "2026-01-19",
    ),
    "UNL": (
        "2025-08-04",
        "2025-09-08",
        "2025-10-06",
        "2025-11-03",
        "2025-12-01",
        "2026-01-05",
        "2026-02-02",
    ),
}


def _default_dates() -> dict[str, list[date]]:
    return {
        class_type: [date.fromisoformat(value) for value in values]
        for class_type, values in DEFAULT_START_DATES.items()
    }


@dataclass
class CohortCalendar:
    """Start dates per class type, kept sorted."""

    start_dates: Mapping[str, Sequence[date]] = field(default_factory=_default_dates)

    def __post_init__(self) -> None:
        self.start_dates = {
            class_type: sorted(dates) for class_type, dates in self.start_dates.items()
        }

    def _dates(self, class_type: str) -> list[date]:
        try:
            dates = list(self.start_dates[class_type])
        except KeyError as exc:
            raise KeyError(f"Unsupported class type: {class_type!r}") from exc
        if not dates:
            raise ValueError(f"No start dates configured for {class_type}")
        return dates

    def next_start_date(self, class_type: str, today: date) -> date:
        """First start date after ``today``; the last known date when none remain."""
        dates = self._dates(class_type)
        return next((value for value in dates if value > today), dates[-1])

    def future_start_dates(self, class_type: str, today: date) -> list[date]:
        return [value for value in self._dates(class_type) if value > today]

    def projected_start_date(self, candidate: Candidate, today: date) -> date:
        assignment = candidate.class_assignment
        if assignment.start_date is not None:
            return assignment.start_date
        class_type = assignment.class_type or ("AGENT" if candidate.is_licensed else "UNL")
        return self.next_start_date(class_type, today)

    def options(self) -> list[dict[str, str]]:
        labels = {"AGENT": "Licensed Agent", "UNL": "Unlicensed Agent"}
        entries = [
            {
                "value": value.isoformat(),
                "label": f"{labels.get(class_type, class_type)} - {value:%B} {value.day}, {value.year}",
                "class_type": class_type,
            }
            for class_type, dates in self.start_dates.items()
            for value in dates
        ]
        return sorted(entries, key=lambda entry: entry["value"])
