"""Event processor for classifying and ordering events relative to today."""
import logging
from datetime import date, datetime, timedelta
from functools import cmp_to_key
from typing import Dict, Iterable, List, Optional, Protocol, Union

from processor.models import ProcessedEvent, RawEvent, Temporal

logger = logging.getLogger(__name__)


class Classified(Protocol):
    """Anything carrying a temporal class and a date."""
    temporal: Temporal
    date: datetime


def get_temporal(event_date: datetime, today: datetime) -> Temporal:
    """
    Classify an event date relative to a reference day.

    Args:
        event_date: Event timestamp
        today: Reference date, already normalized to the start of its day

    Returns:
        FUTURE from the next day onwards, CURRENT within the reference day,
        PAST before it
    """
    tomorrow = today + timedelta(days=1)

    if event_date >= tomorrow:
        return Temporal.FUTURE
    if event_date >= today:
        return Temporal.CURRENT
    return Temporal.PAST


def _sign(delta: timedelta) -> int:
    return (delta > timedelta(0)) - (delta < timedelta(0))


def compare_events(a: Classified, b: Classified) -> int:
    """
    Order two classified events.

    Events are ordered by temporal class first. Within PAST the most recent
    event comes first; within CURRENT and FUTURE the earliest comes first.

    Args:
        a: Object exposing ``temporal`` and ``date``
        b: Object exposing ``temporal`` and ``date``

    Returns:
        Negative if a sorts first, positive if b sorts first, 0 if tied
    """
    if a.temporal != b.temporal:
        return int(a.temporal) - int(b.temporal)

    if a.temporal == Temporal.PAST:
        return _sign(b.date - a.date)
    return _sign(a.date - b.date)


def start_of_day(value: Union[date, datetime]) -> datetime:
    """Return a new datetime at midnight of the given day."""
    if not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def process_events(
    raw_events: Iterable[RawEvent],
    today: Optional[Union[date, datetime]] = None
) -> List[ProcessedEvent]:
    """
    Classify raw events against today and sort them for display.

    Args:
        raw_events: Raw events from the content loader
        today: Reference date (default: now). The caller's value is left
            untouched; a day-start copy is used for classification.

    Returns:
        ProcessedEvent list ordered by ``compare_events``
    """
    raw_events = list(raw_events)
    if today is None:
        # Aware event dates need an aware clock in the same zone
        tz = next(
            (e.date.tzinfo for e in raw_events if e.date.tzinfo is not None),
            None
        )
        today = datetime.now(tz)
    reference = start_of_day(today)

    processed_events = [
        ProcessedEvent(
            id=event.id,
            title=event.title,
            date=event.date,
            temporal=get_temporal(event.date, reference),
            description=event.body,
            location=event.location
        )
        for event in raw_events
    ]
    processed_events.sort(key=cmp_to_key(compare_events))

    counts = {temporal: 0 for temporal in Temporal}
    for event in processed_events:
        counts[event.temporal] += 1
    logger.info(
        f"Processed {len(processed_events)} events for "
        f"{reference.date().isoformat()}: "
        f"{counts[Temporal.CURRENT]} current, "
        f"{counts[Temporal.FUTURE]} future, "
        f"{counts[Temporal.PAST]} past"
    )
    return processed_events


def group_by_temporal(
    processed_events: Iterable[ProcessedEvent]
) -> Dict[Temporal, List[ProcessedEvent]]:
    """
    Split an ordered listing into one section per temporal class.

    Args:
        processed_events: Events, typically already sorted

    Returns:
        Mapping with every Temporal key; each list keeps the incoming order
    """
    sections = {temporal: [] for temporal in Temporal}
    for event in processed_events:
        sections[event.temporal].append(event)
    return sections
