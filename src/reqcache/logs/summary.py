"""Aggregate a recorded event log into request counts and timing statistics."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from reqcache.models import LogCategory, LogEvent, LogSummary, TimingSummary

_REQUEST_CATEGORIES = (LogCategory.HTTP, LogCategory.CACHE_HIT)


def request_log_summary(events: Iterable[LogEvent]) -> LogSummary:
    """Summarise *events*.

    Requests are counted per verb over ``HTTP`` events and ``CACHE HIT``
    events, since a hit is a request answered without the network. Timing
    statistics only cover events that carry an elapsed time. An empty log
    gives zero counts and empty timing statistics.
    """
    counts: Counter[str] = Counter()
    categories: Counter[LogCategory] = Counter()
    elapsed: list[float] = []

    for event in events:
        categories[event.category] += 1
        if event.category in _REQUEST_CATEGORIES and event.verb:
            counts[event.verb.upper()] += 1
        if event.elapsed is not None:
            elapsed.append(event.elapsed)

    timing = TimingSummary()
    if elapsed:
        timing = TimingSummary(
            count=len(elapsed),
            min=min(elapsed),
            mean=sum(elapsed) / len(elapsed),
            max=max(elapsed),
        )

    return LogSummary(
        counts=dict(counts),
        hits=categories[LogCategory.CACHE_HIT],
        sets=categories[LogCategory.CACHE_SET],
        drops=categories[LogCategory.CACHE_DROP],
        messages=categories[LogCategory.MESSAGE],
        errors=categories[LogCategory.ERROR],
        timing=timing,
    )
