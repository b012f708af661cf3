"""
Windowed uptime aggregation

Turns per-entity status records into on/off counts and summed uptime over a
half-open window [start, end). Records inside the window are walked in order;
a second "boundary" index holding the earliest record at or after `end`
decides whether state observed near the edge carries over the boundary.
"""

from datetime import datetime

from uptime_report.schemas.status import AggregationResult, EntityState, StatusIndex

SECONDS_PER_HOUR = 3600.0


def _hours(seconds: float) -> float:
    return seconds / SECONDS_PER_HOUR


def aggregate(
    window_records: StatusIndex,
    boundary_records: StatusIndex,
    start: datetime,
    end: datetime,
) -> AggregationResult:
    """Aggregate uptime statistics for every entity keyed in window_records.

    Args:
        window_records: records observed inside [start, end), per entity
        boundary_records: records observed at or after end, per entity; only
            the first one of each entity is used
        start: inclusive window start
        end: exclusive window end

    Returns:
        AggregationResult with on/off classification at `end` and total uptime hours
    """
    on_count = 0
    off_count = 0
    total_uptime = 0.0

    for entity_id, records in window_records.items():
        is_online = False
        last_off_boundary = start

        for record in records:
            if record.state == EntityState.ON:
                # elapsed_seconds may reach back before start
                total_uptime += min(
                    _hours((record.observed_at - start).total_seconds()),
                    _hours(record.elapsed_seconds),
                )
                is_online = True
            else:
                last_off_boundary = max(last_off_boundary, record.observed_at)
                is_online = False

        boundary = boundary_records.get(entity_id) or []
        if boundary:
            first = boundary[0]
            if first.state == EntityState.ON:
                on_count += 1
                total_uptime += min(
                    _hours((end - last_off_boundary).total_seconds()),
                    _hours(first.elapsed_seconds),
                )
            else:
                off_count += 1
            continue

        if is_online:
            on_count += 1
        else:
            off_count += 1

    return AggregationResult(
        on_count=on_count,
        off_count=off_count,
        total_uptime_hours=total_uptime,
    )
