from typing import Sequence, Union

from rover_console.schemas.alerts import PRIORITIES, AlertView, LocalAlert, RemoteAlert

COUNT_BUCKETS = ("all", "critical", "high", "medium", "low")

AnyAlert = Union[LocalAlert, RemoteAlert]


def count_by_priority(alerts: Sequence[AnyAlert]) -> dict[str, int]:
    counts = {bucket: 0 for bucket in COUNT_BUCKETS}
    counts["all"] = len(alerts)
    for a in alerts:
        counts[a.priority] += 1
    return counts


def merge_alerts(
    local: Sequence[LocalAlert],
    remote: Sequence[RemoteAlert],
    priority_filter: str = "all",
) -> AlertView:
    """Combine both sources into one list, newest first.

    Counts are taken over the unfiltered set so filter chip labels stay put
    while the operator switches between them. ``sorted`` is stable, so equal
    timestamps keep local-before-remote insertion order.
    """
    if priority_filter != "all" and priority_filter not in PRIORITIES:
        raise ValueError(f"Unknown priority filter: {priority_filter}")

    combined: list[AnyAlert] = [*local, *remote]
    counts = count_by_priority(combined)

    if priority_filter != "all":
        combined = [a for a in combined if a.priority == priority_filter]
    combined = sorted(combined, key=lambda a: a.created_at, reverse=True)

    return AlertView(filter=priority_filter, counts=counts, alerts=combined)
