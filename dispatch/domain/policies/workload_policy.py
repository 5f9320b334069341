"""WorkloadPolicy — advisory threshold on a technician's active assignments."""

from __future__ import annotations

DEFAULT_WORKLOAD_THRESHOLD = 10


def workload_warning(
    workload: int,
    threshold: int = DEFAULT_WORKLOAD_THRESHOLD,
    subject: str = "Technician",
) -> str | None:
    """Return a warning once *workload* exceeds *threshold*, else None.

    Purely advisory: callers attach the string to a response, they never
    refuse an assignment because of it.
    """
    if workload > threshold:
        return (
            f"Warning: {subject} has {workload} active tasks, "
            f"which exceeds the recommended threshold of {threshold}"
        )
    return None
