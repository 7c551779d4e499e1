"""Project a measured latency to a larger dataset.

The projection assumes query cost grows linearly with the number of rows.
Real index scans do not behave exactly like that (partition count, cache
pressure and planner choices all shift at scale), so the result is a coarse
estimate and is reported as one.
"""

from measurements.base_measurement import ExtrapolationResult

DEFAULT_BUDGET_SECONDS = 2.0


def extrapolate(
    measured_duration: float,
    measured_users: int,
    target_users: int,
    budget: float = DEFAULT_BUDGET_SECONDS,
) -> ExtrapolationResult:
    """Scale measured_duration by target_users / measured_users.

    A target smaller than the measured size is projected the same way.
    """
    if measured_users <= 0:
        raise ValueError("measured_users must be positive")
    if measured_duration < 0:
        raise ValueError("measured_duration must not be negative")

    projected = measured_duration * (target_users / measured_users)
    return ExtrapolationResult(
        measured_duration=measured_duration,
        measured_users=measured_users,
        target_users=target_users,
        projected_duration=projected,
        budget=budget,
    )
