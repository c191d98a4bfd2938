from typing import Sequence


NS_PER_SECOND = 1_000_000_000
MINUTE_NS = 60 * NS_PER_SECOND


def estimate(timestamps_ns: Sequence[int]) -> int:
    """
    Characters-per-minute-like speed from event timestamps in nanoseconds.

    The interval between the first two events never contributes, and the
    summed intervals are averaged over the number of timestamps rather than
    the number of intervals. Clients already rely on these numbers.
    """
    length = len(timestamps_ns)
    if length == 0:
        return 0

    accumulator = 0
    for i in range(length - 1, 1, -1):
        accumulator += timestamps_ns[i] - timestamps_ns[i - 1]

    average_interval = accumulator // length
    if average_interval <= 0:
        return 0

    return MINUTE_NS // average_interval
