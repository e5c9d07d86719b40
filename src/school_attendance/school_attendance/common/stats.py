from __future__ import annotations


def percentage(part: int, total: int) -> int:
    """Rounded share of ``part`` in ``total`` as 0..100; 0 when total is 0.

    Halves round up (67 for 2/3, 13 for 1/8) rather than to even.
    """
    if total <= 0:
        return 0
    return (200 * int(part) + int(total)) // (2 * int(total))
