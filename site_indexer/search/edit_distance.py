"""
Bounded Levenshtein distance.
"""

from typing import Optional


def levenshtein(s1: str, s2: str, max_distance: Optional[int] = None) -> int:
    """
    Edit distance between ``s1`` and ``s2``.

    With ``max_distance`` set the result is exact up to the cap and exactly
    ``max_distance + 1`` for anything farther apart. Rows whose minimum
    already exceeds the cap stop the computation early.
    """
    if max_distance is not None and abs(len(s1) - len(s2)) > max_distance:
        return max_distance + 1

    if not s1:
        return _capped(len(s2), max_distance)
    if not s2:
        return _capped(len(s1), max_distance)

    previous_row = list(range(len(s2) + 1))
    current_row = [0] * (len(s2) + 1)

    for i in range(1, len(s1) + 1):
        current_row[0] = i
        row_minimum = i
        char1 = s1[i - 1]

        for j in range(1, len(s2) + 1):
            cost = 0 if char1 == s2[j - 1] else 1
            current_row[j] = min(
                current_row[j - 1] + 1,     # insertion
                previous_row[j] + 1,        # deletion
                previous_row[j - 1] + cost  # substitution
            )
            if current_row[j] < row_minimum:
                row_minimum = current_row[j]

        if max_distance is not None and row_minimum > max_distance:
            return max_distance + 1

        previous_row, current_row = current_row, previous_row

    return _capped(previous_row[len(s2)], max_distance)


def _capped(distance: int, max_distance: Optional[int]) -> int:
    if max_distance is not None and distance > max_distance:
        return max_distance + 1
    return distance
