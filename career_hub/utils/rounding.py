"""
Rounding shared by progress and certificate scores
"""
import math


def round_half_up(value: float) -> int:
    """Nearest integer with halves rounded up (12.5 -> 13), unlike round()"""
    return math.floor(value + 0.5)
