import math


class MathTools:
    """Provides small numeric helpers for strength calculations."""

    @staticmethod
    def clamp(value: float, min_value: float, max_value: float) -> float:
        """Clamp ``value`` to the inclusive range [min_value, max_value]."""
        if min_value > max_value:
            raise ValueError("min_value must not exceed max_value")
        return max(min_value, min(value, max_value))

    @staticmethod
    def is_valid_weight(value: float | None) -> bool:
        """Return True for a finite, non-negative weight."""
        if value is None or isinstance(value, bool):
            return False
        try:
            number = float(value)
        except (TypeError, ValueError):
            return False
        return math.isfinite(number) and number >= 0

    @staticmethod
    def ceil_threshold(value: float) -> int:
        """Round a threshold weight up to the next whole unit.

        A threshold of 105.1 becomes 106 so that a logged 106 meets it.
        """
        return int(math.ceil(value))

    @staticmethod
    def format_ratio(value: float) -> str:
        """Return ``value`` formatted as ``X.XX:1``."""
        return f"{value:.2f}:1"

    @staticmethod
    def format_range(lower: float, upper: float) -> str:
        """Return a ratio band formatted as ``L.LL-U.UU:1``."""
        return f"{lower:.2f}-{upper:.2f}:1"
