class WeightConverter:
    """Utility for converting weights between kg and lbs."""

    LBS_TO_KG = 0.453592
    KG_TO_LB = 1 / LBS_TO_KG
    UNITS = ("kg", "lbs")

    @staticmethod
    def to_kg(weight: float, unit: str | None) -> float:
        """Return ``weight`` expressed in kilograms."""
        if unit == "lbs":
            return weight * WeightConverter.LBS_TO_KG
        return weight

    @staticmethod
    def from_kg(kg: float, unit: str | None) -> float:
        """Return ``kg`` expressed in ``unit``."""
        if unit == "lbs":
            return kg / WeightConverter.LBS_TO_KG
        return kg

    @staticmethod
    def convert(weight: float, from_unit: str, to_unit: str) -> float:
        if from_unit == to_unit:
            return weight
        return WeightConverter.from_kg(WeightConverter.to_kg(weight, from_unit), to_unit)

    @staticmethod
    def kg_to_lb(kg: float) -> float:
        return round(kg * WeightConverter.KG_TO_LB, 2)

    @staticmethod
    def lb_to_kg(lb: float) -> float:
        return round(lb * WeightConverter.LBS_TO_KG, 2)
