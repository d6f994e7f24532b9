from typing import Literal

from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    weight_unit: Literal["kg", "lbs"] = "kg"
    age_adjustment_start: int = Field(40, ge=0)
    age_adjustment_rate: float = Field(0.01, ge=0)
    llm_endpoint: str = ""
    llm_api_key: str | bool = ""
    llm_primary_model: str = "gemini-2.5-flash-lite"
    llm_fallback_model: str = "gemini-2.5-flash"
    llm_timeout: float = Field(30.0, gt=0)


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
