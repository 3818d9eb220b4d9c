"""Base model configuration for parameters and API payloads."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Frozen base model; fields may be filled by alias or by name."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)
