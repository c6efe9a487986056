"""
Common models used across the engine.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel as PydanticBase, ConfigDict


class BaseModel(PydanticBase):
    """Base model for all models"""

    model_config = ConfigDict(
        use_enum_values=True,
        json_encoders={
            datetime: lambda v: v.isoformat(),
            date: lambda v: v.isoformat(),
        },
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert the model to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


class FrozenModel(BaseModel):
    """Base model for immutable values"""

    model_config = ConfigDict(
        use_enum_values=True,
        frozen=True,
        json_encoders={
            datetime: lambda v: v.isoformat(),
            date: lambda v: v.isoformat(),
        },
    )
