"""Base model for rows read back from storage."""

from typing import Any

from pydantic import BaseModel, model_validator


class StoredRow(BaseModel):
    """Row loaded from a table whose defaulted columns are nullable.

    A NULL in a column that has a model default is treated as the default;
    NULL in a required column still fails validation.
    """

    @model_validator(mode="before")
    @classmethod
    def drop_null_columns(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        return {
            key: value
            for key, value in data.items()
            if value is not None or key not in cls.model_fields or cls.model_fields[key].is_required()
        }
