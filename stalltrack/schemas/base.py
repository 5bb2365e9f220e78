"""Shared pydantic configuration for API payloads.

Storage rows are snake_case; the JSON boundary is camelCase. Input models
accept either spelling so Python callers can keep using field names.
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Numbers the services validate themselves, so a bad value surfaces as the
# matching ledger error instead of a generic 422.
NumericInput = Union[int, float, str]
MoneyInput = NumericInput


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
