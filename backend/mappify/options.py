from typing import Any, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mappify.exceptions import ValidationError
from mappify.filters import FilterExpression


class FindOptions(BaseModel):
    """Options accepted by the finders.

    ``offset`` is a 1-based page number: the SQL offset is ``(offset - 1) * limit``.
    """
    model_config = ConfigDict(extra="forbid")

    where: dict[str, Any] = Field(default_factory=dict)
    attributes: Optional[list[str]] = None
    exclude: list[str] = Field(default_factory=list)
    limit: Optional[int] = Field(default=None, ge=1)
    offset: Optional[int] = Field(default=None, ge=1)
    order: Optional[str] = None
    group: Optional[str] = None

    @field_validator("where", "exclude", mode="before")
    @classmethod
    def _none_as_empty(cls, value, info):
        if value is None:
            return {} if info.field_name == "where" else []
        if isinstance(value, FilterExpression):
            return value.to_where()
        return value

    @model_validator(mode="after")
    def _check_paging(self):
        if (self.limit is None) != (self.offset is None):
            raise ValueError("limit and offset must be provided together")
        return self

    @property
    def sql_offset(self):
        if self.limit is None or self.offset is None:
            return None
        return (self.offset - 1) * self.limit


def parse_options(options=None, **kwargs):
    """Merge a mapping and keyword options into a validated FindOptions."""
    if isinstance(options, FindOptions):
        if not kwargs:
            return options
        options = options.model_dump(exclude_unset=True)
    merged = {**(options or {}), **kwargs}
    try:
        return FindOptions(**merged)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid query options: {e}") from e
