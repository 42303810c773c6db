"""Shared pydantic configuration for API and DynamoDB models."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def attribute_alias(field_name: str) -> str:
    """
    Wire name of a model field.

    Key attributes (PK, SK, GSI1_PK, GSI1PK, ...) keep their upper-case
    names; every other field is exposed in camelCase.
    """
    if field_name.isupper():
        return field_name
    return to_camel(field_name)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CamelModel(BaseModel):
    """Base model accepting both camelCase and snake_case input."""

    model_config = ConfigDict(alias_generator=attribute_alias, populate_by_name=True)
