"""Base model for all domain entities."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class DomainModel(BaseModel):
    """Base class for all domain models.

    Fields are declared in snake_case and aliased to camelCase, and both
    spellings are accepted on input. ``model_dump(by_alias=True)`` produces
    the joined-word form used for records built inside the library.
    """

    model_config = ConfigDict(
        frozen=True,  # All domain models are immutable
        arbitrary_types_allowed=True,  # Allow custom value objects
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,  # Integer primary keys from relational stores
    )
