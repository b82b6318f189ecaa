from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# Primary keys and order indexes are 32-bit integer columns
INT32_MIN = -2**31
INT32_MAX = 2**31 - 1


class CamelModel(BaseModel):
    """Serializes with camelCase keys, accepts camelCase or snake_case on input."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class RequestModel(CamelModel):
    """Base for request bodies: unknown keys are rejected."""
    model_config = ConfigDict(extra="forbid")
