"""Base model with camelCase aliases for extension payloads and API output."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys on the wire.

    The browser extension posts ``idleTimeBefore`` / ``pageTitle`` style
    keys; ``populate_by_name`` keeps construction from Python readable.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FrozenCamelModel(CamelModel):
    """CamelModel that cannot be mutated after creation."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )
