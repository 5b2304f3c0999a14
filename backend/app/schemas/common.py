from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Request body accepting the client's camelCase keys (snake_case also works)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def iso(value):
    return value.isoformat() if value else None
