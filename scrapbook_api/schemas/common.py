from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter
from pydantic.alias_generators import to_camel

_http_url = TypeAdapter(HttpUrl)


def _check_http_url(value: str) -> str:
    # Validate only; the stored value is the string as submitted
    _http_url.validate_python(value)
    return value


HttpUrlString = Annotated[str, Field(max_length=2048), AfterValidator(_check_http_url)]


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python; either spelling accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class SuccessResponse(CamelModel):
    success: bool = True
