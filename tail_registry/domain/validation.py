from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator


class TailCategory(StrEnum):
    GAMING = "gaming"
    EVENT = "event"
    EDUCATION = "education"
    MEME = "meme"
    STABLECOIN = "stablecoin"
    WRAPPED = "wrapped"
    PLATFORM = "platform"


ASSET_HASH_LENGTH = 64
COIN_ID_LENGTH = 64
NFT_ID_LENGTH = 62

OPTIONAL_URL_FIELDS = ("website_url", "twitter_url", "discord_url")

REQUIRED_MESSAGES: dict[str, str] = {
    "hash": "Please enter hash",
    "name": "Please enter name",
    "code": "Please enter code",
    "category": "Please select category",
    "coin": "Please enter Coin ID",
    "logo": "Please enter NFT ID",
}

_URL_ADAPTER = TypeAdapter(HttpUrl)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class TailFields(BaseModel):
    """Structurally valid registration form.

    ``logo`` is only length-checked here; whether it decodes is decided at
    submit time.
    """

    model_config = ConfigDict(extra="ignore")

    hash: str = Field(min_length=ASSET_HASH_LENGTH, max_length=ASSET_HASH_LENGTH)
    name: str = Field(min_length=1, max_length=100)
    code: str = Field(min_length=1, max_length=5)
    category: TailCategory
    coin: str = Field(min_length=COIN_ID_LENGTH, max_length=COIN_ID_LENGTH)
    logo: str = Field(min_length=NFT_ID_LENGTH, max_length=NFT_ID_LENGTH)
    description: str = ""
    website_url: str | None = None
    twitter_url: str | None = None
    discord_url: str | None = None

    @field_validator("description", mode="before")
    @classmethod
    def _description_default(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator(*OPTIONAL_URL_FIELDS, mode="before")
    @classmethod
    def _blank_url_is_absent(cls, value: object) -> object:
        if value == "":
            return None
        return value

    @field_validator(*OPTIONAL_URL_FIELDS)
    @classmethod
    def _url_is_well_formed(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            _URL_ADAPTER.validate_python(value)
        except ValidationError as exc:
            raise ValueError("must be a valid URL") from exc
        # Keep the user's text; HttpUrl would normalise it.
        return value


def validate_fields(fields: Mapping[str, object]) -> TailFields | list[FieldError]:
    try:
        return TailFields.model_validate(dict(fields))
    except ValidationError as exc:
        return _field_errors(exc)


def _field_errors(exc: ValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    seen: set[str] = set()
    for error in exc.errors():
        field = str(error["loc"][0]) if error["loc"] else "__root__"
        if field in seen:
            continue
        seen.add(field)
        errors.append(FieldError(field=field, message=_message_for(field, error)))
    return errors


def _message_for(field: str, error: Mapping[str, object]) -> str:
    required_message = REQUIRED_MESSAGES.get(field)
    if required_message is not None and (error.get("type") == "missing" or error.get("input") in ("", None)):
        return required_message
    message = str(error.get("msg", "invalid value"))
    return message.removeprefix("Value error, ")
