"""Shared base model and decode helpers for APS response shapes."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Type, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound="LenientModel")


class LenientModel(BaseModel):
    """Base for decoded APS records.

    Unknown keys are ignored, and ``null`` or mistyped values fall back to the
    field default, so a record with one bad field still decodes.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_error(
        cls, value: Any, handler: ValidatorFunctionWrapHandler, info: ValidationInfo
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            field = cls.model_fields[info.field_name]
            if field.is_required():
                raise
            logger.debug("Ignoring malformed %s.%s: %r", cls.__name__, info.field_name, value)
            return field.get_default(call_default_factory=True)


def as_dict(raw: Any) -> Dict[str, Any]:
    return raw if isinstance(raw, dict) else {}


def as_list(raw: Any) -> List[Any]:
    return raw if isinstance(raw, list) else []


def decode_many(model: Type[ModelT], values: Any) -> List[ModelT]:
    """Decode every dict in ``values``; entries that do not fit are skipped."""
    decoded: List[ModelT] = []
    for value in as_list(values):
        if not isinstance(value, dict):
            continue
        try:
            decoded.append(model.model_validate(value))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed %s entry (id=%s): %s",
                model.__name__,
                value.get("id"),
                exc.errors()[0].get("msg") if exc.errors() else exc,
            )
    return decoded


def decode_one(model: Type[ModelT], value: Any) -> ModelT:
    """Decode a single record, falling back to an all-defaults instance."""
    try:
        return model.model_validate(as_dict(value))
    except ValidationError as exc:
        logger.warning("Malformed %s payload: %s", model.__name__, exc)
        return model.model_validate({})


def to_payload(model: BaseModel) -> Dict[str, Any]:
    """Serialize a summary record, omitting absent fields."""
    return model.model_dump(by_alias=True, exclude_none=True)


__all__ = [
    "LenientModel",
    "as_dict",
    "as_list",
    "decode_many",
    "decode_one",
    "to_payload",
]
