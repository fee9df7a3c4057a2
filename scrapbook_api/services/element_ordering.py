"""Element validity and render order.

Render order is ascending ``zIndex`` with ties kept in insertion order. It is
recomputed on every read and never stored apart from ``zIndex`` itself.
"""

from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any, Protocol, TypeVar

from pydantic import ValidationError as PydanticValidationError

from scrapbook_api.exceptions import ElementValidationError
from scrapbook_api.models.base import utcnow
from scrapbook_api.schemas.element import ElementSpec


class _Stackable(Protocol):
    z_index: int


T = TypeVar("T", bound=_Stackable)

_TICK = timedelta(microseconds=1)


def render_order(elements: Iterable[T]) -> list[T]:
    """Return elements bottom-to-top. ``sorted`` is stable, so equal zIndex keeps input order."""
    return sorted(elements, key=lambda element: element.z_index)


def creation_stamps(count: int, after: datetime | None = None) -> list[datetime]:
    """Strictly increasing ``created_at`` values for ``count`` rows inserted together.

    The sequence starts at the current time, or one tick past ``after`` (the
    page's newest element) when the clock reads earlier than that, so
    insertion order holds even if the wall clock stalls or steps back.
    """
    start = utcnow()
    if after is not None:
        if after.tzinfo is None:
            # SQLite hands timestamps back without tzinfo
            after = after.replace(tzinfo=timezone.utc)
        start = max(start, after + _TICK)
    return [start + index * _TICK for index in range(count)]


def _describe(exc: PydanticValidationError) -> tuple[str, str | None]:
    first = exc.errors()[0]
    loc = [str(part) for part in first.get("loc", ())]
    field = ".".join(loc) if loc else None
    msg = first.get("msg", "invalid value")
    return (f"{field}: {msg}" if field else msg), field


def validate_element(raw: ElementSpec | Mapping[str, Any], index: int | None = None) -> ElementSpec:
    """Validate one element specification.

    Raises:
        ElementValidationError: unknown type, non-numeric position,
            non-positive scale, non-integer zIndex, or properties that do not
            match the element type.
    """
    if isinstance(raw, ElementSpec):
        return raw
    if not isinstance(raw, Mapping):
        raise ElementValidationError("element must be an object", index=index)
    try:
        return ElementSpec.model_validate(raw)
    except PydanticValidationError as exc:
        reason, field = _describe(exc)
        raise ElementValidationError(reason, index=index, field=field) from exc


def normalize_elements(raw_elements: Sequence[ElementSpec | Mapping[str, Any]]) -> list[ElementSpec]:
    """Validate a whole layout before anything is written. Submission order is preserved."""
    return [validate_element(raw, index) for index, raw in enumerate(raw_elements)]
