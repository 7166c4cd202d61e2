# src/asynctable/filters/translation.py
"""Raw-byte injection into backend comparators.

The backend's regex comparator only takes text through its constructor and
stores it UTF-8 encoded, but matches in raw-byte mode. Legacy callers build
patterns out of arbitrary byte values (single-byte charsets, binary row keys),
so going through the text constructor would match a different byte sequence
than the one the caller wrote.

inject_comparator_bytes() is the only place that reaches past the backend's
public API. It writes the private ``_value`` slot declared on
ByteArrayComparable through the slot descriptor of the declaring class, so a
read-only property on a subclass cannot intercept it.

WARNING: this depends on the backend keeping that field name and layout. If
the field disappears or refuses the write, translation fails with
FilterTranslationError. It never falls back to the text path: that would
silently change which rows match.
"""

from __future__ import annotations

import structlog

from asynctable.backend.filters import ByteArrayComparable
from asynctable.contracts.enums import PatchFailure
from asynctable.contracts.errors import FilterTranslationError

logger = structlog.get_logger(__name__)

COMPARATOR_VALUE_FIELD = "_value"


def inject_comparator_bytes(
    comparator: object,
    raw: bytes,
    *,
    filter_kind: bytes,
    field_owner: type = ByteArrayComparable,
    field_name: str = COMPARATOR_VALUE_FIELD,
) -> None:
    """Overwrite a comparator's reference bytes with ``raw``.

    Args:
        comparator: Backend comparator built through its public constructor
        raw: Exact bytes the backend must match against
        filter_kind: Kind name of the filter being translated (for errors)
        field_owner: Backend class that declares the field
        field_name: Name of the private field on field_owner

    Raises:
        FilterTranslationError: reason=MISSING_FIELD when field_owner does not
            declare the field; reason=ACCESS_DENIED when the write is rejected.
    """
    descriptor = vars(field_owner).get(field_name)
    if descriptor is None or not hasattr(descriptor, "__set__"):
        cause = AttributeError(f"{field_owner.__qualname__} has no writable field {field_name!r}")
        logger.error(
            "Comparator patch point missing",
            filter_kind=filter_kind,
            field_owner=field_owner.__qualname__,
            field_name=field_name,
        )
        raise FilterTranslationError(filter_kind, PatchFailure.MISSING_FIELD, cause)

    try:
        descriptor.__set__(comparator, bytes(raw))
    except (AttributeError, TypeError) as e:
        logger.error(
            "Comparator patch write rejected",
            filter_kind=filter_kind,
            comparator_type=type(comparator).__qualname__,
            error=str(e),
        )
        raise FilterTranslationError(filter_kind, PatchFailure.ACCESS_DENIED, e) from e
