"""Classify SQLAlchemy/asyncpg failures into StoreErrorKind.

The asyncpg dialect re-raises driver errors as DBAPIError subclasses whose
`orig` carries the PostgreSQL SQLSTATE (`orig.sqlstate`, mirrored as
`orig.pgcode`). Classification is by SQLSTATE, falling back to the class of
the SQLAlchemy exception when no code is present.
"""

from sqlalchemy import exc as sa_exc

from src.pa_common.enums import StoreErrorKind
from src.pa_common.errors import StoreError

_SQLSTATE_KINDS: dict[str, StoreErrorKind] = {
    "40001": StoreErrorKind.TRANSIENT_CONFLICT,  # serialization_failure
    "40P01": StoreErrorKind.TRANSIENT_CONFLICT,  # deadlock_detected
    "55P03": StoreErrorKind.TRANSIENT_CONFLICT,  # lock_not_available
    "42P04": StoreErrorKind.ALREADY_EXISTS,      # duplicate_database
    "42P07": StoreErrorKind.ALREADY_EXISTS,      # duplicate_table
    "42710": StoreErrorKind.ALREADY_EXISTS,      # duplicate_object
    "3D000": StoreErrorKind.NOT_FOUND,           # invalid_catalog_name
    "42P01": StoreErrorKind.NOT_FOUND,           # undefined_table
}

# Matched on the two-character SQLSTATE class when no exact code matches
_SQLSTATE_CLASS_KINDS: dict[str, StoreErrorKind] = {
    "08": StoreErrorKind.UNAVAILABLE,            # connection exception
    "23": StoreErrorKind.CONSTRAINT_VIOLATION,   # integrity constraint violation
    "53": StoreErrorKind.RESOURCE_EXHAUSTED,     # insufficient resources
    "57": StoreErrorKind.UNAVAILABLE,            # operator intervention (shutdown)
}


def sqlstate_of(error: BaseException) -> str | None:
    orig = getattr(error, "orig", None)
    for candidate in (orig, getattr(orig, "__cause__", None), error):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if isinstance(code, str):
            return code
    return None


def classify_store_error(error: BaseException) -> StoreErrorKind:
    if isinstance(error, StoreError):
        return error.kind
    code = sqlstate_of(error)
    if code is not None:
        if code in _SQLSTATE_KINDS:
            return _SQLSTATE_KINDS[code]
        kind = _SQLSTATE_CLASS_KINDS.get(code[:2])
        if kind is not None:
            return kind
    if isinstance(error, sa_exc.TimeoutError):
        # Connection pool exhausted
        return StoreErrorKind.RESOURCE_EXHAUSTED
    if isinstance(error, sa_exc.DBAPIError) and error.connection_invalidated:
        return StoreErrorKind.UNAVAILABLE
    if isinstance(error, sa_exc.IntegrityError):
        return StoreErrorKind.CONSTRAINT_VIOLATION
    if isinstance(error, (sa_exc.InterfaceError, ConnectionError, OSError)):
        return StoreErrorKind.UNAVAILABLE
    return StoreErrorKind.UNKNOWN


def to_store_error(error: BaseException) -> StoreError:
    """Wrap a raw store exception; callers raise it `from` the original."""
    if isinstance(error, StoreError):
        return error
    text = str(error)
    detail = text.splitlines()[0] if text else type(error).__name__
    return StoreError(classify_store_error(error), detail)


def is_transient_store_fault(error: BaseException) -> bool:
    """Retry predicate: True for aborted transactions and exhausted resources."""
    return isinstance(error, StoreError) and error.is_transient
