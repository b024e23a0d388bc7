from sqlalchemy.exc import IntegrityError

# SQLSTATE codes reported by PostgreSQL drivers
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"


def _sqlstate(exc: IntegrityError):
    orig = exc.orig
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when ``exc`` comes from a primary key or unique constraint"""
    code = _sqlstate(exc)
    if code is not None:
        return code == _UNIQUE_VIOLATION
    return "UNIQUE constraint failed" in str(exc.orig)


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    """True when ``exc`` comes from a foreign key constraint"""
    code = _sqlstate(exc)
    if code is not None:
        return code == _FOREIGN_KEY_VIOLATION
    return "FOREIGN KEY constraint failed" in str(exc.orig)
