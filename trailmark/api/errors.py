"""Translate component validation errors into HTTP errors."""

from typing import Any, NoReturn

from fastapi import HTTPException


def error_detail(errors: list[Any]) -> list[dict[str, Any]]:
    # Component errors carry either field_name or field
    return [
        {
            "code": err.code,
            "message": err.message,
            "field": getattr(err, "field_name", None) or getattr(err, "field", None),
        }
        for err in errors
    ]


def raise_for_errors(errors: list[Any]) -> NoReturn:
    """404 when anything was not found, else 400."""
    status_code = 404 if any(err.code == "not_found" for err in errors) else 400
    raise HTTPException(status_code=status_code, detail=error_detail(errors))
