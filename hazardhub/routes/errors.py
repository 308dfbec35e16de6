"""
Mapping from business failures to HTTP errors.
"""

from fastapi import HTTPException, status

from hazardhub.models.result import CommandResult, ErrorKind

_STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
}


def raise_for_failure(result: CommandResult) -> None:
    """Raise HTTPException for a failed result; no-op on success."""
    if result.success:
        return
    raise HTTPException(
        status_code=_STATUS_BY_KIND[result.error.kind],
        detail={"error": result.error.value, "message": result.message},
    )
