from fastapi import HTTPException, status

from dominion.exceptions import (
    DominionError,
    EmpireNotFoundError,
    GameNotFoundError,
    PersistenceUnavailableError,
    SnapshotCorruptedError,
    SnapshotNotFoundError,
    SnapshotVersionError,
    TurnInProgressError,
    TurnPhaseError,
)

# Most specific first; anything else that is a ValueError is a 400
_STATUS_BY_ERROR: list[tuple[type[Exception], int]] = [
    (GameNotFoundError, status.HTTP_404_NOT_FOUND),
    (EmpireNotFoundError, status.HTTP_404_NOT_FOUND),
    (SnapshotNotFoundError, status.HTTP_404_NOT_FOUND),
    (TurnInProgressError, status.HTTP_409_CONFLICT),
    (SnapshotVersionError, status.HTTP_409_CONFLICT),
    (SnapshotCorruptedError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (TurnPhaseError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (PersistenceUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def http_error(exc: Exception) -> HTTPException:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            break
    else:
        code = status.HTTP_400_BAD_REQUEST if isinstance(exc, ValueError) else status.HTTP_500_INTERNAL_SERVER_ERROR

    if isinstance(exc, DominionError):
        return HTTPException(status_code=code, detail=exc.to_dict()["error"])
    return HTTPException(status_code=code, detail=str(exc))
