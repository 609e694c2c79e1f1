from fastapi import HTTPException, status

from taskboard.core.exceptions import RemoteStoreError
from taskboard.services.repository import EntityRepository


def not_found(label: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")


def remote_failure(repository: EntityRepository) -> HTTPException:
    # la mise à jour optimiste a déjà été remplacée par le refresh
    error = repository.error
    if isinstance(error, RemoteStoreError) and error.status_code == status.HTTP_404_NOT_FOUND:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    detail = str(error) if error else "Remote store rejected the change"
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


def ensure_exists(repository: EntityRepository, entity_id: str, label: str):
    item = repository.get(entity_id)
    if item is None:
        raise not_found(label)
    return item
