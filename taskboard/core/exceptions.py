"""Exceptions du domaine taskboard."""

from typing import Optional


class TaskboardError(Exception):
    pass


class RemoteStoreError(TaskboardError):
    """Échec d'un appel au backend distant (réseau ou rejet)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidEntityError(TaskboardError, ValueError):
    """Donnée refusée avant persistance (ex: nom vide)."""
