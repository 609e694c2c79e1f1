from fastapi import Request

from taskboard.services.workspace import Workspace


def get_workspace(request: Request) -> Workspace:
    # construit au démarrage (lifespan), voir main.py
    return request.app.state.workspace
