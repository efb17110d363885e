from fastapi import Depends, HTTPException, Request, status

from addonmirror.repos.query import RepositoryView
from addonmirror.repos.store import RepositoryService


def get_service(request: Request) -> RepositoryService:
    """Repository service created at application startup."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Repository is not initialized",
        )
    return service


def get_view(service: RepositoryService = Depends(get_service)) -> RepositoryView:
    """Query view bound to the snapshot published when the request arrived."""
    snapshot = service.store.current()
    if snapshot is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No repository snapshot available",
        )
    return RepositoryView(snapshot)
