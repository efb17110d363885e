"""Addon repository endpoints.

Serves the aggregated snapshot in the layout Kodi expects from an addon
repository: addons.xml, addons.xml.md5, per-addon changelogs and asset
downloads (redirected to GitHub).
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, RedirectResponse, Response

from addonmirror.common.errors import ReloadError
from addonmirror.repos.query import RepositoryView
from addonmirror.repos.store import RepositoryService
from gateway.api.deps import get_service, get_view

router = APIRouter(tags=["repository"])


@router.get("/", response_class=HTMLResponse)
async def index(view: RepositoryView = Depends(get_view)):
    """HTML listing of each addon's installable zip."""
    return HTMLResponse(view.index_html())


@router.get("/addons.xml")
async def addons_xml(view: RepositoryView = Depends(get_view)):
    return Response(content=view.manifest_document(), media_type="application/xml")


@router.get("/addons.xml.md5", response_class=PlainTextResponse)
async def addons_xml_md5(view: RepositoryView = Depends(get_view)):
    return PlainTextResponse(view.checksum())


@router.api_route("/reload", methods=["GET", "POST"])
async def reload(service: RepositoryService = Depends(get_service)):
    """Re-aggregate all repositories and publish the new snapshot."""
    try:
        result = await service.reload()
    except ReloadError as e:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "failed",
                "detail": e.message,
                "generation": service.store.generation,
            },
        )

    return {
        "status": "ok" if result.is_complete else "partial",
        "generation": service.store.generation,
        "duration_seconds": round(result.duration_seconds, 3),
        **result.snapshot.summary(),
        "failed": [failure.to_dict() for failure in result.failures],
    }


@router.get("/{addon_id}/changelog-{version}.txt", response_class=PlainTextResponse)
async def changelog(addon_id: str, version: str, view: RepositoryView = Depends(get_view)):
    """Changelog of every release; the version in the path is not checked."""
    return PlainTextResponse(view.changelog(addon_id))


@router.get("/{addon_id}/{filename}")
async def asset(addon_id: str, filename: str, view: RepositoryView = Depends(get_view)):
    """Redirect to a named asset of the addon's current release."""
    return RedirectResponse(view.asset_url(addon_id, filename), status_code=status.HTTP_302_FOUND)
