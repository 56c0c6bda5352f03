"""Settings router — backup and restore, wiping data, and the generator API key."""

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from linguagen.dependencies import get_library, get_store, resolve_api_key
from linguagen.schemas.settings import ApiKeyStatus, ApiKeyUpdate, RestoreResponse
from linguagen.services.ai_client import ai_provider_name
from linguagen.services.library import LessonLibrary
from linguagen.services.record_store import RecordStore

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("/backup")
def export_backup(
    library: LessonLibrary = Depends(get_library),
    store: RecordStore = Depends(get_store),
):
    """Download every student and lesson as one JSON file."""
    backup = store.export_data(library.lessons, library.students)
    return Response(
        content=backup.content,
        media_type=backup.media_type,
        headers={"Content-Disposition": f'attachment; filename="{backup.filename}"'},
    )


@router.post("/backup", response_model=RestoreResponse)
async def import_backup(
    file: UploadFile = File(...),
    confirm: bool = Query(False),
    library: LessonLibrary = Depends(get_library),
    store: RecordStore = Depends(get_store),
):
    """Restore from a backup file.  This OVERWRITES all current data (?confirm=true)."""
    contents = store.import_data(await file.read())
    library.restore(contents.students, contents.lessons, confirmed=confirm)
    return RestoreResponse(
        students=len(contents.students),
        lessons=len(contents.lessons),
        message="Data restored successfully.",
    )


@router.delete("/data", status_code=204)
def clear_data(confirm: bool = Query(False), library: LessonLibrary = Depends(get_library)):
    library.clear(confirmed=confirm)


@router.get("/api-key", response_model=ApiKeyStatus)
def api_key_status(store: RecordStore = Depends(get_store)):
    api_key = resolve_api_key(store)
    return ApiKeyStatus(configured=bool(api_key), provider=ai_provider_name(api_key))


@router.put("/api-key", response_model=ApiKeyStatus)
def save_api_key(body: ApiKeyUpdate, store: RecordStore = Depends(get_store)):
    store.save_api_key(body.api_key)
    return api_key_status(store)


@router.delete("/api-key", response_model=ApiKeyStatus)
def clear_api_key(store: RecordStore = Depends(get_store)):
    store.clear_api_key()
    return api_key_status(store)
