import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .blobs import BlobStore
from .config import Settings, get_settings
from .file_utils import format_file_size, generate_share_id, get_file_category, is_allowed_filename
from .logging_config import configure_logging
from .schemas import AdminStats, FileCreate, FileRecord
from .storage import DuplicateShareIdError, FileStorage, build_storage

logger = logging.getLogger(__name__)

SHARE_ID_ATTEMPTS = 5


def get_storage(request: Request) -> FileStorage:
    return request.app.state.storage


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blobs


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def create_app(settings: Optional[Settings] = None, storage: Optional[FileStorage] = None) -> FastAPI:
    """Build the FileShare API with its metadata store and blob store attached."""
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(title="FileShare API")
    app.state.settings = settings
    app.state.storage = storage or build_storage(settings.storage_backend, settings.db_path)
    app.state.blobs = BlobStore(settings.uploads_dir)

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this to your frontend's domain
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Invalid request"
        return JSONResponse(status_code=422, content={"message": message})

    @app.on_event("startup")
    async def startup_event():
        logger.info(
            "FileShare started: storage=%s uploads=%s",
            type(app.state.storage).__name__,
            app.state.blobs.root,
        )

    register_routes(app)
    return app


async def _find_blob(blobs: BlobStore, record: FileRecord):
    if not await blobs.exists(record.filename):
        logger.warning("Blob %s missing for file %s", record.filename, record.id)
        raise HTTPException(status_code=404, detail="File not found on disk")
    return blobs.path_for(record.filename)


def register_routes(app: FastAPI) -> None:
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.get("/api/files", response_model=List[FileRecord])
    async def list_files(
        q: Optional[str] = None,
        category: Optional[str] = None,
        storage: FileStorage = Depends(get_storage),
    ):
        """Public listing, newest first. ``q`` and ``category`` narrow the result."""
        try:
            files = await storage.get_all_files()
        except Exception:
            logger.exception("Listing files failed")
            raise HTTPException(status_code=500, detail="Failed to fetch files")
        if q:
            needle = q.lower()
            files = [f for f in files if needle in f.original_name.lower()]
        if category and category != "All":
            files = [f for f in files if get_file_category(f.mime_type) == category]
        return files

    @app.post("/api/upload", response_model=FileRecord)
    async def upload_file(
        file: Optional[UploadFile] = File(None),
        storage: FileStorage = Depends(get_storage),
        blobs: BlobStore = Depends(get_blob_store),
        settings: Settings = Depends(get_app_settings),
    ):
        """Save the uploaded bytes, then record them under a fresh share id."""
        if file is None or not file.filename:
            raise HTTPException(status_code=400, detail="No file uploaded")
        if not is_allowed_filename(file.filename):
            raise HTTPException(status_code=400, detail="File type not allowed")

        # Stop one byte past the limit instead of buffering the whole part
        contents = await file.read(settings.max_upload_bytes + 1)
        if len(contents) > settings.max_upload_bytes:
            raise HTTPException(status_code=413, detail="File too large")

        key = blobs.new_key(file.filename)
        try:
            await blobs.save(key, contents)
            for _ in range(SHARE_ID_ATTEMPTS):
                draft = FileCreate(
                    filename=key,
                    original_name=file.filename,
                    mime_type=file.content_type or "application/octet-stream",
                    size=len(contents),
                    share_id=generate_share_id(),
                )
                try:
                    record = await storage.create_file(draft)
                except DuplicateShareIdError as e:
                    logger.warning("Share id collision on %s, retrying", e.share_id)
                    continue
                logger.info("Uploaded %s as %s (%d bytes)", record.original_name, record.share_id, record.size)
                return record
            raise RuntimeError("Could not allocate a unique share id")
        except Exception:
            logger.exception("Upload of %s failed", file.filename)
            await blobs.delete(key)
            raise HTTPException(status_code=500, detail="Failed to upload file")

    @app.get("/api/files/{share_id}", response_model=FileRecord)
    async def get_file(share_id: str, storage: FileStorage = Depends(get_storage)):
        record = await storage.get_file_by_share_id(share_id)
        if not record:
            raise HTTPException(status_code=404, detail="File not found")
        await storage.increment_views(record.id)
        record.views += 1
        return record

    @app.get("/api/download/{share_id}")
    async def download_file(
        share_id: str,
        storage: FileStorage = Depends(get_storage),
        blobs: BlobStore = Depends(get_blob_store),
    ):
        record = await storage.get_file_by_share_id(share_id)
        if not record:
            raise HTTPException(status_code=404, detail="File not found")
        path = await _find_blob(blobs, record)
        await storage.increment_downloads(record.id)
        return FileResponse(path, media_type=record.mime_type, filename=record.original_name)

    @app.get("/api/preview/{share_id}")
    async def preview_file(
        share_id: str,
        storage: FileStorage = Depends(get_storage),
        blobs: BlobStore = Depends(get_blob_store),
    ):
        record = await storage.get_file_by_share_id(share_id)
        if not record:
            raise HTTPException(status_code=404, detail="File not found")
        return FileResponse(await _find_blob(blobs, record), media_type=record.mime_type)

    # Admin endpoints
    @app.get("/api/admin/files", response_model=List[FileRecord])
    async def admin_list_files(storage: FileStorage = Depends(get_storage)):
        return await storage.get_all_files()

    @app.get("/api/admin/stats", response_model=AdminStats)
    async def admin_stats(storage: FileStorage = Depends(get_storage)):
        stats = await storage.get_stats()
        return AdminStats(**stats.model_dump(), total_size_formatted=format_file_size(stats.total_size))

    @app.delete("/api/admin/files/{file_id}")
    async def admin_delete_file(
        file_id: int,
        storage: FileStorage = Depends(get_storage),
        blobs: BlobStore = Depends(get_blob_store),
    ):
        """Delete the blob first, then the record.

        A failed blob delete keeps the record so the request can be retried.
        """
        record = await storage.get_file(file_id)
        if record:
            try:
                if not await blobs.delete(record.filename):
                    logger.warning("Blob %s already gone for file %s", record.filename, file_id)
            except OSError:
                logger.exception("Could not delete blob %s for file %s", record.filename, file_id)
                raise HTTPException(status_code=500, detail="Failed to delete file")
            await storage.delete_file(file_id)
            logger.info("Deleted file %s (%s)", file_id, record.share_id)
        return {"success": True}


app = create_app()
