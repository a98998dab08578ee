# ========================================
# careerconnect/routes/files.py
# ========================================

import io

import structlog
from fastapi import APIRouter, HTTPException, UploadFile
from fastapi.responses import StreamingResponse
from gridfs.errors import NoFile

from careerconnect.config import settings
from careerconnect.database import BUCKETS, get_fs_bucket, parse_object_id
from careerconnect.utils.clock import utcnow

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/files", tags=["Files"])


async def store_upload(bucket_name: str, file: UploadFile, owner: dict) -> str:
    """Save an upload into GridFS and return its download path."""
    contents = await file.read()
    if len(contents) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=400, detail="File size exceeds upload limit")

    fs_bucket = get_fs_bucket(bucket_name)
    file_id = await fs_bucket.upload_from_stream(
        filename=f"{owner['_id']}_{file.filename}",
        source=io.BytesIO(contents),
        metadata={
            "user_id": str(owner["_id"]),
            "content_type": file.content_type,
            "original_filename": file.filename,
            "uploaded_at": utcnow(),
        },
    )
    return f"{router.prefix}/{bucket_name}/{file_id}"


async def discard_upload(url: str) -> None:
    """Delete a file stored by store_upload; a missing file is ignored."""
    bucket_name, _, file_id = url[len(router.prefix) + 1:].partition("/")
    fs_bucket = get_fs_bucket(bucket_name)
    try:
        await fs_bucket.delete(parse_object_id(file_id, "file ID"))
    except NoFile:
        return
    logger.info("upload_discarded", bucket=bucket_name, file_id=file_id)


# ✅ DOWNLOAD/VIEW A STORED FILE FROM GRIDFS
@router.get("/{bucket}/{file_id}")
async def download_file(bucket: str, file_id: str):
    if bucket not in BUCKETS:
        raise HTTPException(status_code=404, detail="File not found")

    oid = parse_object_id(file_id, "file ID")
    fs_bucket = get_fs_bucket(bucket)

    try:
        grid_out = await fs_bucket.open_download_stream(oid)
    except NoFile:
        raise HTTPException(status_code=404, detail="File not found")

    contents = await grid_out.read()
    metadata = grid_out.metadata or {}
    filename = metadata.get("original_filename") or grid_out.filename

    return StreamingResponse(
        io.BytesIO(contents),
        media_type=metadata.get("content_type") or "application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )
