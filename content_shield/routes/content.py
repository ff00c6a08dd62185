"""
Content Routes

Upload, catalogue, download and per-item actions on content ("posts").
Stored files are only ever served through the access-checked routes here.
"""

from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from content_shield.auth import get_current_user
from content_shield.constants.licensing import LicenseType
from content_shield.database import get_db
from content_shield.exceptions import BlobNotFoundError, PermissionDeniedError
from content_shield.models.user import User
from content_shield.schemas.content import AccessDecisionResponse, ContentMetadata, ContentResponse, ContentWithAccess
from content_shield.schemas.delete_request import DeleteRequestCreate, DeleteRequestResponse
from content_shield.schemas.engagement import CommentCreate, CommentResponse, LikeResponse
from content_shield.schemas.license_request import LicenseRequestResponse
from content_shield.services.access_resolver import AccessResolver
from content_shield.services.blob_store import LocalBlobStore, get_blob_store
from content_shield.services.content_identity import ContentIdentityService, stage_upload
from content_shield.services.content_service import ContentService
from content_shield.services.delete_request_service import DeleteRequestService
from content_shield.services.engagement_service import EngagementService
from content_shield.services.license_service import LicenseService

router = APIRouter(prefix="/api/posts", tags=["Posts"])


@router.post("", response_model=ContentResponse, status_code=status.HTTP_201_CREATED)
async def upload_content(
    file: UploadFile = File(...),
    title: str = Form(..., min_length=1, max_length=200),
    description: str | None = Form(None, max_length=5000),
    license_type: LicenseType = Form(...),
    allow_download: bool = Form(False),
    price: int | None = Form(None, gt=0),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    """
    Upload a file as a new post.

    Byte-identical files already on the platform are rejected with 409.
    Maximum file size: 10MB
    """
    metadata = ContentMetadata(
        title=title,
        description=description,
        license_type=license_type,
        allow_download=allow_download,
        price=price,
        original_filename=(file.filename or "")[-255:],
        content_type=file.content_type or "application/octet-stream",
    )
    staged_path = await stage_upload(file)
    return await ContentIdentityService(db, blob_store).register_staged_file(current_user, staged_path, metadata)


@router.get("", response_model=list[ContentWithAccess])
async def get_feed(
    skip: int = 0,
    limit: int | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    contents = await ContentService(db, blob_store).list_feed(skip=skip, limit=limit)
    return await AccessResolver(db).annotate_access(current_user, contents)


@router.get("/trending", response_model=list[ContentWithAccess])
async def get_trending(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    contents = await ContentService(db, blob_store).list_trending()
    return await AccessResolver(db).annotate_access(current_user, contents)


@router.get("/{content_id}", response_model=ContentWithAccess)
async def get_content(
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    resolver = AccessResolver(db)
    content = await resolver.get_content(content_id)
    annotated = await resolver.annotate_access(current_user, [content])
    return annotated[0]


@router.get("/{content_id}/access", response_model=AccessDecisionResponse)
async def get_access(
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await AccessResolver(db).resolve(current_user, content_id)


@router.get("/{content_id}/download")
async def download_content(
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    decision = await AccessResolver(db).resolve(current_user, content_id)
    if not decision.can_download:
        raise PermissionDeniedError("You don't have permission to download this content", action="download")

    content = await ContentService(db, blob_store).get_content(content_id)
    if not blob_store.exists(content.file_path):
        raise BlobNotFoundError(content.file_path)

    return FileResponse(
        blob_store.path_for(content.file_path),
        media_type=content.content_type,
        filename=f"{content.title}{Path(content.file_path).suffix}",
    )


@router.get("/{content_id}/thumbnail")
async def get_thumbnail(
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    resolver = AccessResolver(db)
    content = await resolver.get_content(content_id)
    if not await resolver.can_access(current_user, content):
        raise PermissionDeniedError("You don't have access to this content", action="view_thumbnail")
    if not content.thumbnail_path or not blob_store.exists(content.thumbnail_path):
        raise BlobNotFoundError(content.thumbnail_path or f"thumbnail:{content_id}")

    return FileResponse(blob_store.path_for(content.thumbnail_path), media_type=content.content_type)


@router.delete("/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_content(
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    await ContentService(db, blob_store).delete_content(current_user, content_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{content_id}/request-license",
    response_model=LicenseRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_license(
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await LicenseService(db).request_license(current_user, content_id)


@router.post(
    "/{content_id}/request-deletion",
    response_model=DeleteRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_deletion(
    content_id: int,
    payload: DeleteRequestCreate | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    blob_store: LocalBlobStore = Depends(get_blob_store),
):
    service = DeleteRequestService(db, ContentService(db, blob_store))
    return await service.create_request(current_user, content_id, payload.reason if payload else None)


@router.post("/{content_id}/like", response_model=LikeResponse)
async def like_content(
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EngagementService(db).like(current_user, content_id)


@router.delete("/{content_id}/like", response_model=LikeResponse)
async def unlike_content(
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EngagementService(db).unlike(current_user, content_id)


@router.get("/{content_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EngagementService(db).list_comments(current_user, content_id)


@router.post("/{content_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    content_id: int,
    payload: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await EngagementService(db).add_comment(current_user, content_id, payload.body)
