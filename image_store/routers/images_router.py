from fastapi import APIRouter, Depends, HTTPException, File, Form, UploadFile, Query
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session
from typing import Optional
import logging

from ..database import get_session
from ..core.config import settings
from ..application.services.image_service import ImageService
from ..infrastructure.storage.local_storage import LocalBlobStore
from ..infrastructure.audit.std_logger import StdAuditLogger
from ..infrastructure.persistence.sqlalchemy.repositories.image_repository_sql import SqlImageRepository
from ..schemas.images.image import (
    ImageResponse,
    DrawingUploadRequest,
    DrawingReplaceRequest,
    Base64ImageResponse,
    ImageListResponse,
)
from ..services.auth import decode_jwt_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["Images"])

oauth2_scheme = HTTPBearer(auto_error=False)

def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme)) -> int:
    if not credentials or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    payload = decode_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")
    try:
        return int(user_id)
    except (ValueError, TypeError):
        raise HTTPException(status_code=401, detail="Invalid token: invalid user ID format")


def get_blob_store() -> LocalBlobStore:
    return LocalBlobStore(settings.PUBLIC_DIR)


def get_image_service(
    session: Session = Depends(get_session),
    blob_store: LocalBlobStore = Depends(get_blob_store),
) -> ImageService:
    return ImageService(
        image_repo=SqlImageRepository(session),
        blob_store=blob_store,
        audit_logger=StdAuditLogger(),
    )


@router.post("/gallery/upload", response_model=ImageResponse)
def upload_gallery_image(
    file: UploadFile = File(...),
    uploaded_to: int = Form(0),
    current_user: int = Depends(get_current_user),
    service: ImageService = Depends(get_image_service),
):
    data = file.file.read()
    record = service.upload(data, file.filename or "", "gallery", uploaded_to, current_user)
    return ImageResponse.model_validate(record)


@router.post("/drawing/upload", response_model=ImageResponse)
def upload_drawing(
    body: DrawingUploadRequest,
    current_user: int = Depends(get_current_user),
    service: ImageService = Depends(get_image_service),
):
    record = service.upload_base64(body.image, "drawio", body.uploaded_to, current_user)
    return ImageResponse.model_validate(record)


@router.put("/drawing/upload/{image_id}", response_model=ImageResponse)
def replace_drawing(
    image_id: int,
    body: DrawingReplaceRequest,
    current_user: int = Depends(get_current_user),
    service: ImageService = Depends(get_image_service),
):
    record = service.replace_drawing(image_id, body.image, current_user)
    return ImageResponse.model_validate(record)


@router.get("/base64/{image_id}", response_model=Base64ImageResponse)
def get_image_base64(
    image_id: int,
    current_user: int = Depends(get_current_user),
    service: ImageService = Depends(get_image_service),
):
    return Base64ImageResponse(content=service.get_base64(image_id))


@router.get("/{image_type}/all", response_model=ImageListResponse)
def list_images(
    image_type: str,
    uploaded_to: Optional[int] = Query(None),
    page: int = Query(0, ge=0),
    count: int = Query(24, ge=1, le=100),
    current_user: int = Depends(get_current_user),
    service: ImageService = Depends(get_image_service),
):
    records, has_more = service.list_images(image_type, uploaded_to=uploaded_to, page=page, count=count)
    return ImageListResponse(
        images=[ImageResponse.model_validate(r) for r in records],
        has_more=has_more,
    )


@router.get("/{image_id}", response_model=ImageResponse)
def get_image(
    image_id: int,
    current_user: int = Depends(get_current_user),
    service: ImageService = Depends(get_image_service),
):
    return ImageResponse.model_validate(service.get(image_id))


@router.delete("/{image_id}")
def delete_image(
    image_id: int,
    current_user: int = Depends(get_current_user),
    service: ImageService = Depends(get_image_service),
):
    service.delete(image_id, actor_id=current_user)
    return {"message": "Image deleted"}
