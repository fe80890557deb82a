"""
Smart scan endpoints.

Start a session, upload a photo, run AI item detection, read results.
"""

from __future__ import annotations

from pathlib import Path
from uuid import UUID

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from openai import AsyncOpenAI
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.user import User
from app.schemas.scan import ScanDetailResponse, ScanSessionResponse
from app.services.scan_service import ScanService
from app.services.vision_client import VisionClient

router = APIRouter()


def get_scan_service(db: AsyncSession = Depends(get_db)) -> ScanService:
    """Dependency that constructs ScanService."""
    return ScanService(
        db=db,
        upload_dir=Path(settings.UPLOAD_DIR),
        public_base_url=settings.PUBLIC_BASE_URL,
    )


def get_vision_client() -> VisionClient:
    """Dependency that constructs the OpenAI-backed VisionClient."""
    if not settings.OPENAI_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": "VISION_NOT_CONFIGURED", "message": "Missing OPENAI_API_KEY"},
        )
    client = AsyncOpenAI(
        api_key=settings.OPENAI_API_KEY,
        timeout=settings.OPENAI_TIMEOUT_SECONDS,
    )
    return VisionClient(client=client, model=settings.OPENAI_VISION_MODEL)


@router.post(
    "/start",
    response_model=ScanSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start a scan session",
)
async def start_scan(
    current_user: User = Depends(get_current_user),
    service: ScanService = Depends(get_scan_service),
) -> ScanSessionResponse:
    return await service.start_scan(current_user)


@router.post(
    "/{scan_id}/upload",
    response_model=ScanSessionResponse,
    summary="Upload the photo to scan",
)
async def upload_scan_image(
    scan_id: UUID,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    service: ScanService = Depends(get_scan_service),
) -> ScanSessionResponse:
    """Store the photo; the session moves to `processing`."""
    content = await file.read()
    return await service.upload_image(scan_id, current_user, content)


@router.post(
    "/{scan_id}/run",
    response_model=ScanDetailResponse,
    summary="Detect and count items in the photo",
)
async def run_scan(
    scan_id: UUID,
    current_user: User = Depends(get_current_user),
    service: ScanService = Depends(get_scan_service),
    vision: VisionClient = Depends(get_vision_client),
) -> ScanDetailResponse:
    """
    Send the photo to the vision model and store what it found.

    - 400 if no photo was uploaded
    - 502 if the model call fails or returns nothing parseable
    """
    return await service.run_scan(scan_id, current_user, vision)


@router.get(
    "/{scan_id}",
    response_model=ScanDetailResponse,
    summary="Get a scan session with its results",
)
async def get_scan(
    scan_id: UUID,
    current_user: User = Depends(get_current_user),
    service: ScanService = Depends(get_scan_service),
) -> ScanDetailResponse:
    return await service.get_scan(scan_id, current_user)
