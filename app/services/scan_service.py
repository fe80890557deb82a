"""
Smart scan business logic.

A scan session holds one uploaded photo and the item counts the vision
model found in it. Sessions are private to the user who started them.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from uuid import UUID

import openai
from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.scan import ScanResult, ScanSession, ScanStatus
from app.models.user import User
from app.schemas.scan import ScanDetailResponse, ScanResultResponse, ScanSessionResponse
from app.services.vision_client import VisionClient
from app.services.vision_normalizer import VisionResponseError

logger = logging.getLogger(__name__)


class ScanService:
    """Handles scan session lifecycle and AI detection runs."""

    def __init__(
        self,
        db: AsyncSession,
        upload_dir: Path,
        public_base_url: str,
    ) -> None:
        self.db = db
        self.upload_dir = upload_dir
        self.public_base_url = public_base_url.rstrip("/")

    # -----------------------------------------------------------------------
    # Start
    # -----------------------------------------------------------------------

    async def start_scan(self, user: User) -> ScanSessionResponse:
        """Open a new, empty scan session."""
        scan = ScanSession(user_id=user.id, status=ScanStatus.created)
        self.db.add(scan)
        await self.db.flush()
        await self.db.refresh(scan)

        logger.info("Scan started: scan_id=%s user_id=%s", scan.id, user.id)
        return ScanSessionResponse.model_validate(scan)

    # -----------------------------------------------------------------------
    # Upload
    # -----------------------------------------------------------------------

    async def upload_image(self, scan_id: UUID, user: User, content: bytes) -> ScanSessionResponse:
        """Store the photo for a session and mark it as processing."""
        scan = await self._get_scan(scan_id, user)

        if not content:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "EMPTY_UPLOAD", "message": "No file uploaded"},
            )

        filename = f"{scan.id}-{int(time.time() * 1000)}.jpg"
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        (self.upload_dir / filename).write_bytes(content)

        scan.image_url = f"/uploads/{filename}"
        scan.status = ScanStatus.processing
        await self.db.flush()

        logger.info("Scan image stored: scan_id=%s bytes=%s", scan.id, len(content))
        return ScanSessionResponse.model_validate(scan)

    # -----------------------------------------------------------------------
    # Run
    # -----------------------------------------------------------------------

    async def run_scan(
        self, scan_id: UUID, user: User, vision: VisionClient
    ) -> ScanDetailResponse:
        """
        Run item detection on the uploaded photo.

        - Requires an uploaded image
        - Replaces any results from a previous run
        - Marks the session failed and returns 502 if detection fails
        """
        scan = await self._get_scan(scan_id, user)

        if not scan.image_url:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"code": "NO_IMAGE", "message": "No image uploaded yet"},
            )

        try:
            items = await vision.detect_items(f"{self.public_base_url}{scan.image_url}")
        except (VisionResponseError, openai.OpenAIError):
            logger.exception("Scan failed: scan_id=%s", scan.id)
            scan.status = ScanStatus.failed
            await self.db.flush()
            await self.db.commit()
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={"code": "SCAN_FAILED", "message": "Scan failed, please try again"},
            )

        await self.db.execute(delete(ScanResult).where(ScanResult.scan_session_id == scan.id))
        self.db.add_all(
            ScanResult(
                scan_session_id=scan.id,
                label=item.label,
                count=item.count,
                confidence=item.confidence,
            )
            for item in items
        )
        scan.status = ScanStatus.done
        await self.db.flush()

        logger.info("Scan done: scan_id=%s labels=%s", scan.id, len(items))
        return await self._detail(scan)

    # -----------------------------------------------------------------------
    # Get
    # -----------------------------------------------------------------------

    async def get_scan(self, scan_id: UUID, user: User) -> ScanDetailResponse:
        scan = await self._get_scan(scan_id, user)
        return await self._detail(scan)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _get_scan(self, scan_id: UUID, user: User) -> ScanSession:
        result = await self.db.execute(
            select(ScanSession).where(
                ScanSession.id == scan_id,
                ScanSession.user_id == user.id,
            )
        )
        scan = result.scalar_one_or_none()

        if scan is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "SCAN_NOT_FOUND", "message": "Scan session not found"},
            )
        return scan

    async def _detail(self, scan: ScanSession) -> ScanDetailResponse:
        result = await self.db.execute(
            select(ScanResult)
            .where(ScanResult.scan_session_id == scan.id)
            .order_by(ScanResult.label)
        )
        return ScanDetailResponse(
            scan=ScanSessionResponse.model_validate(scan),
            results=[ScanResultResponse.model_validate(r) for r in result.scalars().all()],
        )
