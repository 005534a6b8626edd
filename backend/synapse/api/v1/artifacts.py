"""Artifact API routes, including file upload."""

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from synapse.config import settings
from synapse.core.database import get_db
from synapse.core.exceptions import BadRequestError, ValidationError
from synapse.core.security import get_current_user
from synapse.models.user import User
from synapse.schemas.contribution import ArtifactCreate, ArtifactResponse, UploadResponse
from synapse.services.artifact_service import ArtifactService
from synapse.utils.file_store import save_upload

logger = structlog.get_logger()

router = APIRouter()


@router.get("", response_model=list[ArtifactResponse])
async def list_artifacts(
    problem_id: int | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = ArtifactService(db)
    return await service.list_artifacts(problem_id)


@router.post("", response_model=ArtifactResponse, status_code=201)
async def create_artifact(
    data: ArtifactCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Attach a link or an already uploaded file to a problem."""
    service = ArtifactService(db)
    return await service.create_artifact(data, current_user)


@router.post("/upload", response_model=UploadResponse)
async def upload_file(
    file: UploadFile = File(...),
    problem_id: int | None = Form(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Store an uploaded file; attach it to ``problem_id`` when one is given.

    A failed artifact insert does not fail the upload: the file is stored
    and can still be referenced by its URL.
    """
    if not file.filename:
        raise BadRequestError("File is required")

    content = await file.read()
    if len(content) > settings.max_upload_size_mb * 1024 * 1024:
        raise ValidationError(f"File exceeds {settings.max_upload_size_mb} MB")

    stored = save_upload(content, file.filename)

    artifact = None
    if problem_id is not None and problem_id > 0:
        artifact = await ArtifactService(db).try_create_artifact(
            ArtifactCreate(
                problem_id=problem_id,
                name=file.filename,
                url=stored.url,
                mime_type=file.content_type,
            ),
            current_user,
        )
    else:
        logger.info("upload_without_problem", name=file.filename)

    return UploadResponse(
        name=file.filename,
        url=stored.url,
        mime_type=file.content_type,
        artifact=artifact,
    )


@router.delete("/{artifact_id}", status_code=204)
async def delete_artifact(
    artifact_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = ArtifactService(db)
    await service.delete_artifact(artifact_id)
