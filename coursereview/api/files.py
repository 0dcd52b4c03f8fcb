# coursereview/api/files.py
"""
Course file uploads

Endpoints:
- POST /files/ - Upload a file (multipart); waits for moderation
- GET /files/course/{course_id} - Approved files of a course
- DELETE /files/{file_id} - Delete own file
- POST /files/{file_id}/report - Report a file
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from coursereview.config import settings
from coursereview.constants import FileType
from coursereview.database import get_db
from coursereview.models.user import User
from coursereview.schemas.moderation import FileResponse
from coursereview.schemas.review import ReportRequest
from coursereview.services import file_service
from coursereview.services.storage import ObjectStorage, StorageError, get_storage
from coursereview.utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


@router.post("/", response_model=FileResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    course_id: int = Form(...),
    type: FileType = Form(...),
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    # at most one byte past the limit
    data = await file.read(settings.MAX_FILE_SIZE + 1)
    try:
        return file_service.upload_file(
            db,
            storage,
            course_id=course_id,
            user_id=current_user.id,
            file_type=type.value,
            file_name=file.filename or "upload",
            data=data,
            content_type=file.content_type,
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.get("/course/{course_id}", response_model=List[FileResponse])
def list_course_files(course_id: int, db: Session = Depends(get_db)):
    return file_service.list_course_files(db, course_id)


@router.delete("/{file_id}")
def delete_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: ObjectStorage = Depends(get_storage),
):
    try:
        return file_service.delete_file(db, storage, file_id, current_user.id)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.post("/{file_id}/report", status_code=status.HTTP_201_CREATED)
def report_file(
    file_id: int,
    report: ReportRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return file_service.report_file(db, file_id, current_user.id, report.reason)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
