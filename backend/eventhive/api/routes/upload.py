"""
Image upload endpoints.
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile

from eventhive.models.user import User
from eventhive.services.upload_service import delete_upload, save_upload
from eventhive.core.security import get_current_user

router = APIRouter(prefix="/upload", tags=["Uploads"])


@router.post("")
async def upload_file_endpoint(
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
):
    """Store a JPEG, PNG or WebP image of at most 5MB."""
    return await save_upload(file)


@router.delete("")
async def delete_file_endpoint(
    filename: str = Query(..., min_length=1),
    user: User = Depends(get_current_user),
):
    existed = await delete_upload(filename)
    return {"success": True, "deleted": existed}
