"""FastAPI router for device catalog endpoints.

Devices are created by uploading their photo; the remaining endpoints
read, edit and delete catalog entries and serve the stored photos.
"""

import logging
import mimetypes
from typing import Annotated, Optional, Union

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import FileResponse

from ...config import Settings
from ...exceptions import InvalidRequestError, UploadTooLargeError
from ..domain.ports import IPhotoStore
from ..state import RegistryState
from ..use_cases import (
    DeleteDeviceUseCase,
    DeviceUpload,
    GetDeviceInfoUseCase,
    GetDevicePhotoUseCase,
    GetRegistryUseCase,
    UpdateDeviceUseCase,
    UploadDeviceUseCase,
)
from .dependencies import get_photo_store, get_registry_state, get_settings
from .schemas import (
    DeviceInfoDTO,
    EditProductRequest,
    ErrorResponse,
    MessageResponse,
    RegistryDTO,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Device Catalog"])

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Device not found"}}
BAD_REQUEST = {400: {"model": ErrorResponse, "description": "Missing input"}}

IdentifierQuery = Annotated[Optional[str], Query(description="Device identifier")]
IdAliasQuery = Annotated[Optional[str], Query(alias="id", description="Alias of identifier")]


@router.post(
    "/upload",
    response_model=MessageResponse,
    responses={**BAD_REQUEST, 413: {"model": ErrorResponse, "description": "Photo too large"}},
    summary="Upload a photo",
)
async def upload_photo(
    identifier: Annotated[Optional[str], Form()] = None,
    name: Annotated[Optional[str], Form()] = None,
    description: Annotated[Optional[str], Form()] = None,
    serial_number: Annotated[Optional[str], Form(alias="serialNumber")] = None,
    manufacturer: Annotated[Optional[str], Form()] = None,
    photo: Optional[UploadFile] = File(None),
    state: RegistryState = Depends(get_registry_state),
    photo_store: IPhotoStore = Depends(get_photo_store),
    settings: Settings = Depends(get_settings),
):
    """Upload a device photo and register the device it shows.

    The photo is stored under its original filename. The new device
    starts as "no used" and "available".
    """
    if photo is None or not photo.filename:
        raise InvalidRequestError("Photo file is required", field="photo")

    # Check content-length header if available (early rejection)
    limit = settings.max_upload_size_bytes
    if photo.size and photo.size > limit:
        raise UploadTooLargeError(photo.size, limit)

    content = await photo.read()

    use_case = UploadDeviceUseCase(state, photo_store, max_upload_size_bytes=limit)
    await use_case.execute(
        DeviceUpload(
            identifier=identifier,
            name=name,
            description=description,
            serial_number=serial_number,
            manufacturer=manufacturer,
        ),
        filename=photo.filename,
        content=content,
    )
    return MessageResponse(message="The photo uploaded successfully")


@router.get(
    "/photo-info/",
    response_model=Union[DeviceInfoDTO, list[DeviceInfoDTO]],
    responses=NOT_FOUND,
    summary="Get information about photos",
)
async def photo_info(
    identifier: IdentifierQuery = None,
    id_: IdAliasQuery = None,
    state: RegistryState = Depends(get_registry_state),
):
    """Details of one device when an identifier is given, else of all devices."""
    use_case = GetDeviceInfoUseCase(state)
    identifier = identifier or id_
    if identifier:
        return use_case.get(identifier)
    return use_case.list_all()


@router.get(
    "/show_photo/",
    response_class=FileResponse,
    responses={
        **BAD_REQUEST,
        **NOT_FOUND,
        200: {"content": {"image/*": {}}, "description": "The image file"},
    },
    summary="Get photo by identifier",
)
async def show_photo(
    identifier: IdentifierQuery = None,
    id_: IdAliasQuery = None,
    state: RegistryState = Depends(get_registry_state),
    photo_store: IPhotoStore = Depends(get_photo_store),
):
    """Return the image file of a device."""
    use_case = GetDevicePhotoUseCase(state, photo_store)
    path = use_case.execute(identifier or id_)
    media_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    return FileResponse(path, media_type=media_type)


@router.get("/get_all", response_model=RegistryDTO, summary="Get all photos")
async def get_all(state: RegistryState = Depends(get_registry_state)):
    """Return the whole registry document: devices and users."""
    return GetRegistryUseCase(state).execute().to_dict()


@router.put(
    "/edit_product",
    response_model=MessageResponse,
    responses={**BAD_REQUEST, 404: {"model": ErrorResponse, "description": "Product not found"}},
    summary="Edit a product",
)
async def edit_product(
    request: EditProductRequest,
    state: RegistryState = Depends(get_registry_state),
):
    """Edit a device. Only the fields present in the body are changed."""
    use_case = UpdateDeviceUseCase(state)
    await use_case.execute(str(request.identifier), request.changes())
    return MessageResponse(message="The product edited successfully")


@router.delete(
    "/delete_product",
    response_model=MessageResponse,
    responses={**BAD_REQUEST, 404: {"model": ErrorResponse, "description": "Product not found"}},
    summary="Delete a product",
)
async def delete_product(
    identifier: Annotated[
        Optional[str], Query(description="Identifier of the product to be deleted")
    ] = None,
    state: RegistryState = Depends(get_registry_state),
):
    """Delete a device from the catalog.

    Users holding the device keep it in their device list.
    """
    use_case = DeleteDeviceUseCase(state)
    await use_case.execute(identifier)
    return MessageResponse(message="The product deleted successfully")
