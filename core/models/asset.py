# =============================================================================
# core/models/asset.py - Media Asset Schemas
# =============================================================================
# These models describe images on their way into the content repository
# (ImageUpload) and the handle the repository gives back (AssetDescriptor).
#
# An AssetDescriptor is immutable: re-uploading produces a new descriptor,
# and the previous one is only ever used to delete the old object.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class AssetDescriptor(BaseModel):
    """
    Handle for one stored media object.

    The content_hash is the repository's current hash for storage_path;
    any update or delete must present it.

    Example:
        {
            "url": "https://raw.githubusercontent.com/acme/media/main/partners/avatars/1718000000000_ab12cd34_me.png",
            "storage_path": "partners/avatars/1718000000000_ab12cd34_me.png",
            "content_hash": "3d21ec53a331a6f037a91c368710b99387d012c1"
        }
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., min_length=1, description="Public download URL")
    storage_path: str = Field(..., min_length=1, description="Path inside the content repository")
    content_hash: str = Field(..., min_length=1, description="Hash required to mutate the object")


class ImageUpload(BaseModel):
    """
    An image received from a client, held in memory.

    Built by the HTTP layer from an UploadFile; nothing is staged on disk.
    """

    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., min_length=1, description="Original filename")
    content_type: str = Field(default="", description="Declared MIME type")
    content: bytes = Field(..., repr=False, description="Raw image bytes")

    @property
    def size(self) -> int:
        return len(self.content)
