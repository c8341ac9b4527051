from pydantic import BaseModel
from typing import Optional


class MediaFile(BaseModel):
    filename: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        _, dot, ext = self.filename.rpartition(".")
        return ext.lower() if dot and ext else "bin"

    @property
    def is_video(self) -> bool:
        return self.content_type.startswith("video/")


class UploadResponse(BaseModel):
    bucket: str
    path: str
    public_url: str
    content_type: Optional[str] = None
