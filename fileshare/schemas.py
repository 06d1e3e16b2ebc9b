from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from datetime import datetime


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class FileBase(CamelModel):
    filename: str  # Storage key of the blob on disk
    original_name: str
    mime_type: str
    size: int = Field(ge=0)
    share_id: str


class FileCreate(FileBase):
    pass


class FileRecord(FileBase):
    id: int
    uploaded_at: datetime
    views: int = 0
    downloads: int = 0


class FileStats(CamelModel):
    total_files: int = 0
    total_views: int = 0
    total_downloads: int = 0
    total_size: int = 0


class AdminStats(FileStats):
    total_size_formatted: str
