from sqlalchemy import Column, Integer, String, DateTime, Text
from .database import Base


class FileRow(Base):
    __tablename__ = "files"
    # AUTOINCREMENT keeps SQLite from reusing the id of a deleted last row
    __table_args__ = {"sqlite_autoincrement": True}
    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(Text, nullable=False)  # Storage key inside the uploads dir
    original_name = Column(Text, nullable=False)
    mime_type = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)
    share_id = Column(String(64), nullable=False, unique=True, index=True)
    uploaded_at = Column(DateTime(timezone=True), nullable=False)
    views = Column(Integer, nullable=False, default=0)
    downloads = Column(Integer, nullable=False, default=0)
