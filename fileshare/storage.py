"""Metadata store for uploaded files.

``FileStorage`` is the contract every handler depends on. ``MemStorage`` keeps
records in process memory; ``SqliteStorage`` persists them in a SQLite table
through aiosqlite. Neither touches the bytes on disk: callers pair
``delete_file`` with a blob deletion themselves.
"""

import sqlite3
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

import aiosqlite

from .database import init_db
from .schemas import FileCreate, FileRecord, FileStats


class DuplicateShareIdError(Exception):
    """Raised by ``create_file`` when a live record already uses the share id."""

    def __init__(self, share_id: str):
        super().__init__(f"Share id already in use: {share_id}")
        self.share_id = share_id


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FileStorage(ABC):
    @abstractmethod
    async def create_file(self, file: FileCreate) -> FileRecord:
        ...

    @abstractmethod
    async def get_file(self, file_id: int) -> Optional[FileRecord]:
        ...

    @abstractmethod
    async def get_file_by_share_id(self, share_id: str) -> Optional[FileRecord]:
        ...

    @abstractmethod
    async def get_all_files(self) -> List[FileRecord]:
        """Return every live record, newest first."""

    @abstractmethod
    async def increment_views(self, file_id: int) -> None:
        ...

    @abstractmethod
    async def increment_downloads(self, file_id: int) -> None:
        ...

    @abstractmethod
    async def delete_file(self, file_id: int) -> None:
        ...

    @abstractmethod
    async def get_stats(self) -> FileStats:
        ...


class MemStorage(FileStorage):
    def __init__(self):
        self._files: Dict[int, FileRecord] = {}
        self._share_index: Dict[str, int] = {}
        self._current_id = 1
        self._lock = threading.Lock()

    async def create_file(self, file: FileCreate) -> FileRecord:
        with self._lock:
            if file.share_id in self._share_index:
                raise DuplicateShareIdError(file.share_id)
            file_id = self._current_id
            self._current_id += 1
            record = FileRecord(
                **file.model_dump(),
                id=file_id,
                uploaded_at=_utcnow(),
                views=0,
                downloads=0,
            )
            self._files[file_id] = record
            self._share_index[record.share_id] = file_id
            return record.model_copy()

    async def get_file(self, file_id: int) -> Optional[FileRecord]:
        with self._lock:
            record = self._files.get(file_id)
            return record.model_copy() if record else None

    async def get_file_by_share_id(self, share_id: str) -> Optional[FileRecord]:
        with self._lock:
            file_id = self._share_index.get(share_id)
            if file_id is None:
                return None
            return self._files[file_id].model_copy()

    async def get_all_files(self) -> List[FileRecord]:
        with self._lock:
            records = [record.model_copy() for record in self._files.values()]
        return sorted(records, key=lambda f: (f.uploaded_at, f.id), reverse=True)

    async def increment_views(self, file_id: int) -> None:
        with self._lock:
            record = self._files.get(file_id)
            if record:
                record.views += 1

    async def increment_downloads(self, file_id: int) -> None:
        with self._lock:
            record = self._files.get(file_id)
            if record:
                record.downloads += 1

    async def delete_file(self, file_id: int) -> None:
        with self._lock:
            record = self._files.pop(file_id, None)
            if record:
                self._share_index.pop(record.share_id, None)

    async def get_stats(self) -> FileStats:
        with self._lock:
            files = list(self._files.values())
            return FileStats(
                total_files=len(files),
                total_views=sum(f.views for f in files),
                total_downloads=sum(f.downloads for f in files),
                total_size=sum(f.size for f in files),
            )


class SqliteStorage(FileStorage):
    """File records kept in the ``files`` table of a SQLite database."""

    COLUMNS = "id, filename, original_name, mime_type, size, share_id, uploaded_at, views, downloads"

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        init_db(self.db_path)

    async def _fetch_one(self, sql: str, params) -> Optional[FileRecord]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(sql, params)
            row = await cursor.fetchone()
        return FileRecord.model_validate(dict(row)) if row else None

    async def create_file(self, file: FileCreate) -> FileRecord:
        uploaded_at = _utcnow()
        try:
            async with aiosqlite.connect(self.db_path) as db:
                cursor = await db.execute(
                    '''INSERT INTO files (filename, original_name, mime_type, size, share_id, uploaded_at, views, downloads)
                    VALUES (?, ?, ?, ?, ?, ?, 0, 0)''',
                    (file.filename, file.original_name, file.mime_type, file.size, file.share_id, uploaded_at.isoformat()),
                )
                await db.commit()
                file_id = cursor.lastrowid
        except sqlite3.IntegrityError as e:
            raise DuplicateShareIdError(file.share_id) from e
        return FileRecord(**file.model_dump(), id=file_id, uploaded_at=uploaded_at)

    async def get_file(self, file_id: int) -> Optional[FileRecord]:
        return await self._fetch_one(f"SELECT {self.COLUMNS} FROM files WHERE id = ?", (file_id,))

    async def get_file_by_share_id(self, share_id: str) -> Optional[FileRecord]:
        return await self._fetch_one(
            f"SELECT {self.COLUMNS} FROM files WHERE share_id = ? ORDER BY id LIMIT 1", (share_id,)
        )

    async def get_all_files(self) -> List[FileRecord]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(f"SELECT {self.COLUMNS} FROM files ORDER BY uploaded_at DESC, id DESC")
            rows = await cursor.fetchall()
        return [FileRecord.model_validate(dict(row)) for row in rows]

    async def _increment(self, column: str, file_id: int) -> None:
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(f"UPDATE files SET {column} = {column} + 1 WHERE id = ?", (file_id,))
            await db.commit()

    async def increment_views(self, file_id: int) -> None:
        await self._increment("views", file_id)

    async def increment_downloads(self, file_id: int) -> None:
        await self._increment("downloads", file_id)

    async def delete_file(self, file_id: int) -> None:
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM files WHERE id = ?", (file_id,))
            await db.commit()

    async def get_stats(self) -> FileStats:
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT COUNT(*), COALESCE(SUM(views), 0), COALESCE(SUM(downloads), 0), COALESCE(SUM(size), 0) FROM files"
            )
            total_files, total_views, total_downloads, total_size = await cursor.fetchone()
        return FileStats(
            total_files=total_files,
            total_views=total_views,
            total_downloads=total_downloads,
            total_size=total_size,
        )


def build_storage(backend: str, db_path: Path) -> FileStorage:
    """Pick the store implementation named by configuration."""
    if backend == "memory":
        return MemStorage()
    if backend == "sqlite":
        return SqliteStorage(db_path)
    raise ValueError(f"Unknown storage backend: {backend}")
