"""
附件存储 - 工单附件写入本地目录，返回 /uploads/<文件名> 形式的引用
"""
import logging
import os
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, Optional, Union

from campus_hub.config import settings

logger = logging.getLogger(__name__)

URL_PREFIX = "/uploads/"


class FileStorage:
    """本地文件存储"""

    def __init__(self, upload_dir: Optional[str] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)

    def store(self, filename: Optional[str], content: Union[bytes, BinaryIO]) -> str:
        """保存文件，返回可访问的引用；content 可为字节或可读的二进制流"""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        ext = os.path.splitext(filename or "")[1]
        stored_name = f"{uuid.uuid4()}{ext}"
        target = self.upload_dir / stored_name
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            with open(target, "wb") as out:
                shutil.copyfileobj(content, out)
        logger.debug(f"Stored attachment {filename} as {stored_name}")
        return URL_PREFIX + stored_name

    def path_of(self, reference: str) -> Optional[Path]:
        """引用对应的本地路径；非本存储的引用返回 None"""
        if not reference or not reference.startswith(URL_PREFIX):
            return None
        name = os.path.basename(reference[len(URL_PREFIX):])
        if not name:
            return None
        return self.upload_dir / name

    def delete(self, reference: str) -> bool:
        """删除文件，返回是否删除了文件"""
        path = self.path_of(reference)
        if path is None or not path.exists():
            return False
        path.unlink()
        logger.debug(f"Deleted attachment {reference}")
        return True
