import os
import shutil
from typing import BinaryIO, Optional
from uuid import uuid4

from app.config import settings

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}


class LocalMediaStorage:
    """
    Stores uploaded images under MEDIA_DIR/<folder>/ and hands back the public URL.
    """

    def __init__(self, root: Optional[str] = None, base_url: Optional[str] = None):
        self.root = root or settings.MEDIA_DIR
        self.base_url = (base_url or settings.MEDIA_URL).rstrip("/")

    def save(self, fileobj: BinaryIO, filename: str, folder: str) -> str:
        ext = os.path.splitext(filename or "")[1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            ext = ".bin"
        target_dir = os.path.join(self.root, folder)
        os.makedirs(target_dir, exist_ok=True)
        name = f"{uuid4().hex}{ext}"
        with open(os.path.join(target_dir, name), "wb") as out:
            shutil.copyfileobj(fileobj, out)
        return f"{self.base_url}/{folder}/{name}"
