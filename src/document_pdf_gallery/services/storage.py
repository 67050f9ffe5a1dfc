"""Local public disk: uploaded originals and generated PDFs, served under /storage."""
import logging
import os
import secrets
import shutil
from typing import Iterable, List, Optional, Tuple

from flask import current_app, url_for
from werkzeug.security import safe_join

from document_pdf_gallery.services.errors import StorageWriteFailed

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'public_storage'
TRASH_DIR = '.trash'


class StagedDelete:
    """Files moved aside during a delete; either purged or put back."""

    def __init__(self, storage: "PublicStorage", token: str, moved: List[Tuple[str, str]]):
        self.storage = storage
        self.token = token
        self.moved = moved

    def restore(self) -> None:
        for original, staged in reversed(self.moved):
            os.makedirs(os.path.dirname(original), exist_ok=True)
            os.replace(staged, original)
        self.moved = []
        self._remove_stage_dir()

    def purge(self) -> List[str]:
        """Unlink staged files; returns the ones that could not be removed (orphans)."""
        orphans = []
        for original, staged in self.moved:
            try:
                os.remove(staged)
            except OSError as e:
                orphans.append(staged)
                logger.warning("Orphaned file left in storage trash: %s (%s)", staged, e)
        self.moved = []
        self._remove_stage_dir()
        return orphans

    def _remove_stage_dir(self) -> None:
        stage_dir = os.path.join(self.storage.root, TRASH_DIR, self.token)
        shutil.rmtree(stage_dir, ignore_errors=True)


class PublicStorage:
    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def path(self, relative_path: str) -> str:
        full_path = safe_join(self.root, relative_path)
        if full_path is None:
            raise ValueError(f"Path escapes storage root: {relative_path}")
        return full_path

    def exists(self, relative_path: Optional[str]) -> bool:
        return bool(relative_path) and os.path.isfile(self.path(relative_path))

    def url(self, relative_path: str) -> str:
        return url_for('documents.storage_file', filename=relative_path)

    def put_file(self, file_storage, directory: str, filename: str) -> str:
        """Save an uploaded werkzeug FileStorage as ``directory/filename``; returns the relative path."""
        relative_path = f"{directory}/{filename}"
        full_path = self.path(relative_path)
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            file_storage.stream.seek(0)
            file_storage.save(full_path)
        except OSError as e:
            if os.path.isfile(full_path):
                try:
                    os.remove(full_path)
                except OSError as cleanup_error:
                    logger.warning("Could not remove partial upload %s: %s", full_path, cleanup_error)
            raise StorageWriteFailed(f"Failed to store {relative_path}: {e}") from e
        return relative_path

    def delete(self, relative_path: Optional[str]) -> bool:
        if not relative_path:
            return False
        full_path = self.path(relative_path)
        if not os.path.exists(full_path):
            return False
        os.remove(full_path)
        return True

    def stage_for_delete(self, relative_paths: Iterable[Optional[str]]) -> StagedDelete:
        """Move files into a per-delete trash folder; on any failure, undo and raise."""
        token = secrets.token_hex(8)
        staged = StagedDelete(self, token, [])
        try:
            for relative_path in relative_paths:
                if not relative_path:
                    continue
                original = self.path(relative_path)
                if not os.path.exists(original):
                    logger.warning("Stored file already missing, skipping: %s", relative_path)
                    continue
                target = os.path.join(self.root, TRASH_DIR, token, relative_path)
                os.makedirs(os.path.dirname(target), exist_ok=True)
                os.replace(original, target)
                staged.moved.append((original, target))
        except OSError as e:
            staged.restore()
            raise StorageWriteFailed(f"Could not remove stored files: {e}") from e
        return staged


def get_storage_for(app) -> PublicStorage:
    if EXTENSION_KEY not in app.extensions:
        storage = PublicStorage(app.config['STORAGE_ROOT'])
        os.makedirs(storage.root, exist_ok=True)
        app.extensions[EXTENSION_KEY] = storage
    return app.extensions[EXTENSION_KEY]


def get_storage() -> PublicStorage:
    return get_storage_for(current_app)
