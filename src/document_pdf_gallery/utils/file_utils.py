import os
import secrets


def get_extension(filename: str) -> str:
    """Lower-cased extension without the dot ('' when there is none)."""
    return os.path.splitext(filename or '')[1].lstrip('.').lower()


def generate_hash_name() -> str:
    """Random 40-character storage name, unique per upload."""
    return secrets.token_hex(20)


def stream_size(file_storage) -> int:
    """Size in bytes of an uploaded werkzeug FileStorage, leaving the stream at position 0."""
    stream = file_storage.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size
