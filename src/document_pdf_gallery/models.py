import os
from enum import Enum

from sqlalchemy import TIMESTAMP, Column, Integer, String, Text
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from document_pdf_gallery.extensions import db


class FileCategory(str, Enum):
    PDF = "pdf"
    WORD = "word"
    EXCEL = "excel"
    IMAGE = "image"

    @classmethod
    def list(cls):
        return [c.value for c in cls]


FILE_ICONS = {
    FileCategory.WORD.value: "📄",
    FileCategory.EXCEL.value: "📊",
    FileCategory.IMAGE.value: "🖼️",
}


class Document(db.Model):
    __tablename__ = 'documents'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    path = Column(Text, nullable=False)
    pdf_path = Column(Text, nullable=False)
    file_type = Column(String(16), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(TIMESTAMP(timezone=True), default=func.now(), onupdate=func.now())

    @validates('file_type')
    def _validate_file_type(self, key, value):
        value = FileCategory(value).value
        if self.file_type is not None and self.file_type != value:
            raise ValueError(f"file_type is immutable (was {self.file_type!r}, got {value!r})")
        return value

    @property
    def original_file_url(self) -> str:
        from document_pdf_gallery.services.storage import get_storage
        return get_storage().url(self.path)

    @property
    def pdf_url(self) -> str:
        from document_pdf_gallery.services.storage import get_storage
        return get_storage().url(self.pdf_path)

    @property
    def file_icon(self) -> str:
        return FILE_ICONS.get(self.file_type, "📎")

    @property
    def pdf_download_name(self) -> str:
        return f"{os.path.splitext(self.name)[0]}.pdf"

    def __repr__(self):
        return f"<Document id={self.id} name={self.name!r} file_type={self.file_type}>"
