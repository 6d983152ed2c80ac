from datetime import datetime
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from knowledge_base.files.attachments import Attachment, load_attachments
from knowledge_base.models.base import Base


class Article(Base):
    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    category_id: Mapped[int | None] = mapped_column(ForeignKey("categories.id"), nullable=True)
    created_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    # JSON text: list of attachments with base64 payloads
    files: Mapped[str] = mapped_column(Text, default="[]", nullable=False)
    images: Mapped[str] = mapped_column(Text, default="[]", nullable=False)
    enable_slideshow: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=datetime.utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    @property
    def file_list(self) -> list[Attachment]:
        return load_attachments(self.files)

    @property
    def image_list(self) -> list[Attachment]:
        return load_attachments(self.images)
