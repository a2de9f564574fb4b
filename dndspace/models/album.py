"""
앨범 모델
"""

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
import uuid

from dndspace.core.database import Base, UUID, utcnow


class Album(Base):
    """캐릭터 사진 앨범"""
    __tablename__ = "albums"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    character_id = Column(UUID(), ForeignKey("characters.id"), nullable=False, index=True)
    title = Column(String(100), nullable=False)
    description = Column(String(500), default="")
    # photos <-> albums 순환 참조를 피하려고 FK 없이 보관. 앨범 소속 여부는 서비스에서 검증
    cover_photo_id = Column(UUID(), nullable=True)
    photo_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Album(id={self.id}, character_id={self.character_id}, title={self.title})>"
