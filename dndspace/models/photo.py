"""
사진 / 사진 좋아요 / 사진 태그 / 사진 댓글 모델
"""

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, Table, UniqueConstraint, Index
from sqlalchemy.orm import relationship
import uuid

from dndspace.core.database import Base, UUID, utcnow


# 사진 <-> 캐릭터 태그 (다대다)
photo_tags = Table(
    "photo_tags",
    Base.metadata,
    Column("photo_id", UUID(), ForeignKey("photos.id"), primary_key=True),
    Column("character_id", UUID(), ForeignKey("characters.id"), primary_key=True),
)


class Photo(Base):
    """앨범 사진"""
    __tablename__ = "photos"
    __table_args__ = (
        Index("ix_photos_album_order", "album_id", "order"),
    )

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    album_id = Column(UUID(), ForeignKey("albums.id"), nullable=False, index=True)
    character_id = Column(UUID(), ForeignKey("characters.id"), nullable=False, index=True)
    image_url = Column(String(500), nullable=False)
    storage_key = Column(String(500), nullable=False)
    caption = Column(String(500), default="")
    order = Column(Integer, nullable=False, default=0)
    like_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # 관계 설정
    tagged_characters = relationship("Character", secondary=photo_tags)

    def __repr__(self):
        return f"<Photo(id={self.id}, album_id={self.album_id}, order={self.order})>"


class PhotoLike(Base):
    """사진 좋아요 - 캐릭터 단위"""
    __tablename__ = "photo_likes"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    photo_id = Column(UUID(), ForeignKey("photos.id"), nullable=False, index=True)
    character_id = Column(UUID(), ForeignKey("characters.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    # 제약 조건 - 캐릭터는 사진당 한 번만 좋아요 가능
    __table_args__ = (
        UniqueConstraint('photo_id', 'character_id', name='uq_photo_like_photo_character'),
    )

    character = relationship("Character")

    def __repr__(self):
        return f"<PhotoLike(photo_id={self.photo_id}, character_id={self.character_id})>"


class PhotoComment(Base):
    """사진 댓글"""
    __tablename__ = "photo_comments"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    photo_id = Column(UUID(), ForeignKey("photos.id"), nullable=False, index=True)
    author_id = Column(UUID(), ForeignKey("characters.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)

    author = relationship("Character")

    def __repr__(self):
        return f"<PhotoComment(id={self.id}, photo_id={self.photo_id}, author_id={self.author_id})>"
