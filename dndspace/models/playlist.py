"""
플레이리스트 모델
"""

from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
import uuid

from dndspace.core.database import Base, UUID, utcnow


PLATFORMS = ("spotify", "youtube", "soundcloud", "amazon-music")


class Playlist(Base):
    """캐릭터 플레이리스트 (캐릭터당 1개)"""
    __tablename__ = "playlists"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    character_id = Column(UUID(), ForeignKey("characters.id"), nullable=False, unique=True, index=True)
    title = Column(String(100), nullable=False, default="My Playlist")
    description = Column(String(500), default="")
    auto_play = Column(Boolean, nullable=False, default=False)
    is_public = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # 관계 설정
    songs = relationship(
        "Song",
        back_populates="playlist",
        cascade="all, delete-orphan",
        order_by="Song.order",
    )

    def __repr__(self):
        return f"<Playlist(id={self.id}, character_id={self.character_id})>"


class Song(Base):
    """플레이리스트 곡"""
    __tablename__ = "playlist_songs"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    playlist_id = Column(UUID(), ForeignKey("playlists.id"), nullable=False, index=True)
    platform = Column(String(20), nullable=False)
    embed_url = Column(String(500), nullable=False)
    title = Column(String(200), nullable=False)
    artist = Column(String(200), nullable=True)
    order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    playlist = relationship("Playlist", back_populates="songs")

    def __repr__(self):
        return f"<Song(id={self.id}, platform={self.platform}, order={self.order})>"
