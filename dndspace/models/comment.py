"""
담벼락 댓글 모델
"""

from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
import uuid

from dndspace.core.database import Base, UUID, utcnow


class WallComment(Base):
    """캐릭터 담벼락 댓글 모델

    parent_comment_id 가 None 이면 최상위 댓글, 아니면 최상위 댓글에 달린 답글이다.
    답글의 부모는 항상 최상위 댓글이다 (중첩 1단계).
    """
    __tablename__ = "wall_comments"
    __table_args__ = (
        Index("ix_wall_comments_character_created", "character_id", "created_at"),
    )

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    # 담벼락 주인 캐릭터
    character_id = Column(UUID(), ForeignKey("characters.id"), nullable=False, index=True)
    # 작성자 캐릭터
    author_id = Column(UUID(), ForeignKey("characters.id"), nullable=False, index=True)
    content = Column(Text, default="")
    photo_url = Column(String(500), nullable=True)
    photo_key = Column(String(500), nullable=True)
    parent_comment_id = Column(UUID(), ForeignKey("wall_comments.id"), nullable=True, index=True)
    is_edited = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # 관계 설정
    character = relationship("Character", foreign_keys=[character_id])
    author = relationship("Character", foreign_keys=[author_id])

    @property
    def is_reply(self) -> bool:
        return self.parent_comment_id is not None

    def __repr__(self):
        return f"<WallComment(id={self.id}, character_id={self.character_id}, author_id={self.author_id})>"
