"""
사용자(계정) 모델
"""

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.orm import relationship
import uuid

from dndspace.core.database import Base, UUID, utcnow


class User(Base):
    """사용자 모델 - 캐릭터의 소유 주체"""
    __tablename__ = "users"

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(50), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # 관계 설정
    characters = relationship("Character", back_populates="owner")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, username={self.username})>"
