"""
캐릭터 모델 - 캠페인 캐릭터 프로필
"""

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
import uuid

from dndspace.core.database import Base, UUID, JSON, utcnow


ABILITY_NAMES = ("strength", "dexterity", "constitution", "intelligence", "wisdom", "charisma")

ALIGNMENTS = (
    "Lawful Good", "Neutral Good", "Chaotic Good",
    "Lawful Neutral", "True Neutral", "Chaotic Neutral",
    "Lawful Evil", "Neutral Evil", "Chaotic Evil",
)

DEFAULT_PROFILE_IMAGE = "/default-character.png"
DEFAULT_BANNER_IMAGE = "/default-banner.png"


class Character(Base):
    """캐릭터 모델"""
    __tablename__ = "characters"
    __table_args__ = (
        CheckConstraint("level BETWEEN 1 AND 20", name="level_range"),
        *(
            CheckConstraint(f"{name} BETWEEN 1 AND 30", name=f"{name}_range")
            for name in ABILITY_NAMES
        ),
    )

    id = Column(UUID(), primary_key=True, default=uuid.uuid4, index=True)
    owner_id = Column(UUID(), ForeignKey("users.id"), nullable=False, index=True)

    # 기본 정보
    name = Column(String(100), nullable=False)
    race = Column(String(100), nullable=False)
    character_class = Column("class", String(100), nullable=False)
    level = Column(Integer, nullable=False, default=1)
    background = Column(Text, default="")
    alignment = Column(String(20), nullable=False, default="True Neutral")
    bio = Column(String(2000), default="")

    # 능력치 (1~30)
    strength = Column(Integer, nullable=False)
    dexterity = Column(Integer, nullable=False)
    constitution = Column(Integer, nullable=False)
    intelligence = Column(Integer, nullable=False)
    wisdom = Column(Integer, nullable=False)
    charisma = Column(Integer, nullable=False)

    # 이미지 (URL + 외부 스토리지 삭제 키)
    profile_image_url = Column(String(500), default=DEFAULT_PROFILE_IMAGE)
    profile_image_key = Column(String(500), nullable=True)
    banner_image_url = Column(String(500), default=DEFAULT_BANNER_IMAGE)
    banner_image_key = Column(String(500), nullable=True)

    # 탑 프렌즈 (표시 순서가 있는 캐릭터 ID 목록)
    top_friend_ids = Column(JSON, default=list)

    # 통계
    profile_views = Column(Integer, nullable=False, default=0)

    # 생성 시 한 번만 발급되는 프로필 주소
    slug = Column(String(120), unique=True, index=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # 관계 설정
    owner = relationship("User", back_populates="characters")

    @property
    def stats(self) -> dict:
        return {name: getattr(self, name) for name in ABILITY_NAMES}

    def __repr__(self):
        return f"<Character(id={self.id}, name={self.name}, slug={self.slug})>"
