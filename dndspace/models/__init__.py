"""
모델 패키지
"""

from .user import User
from .character import Character
from .comment import WallComment
from .album import Album
from .photo import Photo, PhotoLike, PhotoComment, photo_tags
from .playlist import Playlist, Song

__all__ = [
    "User",
    "Character",
    "WallComment",
    "Album",
    "Photo",
    "PhotoLike",
    "PhotoComment",
    "photo_tags",
    "Playlist",
    "Song",
]
