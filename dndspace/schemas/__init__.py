"""
Pydantic 스키마 패키지
"""

from .common import CharacterSummary, MessageResponse
from .auth import Token, RefreshTokenRequest
from .user import UserCreate, UserLogin, UserResponse
from .character import (
    AbilityScores,
    CharacterCreate,
    CharacterUpdate,
    CharacterResponse,
    CharacterListResponse,
    CharacterDetailResponse,
    CharacterImageResponse,
    ProfileViewResponse,
)
from .comment import CommentUpdate, WallCommentResponse, WallThreadResponse
from .photo import (
    PhotoResponse,
    PhotoUploadResponse,
    PhotoUpdate,
    CaptionUpdate,
    CaptionResponse,
    PhotoReorderRequest,
    LikeToggleRequest,
    LikeToggleResponse,
    PhotoLikesResponse,
    TaggedCharactersResponse,
    PhotoCommentCreate,
    PhotoCommentResponse,
)
from .album import AlbumCreate, AlbumUpdate, AlbumResponse, AlbumWithPhotosResponse
from .playlist import (
    PlaylistUpsert,
    PlaylistResponse,
    SongCreate,
    SongUpdate,
    SongReorderRequest,
    SongResponse,
)
