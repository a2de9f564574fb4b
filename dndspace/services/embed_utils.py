"""
음악 플랫폼 링크 → 임베드 플레이어 URL 변환

네트워크 호출 없이 문자열만 다룬다.
SoundCloud / Amazon Music 은 공유 대화상자에서 복사한 임베드 URL만 받는다.
"""

from typing import Optional
from urllib.parse import urlsplit, parse_qs
import re

from dndspace.core.exceptions import InvalidEmbedUrlError


_SPOTIFY_RE = re.compile(r"spotify\.com/(track|album|playlist)/([a-zA-Z0-9]+)")


def _youtube_video_id(url: str) -> Optional[str]:
    if "youtube.com/watch" in url:
        values = parse_qs(urlsplit(url).query).get("v")
        return values[0] if values else None
    if "youtu.be/" in url:
        return url.split("youtu.be/", 1)[1].split("?", 1)[0].split("/", 1)[0]
    if "youtube.com/embed/" in url:
        return url.split("/embed/", 1)[1].split("?", 1)[0].split("/", 1)[0]
    return None


def _normalize_youtube(url: str) -> str:
    video_id = _youtube_video_id(url)
    if not video_id:
        raise InvalidEmbedUrlError("올바른 YouTube URL 형식이 아닙니다.")
    return f"https://www.youtube.com/embed/{video_id}"


def _normalize_spotify(url: str) -> str:
    match = _SPOTIFY_RE.search(url)
    if match:
        return f"https://open.spotify.com/embed/{match.group(1)}/{match.group(2)}"
    if "/embed/" in url:
        return url
    raise InvalidEmbedUrlError("올바른 Spotify URL 형식이 아닙니다.")


def _normalize_soundcloud(url: str) -> str:
    if "soundcloud.com" not in url or "/tracks/" not in url:
        raise InvalidEmbedUrlError("SoundCloud 공유 버튼의 임베드 URL을 사용해주세요.")
    return url


def _normalize_amazon_music(url: str) -> str:
    if "music.amazon.com/embed/" not in url:
        raise InvalidEmbedUrlError("Amazon Music 공유 버튼의 임베드 URL을 사용해주세요.")
    return url


_NORMALIZERS = {
    "youtube": _normalize_youtube,
    "spotify": _normalize_spotify,
    "soundcloud": _normalize_soundcloud,
    "amazon-music": _normalize_amazon_music,
}


def normalize_embed_url(platform: str, raw_url: str) -> str:
    """플랫폼별 링크를 플레이어에 넣을 수 있는 임베드 URL로 변환한다.

    변환할 수 없으면 InvalidEmbedUrlError.
    """
    normalizer = _NORMALIZERS.get(platform)
    if normalizer is None:
        raise InvalidEmbedUrlError("지원하지 않는 플랫폼입니다.")
    url = (raw_url or "").strip()
    if not url:
        raise InvalidEmbedUrlError("URL을 입력해주세요.")
    return normalizer(url)
