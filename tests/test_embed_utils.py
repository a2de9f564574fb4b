import pytest

from dndspace.core.exceptions import InvalidEmbedUrlError
from dndspace.services.embed_utils import normalize_embed_url


@pytest.mark.parametrize(
    "raw",
    [
        "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
        "https://www.youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ",
        "https://youtu.be/dQw4w9WgXcQ?t=42",
        "https://www.youtube.com/embed/dQw4w9WgXcQ",
        "  https://youtu.be/dQw4w9WgXcQ  ",
    ],
)
def test_youtube_links_become_embed_urls(raw):
    assert normalize_embed_url("youtube", raw) == "https://www.youtube.com/embed/dQw4w9WgXcQ"


def test_youtube_rejects_unrecognised_links():
    with pytest.raises(InvalidEmbedUrlError):
        normalize_embed_url("youtube", "https://vimeo.com/12345")


def test_youtube_watch_without_video_id_is_rejected():
    with pytest.raises(InvalidEmbedUrlError):
        normalize_embed_url("youtube", "https://www.youtube.com/watch?list=abc")


@pytest.mark.parametrize("kind", ["track", "album", "playlist"])
def test_spotify_share_links_become_embed_urls(kind):
    url = f"https://open.spotify.com/{kind}/4uLU6hMCjMI75M1A2tKUQC?si=abc"
    assert normalize_embed_url("spotify", url) == f"https://open.spotify.com/embed/{kind}/4uLU6hMCjMI75M1A2tKUQC"


def test_spotify_embed_url_is_kept():
    url = "https://open.spotify.com/embed/episode/xyz"
    assert normalize_embed_url("spotify", url) == url


def test_spotify_rejects_other_links():
    with pytest.raises(InvalidEmbedUrlError):
        normalize_embed_url("spotify", "https://open.spotify.com/user/someone")


def test_soundcloud_requires_track_embed_url():
    url = "https://w.soundcloud.com/player/?url=https%3A//api.soundcloud.com/tracks/123"
    assert normalize_embed_url("soundcloud", url) == url
    with pytest.raises(InvalidEmbedUrlError):
        normalize_embed_url("soundcloud", "https://soundcloud.com/artist/song")


def test_amazon_music_requires_embed_url():
    url = "https://music.amazon.com/embed/B0123456"
    assert normalize_embed_url("amazon-music", url) == url
    with pytest.raises(InvalidEmbedUrlError):
        normalize_embed_url("amazon-music", "https://music.amazon.com/albums/B0123456")


def test_unknown_platform_and_blank_url_are_rejected():
    with pytest.raises(InvalidEmbedUrlError):
        normalize_embed_url("bandcamp", "https://bandcamp.com/track/1")
    with pytest.raises(InvalidEmbedUrlError):
        normalize_embed_url("youtube", "   ")
