import pytest

from dndspace.core.exceptions import ForbiddenError, NotFoundError
from dndspace.models import Album, Character, Photo, PhotoComment, User, WallComment
from dndspace.services.authorization import (
    ensure_acting_character,
    ensure_can_delete_photo_comment,
    ensure_can_delete_wall_comment,
    ensure_owner,
)

from tests.helpers import DEFAULT_STATS


async def _user(db, name):
    user = User(email=f"{name}@example.com", username=name, hashed_password="unused")
    db.add(user)
    await db.flush()
    return user


async def _character(db, owner, name):
    character = Character(
        owner_id=owner.id, name=name, race="Elf", character_class="Ranger", slug=f"{name.lower()}-abc123",
        **DEFAULT_STATS,
    )
    db.add(character)
    await db.flush()
    return character


async def test_ownership_chain_for_album_and_photo(db):
    owner, other = await _user(db, "owner"), await _user(db, "other")
    character = await _character(db, owner, "Legolas")
    album = Album(character_id=character.id, title="Trees")
    db.add(album)
    await db.flush()
    photo = Photo(album_id=album.id, character_id=character.id, image_url="u", storage_key="k")
    db.add(photo)
    await db.commit()

    assert (await ensure_owner(db, owner, photo)).id == character.id
    assert (await ensure_owner(db, owner, album)).id == character.id
    with pytest.raises(ForbiddenError):
        await ensure_owner(db, other, photo)
    with pytest.raises(NotFoundError):
        await ensure_owner(db, owner, None)


async def test_acting_character_must_belong_to_user(db):
    owner, other = await _user(db, "owner"), await _user(db, "other")
    character = await _character(db, owner, "Gimli")
    await db.commit()

    assert (await ensure_acting_character(db, owner, character.id)).name == "Gimli"
    with pytest.raises(ForbiddenError):
        await ensure_acting_character(db, other, character.id)


async def test_comment_deletion_or_rules(db):
    wall_owner, author_owner, stranger = (
        await _user(db, "wall"), await _user(db, "author"), await _user(db, "stranger")
    )
    wall = await _character(db, wall_owner, "Wall")
    author = await _character(db, author_owner, "Author")
    album = Album(character_id=wall.id, title="A")
    db.add(album)
    await db.flush()
    photo = Photo(album_id=album.id, character_id=wall.id, image_url="u", storage_key="k")
    db.add(photo)
    await db.flush()
    wall_comment = WallComment(character_id=wall.id, author_id=author.id, content="hi")
    photo_comment = PhotoComment(photo_id=photo.id, author_id=author.id, content="nice")
    db.add_all([wall_comment, photo_comment])
    await db.commit()

    for user in (wall_owner, author_owner):
        await ensure_can_delete_wall_comment(db, user, wall_comment)
        await ensure_can_delete_photo_comment(db, user, photo, photo_comment)
    with pytest.raises(ForbiddenError):
        await ensure_can_delete_wall_comment(db, stranger, wall_comment)
    with pytest.raises(ForbiddenError):
        await ensure_can_delete_photo_comment(db, stranger, photo, photo_comment)
