from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
import uuid

from dndspace.services.comment_service import assemble_wall, thread_root_id

from tests.helpers import create_character, post_comment, PNG_BYTES


BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _comment(minutes, parent=None):
    return SimpleNamespace(
        id=uuid.uuid4(),
        parent_comment_id=parent.id if parent else None,
        created_at=BASE + timedelta(minutes=minutes),
    )


def test_assemble_wall_groups_replies_under_their_parent():
    older, newer = _comment(0), _comment(10)
    r1, r2, r3 = _comment(5, older), _comment(1, older), _comment(11, newer)

    threads = assemble_wall([newer, older], [r1, r2, r3])

    assert [t.comment for t in threads] == [newer, older]
    assert threads[0].replies == [r3]
    # 답글은 오래된 순
    assert threads[1].replies == [r2, r1]


def test_assemble_wall_drops_orphan_replies():
    top = _comment(0)
    orphan = _comment(1, _comment(-5))

    threads = assemble_wall([top], [orphan])

    assert len(threads) == 1
    assert threads[0].replies == []


def test_reply_to_reply_is_flattened_to_thread_root():
    top = _comment(0)
    reply = _comment(1, top)
    assert thread_root_id(top) == top.id
    assert thread_root_id(reply) == top.id


async def test_wall_lists_top_level_newest_first_with_replies_oldest_first(client, make_user):
    _, headers = await make_user("gm")
    wall = await create_character(client, headers, "Wall")
    author = await create_character(client, headers, "Visitor")

    first = (await post_comment(client, headers, wall["id"], author["id"], "first")).json()
    second = (await post_comment(client, headers, wall["id"], author["id"], "second")).json()
    reply_a = (await post_comment(client, headers, wall["id"], author["id"], "reply a", first["id"])).json()
    reply_b = (await post_comment(client, headers, wall["id"], author["id"], "reply b", first["id"])).json()

    response = await client.get(f"/comments/character/{wall['id']}")
    assert response.status_code == 200
    threads = response.json()

    assert [t["id"] for t in threads] == [second["id"], first["id"]]
    assert [r["id"] for r in threads[1]["replies"]] == [reply_a["id"], reply_b["id"]]
    assert threads[0]["replies"] == []
    assert threads[1]["author"]["name"] == "Visitor"


async def test_reply_to_a_reply_lands_in_the_same_thread(client, make_user):
    _, headers = await make_user("gm")
    wall = await create_character(client, headers, "Wall")

    top = (await post_comment(client, headers, wall["id"], wall["id"], "top")).json()
    reply = (await post_comment(client, headers, wall["id"], wall["id"], "reply", top["id"])).json()
    nested = await post_comment(client, headers, wall["id"], wall["id"], "nested", reply["id"])

    assert nested.status_code == 201
    assert nested.json()["parent_comment_id"] == top["id"]

    replies = (await client.get(f"/comments/{top['id']}/replies")).json()
    assert [r["content"] for r in replies] == ["reply", "nested"]


async def test_reply_must_target_comment_on_same_wall(client, make_user):
    _, headers = await make_user("gm")
    wall_a = await create_character(client, headers, "WallA")
    wall_b = await create_character(client, headers, "WallB")
    top = (await post_comment(client, headers, wall_a["id"], wall_a["id"], "top")).json()

    response = await post_comment(client, headers, wall_b["id"], wall_b["id"], "cross", top["id"])
    assert response.status_code == 400

    missing = await post_comment(client, headers, wall_b["id"], wall_b["id"], "ghost", str(uuid.uuid4()))
    assert missing.status_code == 404


async def test_comment_needs_content_or_photo(client, make_user, storage):
    _, headers = await make_user("gm")
    wall = await create_character(client, headers, "Wall")

    empty = await post_comment(client, headers, wall["id"], wall["id"], "")
    assert empty.status_code == 400

    with_photo = await post_comment(client, headers, wall["id"], wall["id"], "", photo=PNG_BYTES)
    assert with_photo.status_code == 201
    assert with_photo.json()["photo_url"].startswith("https://media.test/comments/")
    assert len(storage.objects) == 1


async def test_cannot_comment_as_someone_elses_character(client, make_user):
    _, owner_headers = await make_user("owner")
    _, other_headers = await make_user("other")
    wall = await create_character(client, owner_headers, "Wall")

    response = await post_comment(client, other_headers, wall["id"], wall["id"], "impostor")
    assert response.status_code == 403


async def test_only_author_can_edit_comment(client, make_user):
    _, owner_headers = await make_user("owner")
    _, visitor_headers = await make_user("visitor")
    wall = await create_character(client, owner_headers, "Wall")
    visitor = await create_character(client, visitor_headers, "Visitor")
    comment = (await post_comment(client, visitor_headers, wall["id"], visitor["id"], "hello")).json()

    denied = await client.put(f"/comments/{comment['id']}", json={"content": "defaced"}, headers=owner_headers)
    assert denied.status_code == 403

    edited = await client.put(f"/comments/{comment['id']}", json={"content": "hello again"}, headers=visitor_headers)
    assert edited.status_code == 200
    assert edited.json()["content"] == "hello again"
    assert edited.json()["is_edited"] is True


async def test_wall_owner_can_delete_visitor_comment_and_its_replies(client, make_user, storage):
    _, owner_headers = await make_user("owner")
    _, visitor_headers = await make_user("visitor")
    _, stranger_headers = await make_user("stranger")
    wall = await create_character(client, owner_headers, "Wall")
    visitor = await create_character(client, visitor_headers, "Visitor")

    top = (await post_comment(client, visitor_headers, wall["id"], visitor["id"], "hi", photo=PNG_BYTES)).json()
    await post_comment(client, owner_headers, wall["id"], wall["id"], "welcome", top["id"])

    denied = await client.delete(f"/comments/{top['id']}", headers=stranger_headers)
    assert denied.status_code == 403

    response = await client.delete(f"/comments/{top['id']}", headers=owner_headers)
    assert response.status_code == 200
    assert (await client.get(f"/comments/character/{wall['id']}")).json() == []
    assert storage.objects == {}


async def test_deleting_one_reply_keeps_parent_and_siblings(client, make_user, storage):
    _, headers = await make_user("gm")
    wall = await create_character(client, headers, "Wall")

    top = (await post_comment(client, headers, wall["id"], wall["id"], "top")).json()
    r1 = (await post_comment(client, headers, wall["id"], wall["id"], "r1", top["id"], photo=PNG_BYTES)).json()
    await post_comment(client, headers, wall["id"], wall["id"], "r2", top["id"])

    assert (await client.delete(f"/comments/{r1['id']}", headers=headers)).status_code == 200

    threads = (await client.get(f"/comments/character/{wall['id']}")).json()
    assert [(t["content"], [r["content"] for r in t["replies"]]) for t in threads] == [("top", ["r2"])]
    assert storage.objects == {}


async def test_wall_of_unknown_character_is_404(client):
    response = await client.get(f"/comments/character/{uuid.uuid4()}")
    assert response.status_code == 404
    assert "message" in response.json()
