import uuid

from tests.helpers import create_character


async def _playlist(client, headers, character_id, **fields):
    return await client.post("/playlists/", json={"character_id": character_id, **fields}, headers=headers)


async def _add_song(client, headers, playlist_id, platform="youtube", url="https://youtu.be/dQw4w9WgXcQ", title="Song"):
    return await client.post(
        f"/playlists/{playlist_id}/songs",
        json={"platform": platform, "url": url, "title": title, "artist": "Bard"},
        headers=headers,
    )


async def test_upsert_creates_then_updates_single_playlist(client, make_user):
    _, headers = await make_user("gm")
    character = await create_character(client, headers, "Thorin")

    created = await _playlist(client, headers, character["id"])
    assert created.status_code == 201
    assert created.json()["title"] == "Thorin's Playlist"
    assert created.json()["is_public"] is True
    assert created.json()["auto_play"] is False

    updated = await _playlist(client, headers, character["id"], title="Songs of the Mountain", auto_play=True)
    assert updated.status_code == 200
    assert updated.json()["id"] == created.json()["id"]
    assert updated.json()["title"] == "Songs of the Mountain"
    assert updated.json()["auto_play"] is True

    fetched = await client.get(f"/playlists/character/{character['id']}")
    assert fetched.json()["id"] == created.json()["id"]


async def test_missing_playlist_is_404(client, make_user):
    _, headers = await make_user("gm")
    character = await create_character(client, headers, "Thorin")
    assert (await client.get(f"/playlists/character/{character['id']}")).status_code == 404


async def test_songs_are_normalized_and_ordered(client, make_user):
    _, headers = await make_user("gm")
    character = await create_character(client, headers, "Thorin")
    playlist = (await _playlist(client, headers, character["id"])).json()

    first = await _add_song(client, headers, playlist["id"], title="Misty Mountains")
    assert first.status_code == 201
    second = await _add_song(
        client, headers, playlist["id"], platform="spotify",
        url="https://open.spotify.com/track/4uLU6hMCjMI75M1A2tKUQC", title="Far Over",
    )

    songs = second.json()["songs"]
    assert [(s["title"], s["order"]) for s in songs] == [("Misty Mountains", 0), ("Far Over", 1)]
    assert songs[0]["embed_url"] == "https://www.youtube.com/embed/dQw4w9WgXcQ"
    assert songs[1]["embed_url"] == "https://open.spotify.com/embed/track/4uLU6hMCjMI75M1A2tKUQC"


async def test_invalid_song_url_is_rejected(client, make_user):
    _, headers = await make_user("gm")
    character = await create_character(client, headers, "Thorin")
    playlist = (await _playlist(client, headers, character["id"])).json()

    response = await _add_song(client, headers, playlist["id"], platform="soundcloud", url="https://soundcloud.com/a/b")

    assert response.status_code == 400
    assert "SoundCloud" in response.json()["message"]


async def test_update_remove_and_reorder_songs(client, make_user):
    _, headers = await make_user("gm")
    character = await create_character(client, headers, "Thorin")
    playlist = (await _playlist(client, headers, character["id"])).json()
    for title in ("One", "Two", "Three"):
        await _add_song(client, headers, playlist["id"], title=title)
    songs = (await client.get(f"/playlists/character/{character['id']}")).json()["songs"]

    renamed = await client.put(
        f"/playlists/{playlist['id']}/songs/{songs[0]['id']}", json={"title": "Uno"}, headers=headers
    )
    assert renamed.json()["songs"][0]["title"] == "Uno"

    reordered = await client.put(
        f"/playlists/{playlist['id']}/reorder",
        json={"song_ids": [songs[2]["id"], songs[0]["id"], songs[1]["id"]]},
        headers=headers,
    )
    assert [s["title"] for s in reordered.json()["songs"]] == ["Three", "Uno", "Two"]

    removed = await client.delete(f"/playlists/{playlist['id']}/songs/{songs[0]['id']}", headers=headers)
    assert [s["title"] for s in removed.json()["songs"]] == ["Three", "Two"]

    missing = await client.delete(f"/playlists/{playlist['id']}/songs/{uuid.uuid4()}", headers=headers)
    assert missing.status_code == 404

    # 새 곡은 남은 곡 중 최대 순서값 다음
    added = (await _add_song(client, headers, playlist["id"], title="Four")).json()["songs"]
    assert added[-1]["title"] == "Four"
    assert added[-1]["order"] == max(s["order"] for s in added[:-1]) + 1


async def test_only_owner_can_change_playlist(client, make_user):
    _, owner = await make_user("owner")
    _, intruder = await make_user("intruder")
    character = await create_character(client, owner, "Thorin")
    playlist = (await _playlist(client, owner, character["id"])).json()

    assert (await _playlist(client, intruder, character["id"], title="Mine")).status_code == 403
    assert (await _add_song(client, intruder, playlist["id"])).status_code == 403
    assert (await client.delete(f"/playlists/{playlist['id']}", headers=intruder)).status_code == 403

    assert (await client.delete(f"/playlists/{playlist['id']}", headers=owner)).status_code == 200
    assert (await client.get(f"/playlists/character/{character['id']}")).status_code == 404
