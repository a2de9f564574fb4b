PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64

DEFAULT_STATS = {
    "strength": 16,
    "dexterity": 12,
    "constitution": 15,
    "intelligence": 10,
    "wisdom": 13,
    "charisma": 8,
}


def character_payload(name="Thorin", **overrides):
    payload = {
        "name": name,
        "race": "Dwarf",
        "class": "Fighter",
        "level": 5,
        "stats": dict(DEFAULT_STATS),
        "alignment": "Lawful Good",
        "bio": "Heir of Durin",
    }
    payload.update(overrides)
    return payload


async def create_character(client, headers, name="Thorin", **overrides):
    response = await client.post("/characters/", json=character_payload(name, **overrides), headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def default_album(client, character_id):
    response = await client.get(f"/albums/character/{character_id}")
    assert response.status_code == 200, response.text
    return response.json()[0]


async def upload_photos(client, headers, album_id, count=1, **form):
    files = [("photos", (f"photo{i}.png", PNG_BYTES, "image/png")) for i in range(count)]
    data = {"album_id": album_id, **form}
    return await client.post("/photos/upload", data=data, files=files, headers=headers)


async def post_comment(client, headers, wall_id, author_id, content="Hail and well met", parent_id=None, photo=None):
    data = {"character_id": wall_id, "author_character_id": author_id, "content": content}
    if parent_id:
        data["parent_comment_id"] = parent_id
    files = {"photo": ("pic.png", photo, "image/png")} if photo else None
    return await client.post("/comments/", data=data, files=files, headers=headers)
