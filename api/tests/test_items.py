"""
Tests for adding and removing press kit items.
"""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from fastapi import status


def _timestamp(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _add(client, headers, press_kit_id, collection, payload):
    return client.post(f"/pressKits/{press_kit_id}/{collection}", json=payload, headers=headers)


def test_media_items_get_increasing_order(client, musician, create_press_kit):
    press_kit = create_press_kit(musician["headers"])
    headers = musician["headers"]

    first = _add(client, headers, press_kit["id"], "mediaItems", {"type": "audio", "title": "Single"})
    second = _add(client, headers, press_kit["id"], "mediaItems", {"type": "video", "title": "Clip"})
    explicit = _add(
        client, headers, press_kit["id"], "mediaItems", {"type": "image", "title": "Cover", "order": 10}
    )
    after = _add(client, headers, press_kit["id"], "mediaItems", {"type": "image", "title": "Back"})

    assert [r.json()["order"] for r in (first, second, explicit, after)] == [0, 1, 10, 11]

    detail = client.get(f"/pressKits/{press_kit['id']}", headers=headers).json()
    assert [m["title"] for m in detail["mediaItems"]] == ["Single", "Clip", "Cover", "Back"]


def test_media_item_rejects_negative_order(client, musician, create_press_kit):
    press_kit = create_press_kit(musician["headers"])

    response = _add(
        client,
        musician["headers"],
        press_kit["id"],
        "mediaItems",
        {"type": "image", "title": "Cover", "order": -1},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["field"] == "order"


def test_event_requires_date(client, musician, create_press_kit):
    press_kit = create_press_kit(musician["headers"])

    response = _add(client, musician["headers"], press_kit["id"], "events", {"name": "Gig"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"] == [{"field": "date", "message": "Date is required"}]


def test_event_dates_are_stored_in_utc(client, musician, create_press_kit):
    press_kit = create_press_kit(musician["headers"])

    response = _add(
        client,
        musician["headers"],
        press_kit["id"],
        "events",
        {"name": "Late show", "date": "2099-03-01T23:30:00+02:00"},
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["date"] == "2099-03-01T21:30:00Z"


def test_adding_an_item_bumps_press_kit_updated_at(client, musician, create_press_kit):
    press_kit = create_press_kit(musician["headers"])

    _add(
        client,
        musician["headers"],
        press_kit["id"],
        "socialLinks",
        {"platform": "bandcamp", "url": "https://band.bandcamp.com"},
    )

    listed = client.get("/pressKits", headers=musician["headers"]).json()
    assert _timestamp(listed[0]["updatedAt"]) > _timestamp(press_kit["updatedAt"])


def test_cannot_add_items_to_foreign_press_kit(client, musician, other_musician, create_press_kit):
    press_kit = create_press_kit(musician["headers"])

    response = _add(
        client,
        other_musician["headers"],
        press_kit["id"],
        "contacts",
        {"name": "Intruder"},
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_remove_item(client, musician, create_press_kit):
    press_kit = create_press_kit(musician["headers"])
    item = _add(
        client,
        musician["headers"],
        press_kit["id"],
        "testimonials",
        {"quote": "Great", "author": "Fan"},
    ).json()

    response = client.delete(
        f"/pressKits/{press_kit['id']}/testimonials/{item['id']}", headers=musician["headers"]
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"message": "Item removed successfully"}
    detail = client.get(f"/pressKits/{press_kit['id']}", headers=musician["headers"]).json()
    assert detail["testimonials"] == []


def test_remove_item_of_another_press_kit_is_not_found(client, musician, create_press_kit):
    first = create_press_kit(musician["headers"], title="First")
    second = create_press_kit(musician["headers"], title="Second")
    item = _add(client, musician["headers"], first["id"], "contacts", {"name": "Booker"}).json()

    response = client.delete(
        f"/pressKits/{second['id']}/contacts/{item['id']}", headers=musician["headers"]
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "Item not found"}

    # Still present under its own press kit.
    detail = client.get(f"/pressKits/{first['id']}", headers=musician["headers"]).json()
    assert len(detail["contacts"]) == 1


def test_remove_missing_item_is_not_found(client, musician, create_press_kit):
    press_kit = create_press_kit(musician["headers"])

    response = client.delete(
        f"/pressKits/{press_kit['id']}/events/{uuid4()}", headers=musician["headers"]
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_remove_from_unknown_collection_is_rejected(client, musician, create_press_kit):
    press_kit = create_press_kit(musician["headers"])

    response = client.delete(
        f"/pressKits/{press_kit['id']}/analytics/{uuid4()}", headers=musician["headers"]
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "Unknown item collection"}
