"""Tests for the post endpoints.

Covers create/list/get/update/delete, validation, and write-time rendering.
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError


async def _create(client, title="Hi", content="Hello **world**\n\nSecond para."):
    response = await client.post("/api/posts", json={"title": title, "content": content})
    assert response.status_code == 201
    return response.json()["data"]


async def test_create_post(client):
    response = await client.post(
        "/api/posts",
        json={"title": "Hi", "content": "Hello **world**\n\nSecond para."},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Post created successfully"
    post = body["data"]
    assert post["title"] == "Hi"
    assert post["content"] == "Hello **world**\n\nSecond para."
    assert post["content_html"] == (
        "<p>Hello <strong>world</strong></p>\n<p>Second para.</p>\n"
    )
    assert post["created_at"] == post["updated_at"]


async def test_create_ignores_client_supplied_html(client):
    response = await client.post(
        "/api/posts",
        json={
            "title": "Sneaky",
            "content": "plain",
            "content_html": "<script>alert(1)</script>",
        },
    )
    assert response.status_code == 201
    assert response.json()["data"]["content_html"] == "<p>plain</p>\n"


async def test_create_sanitizes_hostile_markdown(client):
    post = await _create(
        client,
        content='<script>alert(1)</script>\n\n<img src=x onerror="alert(1)">\n\n[x](javascript:alert(1))',
    )
    html = post["content_html"]
    assert "<script" not in html
    assert "onerror" not in html
    assert 'href="javascript:' not in html


async def test_create_rejects_empty_title(client, mocker):
    spy = mocker.patch("blog_api.services.post_store.process_content")

    response = await client.post("/api/posts", json={"title": "", "content": "body"})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "Validation failed"
    assert body["kind"] == "validation"
    assert any(d.startswith("title") for d in body["details"])
    spy.assert_not_called()


async def test_create_rejects_long_title(client):
    response = await client.post(
        "/api/posts", json={"title": "x" * 201, "content": "body"}
    )
    assert response.status_code == 400
    assert response.json()["kind"] == "validation"


async def test_create_rejects_long_content(client):
    response = await client.post(
        "/api/posts", json={"title": "t", "content": "x" * 10001}
    )
    assert response.status_code == 400
    assert any(d.startswith("content") for d in response.json()["details"])


async def test_create_accepts_boundary_lengths(client):
    post = await _create(client, title="x" * 200, content="y" * 10000)
    assert len(post["title"]) == 200
    assert len(post["content"]) == 10000


async def test_create_rejects_missing_fields(client):
    response = await client.post("/api/posts", json={"title": "only title"})
    assert response.status_code == 400
    assert any(d.startswith("content") for d in response.json()["details"])


async def test_create_storage_failure_returns_500(client, mocker):
    mocker.patch(
        "blog_api.routers.posts.post_store.create_post",
        side_effect=OperationalError("INSERT", {}, Exception("locked")),
    )

    response = await client.post("/api/posts", json={"title": "t", "content": "c"})

    assert response.status_code == 500
    body = response.json()
    assert body == {
        "success": False,
        "error": "Failed to create post",
        "kind": "storage",
    }


async def test_list_posts(client, mocker):
    base = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)
    mocker.patch(
        "blog_api.services.post_store._now",
        side_effect=[base, base + timedelta(minutes=1)],
    )
    await _create(client, title="first")
    await _create(client, title="second")

    response = await client.get("/api/posts")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert [p["title"] for p in body["data"]] == ["second", "first"]
    assert all("content_html" in p for p in body["data"])


async def test_list_posts_empty(client):
    response = await client.get("/api/posts")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": [], "count": 0}


async def test_get_post(client):
    created = await _create(client)

    response = await client.get(f"/api/posts/{created['id']}")

    assert response.status_code == 200
    assert response.json()["data"] == created


async def test_read_does_not_rerender(client, mocker):
    created = await _create(client)
    render = mocker.patch("blog_api.services.post_store.process_content")

    await client.get(f"/api/posts/{created['id']}")
    await client.get("/api/posts")

    render.assert_not_called()


async def test_get_post_not_found(client):
    response = await client.get("/api/posts/999")

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "error": "Post not found",
        "kind": "not_found",
    }


async def test_get_post_invalid_id(client):
    response = await client.get("/api/posts/abc")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid post ID"
    assert response.json()["kind"] == "validation"


async def test_update_post_end_to_end(client, mocker):
    created_at = datetime(2026, 5, 1, 9, 0, tzinfo=timezone.utc)
    mocker.patch(
        "blog_api.services.post_store._now",
        side_effect=[created_at, created_at + timedelta(seconds=30)],
    )
    created = await _create(client)

    response = await client.put(
        f"/api/posts/{created['id']}",
        json={"title": "Hi", "content": "<script>x</script>Bye"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Post updated successfully"
    updated = body["data"]
    assert updated["id"] == created["id"]
    assert "Bye" in updated["content_html"]
    assert "<script" not in updated["content_html"]
    assert updated["created_at"] == created["created_at"]
    assert updated["updated_at"] != created["updated_at"]

    # The stored row matches what the update returned
    fetched = await client.get(f"/api/posts/{created['id']}")
    assert fetched.json()["data"] == updated


async def test_update_requires_full_replacement(client):
    created = await _create(client)

    response = await client.put(
        f"/api/posts/{created['id']}", json={"title": "only title"}
    )

    assert response.status_code == 400
    assert response.json()["kind"] == "validation"
    fetched = await client.get(f"/api/posts/{created['id']}")
    assert fetched.json()["data"]["title"] == "Hi"


async def test_update_post_not_found(client):
    response = await client.put("/api/posts/999", json={"title": "t", "content": "c"})
    assert response.status_code == 404
    assert response.json()["error"] == "Post not found"


async def test_delete_post(client):
    created = await _create(client)

    response = await client.delete(f"/api/posts/{created['id']}")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Post deleted successfully"}
    missing = await client.get(f"/api/posts/{created['id']}")
    assert missing.status_code == 404


async def test_delete_post_not_found(client):
    response = await client.delete("/api/posts/999")
    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


async def test_delete_post_invalid_id(client):
    response = await client.delete("/api/posts/1.5")
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid post ID"


@pytest.mark.parametrize("raw_id", ["+5", " 5 ", "1_0", "٣", "-1", "0", "5e2"])
async def test_get_post_rejects_non_plain_ids(client, raw_id):
    # Post 5 exists, so a lenient parse of "+5" or " 5 " would return it
    for n in range(5):
        await _create(client, title=f"post {n}")

    response = await client.get(f"/api/posts/{raw_id}")

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid post ID"
