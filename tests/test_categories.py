import pytest

from conftest import START, auth_headers, make_category, make_user, parse_time
from leaderboard_backend.models import Category, Leaderboard, RunType, UserRole


def test_get_category_by_id(client, leaderboard, db):
    category = make_category(db, leaderboard, "get-ok", type=RunType.SCORE, name="get ok")

    response = client.get(f"/api/categories/{category.id}")

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == category.id
    assert body["name"] == "get ok"
    assert body["slug"] == "get-ok"
    assert body["info"] == ""
    assert body["type"] == "score"
    assert body["sort_direction"] == "ascending"
    assert body["leaderboard_id"] == leaderboard.id
    assert parse_time(body["created_at"]) == START
    assert body["updated_at"] is None
    assert body["deleted_at"] is None
    assert body["status"] == "published"


@pytest.mark.parametrize("category_id", ["NotANumber", "69"])
def test_get_category_by_id_not_found(client, category_id):
    response = client.get(f"/api/categories/{category_id}")

    assert response.status_code == 404


def test_get_deleted_category_by_id(client, leaderboard, db):
    category = make_category(db, leaderboard, "deleted", deleted_at=START)

    response = client.get(f"/api/categories/{category.id}")

    assert response.status_code == 200
    assert response.json()["status"] == "deleted"


def test_get_category_by_slug(client, leaderboard, db):
    category = make_category(db, leaderboard, "by-slug")

    response = client.get(f"/api/leaderboards/{leaderboard.id}/categories/by-slug")

    assert response.status_code == 200
    assert response.json()["id"] == category.id


def test_get_category_by_slug_ignores_deleted(client, leaderboard, db):
    make_category(db, leaderboard, "gone", deleted_at=START)

    response = client.get(f"/api/leaderboards/{leaderboard.id}/categories/gone")

    assert response.status_code == 404


def test_list_categories(client, db):
    board = Leaderboard(name="get cats ok", slug="getcategories-ok")
    db.add(board)
    db.commit()
    live = make_category(db, board, "getcategories-ok", type=RunType.SCORE)
    live_rta = make_category(db, board, "getcategories-ok-rta")
    deleted = make_category(db, board, "getcategories-ok-deleted", deleted_at=START)

    response = client.get(f"/api/leaderboards/{board.id}/categories?limit=99999999")

    assert response.status_code == 200
    body = response.json()
    assert [c["id"] for c in body["data"]] == [live.id, live_rta.id]
    assert body["total"] == 2
    assert body["limit_default"] == 64
    assert body["limit_max"] == 1024

    response = client.get(f"/api/leaderboards/{board.id}/categories?status=any")
    assert [c["id"] for c in response.json()["data"]] == [live.id, live_rta.id, deleted.id]
    assert response.json()["total"] == 3

    response = client.get(f"/api/leaderboards/{board.id}/categories?status=deleted")
    assert [c["id"] for c in response.json()["data"]] == [deleted.id]


def test_list_categories_paging(client, leaderboard, db):
    created = [make_category(db, leaderboard, f"cat-{i}") for i in range(5)]

    response = client.get(f"/api/leaderboards/{leaderboard.id}/categories?limit=2&offset=2")

    body = response.json()
    assert [c["id"] for c in body["data"]] == [created[2].id, created[3].id]
    assert body["total"] == 5


@pytest.mark.parametrize("limit,offset", [(-1, 0), (1024, -1)])
def test_list_categories_bad_page(client, limit, offset):
    response = client.get(f"/api/leaderboards/54/categories?limit={limit}&offset={offset}")

    assert response.status_code == 422


def test_list_categories_unknown_leaderboard(client):
    response = client.get("/api/leaderboards/32767/categories")

    assert response.status_code == 404


def test_create_category(client, admin_headers, leaderboard):
    request = {
        "name": "1 Player",
        "slug": "1_player",
        "info": "only one guy allowed",
        "sort_direction": "ascending",
        "type": "time",
    }

    response = client.post(f"/leaderboards/{leaderboard.id}/categories", json=request, headers=admin_headers)

    assert response.status_code == 201
    created = response.json()
    assert parse_time(created["created_at"]) == START

    retrieved = client.get(f"/api/categories/{created['id']}").json()
    for key, value in request.items():
        assert retrieved[key] == value


def test_create_category_unauthenticated(client, leaderboard):
    response = client.post(
        f"/leaderboards/{leaderboard.id}/categories",
        json={"name": "x", "slug": "xx", "sort_direction": "ascending", "type": "time"},
    )

    assert response.status_code == 401


@pytest.mark.parametrize("role", [UserRole.BANNED, UserRole.CONFIRMED, UserRole.REGISTERED])
def test_create_category_bad_role(client, db, leaderboard, role):
    user = make_user(db, f"create{role.value}", role)

    response = client.post(
        f"/leaderboards/{leaderboard.id}/categories",
        json={"name": "x", "slug": "xx", "sort_direction": "ascending", "type": "time"},
        headers=auth_headers(user),
    )

    assert response.status_code == 403


def test_create_category_unknown_leaderboard(client, admin_headers):
    response = client.post(
        "/leaderboards/1000/categories",
        json={"name": "x", "slug": "xx", "sort_direction": "ascending", "type": "time"},
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Leaderboard Not Found"


def test_create_category_on_deleted_leaderboard(client, admin_headers, db):
    board = Leaderboard(name="Old", slug="old", deleted_at=START)
    db.add(board)
    db.commit()

    response = client.post(
        f"/leaderboards/{board.id}/categories",
        json={"name": "x", "slug": "xx", "sort_direction": "ascending", "type": "time"},
        headers=admin_headers,
    )

    assert response.status_code == 201


def test_create_category_conflict(client, admin_headers, leaderboard, db):
    existing = make_category(db, leaderboard, "taken")

    response = client.post(
        f"/leaderboards/{leaderboard.id}/categories",
        json={"name": "Again", "slug": "taken", "sort_direction": "ascending", "type": "time"},
        headers=admin_headers,
    )

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["message"] == "Conflict"
    assert error["details"]["conflicting"]["id"] == existing.id


def test_create_category_no_conflict_with_deleted_or_other_board(client, admin_headers, leaderboard, db):
    make_category(db, leaderboard, "reused", deleted_at=START)
    other = Leaderboard(name="Other", slug="other")
    db.add(other)
    db.commit()
    make_category(db, other, "elsewhere")

    for slug in ("reused", "elsewhere"):
        response = client.post(
            f"/leaderboards/{leaderboard.id}/categories",
            json={"name": slug, "slug": slug, "sort_direction": "descending", "type": "score"},
            headers=admin_headers,
        )
        assert response.status_code == 201


@pytest.mark.parametrize(
    "name,slug,sort_direction,run_type,expected",
    [
        (None, "bad-data", "ascending", "score", 422),
        ("Bad Data", None, "ascending", "score", 422),
        ("Bad Data", "b.b", "ascending", "score", 422),
        ("Invalid SortDirection", "invalid-sort-direction", "sideways", "score", 400),
        ("Invalid Type", "invalid-type", "ascending", "distance", 400),
    ],
)
def test_create_category_bad_data(
    client, admin_headers, leaderboard, name, slug, sort_direction, run_type, expected
):
    request = {"sort_direction": sort_direction, "type": run_type}
    if name is not None:
        request["name"] = name
    if slug is not None:
        request["slug"] = slug

    response = client.post(f"/leaderboards/{leaderboard.id}/categories", json=request, headers=admin_headers)

    assert response.status_code == expected
    assert response.json()["error"]["message"] == "One or more validation errors occurred."


def test_create_category_malformed_json(client, admin_headers, leaderboard):
    response = client.post(
        f"/leaderboards/{leaderboard.id}/categories",
        content=b"{not json",
        headers={**admin_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 400


def test_update_category(client, admin_headers, leaderboard, db, clock):
    category = make_category(db, leaderboard, "before", name="Before")
    clock.advance(hours=1)

    response = client.patch(
        f"/categories/{category.id}",
        json={"name": "After", "slug": "after", "info": "new rules", "sort_direction": "descending"},
        headers=admin_headers,
    )

    assert response.status_code == 204
    db.expire_all()
    updated = db.get(Category, category.id)
    assert updated.name == "After"
    assert updated.slug == "after"
    assert updated.info == "new rules"
    assert updated.sort_direction.value == "descending"
    assert updated.updated_at == START.replace(hour=13)


def test_update_category_not_found(client, admin_headers):
    response = client.patch("/categories/1000000", json={"name": "x"}, headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Not Found"


def test_update_category_conflict(client, admin_headers, leaderboard, db):
    first = make_category(db, leaderboard, "updatecat-first")
    to_conflict = make_category(db, leaderboard, "updatecat-to-conflict")

    response = client.patch(
        f"/categories/{to_conflict.id}", json={"slug": "updatecat-first"}, headers=admin_headers
    )

    assert response.status_code == 409
    assert response.json()["error"]["details"]["conflicting"]["id"] == first.id
    db.expire_all()
    retrieved = db.get(Category, to_conflict.id)
    assert retrieved.slug == "updatecat-to-conflict"
    assert retrieved.updated_at is None


def test_update_category_no_conflict_because_old_is_deleted(client, admin_headers, leaderboard, db):
    make_category(db, leaderboard, "updatecat-deleted", deleted_at=START)
    category = make_category(db, leaderboard, "updatecat-live")

    response = client.patch(
        f"/categories/{category.id}", json={"slug": "updatecat-deleted"}, headers=admin_headers
    )

    assert response.status_code == 204
    db.expire_all()
    assert db.get(Category, category.id).slug == "updatecat-deleted"


@pytest.mark.parametrize("slug,error_type", [("b.b", "slug_format"), ("b", "slug_format"), (None, "empty_update")])
def test_update_category_bad_data(client, admin_headers, leaderboard, db, slug, error_type):
    category = make_category(db, leaderboard, "update-bad-data")
    body = {} if slug is None else {"slug": slug}

    response = client.patch(f"/categories/{category.id}", json=body, headers=admin_headers)

    assert response.status_code == 422
    assert [e["type"] for e in response.json()["error"]["details"]["errors"]] == [error_type]
    db.expire_all()
    assert db.get(Category, category.id).slug == "update-bad-data"


def test_update_category_type_not_allowed(client, admin_headers, leaderboard, db):
    category = make_category(db, leaderboard, "fixed-type")

    response = client.patch(f"/categories/{category.id}", json={"type": "score"}, headers=admin_headers)

    assert response.status_code == 422


def test_delete_category(client, admin_headers, leaderboard, db, clock):
    category = make_category(db, leaderboard, "delete-me")
    clock.advance(minutes=5)

    response = client.delete(f"/categories/{category.id}", headers=admin_headers)

    assert response.status_code == 204
    db.expire_all()
    deleted = db.get(Category, category.id)
    assert deleted.deleted_at == clock.now()
    assert deleted.updated_at == clock.now()


def test_delete_category_unauthenticated(client, leaderboard, db):
    category = make_category(db, leaderboard, "keep-me")

    assert client.delete(f"/categories/{category.id}").status_code == 401


@pytest.mark.parametrize("role", [UserRole.BANNED, UserRole.CONFIRMED, UserRole.REGISTERED])
def test_delete_category_bad_role(client, leaderboard, db, role):
    category = make_category(db, leaderboard, "keep-me-too")
    user = make_user(db, f"delete{role.value}", role)

    response = client.delete(f"/categories/{category.id}", headers=auth_headers(user))

    assert response.status_code == 403


def test_delete_category_not_found(client, admin_headers):
    response = client.delete("/categories/1000000", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Not Found"


def test_delete_category_already_deleted(client, admin_headers, leaderboard, db):
    category = make_category(db, leaderboard, "already-gone", deleted_at=START)

    response = client.delete(f"/categories/{category.id}", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Already Deleted"
    db.expire_all()
    assert db.get(Category, category.id).updated_at is None


def test_restore_category_by_status(client, admin_headers, leaderboard, db, clock):
    category = make_category(db, leaderboard, "restore-me", deleted_at=START)
    clock.advance(days=1)

    response = client.patch(f"/categories/{category.id}", json={"status": "published"}, headers=admin_headers)

    assert response.status_code == 204
    db.expire_all()
    restored = db.get(Category, category.id)
    assert restored.deleted_at is None
    assert restored.updated_at == clock.now()


def test_restore_category_was_never_deleted(client, admin_headers, leaderboard, db):
    category = make_category(db, leaderboard, "never-deleted")

    response = client.patch(f"/categories/{category.id}", json={"status": "published"}, headers=admin_headers)

    assert response.status_code == 204


def test_restore_category_conflict(client, admin_headers, leaderboard, db):
    to_restore = make_category(db, leaderboard, "restore-conflict", deleted_at=START)
    conflicting = make_category(db, leaderboard, "restore-conflict")

    response = client.patch(f"/categories/{to_restore.id}", json={"status": "published"}, headers=admin_headers)

    assert response.status_code == 409
    error = response.json()["error"]
    assert error["message"] == "Conflict"
    assert error["details"]["conflicting"]["id"] == conflicting.id
    db.expire_all()
    verify = db.get(Category, to_restore.id)
    assert verify.deleted_at == START
    assert verify.updated_at is None


def test_restore_category_no_conflict_different_board(client, admin_headers, leaderboard, db):
    other = Leaderboard(name="Restore Cat Board", slug="restore-cat-board")
    db.add(other)
    db.commit()
    make_category(db, other, "shared-slug")
    category = make_category(db, leaderboard, "shared-slug", deleted_at=START)

    response = client.patch(f"/categories/{category.id}", json={"status": "published"}, headers=admin_headers)

    assert response.status_code == 204
    db.expire_all()
    assert db.get(Category, category.id).deleted_at is None


def test_restore_endpoint(client, admin_headers, leaderboard, db):
    category = make_category(db, leaderboard, "restore-endpoint", deleted_at=START)

    response = client.put(f"/categories/{category.id}/restore", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["status"] == "published"


def test_restore_endpoint_not_deleted(client, admin_headers, leaderboard, db):
    category = make_category(db, leaderboard, "restore-live")

    response = client.put(f"/categories/{category.id}/restore", headers=admin_headers)

    assert response.status_code == 404
    assert response.json()["error"]["message"] == "Not Deleted"
