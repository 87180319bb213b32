"""
Tests for the Favorites API

Tests the ranked favorites endpoints:
- List my favorites / another user's favorites
- Add a favorite (max 4, no duplicates)
- Move a favorite
- Remove a favorite (gap is closed)
"""

from fastapi import status
from fastapi.testclient import TestClient

from mybook.models import FavoriteBook, User
from tests.conftest import get_auth_header


class TestListFavorites:
    """Tests for GET /api/v1/favorites"""

    def test_requires_auth(self, client: TestClient):
        response = client.get("/api/v1/favorites")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_empty_list(self, client: TestClient, sample_user: User):
        response = client.get("/api/v1/favorites", headers=get_auth_header(sample_user))

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == []

    def test_ordered_by_position(
        self, client: TestClient, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        response = client.get("/api/v1/favorites", headers=get_auth_header(sample_user))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [f["book_id"] for f in data] == ["vol-A", "vol-B", "vol-C", "vol-D"]
        assert [f["position"] for f in data] == [1, 2, 3, 4]

    def test_other_user_favorites(
        self,
        client: TestClient,
        sample_user: User,
        second_user: User,
        full_favorites: list[FavoriteBook],
    ):
        response = client.get(
            f"/api/v1/favorites/users/{sample_user.id}",
            headers=get_auth_header(second_user),
        )

        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()) == 4

    def test_other_user_not_found(self, client: TestClient, sample_user: User):
        response = client.get(
            "/api/v1/favorites/users/99999",
            headers=get_auth_header(sample_user),
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestAddFavorite:
    """Tests for POST /api/v1/favorites"""

    def test_add_first_favorite(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/v1/favorites",
            json={"book_id": "vol-A"},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["book_id"] == "vol-A"
        assert data["position"] == 1
        assert data["user_id"] == sample_user.id

    def test_add_duplicate(
        self, client: TestClient, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        response = client.post(
            "/api/v1/favorites",
            json={"book_id": "vol-B"},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "already" in response.json()["detail"]

    def test_add_when_full(
        self, client: TestClient, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        response = client.post(
            "/api/v1/favorites",
            json={"book_id": "vol-E"},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "4" in response.json()["detail"]

    def test_add_empty_book_id(self, client: TestClient, sample_user: User):
        response = client.post(
            "/api/v1/favorites",
            json={"book_id": ""},
            headers=get_auth_header(sample_user),
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestMoveFavorite:
    """Tests for PUT /api/v1/favorites/{book_id}/position"""

    def test_move_to_front(
        self, client: TestClient, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        headers = get_auth_header(sample_user)
        response = client.put(
            "/api/v1/favorites/vol-D/position",
            json={"new_position": 1},
            headers=headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["position"] == 1

        listing = client.get("/api/v1/favorites", headers=headers).json()
        assert [f["book_id"] for f in listing] == ["vol-D", "vol-A", "vol-B", "vol-C"]

    def test_invalid_position(
        self, client: TestClient, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        response = client.put(
            "/api/v1/favorites/vol-A/position",
            json={"new_position": 5},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "between 1 and 4" in response.json()["detail"]

    def test_unknown_book(
        self, client: TestClient, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        response = client.put(
            "/api/v1/favorites/vol-Z/position",
            json={"new_position": 2},
            headers=get_auth_header(sample_user),
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_cannot_move_another_users_favorite(
        self,
        client: TestClient,
        second_user: User,
        full_favorites: list[FavoriteBook],
    ):
        response = client.put(
            "/api/v1/favorites/vol-A/position",
            json={"new_position": 2},
            headers=get_auth_header(second_user),
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestRemoveFavorite:
    """Tests for DELETE /api/v1/favorites/{book_id}"""

    def test_remove_compacts(
        self, client: TestClient, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        headers = get_auth_header(sample_user)
        response = client.delete("/api/v1/favorites/vol-B", headers=headers)

        assert response.status_code == status.HTTP_204_NO_CONTENT

        listing = client.get("/api/v1/favorites", headers=headers).json()
        assert [(f["book_id"], f["position"]) for f in listing] == [
            ("vol-A", 1),
            ("vol-C", 2),
            ("vol-D", 3),
        ]

    def test_remove_unknown(self, client: TestClient, sample_user: User):
        response = client.delete(
            "/api/v1/favorites/vol-Z",
            headers=get_auth_header(sample_user),
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
