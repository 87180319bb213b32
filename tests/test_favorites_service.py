"""
Tests for the favorites ranking rules.

Exercises the service layer directly against the test session:
- reorder_positions arithmetic
- add / remove / move keep positions dense (1..N)
- capacity, duplicate and position validation
- random operation sequences
- rollback of failed moves and removals
"""

import random
from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mybook.exceptions import (
    CapacityExceededError,
    DuplicateEntryError,
    InvalidPositionError,
    NotFoundError,
)
from mybook.models import FavoriteBook, User
from mybook.services.favorites import (
    add_favorite,
    list_favorites,
    move_favorite,
    remove_favorite,
    reorder_positions,
)


def ranked(db: Session, user: User) -> list[str]:
    """Book ids of a user's favorites in position order."""
    return [f.book_id for f in list_favorites(db, user.id)]


def positions(db: Session, user: User) -> list[int]:
    return [f.position for f in list_favorites(db, user.id)]


# =============================================================================
# Position Arithmetic
# =============================================================================


class TestReorderPositions:
    """Pure position arithmetic, no database."""

    def test_move_last_to_front(self):
        result = reorder_positions({1: 1, 2: 2, 3: 3, 4: 4}, 4, 1)
        assert result == {1: 2, 2: 3, 3: 4, 4: 1}

    def test_move_first_to_third(self):
        result = reorder_positions({1: 1, 2: 2, 3: 3, 4: 4}, 1, 3)
        assert result == {1: 3, 2: 1, 3: 2, 4: 4}

    def test_adjacent_swap(self):
        result = reorder_positions({10: 1, 20: 2}, 10, 2)
        assert result == {10: 2, 20: 1}

    def test_same_position_is_identity(self):
        current = {1: 1, 2: 2, 3: 3}
        assert reorder_positions(current, 2, 2) == current

    def test_result_is_a_permutation(self):
        current = {1: 1, 2: 2, 3: 3, 4: 4}
        for target in current:
            for new in range(1, 5):
                result = reorder_positions(current, target, new)
                assert sorted(result.values()) == [1, 2, 3, 4]
                assert result[target] == new


# =============================================================================
# Add
# =============================================================================


class TestAddFavorite:
    def test_appends_at_next_position(self, db_session: Session, sample_user: User):
        first = add_favorite(db_session, sample_user.id, "vol-A")
        second = add_favorite(db_session, sample_user.id, "vol-B")

        assert first.position == 1
        assert second.position == 2
        assert ranked(db_session, sample_user) == ["vol-A", "vol-B"]

    def test_duplicate_rejected(self, db_session: Session, sample_user: User):
        add_favorite(db_session, sample_user.id, "vol-A")

        with pytest.raises(DuplicateEntryError):
            add_favorite(db_session, sample_user.id, "vol-A")

        assert positions(db_session, sample_user) == [1]

    def test_fifth_favorite_rejected(
        self, db_session: Session, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        with pytest.raises(CapacityExceededError) as exc_info:
            add_favorite(db_session, sample_user.id, "vol-E")

        assert exc_info.value.capacity == 4
        assert ranked(db_session, sample_user) == ["vol-A", "vol-B", "vol-C", "vol-D"]

    def test_same_book_for_different_users(
        self, db_session: Session, sample_user: User, second_user: User
    ):
        add_favorite(db_session, sample_user.id, "vol-A")
        favorite = add_favorite(db_session, second_user.id, "vol-A")

        assert favorite.position == 1


# =============================================================================
# Remove
# =============================================================================


class TestRemoveFavorite:
    def test_remove_closes_gap(
        self, db_session: Session, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        remove_favorite(db_session, sample_user.id, "vol-B")

        assert ranked(db_session, sample_user) == ["vol-A", "vol-C", "vol-D"]
        assert positions(db_session, sample_user) == [1, 2, 3]

    def test_remove_last_keeps_others(
        self, db_session: Session, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        remove_favorite(db_session, sample_user.id, "vol-D")

        assert ranked(db_session, sample_user) == ["vol-A", "vol-B", "vol-C"]
        assert positions(db_session, sample_user) == [1, 2, 3]

    def test_remove_only_favorite(self, db_session: Session, sample_user: User):
        add_favorite(db_session, sample_user.id, "vol-A")

        remove_favorite(db_session, sample_user.id, "vol-A")

        assert list_favorites(db_session, sample_user.id) == []

    def test_remove_unknown_book(
        self, db_session: Session, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        with pytest.raises(NotFoundError):
            remove_favorite(db_session, sample_user.id, "vol-Z")

        assert positions(db_session, sample_user) == [1, 2, 3, 4]

    def test_slot_reusable_after_remove(
        self, db_session: Session, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        remove_favorite(db_session, sample_user.id, "vol-A")
        favorite = add_favorite(db_session, sample_user.id, "vol-E")

        assert favorite.position == 4
        assert ranked(db_session, sample_user) == ["vol-B", "vol-C", "vol-D", "vol-E"]


# =============================================================================
# Move
# =============================================================================


class TestMoveFavorite:
    def test_move_to_front(
        self, db_session: Session, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        moved = move_favorite(db_session, sample_user.id, "vol-D", 1)

        assert moved.position == 1
        assert ranked(db_session, sample_user) == ["vol-D", "vol-A", "vol-B", "vol-C"]

    def test_move_toward_end(
        self, db_session: Session, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        move_favorite(db_session, sample_user.id, "vol-A", 3)

        assert ranked(db_session, sample_user) == ["vol-B", "vol-C", "vol-A", "vol-D"]
        assert positions(db_session, sample_user) == [1, 2, 3, 4]

    def test_move_to_same_position_changes_nothing(
        self, db_session: Session, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        moved = move_favorite(db_session, sample_user.id, "vol-B", 2)

        assert moved.position == 2
        assert ranked(db_session, sample_user) == ["vol-A", "vol-B", "vol-C", "vol-D"]

    @pytest.mark.parametrize("new_position", [0, 5, -1])
    def test_position_out_of_range(
        self,
        db_session: Session,
        sample_user: User,
        full_favorites: list[FavoriteBook],
        new_position: int,
    ):
        with pytest.raises(InvalidPositionError):
            move_favorite(db_session, sample_user.id, "vol-A", new_position)

        assert ranked(db_session, sample_user) == ["vol-A", "vol-B", "vol-C", "vol-D"]

    def test_unknown_book_checked_before_position(
        self, db_session: Session, sample_user: User, full_favorites: list[FavoriteBook]
    ):
        with pytest.raises(NotFoundError):
            move_favorite(db_session, sample_user.id, "vol-Z", 9)

    def test_position_past_end_is_clamped(self, db_session: Session, sample_user: User):
        add_favorite(db_session, sample_user.id, "vol-A")
        add_favorite(db_session, sample_user.id, "vol-B")

        moved = move_favorite(db_session, sample_user.id, "vol-A", 4)

        assert moved.position == 2
        assert ranked(db_session, sample_user) == ["vol-B", "vol-A"]

    def test_other_users_untouched(
        self,
        db_session: Session,
        sample_user: User,
        second_user: User,
        full_favorites: list[FavoriteBook],
    ):
        add_favorite(db_session, second_user.id, "vol-A")
        add_favorite(db_session, second_user.id, "vol-X")

        move_favorite(db_session, sample_user.id, "vol-A", 4)

        assert ranked(db_session, second_user) == ["vol-A", "vol-X"]


# =============================================================================
# Operation Sequences
# =============================================================================


BOOK_POOL = [f"vol-{letter}" for letter in "ABCDEFG"]


def apply_to_model(model: list[str], op: str, book_id: str, position: int):
    """Expected outcome of one operation: the exception type, or None."""
    if op == "add":
        if book_id in model:
            return DuplicateEntryError
        if len(model) >= 4:
            return CapacityExceededError
        model.append(book_id)
    elif op == "remove":
        if book_id not in model:
            return NotFoundError
        model.remove(book_id)
    else:
        if book_id not in model:
            return NotFoundError
        if not 1 <= position <= 4:
            return InvalidPositionError
        model.remove(book_id)
        model.insert(min(position, len(model) + 1) - 1, book_id)
    return None


class TestRandomSequences:
    @pytest.mark.parametrize("seed", [1, 7, 42])
    def test_positions_stay_dense(self, db_session: Session, sample_user: User, seed: int):
        rng = random.Random(seed)
        model: list[str] = []

        for _ in range(150):
            op = rng.choice(["add", "add", "remove", "move"])
            book_id = rng.choice(BOOK_POOL)
            position = rng.randint(0, 5)

            expected_error = apply_to_model(model, op, book_id, position)

            if op == "add":
                call = lambda: add_favorite(db_session, sample_user.id, book_id)
            elif op == "remove":
                call = lambda: remove_favorite(db_session, sample_user.id, book_id)
            else:
                call = lambda: move_favorite(db_session, sample_user.id, book_id, position)

            if expected_error is None:
                call()
            else:
                with pytest.raises(expected_error):
                    call()

            assert ranked(db_session, sample_user) == model
            assert positions(db_session, sample_user) == list(range(1, len(model) + 1))


# =============================================================================
# Failed Writes
# =============================================================================


def seed_favorites(db: Session, book_ids: list[str]) -> int:
    user = User(email="ranker@example.com", username="ranker", hashed_password="x")
    db.add(user)
    db.commit()
    db.add_all(
        FavoriteBook(user_id=user.id, book_id=book_id, position=i)
        for i, book_id in enumerate(book_ids, start=1)
    )
    db.commit()
    return user.id


def stored_ranking(db: Session, user_id: int) -> list[tuple[str, int]]:
    return [(f.book_id, f.position) for f in list_favorites(db, user_id)]


class TestFailedWritesRollBack:
    """A write that fails part-way leaves the stored ranking untouched."""

    ORIGINAL = [("vol-A", 1), ("vol-B", 2), ("vol-C", 3), ("vol-D", 4)]

    def test_move_commit_failure(self, committed_session: Session):
        user_id = seed_favorites(committed_session, ["vol-A", "vol-B", "vol-C", "vol-D"])

        with patch.object(committed_session, "commit", side_effect=SQLAlchemyError("disk I/O error")):
            with pytest.raises(SQLAlchemyError):
                move_favorite(committed_session, user_id, "vol-D", 1)

        assert stored_ranking(committed_session, user_id) == self.ORIGINAL

    def test_move_failure_between_phases(self, committed_session: Session):
        user_id = seed_favorites(committed_session, ["vol-A", "vol-B", "vol-C", "vol-D"])
        real_flush = committed_session.flush
        flushes = []

        def fail_on_second_flush(*args, **kwargs):
            flushes.append(1)
            if len(flushes) == 2:
                raise SQLAlchemyError("connection lost")
            return real_flush(*args, **kwargs)

        with patch.object(committed_session, "flush", side_effect=fail_on_second_flush):
            with pytest.raises(SQLAlchemyError):
                move_favorite(committed_session, user_id, "vol-A", 4)

        assert stored_ranking(committed_session, user_id) == self.ORIGINAL

    def test_remove_commit_failure(self, committed_session: Session):
        user_id = seed_favorites(committed_session, ["vol-A", "vol-B", "vol-C", "vol-D"])

        with patch.object(committed_session, "commit", side_effect=SQLAlchemyError("disk I/O error")):
            with pytest.raises(SQLAlchemyError):
                remove_favorite(committed_session, user_id, "vol-B")

        assert stored_ranking(committed_session, user_id) == self.ORIGINAL
