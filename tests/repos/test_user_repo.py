"""Whole-aggregate save guarded by the user version."""

import threading

import pytest

from easybuy.domain.errors import ConcurrencyConflict
from easybuy.domain.schemas import ItemIn
from easybuy.repos.user_repo import UserRepo
from easybuy.services.cart_service import CartService
from easybuy.services.lock_service import LocalLockService


def _reload(session_factory, user_id):
    session = session_factory()
    try:
        user = UserRepo(session).get_user(user_id)
        return user.version, sorted(t.token for t in user.refresh_tokens), user.cart.items
    finally:
        session.close()


class TestLookups:
    def test_get_by_email(self, db, user):
        repo = UserRepo(db)

        assert repo.get_by_email("alice@example.com").id == user.id
        assert repo.get_by_email("nobody@example.com") is None

    def test_get_by_refresh_token(self, db, user):
        repo = UserRepo(db)
        user.add_refresh_token("t-1")
        repo.save(user)

        assert repo.get_by_refresh_token("t-1").id == user.id
        assert repo.get_by_refresh_token("t-2") is None


class TestVersionedSave:
    def test_save_bumps_version(self, db, session_factory, user):
        repo = UserRepo(db)
        start = user.version

        user.add_refresh_token("t-1")
        repo.save(user)

        version, tokens, _ = _reload(session_factory, user.id)
        assert version == start + 1
        assert tokens == ["t-1"]

    def test_stale_snapshot_is_rejected(self, session_factory, user):
        first, second = session_factory(), session_factory()
        try:
            mine = UserRepo(first).get_user(user.id)
            theirs = UserRepo(second).get_user(user.id)

            mine.add_refresh_token("t-first")
            UserRepo(first).save(mine)

            theirs.add_refresh_token("t-second")
            with pytest.raises(ConcurrencyConflict):
                UserRepo(second).save(theirs)
        finally:
            first.close()
            second.close()

        version, tokens, _ = _reload(session_factory, user.id)
        assert version == user.version + 1
        assert tokens == ["t-first"]

    def test_session_usable_after_conflict(self, session_factory, user):
        first, second = session_factory(), session_factory()
        try:
            mine = UserRepo(first).get_user(user.id)
            theirs = UserRepo(second).get_user(user.id)
            mine.add_refresh_token("t-first")
            UserRepo(first).save(mine)
            theirs.add_refresh_token("t-second")
            with pytest.raises(ConcurrencyConflict):
                UserRepo(second).save(theirs)

            # po rollbacku stan przeladowany z bazy, retry przechodzi
            repo = UserRepo(second)
            fresh = repo.get_user(user.id)
            fresh.add_refresh_token("t-retry")
            repo.save(fresh)
        finally:
            first.close()
            second.close()

        _, tokens, _ = _reload(session_factory, user.id)
        assert tokens == ["t-first", "t-retry"]


class TestConcurrentRequests:
    def test_parallel_cart_adds_are_serialized(self, session_factory, catalog, user):
        locks = LocalLockService(wait_seconds=10)
        errors = []

        def add_one():
            session = session_factory()
            try:
                CartService(session, catalog, locks).add_or_merge(
                    user.id, [ItemIn(product_id="A", quantity=1)]
                )
            except Exception as e:
                errors.append(e)
            finally:
                session.close()

        threads = [threading.Thread(target=add_one) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        _, _, items = _reload(session_factory, user.id)
        assert [(i.product_id, i.quantity) for i in items] == [("A", 5)]
