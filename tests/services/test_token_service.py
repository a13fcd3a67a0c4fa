"""Access/refresh token issuance, rotation and revocation."""

import jwt
import pytest

from easybuy.domain.errors import AuthError, AuthErrorKind
from easybuy.repos.user_repo import UserRepo
from easybuy.services.token_service import AuthResult, TokenService


class TestAccessTokens:
    def test_issued_access_token_verifies_to_user(self, tokens, user):
        token = tokens.issue_access_token(user.id)

        result = tokens.verify_access(token)

        assert result == AuthResult(ok=True, user_id=user.id)
        assert result.unwrap() == user.id

    def test_access_token_expires_after_15_minutes(self, tokens, user):
        payload = jwt.decode(tokens.issue_access_token(user.id), "test-access", algorithms=["HS256"])
        assert payload["exp"] - payload["iat"] == 15 * 60

    def test_expired_token(self, db, lock_service, user):
        short = TokenService(db, lock_service, access_secret="test-access", access_ttl=-1)

        result = short.verify_access(short.issue_access_token(user.id))

        assert not result.ok
        assert result.error == AuthErrorKind.EXPIRED

    def test_token_signed_with_other_secret_is_invalid(self, tokens, user):
        forged = jwt.encode({"id": user.id}, "not-the-secret", algorithm="HS256")
        assert tokens.verify_access(forged).error == AuthErrorKind.INVALID

    def test_garbage_token_is_invalid(self, tokens):
        assert tokens.verify_access("not.a.jwt").error == AuthErrorKind.INVALID

    def test_refresh_token_is_not_an_access_token(self, tokens, user):
        refresh = tokens.issue_refresh_token(user.id)
        assert tokens.verify_access(refresh).error == AuthErrorKind.INVALID

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, tokens, token):
        result = tokens.verify_access(token)

        assert result.error == AuthErrorKind.MISSING
        with pytest.raises(AuthError) as exc:
            result.unwrap()
        assert exc.value.kind == AuthErrorKind.MISSING


class TestRefreshTokens:
    def test_refresh_tokens_are_unique(self, tokens, user):
        assert tokens.issue_refresh_token(user.id) != tokens.issue_refresh_token(user.id)

    def test_refresh_token_has_no_expiry(self, tokens, user):
        payload = jwt.decode(tokens.issue_refresh_token(user.id), "test-refresh", algorithms=["HS256"])
        assert "exp" not in payload

    def test_open_session_stores_refresh_token(self, db, tokens, user):
        pair = tokens.open_session(user)

        assert tokens.verify_access(pair.access_token).user_id == user.id
        assert UserRepo(db).get_by_refresh_token(pair.refresh_token).id == user.id


class TestRotation:
    def test_rotation_replaces_old_token(self, db, tokens, user):
        pair = tokens.open_session(user)

        rotated = tokens.rotate(pair.refresh_token)

        repo = UserRepo(db)
        assert rotated.refresh_token != pair.refresh_token
        assert repo.get_by_refresh_token(pair.refresh_token) is None
        assert repo.get_by_refresh_token(rotated.refresh_token).id == user.id
        assert tokens.verify_access(rotated.access_token).user_id == user.id

    def test_old_token_cannot_rotate_again(self, tokens, user):
        pair = tokens.open_session(user)
        tokens.rotate(pair.refresh_token)

        with pytest.raises(AuthError) as exc:
            tokens.rotate(pair.refresh_token)
        assert exc.value.kind == AuthErrorKind.INVALID

    def test_new_token_rotates_exactly_once(self, tokens, user):
        first = tokens.rotate(tokens.open_session(user).refresh_token)

        second = tokens.rotate(first.refresh_token)

        assert second.refresh_token != first.refresh_token
        with pytest.raises(AuthError):
            tokens.rotate(first.refresh_token)

    def test_other_sessions_survive_rotation(self, db, tokens, user):
        phone = tokens.open_session(user)
        laptop = tokens.open_session(user)

        tokens.rotate(phone.refresh_token)

        assert UserRepo(db).get_by_refresh_token(laptop.refresh_token).id == user.id

    def test_well_formed_token_outside_allowlist_is_invalid(self, tokens, user):
        never_stored = tokens.issue_refresh_token(user.id)

        with pytest.raises(AuthError) as exc:
            tokens.rotate(never_stored)
        assert exc.value.kind == AuthErrorKind.INVALID

    def test_stored_token_with_bad_signature_is_invalid(self, db, tokens, user):
        user.add_refresh_token("tampered-token")
        UserRepo(db).save(user)

        with pytest.raises(AuthError) as exc:
            tokens.rotate("tampered-token")
        assert exc.value.kind == AuthErrorKind.INVALID

    def test_missing_token(self, tokens):
        with pytest.raises(AuthError) as exc:
            tokens.rotate(None)
        assert exc.value.kind == AuthErrorKind.MISSING


class TestRevocation:
    def test_revoke_removes_token(self, db, tokens, user):
        pair = tokens.open_session(user)

        tokens.revoke(pair.refresh_token)

        assert UserRepo(db).get_by_refresh_token(pair.refresh_token) is None
        with pytest.raises(AuthError):
            tokens.rotate(pair.refresh_token)

    def test_token_dropped_before_lock_is_a_noop(self, db, session_factory, tokens, user, monkeypatch):
        pair = tokens.open_session(user)
        load_fresh = tokens.repo.refresh
        saves = []

        def rotated_away_then_refresh(holder):
            # inny request zdazyl usunac token zanim dostalismy lock
            other = session_factory()
            try:
                repo = UserRepo(other)
                stale = repo.get_user(holder.id)
                stale.discard_refresh_token(pair.refresh_token)
                repo.save(stale)
            finally:
                other.close()
            return load_fresh(holder)

        monkeypatch.setattr(tokens.repo, "refresh", rotated_away_then_refresh)
        monkeypatch.setattr(tokens.repo, "save", saves.append)

        tokens.revoke(pair.refresh_token)

        assert saves == []
        assert UserRepo(db).get_by_refresh_token(pair.refresh_token) is None

    def test_revoking_unknown_token_fails(self, tokens, user):
        pair = tokens.open_session(user)
        tokens.revoke(pair.refresh_token)

        with pytest.raises(AuthError) as exc:
            tokens.revoke(pair.refresh_token)
        assert exc.value.kind == AuthErrorKind.UNKNOWN
