#  Latam Site - CSRF Token Store Tests
#
#  Tests for issue/validate/revoke and the session binding of tokens.
#
#  Depends on: latam_site/services/csrf.py, latam_site/services/store.py
#  Used by:    pytest

from latam_site.services.csrf import TokenStore
from latam_site.services.store import MemoryStore


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _store(ttl: float = 3600, clock=None) -> TokenStore:
    return TokenStore(store=MemoryStore(), ttl_seconds=ttl, clock=clock or FakeClock())


class TestIssue:
    def test_token_bound_to_session(self):
        tokens = _store()
        token = tokens.issue("session-a")
        assert token.session_id == "session-a"
        assert len(token.value) >= 32

    def test_tokens_are_random(self):
        tokens = _store()
        assert tokens.issue("s").value != tokens.issue("s").value

    def test_new_session_ids_are_unique(self):
        assert TokenStore.new_session_id() != TokenStore.new_session_id()


class TestValidate:
    def test_valid_token_accepted(self):
        tokens = _store()
        token = tokens.issue("session-a")
        assert tokens.validate("session-a", token.value) is True

    def test_validate_has_no_side_effect(self):
        tokens = _store()
        token = tokens.issue("session-a")
        assert tokens.validate("session-a", token.value)
        assert tokens.validate("session-a", token.value)

    def test_mismatch_rejected(self):
        tokens = _store()
        tokens.issue("session-a")
        assert tokens.validate("session-a", "forged") is False

    def test_missing_session_rejected(self):
        tokens = _store()
        token = tokens.issue("session-a")
        assert tokens.validate(None, token.value) is False
        assert tokens.validate("", token.value) is False

    def test_missing_token_rejected(self):
        tokens = _store()
        tokens.issue("session-a")
        assert tokens.validate("session-a", None) is False
        assert tokens.validate("session-a", "") is False

    def test_unknown_session_rejected(self):
        assert _store().validate("never-issued", "whatever") is False

    def test_token_from_other_session_rejected(self):
        tokens = _store()
        token_a = tokens.issue("session-a")
        tokens.issue("session-b")
        assert tokens.validate("session-b", token_a.value) is False

    def test_reissue_invalidates_previous_token(self):
        """Single active token per session: the old one becomes stale."""
        tokens = _store()
        old = tokens.issue("session-a")
        new = tokens.issue("session-a")
        assert tokens.validate("session-a", old.value) is False
        assert tokens.validate("session-a", new.value) is True

    def test_expired_token_rejected(self):
        clock = FakeClock()
        tokens = _store(ttl=60, clock=clock)
        token = tokens.issue("session-a")
        clock.now += 60
        assert tokens.validate("session-a", token.value) is False

    def test_non_ascii_token_does_not_raise(self):
        tokens = _store()
        tokens.issue("session-a")
        assert tokens.validate("session-a", "tókén-ñ") is False


class TestRevoke:
    def test_revoked_token_rejected(self):
        tokens = _store()
        token = tokens.issue("session-a")
        tokens.revoke("session-a")
        assert tokens.validate("session-a", token.value) is False

    def test_revoke_only_affects_own_session(self):
        tokens = _store()
        tokens.issue("session-a")
        token_b = tokens.issue("session-b")
        tokens.revoke("session-a")
        assert tokens.validate("session-b", token_b.value) is True
