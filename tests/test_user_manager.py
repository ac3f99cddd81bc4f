"""Tests for UserManager."""

import pytest

from core.user_manager import UserManager
from utils.config import Config


@pytest.fixture
def config(temp_db_path):
    return Config(temp_db_path)


@pytest.fixture
def manager(config):
    return UserManager(config)


class TestUserManager:
    """Tests for creating, loading and forgetting the current user."""

    def test_no_user_initially(self, manager):
        assert manager.get_current_user() is None

    def test_create_user_persists_identity(self, config, manager):
        user = manager.create_user(display_name="alice", email="alice@example.org")

        reloaded = UserManager(config).get_current_user()
        assert reloaded.user_id == user.user_id
        assert reloaded.display_name == "alice"
        assert reloaded.email == "alice@example.org"
        assert reloaded.created_at == user.created_at

    def test_user_ids_are_unique(self, manager):
        first = manager.create_user(display_name="a")
        second = manager.create_user(display_name="b")
        assert first.user_id != second.user_id
        assert manager.get_current_user().user_id == second.user_id

    def test_numeric_display_name_stays_string(self, config, manager):
        manager.create_user(display_name="1234")
        assert UserManager(config).get_current_user().display_name == "1234"

    def test_sign_out_forgets_user(self, config, manager):
        manager.create_user(display_name="alice")
        manager.sign_out()

        assert manager.get_current_user() is None
        assert UserManager(config).get_current_user() is None

    def test_to_profile_starts_with_zero_stats(self, manager):
        profile = manager.create_user(display_name="alice").to_profile()
        assert profile.total_games == 0
        assert profile.display_name == "alice"


class TestSignIn:
    """Tests for adopting an existing identity."""

    def test_adopts_given_id(self, config, manager):
        user = manager.sign_in("shared-id", display_name="alice")

        reloaded = UserManager(config).get_current_user()
        assert user.user_id == reloaded.user_id == "shared-id"
        assert reloaded.display_name == "alice"

    def test_same_id_on_two_devices(self, temp_db_path, tmp_path):
        first = UserManager(Config(temp_db_path)).create_user(display_name="alice")
        other_device = UserManager(Config(tmp_path / "other.db"))

        assert other_device.sign_in(first.user_id).user_id == first.user_id

    def test_switching_user_clears_old_details(self, manager):
        manager.create_user(display_name="alice", email="alice@example.org")

        user = manager.sign_in("someone-else")

        assert user.display_name is None
        assert user.email is None
        assert user.created_at is None

    def test_same_id_keeps_details(self, manager):
        created = manager.create_user(display_name="alice")

        user = manager.sign_in(created.user_id)

        assert user.display_name == "alice"
        assert user.created_at == created.created_at

    @pytest.mark.parametrize("user_id", ["", "   "])
    def test_blank_id_rejected(self, manager, user_id):
        with pytest.raises(ValueError):
            manager.sign_in(user_id)
        assert manager.get_current_user() is None


class TestRegisterRemote:
    """Tests for UserManager.register_remote()."""

    def test_creates_remote_profile(self, manager, fake_remote):
        user = manager.create_user(display_name="alice")

        result = manager.register_remote(fake_remote)

        assert result.success
        assert fake_remote.users[user.user_id].display_name == "alice"

    def test_fails_without_user(self, manager, fake_remote):
        result = manager.register_remote(fake_remote)
        assert not result.success
        assert fake_remote.calls == []

    def test_remote_failure_reported(self, manager, fake_remote):
        manager.create_user(display_name="alice")
        fake_remote.failing = True

        assert not manager.register_remote(fake_remote).success

    def test_existing_profile_is_not_overwritten(self, manager, fake_remote):
        user = manager.sign_in("shared-id", display_name="alice")
        fake_remote.users[user.user_id] = user.to_profile().model_copy(
            update={"total_games": 7, "total_wins": 5}
        )

        assert manager.register_remote(fake_remote).success
        assert fake_remote.users[user.user_id].total_games == 7
        assert "create_user" not in fake_remote.calls
