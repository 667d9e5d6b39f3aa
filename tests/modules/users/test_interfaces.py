from modules.users.interfaces import IUserRepository, IUserService
from modules.users.repository import UserRepository
from modules.users.service import UserService
from unittest.mock import MagicMock


class TestUsersInterfaces:
    def test_repository_implements_interface(self):
        assert isinstance(UserRepository(MagicMock()), IUserRepository)

    def test_in_memory_repository_implements_interface(self, repository):
        """The in-memory test double must stay in sync with the contract."""
        assert isinstance(repository, IUserRepository)

    def test_service_implements_interface(self, user_service):
        assert isinstance(user_service, IUserService)

    def test_service_methods(self):
        methods = [
            "create_user",
            "login_with_password",
            "login_with_token",
            "get_by_token",
            "get_all",
            "get_page",
            "get_by_id",
            "update_profile_by_id",
            "push_submission_by_id",
            "verify_by_token",
            "send_verification_email_by_id",
            "send_password_reset_email",
            "change_password",
            "reset_password",
        ]
        for method in methods:
            assert callable(getattr(UserService, method))
