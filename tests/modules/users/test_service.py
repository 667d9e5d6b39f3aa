"""
Tests for UserService.

Runs the workflow against an in-memory credential store and a mocked mailer.
"""

import math
from datetime import timedelta

import pytest

from shared.exceptions import ValidationError
from modules.auth.exceptions import (
    ExpiredTokenError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
)
from modules.auth.passwords import check_password
from modules.auth.tokens import TokenManager
from modules.mail.exceptions import MailDeliveryError
from modules.users.exceptions import EmailAlreadyExistsError, UserNotFoundError
from modules.users.models import Submission, UserPublic
from modules.users.service import RESET_COMPLETE_MESSAGE, RESET_REQUESTED_MESSAGE

from tests.conftest import TEST_JWT_SECRET, TEST_PASSWORD


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_registers_and_logs_in(self, user_service, repository, mailer, tokens):
        """Should store the user, send a verification email and return a session token."""
        result = await user_service.create_user("New@Example.com", "secret123")

        assert result.user.email == "new@example.com"
        assert result.user.verified is False
        assert tokens.verify_auth_token(result.token).sub == result.user.id

        stored = repository.find_by_id(result.user.id)
        assert stored.password != "secret123"
        assert check_password("secret123", stored.password)

        mailer.send_verification_email.assert_awaited_once()
        email, verification_token = mailer.send_verification_email.await_args.args
        assert email == "new@example.com"
        assert tokens.verify_email_verification_token(verification_token).email == email

    @pytest.mark.asyncio
    async def test_result_has_no_password(self, user_service):
        """The returned user should be sanitized."""
        result = await user_service.create_user("new@example.com", "secret123")

        assert type(result.user) is UserPublic
        assert "password" not in result.model_dump()["user"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("password", [None, "", "abc", "12345"])
    async def test_short_password_rejected_before_write(self, user_service, repository, mailer, password):
        """Passwords under 6 characters should fail without touching the store."""
        with pytest.raises(ValidationError) as exc_info:
            await user_service.create_user("new@example.com", password)

        assert exc_info.value.message == "Password must be 6 or more characters."
        assert repository.rows == {}
        assert repository.writes == 0
        mailer.send_verification_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_string_email_rejected(self, user_service):
        with pytest.raises(ValidationError) as exc_info:
            await user_service.create_user(42, "secret123")
        assert exc_info.value.message == "Email must be a string."

    @pytest.mark.asyncio
    async def test_malformed_email_rejected(self, user_service, repository):
        with pytest.raises(ValidationError) as exc_info:
            await user_service.create_user("not-an-email", "secret123")
        assert exc_info.value.message == "Invalid email"
        assert repository.rows == {}

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, user_service, repository):
        """Registering the same email twice (any case) should succeed once."""
        await user_service.create_user("dup@example.com", "secret123")

        with pytest.raises(EmailAlreadyExistsError) as exc_info:
            await user_service.create_user("DUP@example.com", "secret456")

        assert exc_info.value.message == "An account for this email already exists."
        assert len(repository.rows) == 1


class TestLoginWithPassword:
    @pytest.mark.asyncio
    async def test_correct_credentials(self, user_service, test_user, tokens):
        """Should return a token that decodes back to the same user."""
        result = await user_service.login_with_password("alice@example.com", TEST_PASSWORD)

        assert result.user.id == test_user.id
        assert tokens.verify_auth_token(result.token).sub == test_user.id

    @pytest.mark.asyncio
    async def test_email_is_case_insensitive(self, user_service, test_user):
        result = await user_service.login_with_password("ALICE@example.com", TEST_PASSWORD)
        assert result.user.id == test_user.id

    @pytest.mark.asyncio
    async def test_wrong_password_never_succeeds(self, user_service, test_user):
        for attempt in ["wrong-password", TEST_PASSWORD.upper(), TEST_PASSWORD + " "]:
            with pytest.raises(InvalidCredentialsError):
                await user_service.login_with_password("alice@example.com", attempt)

    @pytest.mark.asyncio
    async def test_unknown_email_gets_same_error(self, user_service, test_user):
        """Unknown email and wrong password should be indistinguishable."""
        with pytest.raises(InvalidCredentialsError) as unknown:
            await user_service.login_with_password("nobody@example.com", TEST_PASSWORD)
        with pytest.raises(InvalidCredentialsError) as wrong:
            await user_service.login_with_password("alice@example.com", "wrong-password")

        assert unknown.value.message == wrong.value.message

    @pytest.mark.asyncio
    async def test_missing_password(self, user_service):
        with pytest.raises(ValidationError) as exc_info:
            await user_service.login_with_password("alice@example.com", "")
        assert exc_info.value.message == "Please enter a password"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email", [None, "", "alice", "alice@"])
    async def test_invalid_email(self, user_service, email):
        with pytest.raises(ValidationError) as exc_info:
            await user_service.login_with_password(email, TEST_PASSWORD)
        assert exc_info.value.message == "Invalid email"


class TestLoginWithToken:
    @pytest.mark.asyncio
    async def test_returns_same_token(self, user_service, test_user, auth_token):
        result = await user_service.login_with_token(auth_token)

        assert result.token == auth_token
        assert result.user.id == test_user.id

    @pytest.mark.asyncio
    async def test_deleted_user(self, user_service, repository, test_user, auth_token):
        del repository.rows[test_user.id]

        with pytest.raises(UserNotFoundError):
            await user_service.login_with_token(auth_token)

    @pytest.mark.asyncio
    async def test_garbage_token(self, user_service):
        with pytest.raises(InvalidTokenError):
            await user_service.login_with_token("not-a-token")

    @pytest.mark.asyncio
    async def test_missing_token(self, user_service):
        with pytest.raises(MissingTokenError):
            await user_service.login_with_token(None)

    @pytest.mark.asyncio
    async def test_expired_token(self, user_service, test_user):
        expired = TokenManager(TEST_JWT_SECRET, session_ttl=timedelta(seconds=-60))
        with pytest.raises(ExpiredTokenError):
            await user_service.login_with_token(expired.generate_auth_token(test_user.id))

    @pytest.mark.asyncio
    async def test_reset_token_is_not_a_session(self, user_service, test_user, tokens):
        """A password reset token must never work as a login token."""
        reset_token = tokens.generate_temp_auth_token(test_user.id, test_user.password)

        with pytest.raises(InvalidTokenError):
            await user_service.login_with_token(reset_token)

    @pytest.mark.asyncio
    async def test_get_by_token(self, user_service, test_user, auth_token):
        user = await user_service.get_by_token(auth_token)
        assert user.email == "alice@example.com"


class TestVerifyByToken:
    @pytest.mark.asyncio
    async def test_marks_only_matching_user(self, user_service, repository, unverified_user, tokens):
        """Only the user whose email the token carries should become verified."""
        other = repository.add(email="carol@example.com", verified=False)
        token = tokens.generate_email_verification_token("BOB@example.com")

        user = await user_service.verify_by_token(token)

        assert user.id == unverified_user.id
        assert user.verified is True
        assert repository.find_by_id(unverified_user.id).verified is True
        assert repository.find_by_id(other.id).verified is False

    @pytest.mark.asyncio
    async def test_unknown_email(self, user_service, tokens):
        token = tokens.generate_email_verification_token("ghost@example.com")

        with pytest.raises(UserNotFoundError):
            await user_service.verify_by_token(token)

    @pytest.mark.asyncio
    async def test_session_token_rejected(self, user_service, unverified_user, tokens):
        token = tokens.generate_auth_token(unverified_user.id)

        with pytest.raises(InvalidTokenError):
            await user_service.verify_by_token(token)

    @pytest.mark.asyncio
    async def test_resend_to_unverified(self, user_service, unverified_user, mailer):
        await user_service.send_verification_email_by_id(unverified_user.id)

        mailer.send_verification_email.assert_awaited_once()
        assert mailer.send_verification_email.await_args.args[0] == "bob@example.com"

    @pytest.mark.asyncio
    async def test_resend_to_verified_user_fails(self, user_service, test_user, mailer):
        with pytest.raises(UserNotFoundError):
            await user_service.send_verification_email_by_id(test_user.id)
        mailer.send_verification_email.assert_not_awaited()


class TestPasswordReset:
    @pytest.mark.asyncio
    async def test_request_sends_reset_token(self, user_service, test_user, mailer, tokens):
        result = await user_service.send_password_reset_email("alice@example.com")

        assert result.message == RESET_REQUESTED_MESSAGE
        email, token = mailer.send_password_reset_email.await_args.args
        assert email == "alice@example.com"
        assert tokens.verify_temp_auth_token(token).sub == test_user.id

    @pytest.mark.asyncio
    async def test_request_for_unknown_email_looks_the_same(self, user_service, mailer):
        result = await user_service.send_password_reset_email("ghost@example.com")

        assert result.message == RESET_REQUESTED_MESSAGE
        mailer.send_password_reset_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_complete_reset(self, user_service, test_user, mailer, tokens):
        """After a reset the new password works and the old one does not."""
        token = tokens.generate_temp_auth_token(test_user.id, test_user.password)

        result = await user_service.reset_password(token, "brand-new-pw")

        assert result.message == RESET_COMPLETE_MESSAGE
        mailer.send_password_changed_email.assert_awaited_once_with("alice@example.com")

        login = await user_service.login_with_password("alice@example.com", "brand-new-pw")
        assert login.user.id == test_user.id
        with pytest.raises(InvalidCredentialsError):
            await user_service.login_with_password("alice@example.com", TEST_PASSWORD)

    @pytest.mark.asyncio
    async def test_reset_token_is_single_use(self, user_service, test_user, tokens):
        token = tokens.generate_temp_auth_token(test_user.id, test_user.password)
        await user_service.reset_password(token, "brand-new-pw")

        with pytest.raises(InvalidTokenError):
            await user_service.reset_password(token, "another-pw")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token,password", [(None, "brand-new-pw"), ("tok", None), ("", "")])
    async def test_bad_arguments(self, user_service, repository, token, password):
        with pytest.raises(ValidationError) as exc_info:
            await user_service.reset_password(token, password)

        assert exc_info.value.message == "Bad arguments"
        assert repository.writes == 0

    @pytest.mark.asyncio
    async def test_short_password_rejected_before_token_check(self, user_service, repository):
        with pytest.raises(ValidationError) as exc_info:
            await user_service.reset_password("not-even-a-token", "abc")

        assert exc_info.value.message == "Password must be 6 or more characters."
        assert repository.writes == 0

    @pytest.mark.asyncio
    async def test_session_token_cannot_reset(self, user_service, auth_token):
        with pytest.raises(InvalidTokenError):
            await user_service.reset_password(auth_token, "brand-new-pw")


class TestChangePassword:
    @pytest.mark.asyncio
    async def test_changes_password(self, user_service, test_user, mailer):
        await user_service.change_password(test_user.id, TEST_PASSWORD, "brand-new-pw")

        result = await user_service.login_with_password("alice@example.com", "brand-new-pw")
        assert result.user.id == test_user.id
        mailer.send_password_changed_email.assert_awaited_once_with("alice@example.com")

    @pytest.mark.asyncio
    async def test_wrong_old_password(self, user_service, test_user, mailer):
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await user_service.change_password(test_user.id, "wrong-password", "brand-new-pw")

        assert exc_info.value.message == "Incorrect password"
        mailer.send_password_changed_email.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_arguments(self, user_service, test_user):
        with pytest.raises(ValidationError) as exc_info:
            await user_service.change_password(test_user.id, None, "brand-new-pw")
        assert exc_info.value.message == "Bad arguments."

    @pytest.mark.asyncio
    async def test_short_new_password(self, user_service, test_user):
        with pytest.raises(ValidationError):
            await user_service.change_password(test_user.id, TEST_PASSWORD, "abc")


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_verified_user(self, user_service, test_user):
        user = await user_service.update_profile_by_id(
            test_user.id, {"name": "Alice", "school": "MIT", "graduation_year": 2027}
        )

        assert user.profile.name == "Alice"
        assert user.profile.school == "MIT"
        assert user.status.completed_profile is True
        assert user.last_updated is not None

    @pytest.mark.asyncio
    async def test_unverified_user_matches_nothing(self, user_service, repository, unverified_user):
        with pytest.raises(UserNotFoundError):
            await user_service.update_profile_by_id(unverified_user.id, {"name": "Bob"})

        assert repository.find_by_id(unverified_user.id).profile is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("profile", [
        {},
        {"name": ""},
        {"name": "Alice", "graduation_year": "soon"},
        {"name": "Alice", "favorite_color": "blue"},
        "Alice",
    ])
    async def test_invalid_profile(self, user_service, repository, test_user, profile):
        with pytest.raises(ValidationError) as exc_info:
            await user_service.update_profile_by_id(test_user.id, profile)

        assert exc_info.value.message == "invalid profile"
        assert repository.writes == 0


class TestPushSubmission:
    @pytest.mark.asyncio
    async def test_second_submission_replaces_first(self, user_service, test_user):
        await user_service.push_submission_by_id(
            test_user.id, Submission(code="print(1)", title="First")
        )
        user = await user_service.push_submission_by_id(
            test_user.id, Submission(code="print(2)", title="Second")
        )

        assert user.code == "print(2)"
        assert user.title == "Second"

    @pytest.mark.asyncio
    async def test_unknown_user(self, user_service):
        with pytest.raises(UserNotFoundError):
            await user_service.push_submission_by_id(
                "missing", Submission(code="x", title="y")
            )


class TestListing:
    @pytest.fixture
    def populated(self, repository):
        names = ["Zed", "amy", "Bea", "Cal", "Dee", "Eve", "Fay"]
        for i, name in enumerate(names):
            repository.add(
                email=f"user{i}@example.com",
                profile={"name": name},
                team_code="RED" if i % 2 == 0 else "BLUE",
            )
        return repository

    @pytest.mark.asyncio
    async def test_total_pages(self, user_service, populated):
        page = await user_service.get_page(0, 3)

        assert page.total_pages == math.ceil(7 / 3)
        assert len(page.users) == 3

    @pytest.mark.asyncio
    async def test_pages_are_sorted_slices(self, user_service, populated):
        all_names = [u.profile.name for u in (await user_service.get_all())]

        collected = []
        for p in range(3):
            page = await user_service.get_page(p, 3)
            collected.extend(u.profile.name for u in page.users)

        assert collected == all_names
        assert collected == sorted(collected)

    @pytest.mark.asyncio
    async def test_search_counts_only_matches(self, user_service, populated):
        page = await user_service.get_page(0, 2, "red")

        assert page.total_pages == math.ceil(4 / 2)
        assert all(u.team_code == "RED" for u in page.users)

    @pytest.mark.asyncio
    async def test_search_matches_email_and_name(self, user_service, populated):
        by_email = await user_service.get_page(0, 10, "USER3@")
        by_name = await user_service.get_page(0, 10, "  eve ")

        assert [u.email for u in by_email.users] == ["user3@example.com"]
        assert [u.profile.name for u in by_name.users] == ["Eve"]

    @pytest.mark.asyncio
    async def test_no_matches(self, user_service, populated):
        page = await user_service.get_page(0, 10, "nothing-like-this")

        assert page.users == []
        assert page.total_pages == 0

    @pytest.mark.asyncio
    async def test_page_size_must_be_positive(self, user_service):
        with pytest.raises(ValidationError):
            await user_service.get_page(0, 0)

    @pytest.mark.asyncio
    async def test_get_by_id(self, user_service, test_user):
        user = await user_service.get_by_id(test_user.id)
        assert user.email == test_user.email

    @pytest.mark.asyncio
    async def test_get_by_id_missing(self, user_service):
        with pytest.raises(UserNotFoundError):
            await user_service.get_by_id("missing")


class TestMailFailures:
    """A failed send after a completed write must not turn success into an error."""

    @pytest.fixture
    def smtp_down(self, mailer):
        for send in (
            mailer.send_verification_email,
            mailer.send_password_reset_email,
            mailer.send_password_changed_email,
        ):
            send.side_effect = MailDeliveryError("alice@example.com", "connection refused")
        return mailer

    @pytest.mark.asyncio
    async def test_registration_still_logs_in(self, user_service, repository, tokens, smtp_down):
        result = await user_service.create_user("new@example.com", "secret123")

        assert tokens.verify_auth_token(result.token).sub == result.user.id
        assert len(repository.rows) == 1
        smtp_down.send_verification_email.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reset_still_reports_success(self, user_service, test_user, tokens, smtp_down):
        token = tokens.generate_temp_auth_token(test_user.id, test_user.password)

        result = await user_service.reset_password(token, "brand-new-pw")

        assert result.message == RESET_COMPLETE_MESSAGE
        login = await user_service.login_with_password("alice@example.com", "brand-new-pw")
        assert login.user.id == test_user.id

    @pytest.mark.asyncio
    async def test_change_password_still_succeeds(self, user_service, test_user, smtp_down):
        user = await user_service.change_password(test_user.id, TEST_PASSWORD, "brand-new-pw")

        assert user.id == test_user.id
        smtp_down.send_password_changed_email.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reset_request_does_not_reveal_account(self, user_service, test_user, smtp_down):
        known = await user_service.send_password_reset_email("alice@example.com")
        unknown = await user_service.send_password_reset_email("ghost@example.com")

        assert known == unknown
        smtp_down.send_password_reset_email.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_explicit_resend_reports_failure(self, user_service, unverified_user, smtp_down):
        """Nothing was written, so the caller should learn the email did not go out."""
        with pytest.raises(MailDeliveryError):
            await user_service.send_verification_email_by_id(unverified_user.id)
