"""Tests for the centralized exception hierarchy."""

import pytest

from fabenroll.exceptions import (
    CAConnectionError,
    CAError,
    CAResponseError,
    EnrollmentRejectedError,
    FabEnrollError,
    IdentityNotFoundError,
    ProfileError,
    TrustRootError,
    WalletError,
)


class TestExceptionHierarchy:
    """Verify the exception class hierarchy is correct."""

    def test_base_exception_exists(self):
        assert issubclass(FabEnrollError, Exception)

    @pytest.mark.parametrize(
        "exc_cls",
        [ProfileError, TrustRootError, CAError, WalletError],
    )
    def test_direct_subclasses_of_base(self, exc_cls):
        assert issubclass(exc_cls, FabEnrollError)
        assert exc_cls.__bases__ == (FabEnrollError,)

    @pytest.mark.parametrize(
        "exc_cls",
        [CAConnectionError, EnrollmentRejectedError, CAResponseError],
    )
    def test_ca_subclasses(self, exc_cls):
        assert exc_cls.__bases__ == (CAError,)
        assert issubclass(exc_cls, FabEnrollError)

    def test_identity_not_found_is_wallet_error(self):
        assert IdentityNotFoundError.__bases__ == (WalletError,)


class TestExceptionMessages:
    def test_message_propagation(self):
        err = EnrollmentRejectedError("Authentication failure")
        assert str(err) == "Authentication failure"

    def test_catch_by_base_class(self):
        with pytest.raises(FabEnrollError):
            raise TrustRootError("missing ca.crt")

    def test_does_not_catch_sibling(self):
        with pytest.raises(ProfileError):
            try:
                raise ProfileError("bad profile")
            except CAError:
                pytest.fail("CAError should not catch ProfileError")

    def test_top_level_import(self):
        from fabenroll import FabEnrollError as TopLevelError

        assert TopLevelError is FabEnrollError
