"""Tests for the public credential provider."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, patch

import pytest

from msk_iam_auth.credentials.base import Credentials, CredentialSource
from msk_iam_auth.credentials.chain import CredentialProviderChain
from msk_iam_auth.credentials.exceptions import (
    CredentialSourceError,
    NoCredentialsAvailable,
    ProfileResolutionFailed,
    ResourceReleaseFailed,
)
from msk_iam_auth.credentials.profile import ProfileSource
from msk_iam_auth.credentials.sts_provider import AssumedRoleSource
from msk_iam_auth.options import DebugSettings
from msk_iam_auth.provider import IAMCredentialProvider

ROLE_ARN = "arn:aws:iam::123:role/x"


class _FakeSource(CredentialSource):
    def __init__(
        self,
        name: str,
        result: Credentials | Exception,
        closeable: bool = False,
        close_error: Exception | None = None,
    ) -> None:
        self._name = name
        self._result = result
        self.closeable = closeable  # type: ignore[misc]
        self._close_error = close_error
        self.resolve_calls = 0
        self.refresh_calls = 0
        self.close_calls = 0

    @property
    def name(self) -> str:
        return self._name

    def resolve(self) -> Credentials:
        self.resolve_calls += 1
        if isinstance(self._result, Exception):
            raise self._result
        return self._result

    def refresh(self) -> None:
        self.refresh_calls += 1

    def close(self) -> None:
        self.close_calls += 1
        if self._close_error is not None:
            raise self._close_error


def _creds(key: str) -> Credentials:
    return Credentials(access_key_id=key, secret_access_key="secret", session_token="token")


class _IsolatedProvider(IAMCredentialProvider):
    """Provider whose default chain is a fake instead of real discovery."""

    fallback: CredentialSource = _FakeSource("default", CredentialSourceError("nothing"))

    def default_provider(self) -> CredentialSource:
        return self.fallback


class TestConstruction:
    def test_empty_options_use_default_chain_only(self) -> None:
        provider = IAMCredentialProvider.from_options({})

        sources = provider.chain.sources
        assert len(sources) == 1
        assert isinstance(sources[0], CredentialProviderChain)
        assert sources[0].name == "DefaultFallbackChain"
        assert provider.should_debug_creds is False
        assert provider.sts_region == "aws-global"

    def test_role_option_scenario(self) -> None:
        provider = IAMCredentialProvider.from_options({"awsRoleArn": ROLE_ARN})

        role, default = provider.chain.sources
        assert isinstance(role, AssumedRoleSource)
        assert (role.role_arn, role.session_name, role.region) == (
            ROLE_ARN,
            "aws-msk-iam-auth",
            "aws-global",
        )
        assert default.name == "DefaultFallbackChain"

    def test_profile_role_then_default(self) -> None:
        provider = IAMCredentialProvider.from_options(
            {"awsProfileName": "dev", "awsRoleArn": ROLE_ARN, "awsDebugCreds": "true"}
        )

        assert [type(source) for source in provider.chain.sources] == [
            ProfileSource,
            AssumedRoleSource,
            CredentialProviderChain,
        ]
        assert provider.should_debug_creds is True

    def test_invalid_settings_surface_on_resolve(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MSK_IAM_ROLE_DURATION_SECONDS", "100")

        class _Provider(_IsolatedProvider):
            pass

        _Provider.fallback = _FakeSource("default", _creds("AKIADEFAULT"))
        provider = _Provider.from_options({"awsRoleArn": ROLE_ARN})

        assert provider.resolve().access_key_id == "AKIADEFAULT"
        assert isinstance(provider.chain.sources[0], AssumedRoleSource)


class TestResolve:
    def test_explicit_source_wins(self) -> None:
        profile = _FakeSource("profile", _creds("AKIAPROFILE"))
        role = _FakeSource("role", _creds("AKIAROLE"))
        fallback = _FakeSource("default", _creds("AKIADEFAULT"))

        class _Provider(_IsolatedProvider):
            pass

        _Provider.fallback = fallback
        provider = _Provider([profile, role])

        assert provider.resolve().access_key_id == "AKIAPROFILE"
        assert role.resolve_calls == 0
        assert fallback.resolve_calls == 0

    def test_falls_through_to_role_then_default(self) -> None:
        profile = _FakeSource("profile", ProfileResolutionFailed("missing"))
        role = _FakeSource("role", CredentialSourceError("denied"))
        fallback = _FakeSource("default", _creds("AKIADEFAULT"))

        class _Provider(_IsolatedProvider):
            pass

        _Provider.fallback = fallback
        provider = _Provider([profile, role])

        assert provider.resolve().access_key_id == "AKIADEFAULT"
        assert profile.resolve_calls == role.resolve_calls == 1

    def test_all_sources_failing_raises(self) -> None:
        provider = _IsolatedProvider([_FakeSource("profile", ProfileResolutionFailed("missing"))])

        with pytest.raises(NoCredentialsAvailable) as exc_info:
            provider.resolve()

        assert [name for name, _ in exc_info.value.failures] == ["profile", "default"]

    def test_empty_options_resolve_from_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIAENV")
        monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "envsecret")

        with IAMCredentialProvider.from_options({}) as provider:
            creds = provider.resolve()

        assert creds.access_key_id == "AKIAENV"

    def test_refresh_is_forwarded(self) -> None:
        explicit = _FakeSource("profile", _creds("AKIAPROFILE"))
        provider = _IsolatedProvider([explicit])

        provider.refresh()

        assert explicit.refresh_calls == 1
        assert explicit.resolve_calls == 0


class TestDebugVerification:
    @pytest.mark.parametrize("flag", ["false", "True", "1"])
    def test_no_identity_call_unless_flag_is_true(
        self, flag: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with patch("msk_iam_auth.debug.create_sts_client") as factory:
            provider = _IsolatedProvider.from_options({"awsDebugCreds": flag})
            provider._chain = CredentialProviderChain(  # noqa: SLF001
                [_FakeSource("static", _creds("AKIASTATIC"))]
            )
            with caplog.at_level(logging.DEBUG, logger="msk_iam_auth.debug"):
                provider.resolve()

        factory.assert_not_called()

    def test_identity_logged_when_enabled(self, caplog: pytest.LogCaptureFixture) -> None:
        client = MagicMock()
        client.get_caller_identity.return_value = {"Arn": "arn:aws:iam::123:user/dev"}
        with patch("msk_iam_auth.debug.create_sts_client", return_value=client) as factory:
            provider = _IsolatedProvider(
                [_FakeSource("static", _creds("AKIASTATIC"))],
                DebugSettings(enabled=True, sts_region="us-east-2"),
            )
            with caplog.at_level(logging.DEBUG, logger="msk_iam_auth.debug"):
                creds = provider.resolve()

        assert creds.access_key_id == "AKIASTATIC"
        assert factory.call_args.args[1] == "us-east-2"
        assert "arn:aws:iam::123:user/dev" in caplog.text

    def test_identity_failure_does_not_affect_result(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        client = MagicMock()
        client.get_caller_identity.side_effect = RuntimeError("sts down")
        with patch("msk_iam_auth.debug.create_sts_client", return_value=client):
            provider = _IsolatedProvider(
                [_FakeSource("static", _creds("AKIASTATIC"))],
                DebugSettings(enabled=True),
            )
            with caplog.at_level(logging.DEBUG, logger="msk_iam_auth.debug"):
                creds = provider.resolve()

        assert creds.access_key_id == "AKIASTATIC"


class TestClose:
    def test_close_twice_is_idempotent(self) -> None:
        holder = _FakeSource("role", _creds("AKIAROLE"), closeable=True)
        provider = _IsolatedProvider([holder])

        provider.close()
        provider.close()

        assert holder.close_calls == 1

    def test_close_isolates_failures(self) -> None:
        broken = _FakeSource(
            "profile",
            _creds("AKIAPROFILE"),
            closeable=True,
            close_error=ResourceReleaseFailed("stuck"),
        )
        healthy = _FakeSource("role", _creds("AKIAROLE"), closeable=True)
        provider = _IsolatedProvider([broken, healthy])

        provider.close()

        assert broken.close_calls == healthy.close_calls == 1

    def test_default_chain_is_not_closed(self) -> None:
        fallback = _FakeSource("default", _creds("AKIADEFAULT"), closeable=True)

        class _Provider(_IsolatedProvider):
            pass

        _Provider.fallback = fallback
        _Provider([]).close()

        assert fallback.close_calls == 0

    def test_context_manager_closes_on_error(self) -> None:
        holder = _FakeSource("role", CredentialSourceError("denied"), closeable=True)

        with pytest.raises(NoCredentialsAvailable):
            with _IsolatedProvider([holder]) as provider:
                provider.resolve()

        assert holder.close_calls == 1

    def test_close_releases_real_sources(self) -> None:
        provider = IAMCredentialProvider.from_options(
            {"awsProfileName": "dev", "awsRoleArn": ROLE_ARN}
        )
        profile, role, _ = provider.chain.sources
        client = MagicMock()
        role._client = client  # noqa: SLF001

        provider.close()
        provider.close()

        client.close.assert_called_once()
        assert profile._session is None  # noqa: SLF001
