# ABOUTME: Shared test fixtures for aws-oidc-sts
# ABOUTME: Provides fast provider settings, generated key material and offline boto3 sessions

"""Shared test fixtures."""

import boto3
import pytest

from aws_oidc_sts.config import ProviderSettings
from aws_oidc_sts.keys import KeyMaterialStore

# 2048-bit keys keep the suite fast; the 4096-bit default is covered separately.
TEST_KEY_SIZE = 2048


@pytest.fixture
def settings() -> ProviderSettings:
    """Default provider settings with a smaller key size."""
    return ProviderSettings(key_size=TEST_KEY_SIZE)


@pytest.fixture
def key_dir(tmp_path, settings):
    """A target directory that already holds a generated key pair."""
    KeyMaterialStore(tmp_path, settings).ensure_key_pair()
    return tmp_path


@pytest.fixture(autouse=True)
def _aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep boto3 away from real credentials and profiles."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.setenv("AWS_CONFIG_FILE", "/dev/null")
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", "/dev/null")


@pytest.fixture
def aws_session() -> boto3.Session:
    """A boto3 session with dummy credentials."""
    return boto3.Session(
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        region_name="us-east-1",
    )
