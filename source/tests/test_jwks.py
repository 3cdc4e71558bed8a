# ABOUTME: Tests for JWKS construction and key ID derivation
# ABOUTME: Verifies deterministic kids, the published JSON shape and round-trip verification

import errno
import hashlib
import json
import os
import stat
import subprocess
import sys

import jwt
import pytest
from cryptography.hazmat.primitives import serialization

from aws_oidc_sts.exceptions import JWKSError, KeyFileReadError, PemDecodeError
from aws_oidc_sts.jwks import build_jwks, key_id_from_public_key
from aws_oidc_sts.keys import KeyMaterialStore, load_public_key
from aws_oidc_sts.tokens import sign_token


def _der(public_key) -> bytes:
    return public_key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


class TestKeyId:
    """Test cases for content-addressed key IDs"""

    def test_kid_is_sha256_of_der(self, key_dir, settings):
        """kid is the hex SHA-256 of the DER public key"""
        public_key = load_public_key(key_dir, settings)

        assert key_id_from_public_key(public_key) == hashlib.sha256(_der(public_key)).hexdigest()

    def test_kid_is_deterministic(self, key_dir, settings):
        """Repeated computations agree"""
        public_key = load_public_key(key_dir, settings)

        kids = {key_id_from_public_key(load_public_key(key_dir, settings)) for _ in range(3)}

        assert kids == {key_id_from_public_key(public_key)}
        assert len(kids.pop()) == 64

    def test_kid_is_stable_across_processes(self, key_dir, settings):
        """A separate interpreter derives the same kid from the same file"""
        script = (
            "import sys\n"
            "from aws_oidc_sts.jwks import key_id_from_public_key\n"
            "from aws_oidc_sts.keys import load_public_key\n"
            "print(key_id_from_public_key(load_public_key(sys.argv[1])))\n"
        )
        output = subprocess.run(
            [sys.executable, "-c", script, str(key_dir)],
            capture_output=True,
            text=True,
            check=True,
            env={**os.environ, "PYTHONPATH": os.pathsep.join(sys.path)},
        ).stdout.strip()

        assert output == key_id_from_public_key(load_public_key(key_dir, settings))

    def test_different_keys_get_different_kids(self, tmp_path, settings):
        """Two key pairs never share a kid"""
        first, second = tmp_path / "a", tmp_path / "b"
        KeyMaterialStore(first, settings).ensure_key_pair()
        KeyMaterialStore(second, settings).ensure_key_pair()

        assert key_id_from_public_key(load_public_key(first, settings)) != key_id_from_public_key(
            load_public_key(second, settings)
        )


class TestBuildJWKS:
    """Test cases for writing the JWKS file"""

    def test_writes_single_public_key(self, key_dir, settings):
        """The file holds exactly one public JWK with the expected members"""
        signing_key = build_jwks(key_dir, settings)

        data = json.loads(settings.jwks_path(key_dir).read_text())

        assert list(data) == ["keys"]
        assert len(data["keys"]) == 1
        entry = data["keys"][0]
        assert set(entry) == {"kty", "n", "e", "kid", "use", "alg"}
        assert entry["kty"] == "RSA"
        assert entry["use"] == "sig"
        assert entry["alg"] == "RS256"
        assert entry["e"] == "AQAB"
        assert entry["kid"] == signing_key.kid

    def test_no_private_material_in_file(self, key_dir, settings):
        """Private exponent and primes never reach the JWKS"""
        build_jwks(key_dir, settings)

        entry = json.loads(settings.jwks_path(key_dir).read_text())["keys"][0]

        for private_member in ("d", "p", "q", "dp", "dq", "qi"):
            assert private_member not in entry

    def test_file_is_pretty_printed(self, key_dir, settings):
        """JSON is indented for humans"""
        build_jwks(key_dir, settings)

        text = settings.jwks_path(key_dir).read_text()

        assert text.startswith('{\n  "keys": [')

    def test_overwrites_previous_file(self, key_dir, settings):
        """A stale JWKS is replaced"""
        settings.jwks_path(key_dir).write_text('{"keys": []}')

        build_jwks(key_dir, settings)

        assert len(json.loads(settings.jwks_path(key_dir).read_text())["keys"]) == 1

    def test_file_permissions(self, key_dir, settings):
        """The JWKS is world-readable and no staging file remains"""
        build_jwks(key_dir, settings)

        assert stat.S_IMODE(os.stat(settings.jwks_path(key_dir)).st_mode) == 0o644
        assert sorted(p.name for p in settings.key_dir(key_dir).iterdir()) == [
            "jwks.json",
            "private-key.pem",
            "public-key.pem",
        ]

    def test_failed_write_keeps_previous_file(self, key_dir, settings, monkeypatch):
        """A write that dies midway leaves the old JWKS intact"""
        build_jwks(key_dir, settings)
        before = settings.jwks_path(key_dir).read_bytes()
        real_fdopen = os.fdopen

        class FullDisk:
            def __init__(self, fd, mode):
                self._file = real_fdopen(fd, mode)

            def __enter__(self):
                return self

            def __exit__(self, *exc_info):
                self._file.close()

            def fileno(self):
                return self._file.fileno()

            def write(self, data):
                self._file.write(data[:10])
                raise OSError(errno.ENOSPC, "No space left on device")

        monkeypatch.setattr("aws_oidc_sts.jwks.os.fdopen", FullDisk)

        with pytest.raises(JWKSError, match="No space left"):
            build_jwks(key_dir, settings)

        assert settings.jwks_path(key_dir).read_bytes() == before
        assert sorted(p.name for p in settings.key_dir(key_dir).iterdir()) == [
            "jwks.json",
            "private-key.pem",
            "public-key.pem",
        ]

    def test_failed_rename_keeps_previous_file(self, key_dir, settings, monkeypatch):
        """The staged file is removed when it cannot be moved into place"""
        settings.jwks_path(key_dir).write_text('{"keys": []}')

        def failing_replace(src, dst):
            raise OSError("read-only file system")

        monkeypatch.setattr("aws_oidc_sts.jwks.os.replace", failing_replace)

        with pytest.raises(JWKSError, match="Failed to write JWK Set"):
            build_jwks(key_dir, settings)

        assert settings.jwks_path(key_dir).read_text() == '{"keys": []}'
        assert not [p for p in settings.key_dir(key_dir).iterdir() if p.name.endswith(".tmp")]

    def test_rebuild_is_identical(self, key_dir, settings):
        """Building twice from the same pair yields the same file"""
        build_jwks(key_dir, settings)
        first = settings.jwks_path(key_dir).read_text()
        build_jwks(key_dir, settings)

        assert settings.jwks_path(key_dir).read_text() == first

    def test_missing_keys(self, tmp_path, settings):
        """Building without a key pair fails and writes nothing"""
        (tmp_path / "tls").mkdir()

        with pytest.raises(JWKSError) as exc_info:
            build_jwks(tmp_path, settings)

        assert isinstance(exc_info.value.__cause__, KeyFileReadError)
        assert not settings.jwks_path(tmp_path).exists()

    def test_malformed_public_key(self, key_dir, settings):
        """A broken public key file fails the build with the parse error chained"""
        settings.public_key_path(key_dir).write_text("garbage")

        with pytest.raises(JWKSError, match="public key") as exc_info:
            build_jwks(key_dir, settings)

        assert isinstance(exc_info.value.__cause__, PemDecodeError)
        assert not settings.jwks_path(key_dir).exists()

    def test_mismatched_pair(self, tmp_path, settings):
        """A public key from another pair is rejected"""
        first, second = tmp_path / "a", tmp_path / "b"
        KeyMaterialStore(first, settings).ensure_key_pair()
        KeyMaterialStore(second, settings).ensure_key_pair()
        settings.public_key_path(first).write_bytes(settings.public_key_path(second).read_bytes())

        with pytest.raises(JWKSError, match="does not match"):
            build_jwks(first, settings)


class TestJWKSRoundTrip:
    """Test cases for verifying tokens against the published JWKS"""

    def test_published_key_verifies_signed_token(self, key_dir, settings):
        """A token signed with the handle verifies with the key from jwks.json"""
        signing_key = build_jwks(key_dir, settings)
        token = sign_token(signing_key, settings)

        jwk_set = jwt.PyJWKSet.from_dict(json.loads(settings.jwks_path(key_dir).read_text()))
        header = jwt.get_unverified_header(token)
        published = jwk_set[header["kid"]]

        claims = jwt.decode(
            token,
            published.key,
            algorithms=["RS256"],
            audience=settings.audience,
            issuer=settings.issuer,
        )

        assert claims["sub"] == settings.subject

    def test_published_key_rejects_foreign_token(self, tmp_path, key_dir, settings):
        """A token from another key pair does not verify"""
        build_jwks(key_dir, settings)
        other_dir = tmp_path / "other"
        KeyMaterialStore(other_dir, settings).ensure_key_pair()
        token = sign_token(build_jwks(other_dir, settings), settings)

        published = jwt.PyJWKSet.from_dict(json.loads(settings.jwks_path(key_dir).read_text())).keys[0]

        with pytest.raises(jwt.InvalidSignatureError):
            jwt.decode(token, published.key, algorithms=["RS256"], audience=settings.audience)
