"""Unit tests for the S3 client."""

from pathlib import Path
from unittest.mock import Mock, patch

import boto3
import pytest
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import EndpointConnectionError, ProfileNotFound
from botocore.stub import Stubber

from pys3sync.api import ProbeOutcome, S3Client
from pys3sync.exceptions import (
    FileReadError,
    S3APIError,
    S3CredentialsError,
    S3NetworkError,
    S3NotFoundError,
    S3PermissionError,
    S3UploadError,
)
from pys3sync.utils import DEFAULT_CHUNK_SIZE

BUCKET = "backup"
REGION = "eu-central-1"


@pytest.fixture
def session():
    """A boto3 session with static dummy credentials."""
    return boto3.session.Session(
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        region_name=REGION,
    )


@pytest.fixture
def s3(session):
    return S3Client(bucket=BUCKET, region=REGION, session=session)


@pytest.fixture
def stubber(s3):
    with Stubber(s3._get_client()) as stub:
        yield stub
        stub.assert_no_pending_responses()


class TestS3Client:
    """Tests for S3Client initialization and basic functionality."""

    def test_init(self, s3):
        assert s3.bucket == BUCKET
        assert s3.region == REGION
        assert s3.chunk_size == DEFAULT_CHUNK_SIZE

    def test_client_is_created_once(self, s3):
        assert s3._get_client() is s3._get_client()

    def test_object_url(self, s3):
        assert s3.object_url("/intern/a b.txt") == (
            "https://backup.s3.eu-central-1.amazonaws.com/intern/a%20b.txt"
        )


class TestCheckCredentials:
    """Tests for credential validation."""

    def test_valid_credentials(self, s3):
        s3.check_credentials()

    def test_missing_credentials(self):
        session = Mock()
        session.get_credentials.return_value = None
        client = S3Client(bucket=BUCKET, region=REGION, session=session)

        with pytest.raises(S3CredentialsError, match="Can't find valid AWS credentials"):
            client.check_credentials()

    def test_empty_keys(self):
        session = Mock()
        frozen = Mock(access_key="", secret_key="")
        session.get_credentials.return_value.get_frozen_credentials.return_value = (
            frozen
        )
        client = S3Client(bucket=BUCKET, region=REGION, session=session)

        with pytest.raises(S3CredentialsError):
            client.check_credentials()

    def test_credential_chain_error(self):
        """Errors from the credential chain become S3CredentialsError."""
        session = Mock()
        session.get_credentials.side_effect = ProfileNotFound(profile="nope")
        client = S3Client(bucket=BUCKET, region=REGION, session=session)

        with pytest.raises(S3CredentialsError, match="nope"):
            client.check_credentials()

    def test_unknown_profile_on_session_creation(self):
        with patch(
            "pys3sync.api.boto3.session.Session",
            side_effect=ProfileNotFound(profile="nope"),
        ):
            with pytest.raises(S3CredentialsError, match="nope"):
                S3Client(bucket=BUCKET, region=REGION)


class TestHeadObject:
    """Tests for head_object and probe."""

    def test_head_object_keeps_quotes(self, s3, stubber):
        stubber.add_response(
            "head_object",
            {"ETag": '"5d41402abc4b2a76b9719d911017c592"', "ContentLength": 5},
            {"Bucket": BUCKET, "Key": "/a.txt"},
        )

        remote = s3.head_object("/a.txt")

        assert remote.key == "/a.txt"
        assert remote.etag == '"5d41402abc4b2a76b9719d911017c592"'
        assert remote.size == 5

    def test_head_object_not_found(self, s3, stubber):
        stubber.add_client_error(
            "head_object", service_error_code="404", http_status_code=404
        )

        with pytest.raises(S3NotFoundError):
            s3.head_object("/missing.txt")

    def test_head_object_forbidden(self, s3, stubber):
        stubber.add_client_error(
            "head_object", service_error_code="403", http_status_code=403
        )

        with pytest.raises(S3PermissionError):
            s3.head_object("/secret.txt")

    def test_head_object_other_error(self, s3, stubber):
        stubber.add_client_error(
            "head_object", service_error_code="500", http_status_code=500
        )

        with pytest.raises(S3APIError) as exc_info:
            s3.head_object("/a.txt")
        assert exc_info.value.status_code == 500

    def test_head_object_network_error(self, s3):
        s3._client = Mock()
        s3._client.head_object.side_effect = EndpointConnectionError(
            endpoint_url="https://backup.s3.eu-central-1.amazonaws.com"
        )

        with pytest.raises(S3NetworkError):
            s3.head_object("/a.txt")

    def test_probe_found(self, s3, stubber):
        stubber.add_response(
            "head_object",
            {"ETag": '"abc-2"', "ContentLength": 10},
            {"Bucket": BUCKET, "Key": "/a.txt"},
        )

        result = s3.probe("/a.txt")

        assert result.found
        assert result.outcome == ProbeOutcome.FOUND
        assert result.etag == '"abc-2"'

    def test_probe_not_found(self, s3, stubber, caplog):
        stubber.add_client_error(
            "head_object", service_error_code="404", http_status_code=404
        )

        with caplog.at_level("DEBUG", logger="pys3sync"):
            result = s3.probe("/missing.txt")

        assert not result.found
        assert result.outcome == ProbeOutcome.NOT_FOUND
        assert result.etag is None
        assert "doesn't exist" in caplog.text

    def test_probe_error_is_not_raised(self, s3, stubber, caplog):
        """Probe failures other than 404 are collapsed but logged as warnings."""
        stubber.add_client_error(
            "head_object", service_error_code="403", http_status_code=403
        )

        result = s3.probe("/secret.txt")

        assert not result.found
        assert result.outcome == ProbeOutcome.ERROR
        assert isinstance(result.error, S3PermissionError)
        assert any(r.levelname == "WARNING" for r in caplog.records)


class TestUploadFile:
    """Tests for upload_file."""

    def test_upload_uses_chunk_size(self, s3, tmp_path: Path):
        path = tmp_path / "a.txt"
        path.write_text("hello")
        s3._client = Mock()

        location = s3.upload_file(path, "/intern/a.txt")

        assert location == "https://backup.s3.eu-central-1.amazonaws.com/intern/a.txt"
        args, kwargs = s3._client.upload_fileobj.call_args
        assert args[1:] == (BUCKET, "/intern/a.txt")
        config = kwargs["Config"]
        assert config.multipart_chunksize == DEFAULT_CHUNK_SIZE
        # A file of exactly one part must be a single PUT (plain MD5 ETag)
        assert config.multipart_threshold == DEFAULT_CHUNK_SIZE + 1

    def test_upload_missing_file(self, s3, tmp_path: Path):
        s3._client = Mock()

        with pytest.raises(FileReadError):
            s3.upload_file(tmp_path / "missing.txt", "/missing.txt")

        s3._client.upload_fileobj.assert_not_called()

    def test_upload_failure(self, s3, tmp_path: Path):
        path = tmp_path / "a.txt"
        path.write_text("hello")
        s3._client = Mock()
        s3._client.upload_fileobj.side_effect = S3UploadFailedError("boom")

        with pytest.raises(S3UploadError, match="failed to upload file"):
            s3.upload_file(path, "/a.txt")
