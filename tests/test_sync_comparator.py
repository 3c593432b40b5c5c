"""Tests for the FileComparator class."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from pys3sync.api import ProbeOutcome, ProbeResult, RemoteObject
from pys3sync.exceptions import FileReadError, MalformedETagError, S3PermissionError
from pys3sync.sync.comparator import (
    ChangeStatus,
    FileComparator,
    strip_etag_quotes,
)
from pys3sync.sync.scanner import LocalFile

LOCAL_ETAG = "5d41402abc4b2a76b9719d911017c592"


def _local_file(name: str = "test.txt") -> LocalFile:
    return LocalFile(path=Path(f"/local/{name}"), size=5, remote_key=f"/{name}")


def _found(etag: str, key: str = "/test.txt") -> ProbeResult:
    return ProbeResult(
        key=key,
        outcome=ProbeOutcome.FOUND,
        remote=RemoteObject(key=key, etag=etag, size=5),
    )


class TestStripEtagQuotes:
    """Tests for strip_etag_quotes."""

    def test_strips_surrounding_quotes(self):
        assert strip_etag_quotes(f'"{LOCAL_ETAG}"') == LOCAL_ETAG

    def test_strips_multipart_etag(self):
        assert strip_etag_quotes('"abc-3"') == "abc-3"

    def test_strips_exactly_one_character_each_side(self):
        assert strip_etag_quotes('""abc""') == '"abc"'

    def test_two_characters_give_empty_string(self):
        assert strip_etag_quotes('""') == ""

    @pytest.mark.parametrize("etag", ["", '"'])
    def test_too_short_raises(self, etag):
        with pytest.raises(MalformedETagError):
            strip_etag_quotes(etag)


class TestClassify:
    """Tests for the pure classification rules."""

    def test_no_remote_etag_is_new(self):
        assert FileComparator.classify(LOCAL_ETAG, None) == ChangeStatus.NEW

    def test_equal_etags_are_unchanged(self):
        assert FileComparator.classify(LOCAL_ETAG, LOCAL_ETAG) == ChangeStatus.UNCHANGED

    def test_different_etags_are_changed(self):
        assert FileComparator.classify(LOCAL_ETAG, "other") == ChangeStatus.CHANGED

    def test_comparison_is_case_sensitive(self):
        assert (
            FileComparator.classify(LOCAL_ETAG, LOCAL_ETAG.upper())
            == ChangeStatus.CHANGED
        )


class TestCompare:
    """Tests for FileComparator.compare."""

    def test_not_found_is_new_without_hashing(self):
        """A missing remote object is new and the local ETag is not computed."""
        etag_fn = Mock(return_value=LOCAL_ETAG)
        probe = ProbeResult(key="/test.txt", outcome=ProbeOutcome.NOT_FOUND)

        decision = FileComparator().compare(_local_file(), probe, etag_fn)

        assert decision.status == ChangeStatus.NEW
        assert decision.requires_upload
        etag_fn.assert_not_called()

    def test_probe_error_is_treated_as_new(self):
        """Failed probes are routed exactly like missing objects."""
        etag_fn = Mock(return_value=LOCAL_ETAG)
        probe = ProbeResult(
            key="/test.txt",
            outcome=ProbeOutcome.ERROR,
            error=S3PermissionError("denied"),
        )

        decision = FileComparator().compare(_local_file(), probe, etag_fn)

        assert decision.status == ChangeStatus.NEW
        etag_fn.assert_not_called()

    def test_matching_etag_is_unchanged(self):
        decision = FileComparator().compare(
            _local_file(), _found(f'"{LOCAL_ETAG}"'), lambda f: LOCAL_ETAG
        )

        assert decision.status == ChangeStatus.UNCHANGED
        assert not decision.requires_upload
        assert decision.remote_etag == LOCAL_ETAG
        assert decision.local_etag == LOCAL_ETAG

    def test_different_etag_is_changed(self):
        decision = FileComparator().compare(
            _local_file(),
            _found('"0123456789abcdef0123456789abcdef-2"'),
            lambda f: LOCAL_ETAG,
        )

        assert decision.status == ChangeStatus.CHANGED
        assert decision.requires_upload
        assert decision.remote_etag == "0123456789abcdef0123456789abcdef-2"

    def test_malformed_etag_is_assumed_changed(self):
        etag_fn = Mock(return_value=LOCAL_ETAG)

        decision = FileComparator().compare(_local_file(), _found('"'), etag_fn)

        assert decision.status == ChangeStatus.CHANGED
        assert decision.reason == "Remote ETag is malformed"
        etag_fn.assert_not_called()

    def test_local_read_error_propagates(self):
        """A failed local hash is not silently classified."""
        etag_fn = Mock(side_effect=FileReadError("boom", path="/local/test.txt"))

        with pytest.raises(FileReadError):
            FileComparator().compare(_local_file(), _found(f'"{LOCAL_ETAG}"'), etag_fn)

    def test_etag_fn_receives_local_file(self):
        local_file = _local_file()
        etag_fn = Mock(return_value=LOCAL_ETAG)

        FileComparator().compare(local_file, _found(f'"{LOCAL_ETAG}"'), etag_fn)

        etag_fn.assert_called_once_with(local_file)


class TestForced:
    """Tests for force mode decisions."""

    def test_forced_requires_upload(self):
        decision = FileComparator.forced(_local_file())

        assert decision.status == ChangeStatus.FORCED
        assert decision.requires_upload
        assert decision.local_etag is None
        assert decision.remote_etag is None
