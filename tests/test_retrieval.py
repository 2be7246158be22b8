"""Tests for input byte sources."""

import io
from pathlib import Path

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from mousetraj.errors import AccessDenied, NetworkError, NotFound
from mousetraj.retrieval import ChainedSource, LocalDirectorySource, S3Source


class FakeS3Client:
    """Minimal stand-in for a boto3 S3 client."""

    def __init__(
        self,
        objects: dict[tuple[str, str], bytes] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.objects = objects or {}
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def get_object(self, Bucket: str, Key: str) -> dict:  # noqa: N803
        self.calls.append((Bucket, Key))
        if self.error is not None:
            raise self.error
        if (Bucket, Key) not in self.objects:
            raise _client_error("NoSuchKey")
        return {"Body": io.BytesIO(self.objects[(Bucket, Key)])}


def _client_error(code: str) -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": code}}, "GetObject"
    )


class TestLocalDirectorySource:
    """Tests for LocalDirectorySource."""

    def test_reads_key_csv(self, tmp_path: Path) -> None:
        (tmp_path / "walker.csv").write_bytes(b"t,x,y\n0,1,2\n")
        source = LocalDirectorySource(tmp_path)
        assert source.fetch("walker") == b"t,x,y\n0,1,2\n"

    def test_direct_path(self, tmp_path: Path) -> None:
        path = tmp_path / "session.csv"
        path.write_bytes(b"0,1,2\n")
        source = LocalDirectorySource(tmp_path / "elsewhere")
        assert source.fetch(str(path)) == b"0,1,2\n"

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(NotFound, match="nope.csv"):
            LocalDirectorySource(tmp_path).fetch("nope")


class TestS3Source:
    """Tests for S3Source with a fake client."""

    def test_fetch(self) -> None:
        client = FakeS3Client({("bucket", "statistics/walker.csv"): b"0,1,2\n"})
        source = S3Source("bucket", "statistics/{key}.csv", client=client)
        assert source.fetch("walker") == b"0,1,2\n"
        assert client.calls == [("bucket", "statistics/walker.csv")]

    def test_object_key_template(self) -> None:
        source = S3Source("b", "stats/{key}_1000.csv", client=FakeS3Client())
        assert source.object_key("walker") == "stats/walker_1000.csv"

    def test_not_found(self) -> None:
        source = S3Source("bucket", client=FakeS3Client())
        with pytest.raises(NotFound, match="s3://bucket/walker.csv"):
            source.fetch("walker")

    @pytest.mark.parametrize("code", ["AccessDenied", "403"])
    def test_access_denied(self, code: str) -> None:
        source = S3Source("bucket", client=FakeS3Client(error=_client_error(code)))
        with pytest.raises(AccessDenied):
            source.fetch("walker")

    def test_other_client_error(self) -> None:
        client = FakeS3Client(error=_client_error("SlowDown"))
        with pytest.raises(NetworkError):
            S3Source("bucket", client=client).fetch("walker")

    def test_connection_error(self) -> None:
        error = EndpointConnectionError(endpoint_url="https://s3.example")
        client = FakeS3Client(error=error)
        with pytest.raises(NetworkError):
            S3Source("bucket", client=client).fetch("walker")


class TestChainedSource:
    """Tests for ChainedSource."""

    def test_falls_back_on_not_found(self, tmp_path: Path) -> None:
        client = FakeS3Client({("bucket", "walker.csv"): b"remote"})
        source = ChainedSource(
            [LocalDirectorySource(tmp_path), S3Source("bucket", client=client)]
        )
        assert source.fetch("walker") == b"remote"

    def test_prefers_first_source(self, tmp_path: Path) -> None:
        (tmp_path / "walker.csv").write_bytes(b"local")
        client = FakeS3Client({("bucket", "walker.csv"): b"remote"})
        source = ChainedSource(
            [LocalDirectorySource(tmp_path), S3Source("bucket", client=client)]
        )
        assert source.fetch("walker") == b"local"
        assert client.calls == []

    def test_other_errors_stop_the_chain(self, tmp_path: Path) -> None:
        denied = S3Source("a", client=FakeS3Client(error=_client_error("403")))
        fallback = FakeS3Client({("b", "walker.csv"): b"data"})
        source = ChainedSource([denied, S3Source("b", client=fallback)])
        with pytest.raises(AccessDenied):
            source.fetch("walker")
        assert fallback.calls == []

    def test_all_missing(self, tmp_path: Path) -> None:
        source = ChainedSource(
            [LocalDirectorySource(tmp_path), S3Source("b", client=FakeS3Client())]
        )
        with pytest.raises(NotFound, match="walker"):
            source.fetch("walker")

    def test_requires_a_source(self) -> None:
        with pytest.raises(ValueError):
            ChainedSource([])
