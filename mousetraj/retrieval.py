"""Byte sources for the input CSV: local directory and S3."""

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from difflogtest import get_logger

from mousetraj.errors import AccessDenied, NetworkError, NotFound

logger = get_logger()

_NOT_FOUND_CODES = {"NoSuchKey", "NoSuchBucket", "404", "NotFound"}
_DENIED_CODES = {"AccessDenied", "403", "Forbidden", "AllAccessDisabled"}


class ByteSource(Protocol):
    """Anything that resolves a key to the full CSV payload."""

    def fetch(self, key: str) -> bytes:
        """Return the raw bytes for ``key`` or raise a RetrievalError."""
        ...


class LocalDirectorySource:
    """Reads ``<input_dir>/<key>.csv`` from the local filesystem."""

    def __init__(self, input_dir: str | Path) -> None:
        self.input_dir = Path(input_dir)

    def resolve(self, key: str) -> Path:
        candidate = Path(key)
        if candidate.suffix == ".csv" and candidate.is_file():
            return candidate
        return self.input_dir / f"{key}.csv"

    def fetch(self, key: str) -> bytes:
        path = self.resolve(key)
        if not path.is_file():
            msg = f"{path} does not exist"
            raise NotFound(msg)
        logger.info(f"Read from {path}")
        try:
            return path.read_bytes()
        except PermissionError as exc:
            raise AccessDenied(f"{path}: {exc}") from exc
        except OSError as exc:
            raise NetworkError(f"{path}: {exc}") from exc


class S3Source:
    """Downloads objects from an S3 bucket.

    The object key is built from ``key_template`` with ``{key}``
    replaced by the requested key, so short names like ``walker`` can
    map onto a bucket layout such as ``statistics/{key}.csv``.
    """

    def __init__(
        self,
        bucket: str,
        key_template: str = "{key}.csv",
        client: Any = None,
        region: str | None = None,
    ) -> None:
        self.bucket = bucket
        self.key_template = key_template
        self._client = client
        self.region = region

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.region)
        return self._client

    def object_key(self, key: str) -> str:
        return self.key_template.format(key=key)

    def fetch(self, key: str) -> bytes:
        object_key = self.object_key(key)
        location = f"s3://{self.bucket}/{object_key}"
        logger.info(f"Download from {location}")
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=object_key)
            return response["Body"].read()
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                raise NotFound(f"{location} not found") from exc
            if code in _DENIED_CODES:
                raise AccessDenied(f"access to {location} denied") from exc
            raise NetworkError(f"{location}: {exc}") from exc
        except BotoCoreError as exc:
            raise NetworkError(f"{location}: {exc}") from exc


class ChainedSource:
    """Tries sources in order, falling through only on NotFound."""

    def __init__(self, sources: Sequence[ByteSource]) -> None:
        if not sources:
            msg = "ChainedSource needs at least one source"
            raise ValueError(msg)
        self.sources = list(sources)

    def fetch(self, key: str) -> bytes:
        misses: list[str] = []
        for source in self.sources:
            try:
                return source.fetch(key)
            except NotFound as exc:
                misses.append(str(exc))
        raise NotFound(f"{key!r} not found: " + "; ".join(misses))
