from __future__ import annotations
import io
from minio import Minio
from minio.error import S3Error
from memevsmeme.config import settings

def _parse_endpoint(ep: str) -> tuple[str, bool]:
    # Return (host:port, secure)
    secure = ep.startswith("https://")
    host = ep.replace("http://", "").replace("https://", "")
    return host, secure

_client: Minio | None = None
_bucket_ready = False

def _get_client() -> Minio:
    global _client
    if _client is None:
        host, secure = _parse_endpoint(settings.s3_endpoint)
        _client = Minio(host, access_key=settings.s3_access_key, secret_key=settings.s3_secret_key, secure=secure)
    return _client

def _ensure_bucket(client: Minio) -> None:
    global _bucket_ready
    if _bucket_ready:
        return
    try:
        if not client.bucket_exists(settings.s3_bucket_uploads):
            client.make_bucket(settings.s3_bucket_uploads)
    except S3Error as e:
        # another worker may have created it between the two calls
        if e.code not in ("BucketAlreadyOwnedByYou", "BucketAlreadyExists"):
            raise
    _bucket_ready = True

def media_url(key: str) -> str:
    """Public URL for a stored object, served through the API proxy."""
    return f"/api/media/{key}"

def put_bytes(key: str, data: bytes, content_type: str) -> str:
    client = _get_client()
    _ensure_bucket(client)
    client.put_object(
        settings.s3_bucket_uploads, key, io.BytesIO(data), length=len(data), content_type=content_type
    )
    return media_url(key)

def get_bytes(key: str) -> tuple[bytes, str]:
    """
    Retrieve object from storage.
    Returns (data, content_type).
    """
    response = None
    try:
        response = _get_client().get_object(settings.s3_bucket_uploads, key)
        data = response.read()
        content_type = response.headers.get('Content-Type', 'application/octet-stream')
        return data, content_type
    except S3Error as e:
        if e.code in ('NoSuchKey', 'NoSuchBucket'):
            raise FileNotFoundError(f"Object not found: {key}")
        raise
    finally:
        if response is not None:
            response.close()
            response.release_conn()
