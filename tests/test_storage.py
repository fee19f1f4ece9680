import io

import boto3
import pytest
from botocore.config import Config
from botocore.exceptions import ClientError
from botocore.response import StreamingBody
from botocore.stub import Stubber

from app.core.exceptions import NotFoundError
from app.services.storage import LocalStorage, S3Storage, StorageError, build_object_key

BUCKET = "resumes"
KEY = "user-1/1700000000000.pdf"


def _s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
        config=Config(signature_version="s3v4"),
    )


@pytest.fixture
def s3():
    client = _s3_client()
    with Stubber(client) as stubber:
        yield S3Storage(bucket=BUCKET, client=client), stubber
        stubber.assert_no_pending_responses()


def test_build_object_key():
    key = build_object_key("user-1", "My CV.PDF")
    owner, name = key.split("/")
    assert owner == "user-1"
    assert name.endswith(".pdf")
    assert name[:-4].isdigit()


def test_local_round_trip_and_delete(tmp_path):
    storage = LocalStorage(str(tmp_path))
    storage.upload("user-1/1.txt", b"resume")
    assert storage.download("user-1/1.txt") == b"resume"

    storage.delete("user-1/1.txt")
    with pytest.raises(NotFoundError):
        storage.download("user-1/1.txt")


@pytest.mark.parametrize("key", [
    "attacker/../victim/1.txt",
    "attacker/..\\victim/1.txt",
    "../outside.txt",
])
def test_local_rejects_parent_segments(tmp_path, key):
    storage = LocalStorage(str(tmp_path / "storage"))
    storage.upload("victim/1.txt", b"SECRET RESUME")
    with pytest.raises(NotFoundError):
        storage.download(key)


def test_s3_upload_sends_content_type(s3):
    storage, stubber = s3
    stubber.add_response(
        "put_object",
        {},
        {"Bucket": BUCKET, "Key": KEY, "Body": b"%PDF-1.4", "ContentType": "application/pdf"},
    )
    assert storage.upload(KEY, b"%PDF-1.4", "application/pdf") == KEY


def test_s3_upload_failure_is_storage_error(s3):
    storage, stubber = s3
    stubber.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)
    with pytest.raises(StorageError) as exc:
        storage.upload(KEY, b"%PDF-1.4", "application/pdf")
    assert exc.value.status_code == 502


def test_s3_download(s3):
    storage, stubber = s3
    data = b"%PDF-1.4 resume"
    stubber.add_response(
        "get_object",
        {"Body": StreamingBody(io.BytesIO(data), len(data))},
        {"Bucket": BUCKET, "Key": KEY},
    )
    assert storage.download(KEY) == data


def test_s3_missing_key_is_not_found(s3):
    storage, stubber = s3
    stubber.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
    with pytest.raises(NotFoundError):
        storage.download(KEY)


def test_s3_download_failure_is_storage_error(s3):
    storage, stubber = s3
    stubber.add_client_error("get_object", service_error_code="InternalError", http_status_code=500)
    with pytest.raises(StorageError):
        storage.download(KEY)


def test_s3_delete_failure_is_storage_error(s3):
    storage, stubber = s3
    stubber.add_client_error("delete_object", service_error_code="AccessDenied", http_status_code=403)
    with pytest.raises(StorageError):
        storage.delete(KEY)


def test_s3_signed_url_carries_expiry():
    storage = S3Storage(bucket=BUCKET, client=_s3_client())
    url = storage.signed_url(KEY, 300)
    assert f"/{KEY}" in url
    assert "X-Amz-Expires=300" in url


class FailingPresignClient:
    def generate_presigned_url(self, *args, **kwargs):
        raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "GetObject")


def test_s3_signed_url_failure_is_storage_error():
    storage = S3Storage(bucket=BUCKET, client=FailingPresignClient())
    with pytest.raises(StorageError):
        storage.signed_url(KEY, 300)
