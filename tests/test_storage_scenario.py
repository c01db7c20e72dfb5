import pytest
from unittest.mock import patch
from botocore.stub import Stubber, ANY

from core.s3_client import create_s3_client
from core.storage import ObjectStore

BUCKET = "media-assets"
KEY = "docs/hello.txt"


@pytest.fixture
def s3_stub():
    client = create_s3_client("testing", "testing", region="eu-west-1")
    with Stubber(client) as stubber:
        yield client, stubber
        stubber.assert_no_pending_responses()


@patch("core.storage.detect_mime_type", return_value="text/plain")
def test_upload_exists_delete_scenario(mock_mime, s3_stub, hello_file):
    client, stubber = s3_stub
    store = ObjectStore(bucket=BUCKET, client=client)

    stubber.add_response(
        "put_object", {"ETag": '"49f68a5c8493ec2c0bf489821c21fc3b"'},
        {"ACL": "public-read", "Bucket": BUCKET, "Key": KEY, "Body": ANY, "ContentType": "text/plain"},
    )
    stubber.add_response("head_object", {"ContentLength": 2}, {"Bucket": BUCKET, "Key": KEY})
    stubber.add_response("delete_object", {}, {"Bucket": BUCKET, "Key": KEY})
    stubber.add_client_error(
        "head_object", service_error_code="404", service_message="Not Found",
        http_status_code=404, expected_params={"Bucket": BUCKET, "Key": KEY},
    )
    stubber.add_client_error(
        "head_object", service_error_code="404", service_message="Not Found",
        http_status_code=404, expected_params={"Bucket": BUCKET, "Key": KEY},
    )

    url = store.upload_file(str(hello_file), KEY)
    assert url.startswith("https://")
    assert KEY in url
    assert store.does_file_exist(KEY) is True
    assert store.delete_file(KEY) is True
    assert store.does_file_exist(KEY) is False


def test_copy_is_verified_on_destination(s3_stub):
    client, stubber = s3_stub
    store = ObjectStore(bucket=BUCKET, client=client)

    stubber.add_response(
        "copy_object", {"CopyObjectResult": {"ETag": '"abc"'}},
        {"Bucket": BUCKET, "Key": "docs/copy.txt", "CopySource": ANY},
    )
    stubber.add_response("head_object", {"ContentLength": 2}, {"Bucket": BUCKET, "Key": "docs/copy.txt"})

    assert store.copy_file(KEY, "docs/copy.txt") is True


def test_denied_backend_answers_with_sentinels(s3_stub):
    client, stubber = s3_stub
    store = ObjectStore(bucket=BUCKET, client=client)

    stubber.add_client_error("head_object", service_error_code="403", http_status_code=403)
    stubber.add_client_error("delete_object", service_error_code="AccessDenied", http_status_code=403)

    assert store.does_file_exist(KEY) is False
    assert store.delete_file(KEY) is False
