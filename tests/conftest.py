import pytest
from unittest.mock import MagicMock
from botocore.exceptions import ClientError


def make_client_error(code: str, operation: str = "HeadObject", status: int = 404) -> ClientError:
    return ClientError(
        {"Error": {"Code": code, "Message": f"{code} error"}, "ResponseMetadata": {"HTTPStatusCode": status}},
        operation,
    )


class FakeS3Client:
    """In-memory stand-in for the handful of S3 calls the store makes."""

    def __init__(self, endpoint_url: str = "https://s3.eu-west-1.amazonaws.com"):
        self.objects = {}
        self.acls = {}
        self.content_types = {}
        self.meta = MagicMock()
        self.meta.endpoint_url = endpoint_url

    def put_object(self, Bucket, Key, Body, ACL=None, ContentType=None):
        self.objects[(Bucket, Key)] = Body.read()
        self.acls[(Bucket, Key)] = ACL
        self.content_types[(Bucket, Key)] = ContentType
        return {"ETag": '"etag"'}

    def head_object(self, Bucket, Key):
        if (Bucket, Key) not in self.objects:
            raise make_client_error("404")
        return {"ContentLength": len(self.objects[(Bucket, Key)])}

    def delete_object(self, Bucket, Key):
        self.objects.pop((Bucket, Key), None)
        return {}

    def copy_object(self, Bucket, Key, CopySource):
        source = (CopySource["Bucket"], CopySource["Key"])
        if source not in self.objects:
            raise make_client_error("NoSuchKey", "CopyObject")
        self.objects[(Bucket, Key)] = self.objects[source]
        return {}


@pytest.fixture
def fake_s3():
    return FakeS3Client()


@pytest.fixture
def mock_s3():
    client = MagicMock()
    client.meta.endpoint_url = "https://s3.eu-west-1.amazonaws.com"
    return client


@pytest.fixture
def hello_file(tmp_path):
    path = tmp_path / "hello.txt"
    path.write_text("hi")
    return path


@pytest.fixture
def client_error():
    return make_client_error
