from unittest.mock import MagicMock

import pytest

from fridgechef.storage.s3_compat import S3CompatStore


@pytest.fixture
def s3():
    return MagicMock()


@pytest.fixture
def store(s3):
    return S3CompatStore(bucket="fridgechef", public_base_url="https://cdn.test/fridgechef/", client=s3)


def test_put_bytes_uploads_with_content_type(store, s3):
    result = store.put_bytes(key="uploads/u1/a.png", content_type="image/png", data=b"png")

    assert result.key == "uploads/u1/a.png"
    assert result.public_url == "https://cdn.test/fridgechef/uploads/u1/a.png"

    fileobj, bucket, key = s3.upload_fileobj.call_args.args
    assert fileobj.read() == b"png"
    assert (bucket, key) == ("fridgechef", "uploads/u1/a.png")
    assert s3.upload_fileobj.call_args.kwargs["ExtraArgs"] == {"ContentType": "image/png"}


@pytest.mark.parametrize("key", ["", "/abs.png", "uploads/../secrets.png"])
def test_put_bytes_rejects_unsafe_keys(store, s3, key):
    with pytest.raises(ValueError):
        store.put_bytes(key=key, content_type="image/png", data=b"x")
    s3.upload_fileobj.assert_not_called()


def test_key_for_url_only_maps_own_bucket(store):
    assert store.key_for_url("https://cdn.test/fridgechef/dishes/d.png") == "dishes/d.png"
    assert store.key_for_url("https://images.provider.test/dishes/d.png") is None
    assert store.key_for_url("https://cdn.test/fridgechef/") is None
    assert store.key_for_url(None) is None


def test_delete_and_healthcheck(store, s3):
    store.delete("dishes/d.png")
    s3.delete_object.assert_called_once_with(Bucket="fridgechef", Key="dishes/d.png")

    assert store.healthcheck() is True
    s3.head_bucket.assert_called_once_with(Bucket="fridgechef")


def test_get_store_reuses_one_client(monkeypatch):
    from fridgechef.storage import s3_compat

    factory = MagicMock()
    monkeypatch.setattr(s3_compat.boto3, "client", factory)
    s3_compat.get_store.cache_clear()
    try:
        assert s3_compat.get_store() is s3_compat.get_store()
        factory.assert_called_once()
    finally:
        s3_compat.get_store.cache_clear()
