import pytest

from skin_cancer_api.services.upload import (
    NoFileUploadedError,
    PayloadTooLargeError,
    UnsupportedMediaTypeError,
    make_upload_validator,
)

MAX_BYTES = 1_000_000


@pytest.fixture
def validator():
    return make_upload_validator(MAX_BYTES)


def test_check_present_accepts_filename(validator):
    validator.check_present("skin.png")


@pytest.mark.parametrize("filename", [None, ""])
def test_check_present_no_file(validator, filename):
    with pytest.raises(NoFileUploadedError) as exc:
        validator.check_present(filename)
    assert exc.value.status_code == 400
    assert exc.value.message == "No file uploaded"


@pytest.mark.parametrize("content_type", ["image/png", "image/jpeg", "image/webp"])
def test_check_content_type_accepts_images(validator, content_type):
    validator.check_content_type(content_type)


@pytest.mark.parametrize(
    "content_type", ["text/plain", "application/pdf", "application/octet-stream", None, ""]
)
def test_check_content_type_rejects_non_image(validator, content_type):
    with pytest.raises(UnsupportedMediaTypeError) as exc:
        validator.check_content_type(content_type)
    assert exc.value.status_code == 400
    assert exc.value.message == "Only image files are allowed"


def test_check_size_limit_is_inclusive(validator):
    validator.check_size(MAX_BYTES)


def test_check_size_rejects_too_large(validator):
    with pytest.raises(PayloadTooLargeError) as exc:
        validator.check_size(MAX_BYTES + 1)
    assert exc.value.status_code == 413
    assert exc.value.message == (
        "Payload content length greater than maximum allowed: 1000000"
    )


def test_check_size_unknown_size_passes(validator):
    validator.check_size(None)


def test_check_size_uses_configured_limit():
    validator = make_upload_validator(10)
    with pytest.raises(PayloadTooLargeError) as exc:
        validator.check_size(11)
    assert exc.value.message.endswith(": 10")
