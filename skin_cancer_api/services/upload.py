from dataclasses import dataclass


class UploadValidationError(Exception):
    message = "Invalid upload"
    status_code = 400


class NoFileUploadedError(UploadValidationError):
    message = "No file uploaded"


class UnsupportedMediaTypeError(UploadValidationError):
    message = "Only image files are allowed"


class PayloadTooLargeError(UploadValidationError):
    status_code = 413

    def __init__(self, max_bytes: int):
        super().__init__(max_bytes)
        self.max_bytes = max_bytes
        self.message = (
            f"Payload content length greater than maximum allowed: {max_bytes}"
        )


@dataclass(frozen=True)
class ValidatedUpload:
    data: bytes
    filename: str
    content_type: str


class UploadValidator:
    """
    Проверка загруженного файла до любых внешних вызовов:
    наличие файла, MIME тип image/*, размер не больше max_bytes.
    Проверки вызываются по порядку, каждая один раз.
    """

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes

    def check_present(self, filename: str | None) -> None:
        if not filename:
            raise NoFileUploadedError

    def check_content_type(self, content_type: str | None) -> None:
        if not content_type or not content_type.startswith("image/"):
            raise UnsupportedMediaTypeError

    def check_size(self, size: int | None) -> None:
        if size is not None and size > self.max_bytes:
            raise PayloadTooLargeError(self.max_bytes)


def make_upload_validator(max_bytes: int) -> UploadValidator:
    return UploadValidator(max_bytes=max_bytes)
