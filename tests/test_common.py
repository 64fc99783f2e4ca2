import threading
import time
from io import BytesIO

import pytest
from werkzeug.datastructures import FileStorage

from common.errors import AppError, InternalAppError, ensure_app_error
from common.io import file_stem, secure_filename, with_extension
from common.tasks import map_ordered
from common.validation import (
    FileLimit,
    ValidationError,
    enforce_limits,
    validate_mime,
)


def _storage(data: bytes, name: str = "upload.pdf") -> FileStorage:
    return FileStorage(stream=BytesIO(data), filename=name)


def test_file_limit_falls_back_on_bad_settings():
    limit = FileLimit.from_settings({"max_files": "x", "max_mb": None}, default_max_files=2, default_max_mb=5)
    assert limit.max_files == 2
    assert limit.max_size == 5 * 1024 * 1024

    limit = FileLimit.from_settings({"max_mb": 0.5}, default_max_files=1, default_max_mb=5)
    assert limit.max_size == 1024 * 1024


def test_enforce_limits_reports_size():
    limit = FileLimit(max_files=1, max_size=4)
    with pytest.raises(ValidationError) as excinfo:
        enforce_limits([_storage(b"%PDF-1.4")], limit)
    assert excinfo.value.details == {"size_bytes": 8, "max_bytes": 4}

    with pytest.raises(ValidationError):
        enforce_limits([], limit)


def test_validate_mime_checks_magic_bytes_and_rewinds():
    upload = _storage(b"%PDF-1.4 body")
    validate_mime([upload], {"application/pdf"})
    assert upload.read() == b"%PDF-1.4 body"

    with pytest.raises(ValidationError):
        validate_mime([_storage(b"\x89PNG\r\n\x1a\n")], {"application/pdf"})


def test_filename_helpers():
    assert secure_filename("../../etc/passwd") == "passwd"
    assert secure_filename("my report (final).pdf") == "my_report__final.pdf"
    assert secure_filename("", fallback="split") == "split"
    assert with_extension("pages", "pdf") == "pages.pdf"
    assert with_extension("pages.PDF", "pdf") == "pages.PDF"
    assert file_stem("C:\\docs\\annual.pdf") == "annual"


def test_map_ordered_preserves_input_order():
    seen = set()

    def slow_identity(value: int) -> int:
        time.sleep(0.01 * (5 - value))
        seen.add(threading.get_ident())
        return value

    assert map_ordered(slow_identity, range(5), workers=3) == [0, 1, 2, 3, 4]
    assert map_ordered(lambda value: value * 2, [3, 1], workers=1) == [6, 2]


def test_ensure_app_error_wraps_plain_exceptions():
    wrapped = ensure_app_error(RuntimeError("boom"), fallback_code="page_extract.internal_error")
    assert isinstance(wrapped, InternalAppError)
    assert wrapped.to_dict()["code"] == "page_extract.internal_error"

    existing = AppError(message="nope", code="custom")
    assert ensure_app_error(existing, fallback_code="unused") is existing
