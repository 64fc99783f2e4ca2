from werkzeug.datastructures import MultiDict

from common.forms import get_bool, get_str


def test_get_bool_handles_various_types():
    assert get_bool({}, "flag", default=True) is True
    assert get_bool({"flag": "on"}, "flag", default=False) is True
    assert get_bool({"flag": "OFF"}, "flag", default=True) is False
    assert get_bool({"flag": 0}, "flag", default=True) is False


def test_get_bool_reads_query_args():
    assert get_bool(MultiDict({"download": "1"}), "download") is True
    assert get_bool(MultiDict({"download": "0"}), "download") is False
    assert get_bool(MultiDict(), "download") is False


def test_get_str_strips_and_defaults():
    assert get_str({}, "pages", "all") == "all"
    assert get_str({"pages": "  1-3 "}, "pages") == "1-3"
    assert get_str(None, "pages", "all") == "all"
