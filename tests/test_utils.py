import re
from datetime import datetime

from supplies import utils


def test_generate_id_shape():
    first = utils.generate_id("row")
    assert re.fullmatch(r"row_\d+_[a-z0-9]{6}", first)
    assert utils.generate_id().startswith("id_")


def test_format_datetime_uses_local_time():
    ms = int(datetime(2024, 3, 5, 7, 9).timestamp() * 1000)
    assert utils.format_datetime(ms) == "05/03/2024 07:09"


def test_now_ms_is_milliseconds():
    before = int(datetime.now().timestamp() * 1000)
    assert abs(utils.now_ms() - before) < 5_000


def test_date_suffix():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", utils.get_date_suffix_for_filename())
