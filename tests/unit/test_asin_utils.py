from ppcrecon.asin_utils import asin_badge, is_child_asin, is_parent_asin
from ppcrecon.standards.schemas import BusinessRecord


def _br(sku, parent=None):
    return BusinessRecord(
        date="2024-01-01", sku=sku, sessions=1, units_ordered=1, sales=1.0,
        conversion_rate_percent=0.0, parent_asin=parent,
    )


RECORDS = [
    _br("PARENT1"),
    _br("CHILD1", parent="parent1 "),
    _br("SELF", parent="self"),
    _br("SOLO"),
]


def test_parent_detection_is_case_insensitive():
    assert is_parent_asin("PARENT1", RECORDS)
    assert is_parent_asin("Parent1", RECORDS)
    assert is_parent_asin("SELF", RECORDS)
    assert not is_parent_asin("CHILD1", RECORDS)
    assert not is_parent_asin("", RECORDS)


def test_child_detection():
    assert is_child_asin("CHILD1", RECORDS)
    assert not is_child_asin("SELF", RECORDS)
    assert not is_child_asin("SOLO", RECORDS)


def test_badges():
    assert asin_badge("PARENT1", RECORDS) == "P"
    assert asin_badge("CHILD1", RECORDS) == "C"
    assert asin_badge("SOLO", RECORDS) is None
    assert asin_badge("UNKNOWN", []) is None
