import pytest

from services.photo_query import (
    BBOX_FORMAT_MESSAGE,
    MAX_OFFSET,
    BoundingBox,
    PaginationMeta,
    PhotoFilterSet,
    build_list_response,
    parse_bbox,
    parse_limit,
    parse_offset,
    parse_photo_query,
    parse_photographer_only,
)


# --- bbox ---

def test_bbox_parses_in_order():
    result = parse_bbox("-122.5,37.7,-122.3,37.9")
    assert result.ok
    assert result.value.as_list() == [-122.5, 37.7, -122.3, 37.9]


def test_bbox_whole_world_is_accepted():
    result = parse_bbox("-180,-90,180,90")
    assert result.ok
    assert result.value == BoundingBox(-180, -90, 180, 90)


def test_bbox_tolerates_whitespace():
    assert parse_bbox(" -122.5 , 37.7, -122.3 ,37.9 ").ok


@pytest.mark.parametrize(
    "raw",
    [
        "-122.3,37.7,-122.5,37.9",  # min lon >= max lon
        "-122.5,37.9,-122.3,37.7",  # min lat >= max lat
        "10,10,10,20",              # zero width
        "200,0,210,10",             # longitude out of range
        "0,-91,10,10",              # latitude out of range
        "1,2,3",                    # too few parts
        "1,2,3,4,5",                # too many parts
        "a,b,c,d",
        "1,2,,4",
        "nan,0,10,10",
        "-inf,0,10,10",
        "",
    ],
)
def test_bbox_rejected(raw):
    result = parse_bbox(raw)
    assert not result.ok
    assert result.value is None
    assert result.issues[0].path == "bbox"
    assert result.issues[0].message == BBOX_FORMAT_MESSAGE


def test_bbox_contains_is_inclusive():
    box = BoundingBox(-10, -5, 10, 5)
    assert box.contains(-10, -5)
    assert box.contains(10, 5)
    assert box.contains(0, 0)
    assert not box.contains(10.0001, 0)


# --- limit / offset ---

def test_empty_query_uses_defaults():
    result = parse_photo_query({})
    assert result.ok
    assert result.value.limit == 200
    assert result.value.offset == 0
    assert result.value.bbox is None
    assert result.value.category is None


@pytest.mark.parametrize("raw,expected", [("1", 1), ("200", 200), ("50", 50), (25, 25), ("12abc", 12)])
def test_limit_accepted(raw, expected):
    result = parse_limit(raw)
    assert result.ok
    assert result.value == expected


@pytest.mark.parametrize("raw", ["201", "0", "-1", 500])
def test_limit_out_of_range_rejected(raw):
    result = parse_limit(raw)
    assert not result.ok
    assert result.issues[0].path == "limit"


@pytest.mark.parametrize("raw", ["abc", "", "  ", "x10"])
def test_limit_malformed_falls_back_to_default(raw):
    result = parse_limit(raw)
    assert result.ok
    assert result.value == 200


def test_limit_respects_configured_bounds():
    assert parse_limit(None, default=50, maximum=100).value == 50
    assert not parse_limit("101", default=50, maximum=100).ok


def test_offset_negative_rejected():
    result = parse_offset("-5")
    assert not result.ok
    assert result.issues[0].path == "offset"


@pytest.mark.parametrize("raw", ["99999999999999999999", str(MAX_OFFSET + 1), MAX_OFFSET + 1])
def test_offset_beyond_database_integer_rejected(raw):
    result = parse_offset(raw)
    assert not result.ok
    assert result.issues[0].path == "offset"
    assert result.issues[0].message == "Offset is too large"


def test_offset_at_cap_accepted():
    assert parse_offset(str(MAX_OFFSET)).value == MAX_OFFSET


@pytest.mark.parametrize("raw,expected", [("xyz", 0), (None, 0), ("0", 0), ("400", 400)])
def test_offset_values(raw, expected):
    result = parse_offset(raw)
    assert result.ok
    assert result.value == expected


# --- enums and flags ---

def test_enum_filters_accepted():
    result = parse_photo_query({
        "category": "astrophotography",
        "season": "winter",
        "time_of_day": "blue_hour",
    })
    assert result.ok
    assert result.value.category == "astrophotography"
    assert result.value.season == "winter"
    assert result.value.time_of_day == "blue_hour"


@pytest.mark.parametrize(
    "field,value",
    [("category", "selfie"), ("season", "monsoon"), ("time_of_day", "dusk"), ("category", "Landscape")],
)
def test_enum_filter_rejected(field, value):
    result = parse_photo_query({field: value})
    assert not result.ok
    assert [issue.path for issue in result.issues] == [field]


@pytest.mark.parametrize("raw,expected", [("true", True), ("false", False), (True, True), ("yes", None), ("1", None), (None, None)])
def test_photographer_only_is_lenient(raw, expected):
    assert parse_photographer_only(raw) is expected


def test_unrecognized_photographer_only_does_not_fail_the_query():
    result = parse_photo_query({"photographer_only": "maybe"})
    assert result.ok
    assert result.value.photographer_only is None


def test_all_issues_are_collected():
    result = parse_photo_query({
        "bbox": "1,2,3",
        "category": "selfie",
        "limit": "999",
        "offset": "-1",
    })
    assert not result.ok
    assert {issue.path for issue in result.issues} == {"bbox", "category", "limit", "offset"}


# --- pagination ---

@pytest.mark.parametrize(
    "total,limit,offset,has_more",
    [
        (250, 50, 200, False),
        (250, 50, 100, True),
        (0, 200, 0, False),
        (200, 200, 0, False),
        (201, 200, 0, True),
    ],
)
def test_has_more(total, limit, offset, has_more):
    assert PaginationMeta(total=total, limit=limit, offset=offset).has_more is has_more


def test_list_response_shape():
    filters = PhotoFilterSet(limit=2, offset=0)
    body = build_list_response([{"id": "a"}, {"id": "b"}], total=3, filters=filters)

    assert set(body) == {"data", "meta"}
    assert body["meta"] == {"total": 3, "limit": 2, "offset": 0, "has_more": True}
    assert [item["id"] for item in body["data"]] == ["a", "b"]
