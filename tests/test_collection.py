from __future__ import annotations

import gc
import json
import weakref

import pytest

from urlmetrics_core import (
    MAX_VIEWPORT_WIDTH,
    InvalidArgumentError,
    URLMetricGroupCollection,
)

from tests.helpers import NOW, build_element, build_url_metric, fixed_clock

HERO = "/HTML/BODY/DIV/IMG"
HEADING = "/HTML/BODY/H1"


def _collection(url_metrics=(), breakpoints=(480, 600, 782), sample_size=3, freshness_ttl=86400, **kwargs):
    kwargs.setdefault("clock", fixed_clock())
    return URLMetricGroupCollection(url_metrics, breakpoints, sample_size, freshness_ttl, **kwargs)


@pytest.mark.parametrize(
    "breakpoints",
    [(), (1,), (480,), (480, 600, 782), (1, 2, 3), (MAX_VIEWPORT_WIDTH - 1,)],
)
def test_groups_partition_every_viewport_width(breakpoints) -> None:
    collection = _collection(breakpoints=breakpoints)
    groups = list(collection)

    assert len(groups) == len(breakpoints) + 1
    assert groups[0].minimum_viewport_width == 0
    assert groups[-1].maximum_viewport_width == MAX_VIEWPORT_WIDTH
    for previous, current in zip(groups, groups[1:]):
        assert current.minimum_viewport_width == previous.maximum_viewport_width + 1
    assert [group.maximum_viewport_width for group in groups[:-1]] == list(breakpoints)


def test_breakpoints_are_sorted_and_deduplicated() -> None:
    collection = _collection(breakpoints=[782, 480, 600, 480])

    assert collection.breakpoints == (480, 600, 782)
    assert len(collection) == 4


@pytest.mark.parametrize("breakpoint", [0, -1, MAX_VIEWPORT_WIDTH, 1.5, True, "480"])
def test_invalid_breakpoints_are_rejected(breakpoint) -> None:
    with pytest.raises(InvalidArgumentError):
        _collection(breakpoints=[480, breakpoint])


@pytest.mark.parametrize("sample_size", [0, -3, True, 2.5])
def test_invalid_sample_size_is_rejected(sample_size) -> None:
    with pytest.raises(InvalidArgumentError):
        _collection(sample_size=sample_size)


def test_negative_freshness_ttl_is_rejected() -> None:
    with pytest.raises(InvalidArgumentError):
        _collection(freshness_ttl=-1)


@pytest.mark.parametrize("freshness_ttl", ["60", None, True])
def test_non_numeric_freshness_ttl_is_rejected(freshness_ttl) -> None:
    with pytest.raises(InvalidArgumentError):
        _collection(freshness_ttl=freshness_ttl)


def test_adjacent_breakpoints_give_single_width_groups() -> None:
    collection = _collection([build_url_metric(2)], breakpoints=(1, 2, 3))

    group = collection.get_group_for_viewport_width(2)

    assert (group.minimum_viewport_width, group.maximum_viewport_width) == (2, 2)
    assert list(group) == collection.get_flattened_url_metrics()
    assert collection.get_last_group().minimum_viewport_width == 4


def test_largest_breakpoint_leaves_single_width_last_group() -> None:
    collection = _collection(breakpoints=(MAX_VIEWPORT_WIDTH - 1,))

    last = collection.get_last_group()

    assert last.minimum_viewport_width == last.maximum_viewport_width == MAX_VIEWPORT_WIDTH
    assert collection.get_group_for_viewport_width(MAX_VIEWPORT_WIDTH) is last


def test_zero_freshness_ttl_is_allowed() -> None:
    assert _collection(freshness_ttl=0).freshness_ttl == 0


def test_without_breakpoints_single_group_takes_everything() -> None:
    collection = _collection(
        [build_url_metric(1), build_url_metric(5000)], breakpoints=(), sample_size=5
    )

    assert len(collection) == 1
    assert len(collection.get_first_group()) == 2
    assert collection.get_first_group() is collection.get_last_group()


def test_samples_are_routed_by_viewport_width() -> None:
    collection = _collection(
        [build_url_metric(width) for width in (0, 480, 481, 600, 601, 782, 783, 1920)]
    )

    assert [[sample.viewport_width for sample in group] for group in collection] == [
        [0, 480],
        [481, 600],
        [601, 782],
        [783, 1920],
    ]


def test_group_lookup_by_viewport_width() -> None:
    collection = _collection()

    assert collection.get_group_for_viewport_width(0) is collection.get_first_group()
    assert collection.get_group_for_viewport_width(480) is collection.get_first_group()
    assert collection.get_group_for_viewport_width(481).minimum_viewport_width == 481
    assert collection.get_group_for_viewport_width(10_000) is collection.get_last_group()


def test_group_lookup_rejects_negative_width() -> None:
    collection = _collection()

    with pytest.raises(InvalidArgumentError) as excinfo:
        collection.get_group_for_viewport_width(-1)

    assert excinfo.value.context == {"viewport_width": -1}


def test_add_url_metric_returns_receiving_group() -> None:
    collection = _collection()

    group = collection.add_url_metric(build_url_metric(500))

    assert group.minimum_viewport_width == 481
    assert len(group) == 1


def test_groups_are_bounded_per_breakpoint() -> None:
    collection = _collection(sample_size=2)
    samples = [build_url_metric(400) for _ in range(3)]

    for sample in samples:
        collection.add_url_metric(sample)
    collection.add_url_metric(build_url_metric(1000))

    assert list(collection.get_first_group()) == samples[1:]
    assert len(collection.get_last_group()) == 1


def test_population_checks() -> None:
    collection = _collection()

    assert not collection.is_any_group_populated()
    assert not collection.is_every_group_populated()

    collection.add_url_metric(build_url_metric(50))

    assert collection.is_any_group_populated()
    assert not collection.is_every_group_populated()

    for width in (500, 700, 1000):
        collection.add_url_metric(build_url_metric(width))

    assert collection.is_every_group_populated()
    assert not collection.is_every_group_complete()


def test_every_group_complete_needs_full_fresh_groups() -> None:
    widths = (100, 500, 700, 1000)
    collection = _collection(
        [build_url_metric(width) for width in widths], sample_size=1, freshness_ttl=60
    )

    assert collection.is_every_group_complete()

    collection.add_url_metric(build_url_metric(500, timestamp=NOW - 120))

    assert not collection.is_every_group_complete()


def test_groups_by_lcp_element() -> None:
    collection = _collection(
        [
            build_url_metric(100, elements=[build_element(HERO, is_lcp=True)]),
            build_url_metric(500, elements=[build_element(HEADING, is_lcp=True)]),
            build_url_metric(1000, elements=[build_element(HERO, is_lcp=True)]),
        ]
    )

    groups = collection.get_groups_by_lcp_element(HERO)

    assert groups == [collection.get_first_group(), collection.get_last_group()]
    assert collection.get_groups_by_lcp_element("/HTML/BODY/MISSING") == []


def test_common_lcp_element_when_every_group_agrees() -> None:
    collection = _collection(
        [build_url_metric(width, elements=[build_element(HERO, is_lcp=True)]) for width in (100, 1000)],
        breakpoints=(480,),
    )

    common = collection.get_common_lcp_element()

    assert common is not None
    assert common.xpath == HERO


def test_common_lcp_element_requires_every_group_populated() -> None:
    collection = _collection(
        [build_url_metric(100, elements=[build_element(HERO, is_lcp=True)])],
        breakpoints=(480,),
    )

    assert collection.get_common_lcp_element() is None


def test_common_lcp_element_none_on_disagreement() -> None:
    collection = _collection(
        [
            build_url_metric(100, elements=[build_element(HERO, is_lcp=True)]),
            build_url_metric(1000, elements=[build_element(HEADING, is_lcp=True)]),
        ],
        breakpoints=(480,),
    )

    assert collection.get_common_lcp_element() is None


def test_common_lcp_element_none_when_a_group_has_no_lcp() -> None:
    collection = _collection(
        [
            build_url_metric(100, elements=[build_element(HERO, is_lcp=True)]),
            build_url_metric(1000, elements=[build_element(HERO)]),
        ],
        breakpoints=(480,),
    )

    assert collection.get_common_lcp_element() is None


def test_xpath_elements_map_spans_groups() -> None:
    collection = _collection(
        [
            build_url_metric(100, elements=[build_element(HERO, intersection_ratio=0.2)]),
            build_url_metric(
                1000,
                elements=[
                    build_element(HEADING, intersection_ratio=0.0),
                    build_element(HERO, intersection_ratio=0.9),
                ],
            ),
        ]
    )

    elements_map = collection.get_xpath_elements_map()

    assert list(elements_map) == [HERO, HEADING]
    assert [element.intersection_ratio for element in elements_map[HERO]] == [0.2, 0.9]
    assert collection.get_all_element_max_intersection_ratios() == {HERO: 0.9, HEADING: 0.0}
    assert collection.get_element_max_intersection_ratio(HERO) == 0.9
    assert collection.get_element_max_intersection_ratio("/HTML/BODY/MISSING") is None


def test_positioned_in_any_initial_viewport() -> None:
    footer = "/HTML/BODY/FOOTER"
    collection = _collection(
        [
            build_url_metric(
                400,
                viewport_height=800,
                elements=[build_element(HERO, top=100), build_element(footer, top=2000)],
            ),
            build_url_metric(
                1200,
                viewport_height=2400,
                elements=[build_element(footer, top=2000, intersection_ratio=0.0)],
            ),
            build_url_metric(1200, viewport_height=900, elements=[build_element(HEADING, top=900)]),
        ]
    )

    assert collection.get_all_elements_positioned_in_any_initial_viewport() == {
        HERO: True,
        footer: True,
        HEADING: False,
    }
    assert collection.is_element_positioned_in_any_initial_viewport(HEADING) is False
    assert collection.is_element_positioned_in_any_initial_viewport("/HTML/BODY/MISSING") is None


def test_flattened_url_metrics_follow_group_order() -> None:
    small = build_url_metric(100)
    large = build_url_metric(1000)
    medium = build_url_metric(500)
    collection = _collection([small, large, medium])

    assert collection.get_flattened_url_metrics() == [small, medium, large]


def test_as_dict_shape() -> None:
    collection = _collection(
        [build_url_metric(width, elements=[build_element(HERO, is_lcp=True)]) for width in (100, 1000)],
        breakpoints=(480,),
        sample_size=1,
    )

    record = collection.as_dict()

    assert record["breakpoints"] == [480]
    assert record["sample_size"] == 1
    assert record["freshness_ttl"] == 86400
    assert record["every_group_populated"] is True
    assert record["every_group_complete"] is True
    assert record["common_lcp_element"]["xpath"] == HERO
    assert record["all_element_max_intersection_ratios"] == {HERO: 1.0}
    assert [group["minimum_viewport_width"] for group in record["groups"]] == [0, 481]
    for group in record["groups"]:
        assert "sample_size" not in group
        assert "freshness_ttl" not in group
        assert group["complete"] is True
    json.dumps(record)


def test_from_payload_rebuilds_collection() -> None:
    samples = [build_url_metric(width, elements=[build_element(HERO, is_lcp=True)]) for width in (100, 500, 1000)]
    original = _collection(samples, sample_size=2)

    restored = URLMetricGroupCollection.from_payload(
        json.loads(json.dumps(original.as_dict())), clock=fixed_clock()
    )

    assert restored.breakpoints == original.breakpoints
    assert restored.sample_size == 2
    assert restored.get_flattened_url_metrics() == original.get_flattened_url_metrics()
    assert restored.as_dict() == original.as_dict()


def test_from_payload_requires_configuration() -> None:
    with pytest.raises(InvalidArgumentError):
        URLMetricGroupCollection.from_payload({"breakpoints": [480], "groups": []})


def test_collection_does_not_retain_itself_through_groups() -> None:
    collection = _collection([build_url_metric(100)])
    group = collection.get_first_group()
    ref = weakref.ref(collection)

    del collection
    gc.collect()

    assert ref() is None
    group.add_url_metric(build_url_metric(200))
    assert len(group) == 2
