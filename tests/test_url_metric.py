from __future__ import annotations

import gc

import pytest

from urlmetrics_core import DOMRect, Element, InvalidArgumentError, URLMetric, Viewport

from tests.helpers import NOW, build_element, build_payload, build_url_metric


def test_url_metric_from_client_payload() -> None:
    payload = build_payload(412, viewport_height=915)

    url_metric = URLMetric.from_payload(payload)

    assert url_metric.uuid == payload["uuid"]
    assert url_metric.viewport == Viewport(width=412, height=915)
    assert url_metric.viewport_width == 412
    assert url_metric.timestamp == pytest.approx(NOW)
    assert [element.xpath for element in url_metric.elements] == [
        "/HTML/BODY/DIV/IMG",
        "/HTML/BODY/FOOTER/IMG",
    ]
    assert url_metric.lcp_element is url_metric.elements[0]


def test_dom_rect_derives_missing_edges() -> None:
    rect = DOMRect.from_payload({"x": 10, "y": 20, "width": 300, "height": 200})

    assert rect.left == 10.0
    assert rect.top == 20.0
    assert rect.right == 310.0
    assert rect.bottom == 220.0


def test_dom_rect_keeps_explicit_edges() -> None:
    rect = DOMRect.from_payload(
        {"x": 0, "y": 0, "width": 10, "height": 10, "top": -5, "bottom": 5}
    )

    assert rect.top == -5.0
    assert rect.bottom == 5.0


def test_stored_payload_rehydrates_equal_metric() -> None:
    original = build_url_metric(
        600,
        elements=[build_element(is_lcp=True), build_element("/HTML/BODY/P", intersection_ratio=0.5)],
    )

    restored = URLMetric.from_payload(original.as_dict())

    assert restored == original


def test_elements_point_back_at_their_url_metric() -> None:
    element = build_element()
    url_metric = build_url_metric(elements=[element])

    assert element.url_metric is None
    assert all(item.url_metric is url_metric for item in url_metric.elements)


def test_element_back_reference_does_not_keep_metric_alive() -> None:
    url_metric = build_url_metric(elements=[build_element()])
    element = url_metric.elements[0]

    del url_metric
    gc.collect()

    assert element.url_metric is None


def test_lcp_element_is_none_without_flagged_element() -> None:
    url_metric = build_url_metric(elements=[build_element(), build_element("/HTML/BODY/H1")])

    assert url_metric.lcp_element is None


def test_age_is_measured_from_timestamp() -> None:
    url_metric = build_url_metric(timestamp=NOW - 30)

    assert url_metric.age(NOW) == pytest.approx(30.0)


@pytest.mark.parametrize("ratio", [-0.1, 1.5])
def test_element_rejects_out_of_range_intersection_ratio(ratio: float) -> None:
    with pytest.raises(InvalidArgumentError):
        build_element(intersection_ratio=ratio)


def test_element_rejects_empty_xpath() -> None:
    with pytest.raises(InvalidArgumentError):
        build_element("")


@pytest.mark.parametrize(
    "viewport",
    [
        {"width": -1, "height": 800},
        {"width": True, "height": 800},
        {"width": "400", "height": 800},
    ],
)
def test_invalid_viewport_is_rejected(viewport: dict) -> None:
    payload = build_payload()
    payload["viewport"] = viewport

    with pytest.raises(InvalidArgumentError):
        URLMetric.from_payload(payload)


def test_payload_without_viewport_is_rejected() -> None:
    payload = build_payload()
    del payload["viewport"]

    with pytest.raises(InvalidArgumentError):
        URLMetric.from_payload(payload)


def test_payload_with_non_numeric_rect_is_rejected() -> None:
    payload = build_payload()
    payload["elements"][0]["boundingClientRect"]["width"] = "wide"

    with pytest.raises(InvalidArgumentError) as excinfo:
        URLMetric.from_payload(payload)

    assert excinfo.value.context["field"] == "width"


def test_element_payload_requires_rects() -> None:
    with pytest.raises(InvalidArgumentError):
        Element.from_payload({"xpath": "/HTML", "intersectionRatio": 1})
