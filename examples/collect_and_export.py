"""Example that groups a handful of URL Metrics and exports them to CSV."""

from __future__ import annotations

import json
import time
import uuid

from urlmetrics import CollectionSettings, url_metrics_frame
from urlmetrics_core import URLMetric

HERO = "/HTML/BODY/DIV[@id='page']/MAIN/IMG"


def _payload(width: int, height: int, top: float) -> dict:
    rect = {"x": 0, "y": top, "width": width, "height": 240}
    return {
        "uuid": str(uuid.uuid4()),
        "url": "https://example.com/",
        "timestamp": time.time(),
        "viewport": {"width": width, "height": height},
        "elements": [
            {
                "isLCP": True,
                "isLCPCandidate": True,
                "xpath": HERO,
                "intersectionRatio": 1,
                "intersectionRect": rect,
                "boundingClientRect": rect,
            }
        ],
    }


def main() -> None:
    collection = CollectionSettings().build_collection()
    collection.subscribe(
        lambda event: print(
            f"stored {event.url_metric.uuid} in "
            f"{event.group.minimum_viewport_width}-{event.group.maximum_viewport_width}"
        )
    )
    for width, height, top in ((375, 812, 120), (540, 720, 96), (768, 1024, 80), (1440, 900, 64)):
        collection.add_url_metric(URLMetric.from_payload(_payload(width, height, top)))

    common = collection.get_common_lcp_element()
    print(json.dumps({"common_lcp_xpath": common.xpath if common else None}, indent=2))
    print(url_metrics_frame(collection).to_csv(index=False))


if __name__ == "__main__":
    main()
