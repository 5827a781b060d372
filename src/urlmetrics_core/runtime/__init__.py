"""Runtime primitives shared by the group and collection layers."""

from urlmetrics_core.runtime.shared import MAX_VIEWPORT_WIDTH, ResultCache

__all__ = ["MAX_VIEWPORT_WIDTH", "ResultCache"]
