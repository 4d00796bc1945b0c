"""
Fallback channel for errors raised inside the pipeline itself
"""

import logging
from typing import Callable, Optional

ErrorCallback = Callable[[Exception], None]

diagnostics = logging.getLogger("logshield.diagnostics")


def report_error(error: Exception, error_callback: Optional[ErrorCallback] = None) -> None:
    """Hand an internal error to the callback, or to the diagnostics logger"""
    if error_callback:
        try:
            error_callback(error)
            return
        except Exception:
            diagnostics.exception("logshield error callback failed")
    diagnostics.error("%s", error, exc_info=error)
