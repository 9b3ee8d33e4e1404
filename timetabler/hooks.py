"""
Fire-and-forget observers: a metrics recorder and an error reporter.

Callbacks are notified after the fact. Whatever they raise is logged and
dropped; it never reaches the engine or changes its output.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

MetricCallback = Callable[[str, Any, Dict[str, str]], None]
ErrorCallback = Callable[[BaseException, Dict[str, Any]], None]


@dataclass
class Hooks:
    metrics: List[MetricCallback] = field(default_factory=list)
    errors: List[ErrorCallback] = field(default_factory=list)

    def record_metrics(self, values: Mapping[str, Any], tags: Optional[Dict[str, str]] = None) -> None:
        tags = dict(tags or {})
        for name, value in values.items():
            for callback in self.metrics:
                try:
                    callback(name, value, tags)
                except Exception:
                    logger.warning("metrics callback failed for %s", name, exc_info=True)

    def report_error(self, exc: BaseException, context: Optional[Dict[str, Any]] = None) -> None:
        context = dict(context or {})
        for callback in self.errors:
            try:
                callback(exc, context)
            except Exception:
                logger.warning("error reporter failed while reporting %s", type(exc).__name__,
                               exc_info=True)
