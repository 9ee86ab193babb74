"""
Best-effort fan-out over a list of recipients.

Each recipient is handled in turn; a failure is logged and recorded in that
recipient's result without stopping the rest. There is no retry, and run
time grows linearly with the recipient count. Large fan-outs belong on a
background job queue, which this service does not run.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RecipientResult:
    recipient_id: str
    success: bool
    value: Any = None
    error: Optional[str] = None


def run_best_effort(
    recipients: Iterable[T],
    operation: Callable[[T], Any],
    label: str = "BATCH",
) -> List[RecipientResult]:
    results = []
    for recipient in recipients:
        try:
            value = operation(recipient)
        except Exception as e:
            logger.error(f"[{label}] Failed for recipient {recipient}: {str(e)}")
            results.append(RecipientResult(recipient_id=str(recipient), success=False, error=str(e)))
            continue
        results.append(RecipientResult(recipient_id=str(recipient), success=True, value=value))
    return results
