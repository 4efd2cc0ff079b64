"""
Minimal background job dispatcher.

Jobs are plain callables. Each dispatch runs the callable up to ``MAX_TRIES``
times, in a daemon thread by default or inline when ``JOB_DISPATCH_MODE=sync``
(used by the test suite).
"""
import logging
import threading
from typing import Any, Callable, Optional

from chon.utils.runtime import job_dispatch_mode

logger = logging.getLogger(__name__)

MAX_TRIES = 3


def run_with_retries(job: Callable[..., Any], *args: Any, tries: int = MAX_TRIES, **kwargs: Any) -> Any:
    """Call ``job`` until it succeeds or ``tries`` attempts have failed, then re-raise."""
    name = getattr(job, "__name__", repr(job))
    for attempt in range(1, tries + 1):
        try:
            return job(*args, **kwargs)
        except Exception as exc:
            if attempt >= tries:
                logger.error("job_failed: job=%s attempts=%d error=%s", name, attempt, exc)
                raise
            logger.warning("job_attempt_failed: job=%s attempt=%d error=%s", name, attempt, exc)
    return None


def dispatch(job: Callable[..., Any], *args: Any, **kwargs: Any) -> Optional[threading.Thread]:
    """Run ``job`` with retries outside the request path.

    Returns the started thread, or ``None`` when the job ran inline.
    """
    name = getattr(job, "__name__", repr(job))
    if job_dispatch_mode() == "sync":
        try:
            run_with_retries(job, *args, **kwargs)
        except Exception:
            # already logged; inline dispatch must not break the caller either
            pass
        return None

    def _run():
        try:
            run_with_retries(job, *args, **kwargs)
        except Exception:
            pass

    thread = threading.Thread(target=_run, name=f"job-{name}", daemon=True)
    thread.start()
    logger.info("job_dispatched: job=%s", name)
    return thread
