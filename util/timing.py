# util/timing.py
import time
from contextlib import contextmanager
from typing import Any, Iterator
import logging


@contextmanager
def timed(
    logger: logging.Logger, name: str, level: int = logging.INFO, **kv: Any
) -> Iterator[None]:
    """
    Usage:
      with timed(logger, "verify.item", item=3):
          ...
    Emits one record on exit: "<name>.done ms=<int> key=val ..."
    If the block raises, the record is "<name>.failed" at WARNING instead.
    """
    t0 = time.perf_counter()
    outcome = "done"
    try:
        yield
    except BaseException:
        outcome = "failed"
        level = max(level, logging.WARNING)
        raise
    finally:
        dt_ms = int((time.perf_counter() - t0) * 1000)
        suffix = "".join(f" {k}={v}" for k, v in kv.items())
        logger.log(level, "%s.%s ms=%d%s", name, outcome, dt_ms, suffix)
