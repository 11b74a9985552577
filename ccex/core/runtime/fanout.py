# -*- coding: utf-8 -*-
# ccex/core/runtime/fanout.py
# Bounded parallel map over per-item venue calls.

from concurrent.futures import ThreadPoolExecutor, as_completed

from ccex.core.kernel.errors import CcexError
from ccex.core.runtime.logger import get_logger

DEFAULT_FANOUT_WORKERS = 10

logger = get_logger('fanout')


def fan_out(items, fn, max_workers=DEFAULT_FANOUT_WORKERS, venue=None):
    """
    Call fn(item) for every item with at most `max_workers` calls in flight.

    Returns {item: result} for the calls that succeeded. Items whose call
    raised a CcexError are logged and left out; other exceptions propagate.
    """
    items = list(items)
    results = {}
    if not items:
        return results
    dropped = 0
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(items)))) as executor:
        futures = {executor.submit(fn, item): item for item in items}
        for future in as_completed(futures):
            item = futures[future]
            try:
                results[item] = future.result()
            except CcexError as e:
                dropped += 1
                logger.debug("[%s] dropped %s: %s", venue, item, e)
    if dropped:
        logger.warning("[%s] fan-out dropped %d of %d items", venue, dropped, len(items))
    return results
