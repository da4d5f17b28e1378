"""Worker pool with exception handling for parallel scoring.

This module provides a ThreadPoolExecutor wrapper that fans work out across
threads and hands results back in input order, so parallel and sequential
runs produce identical output.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Sequence


class WorkerPool:
    """ThreadPoolExecutor wrapper with exception handling for batch tasks."""

    def __init__(self, max_workers: int = 4, logger=None):
        """
        Initialize worker pool.

        Args:
            max_workers: Maximum number of concurrent worker threads (default: 4)
            logger: Optional logger instance for logging
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.max_workers = max_workers
        self.logger = logger or logging.getLogger(__name__)
        self._stats_lock = threading.Lock()  # Thread-safe stats updates
        self.stats = {
            "max_workers": max_workers,
            "total_submitted": 0,
            "total_completed": 0,
            "total_successful": 0,
            "total_failed": 0,
        }

    def map(self, func: Callable[[Any], Any], items: Sequence[Any], desc: str = "Processing") -> list:
        """
        Process items in parallel with exception handling.

        Args:
            func: Worker function to execute
            items: Items to process
            desc: Description for progress reporting

        Returns:
            List of tuples (success, item, result_or_error), in the order of items
        """
        results: list = [None] * len(items)

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index = {executor.submit(func, item): index for index, item in enumerate(items)}
            with self._stats_lock:
                self.stats["total_submitted"] += len(items)

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                item = items[index]
                with self._stats_lock:
                    self.stats["total_completed"] += 1

                try:
                    result = future.result()
                    with self._stats_lock:
                        self.stats["total_successful"] += 1
                    results[index] = (True, item, result)
                except Exception as e:
                    with self._stats_lock:
                        self.stats["total_failed"] += 1
                    results[index] = (False, item, e)
                    self.logger.error(f"{desc}: Failed for item {index}: {e}", exc_info=True)

        self.logger.debug(
            f"{desc} complete: {self.stats['total_successful']} successful, {self.stats['total_failed']} failed"
        )

        return results
