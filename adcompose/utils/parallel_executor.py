"""Parallel Executor - runs independent upstream reads concurrently and joins them."""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Optional

from adcompose.core.config import Settings


class ParallelExecutor:
    """Runs a fixed set of independent calls with bounded concurrency."""

    def __init__(self, settings: Settings, logger: Any):
        """
        Initialize parallel executor.

        Args:
            settings: Application settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger
        self.max_workers = getattr(settings, "max_parallel_fetches", 3)

    def execute_all(
        self,
        tasks: list[Callable[[], Any]],
        task_names: Optional[list[str]] = None,
        project_id: Optional[str] = None,
        max_workers: Optional[int] = None,
    ) -> list[tuple[Any, Optional[Exception]]]:
        """
        Execute every task and wait for all of them to finish.

        Args:
            tasks: Callables to run
            task_names: Optional names for logging
            project_id: Optional project ID for logging context
            max_workers: Maximum concurrent workers (defaults to max_parallel_fetches)

        Returns:
            (result, exception) per task, in task order
        """
        if not tasks:
            return []

        max_workers = max_workers or self.max_workers
        log_prefix = f"[{project_id}] " if project_id else ""

        def name_of(i: int) -> str:
            return task_names[i] if task_names and i < len(task_names) else f"task_{i+1}"

        # Sequential mode
        if max_workers == 1:
            results = []
            for i, task in enumerate(tasks):
                try:
                    results.append((task(), None))
                except Exception as e:
                    self.logger.warning(f"{log_prefix}❌ {name_of(i)} failed: {e}")
                    results.append((None, e))
            return results

        start_time = time.time()
        results: list[tuple[Any, Optional[Exception]]] = [(None, None)] * len(tasks)

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_index = {executor.submit(task): i for i, task in enumerate(tasks)}

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                elapsed = time.time() - start_time
                try:
                    results[index] = (future.result(), None)
                    self.logger.debug(f"{log_prefix}✅ {name_of(index)} completed in {elapsed:.2f}s")
                except Exception as e:
                    self.logger.warning(f"{log_prefix}❌ {name_of(index)} failed after {elapsed:.2f}s: {e}")
                    results[index] = (None, e)

        successful = sum(1 for _, error in results if error is None)
        self.logger.debug(
            f"{log_prefix}Fetch batch complete: {successful}/{len(tasks)} successful in {time.time() - start_time:.2f}s"
        )
        return results
