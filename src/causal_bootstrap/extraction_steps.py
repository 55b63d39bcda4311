"""Parallel extraction stages of the bootstrapping loop.

Each stage submits one task per seed (or pattern) to a thread pool and then
waits for all of them before returning. Tasks query the sentence source,
parse the returned graphs and return their own result lists; nothing is
shared between tasks while they run.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Generic, Iterable, List, Set, Tuple, TypeVar

from tqdm import tqdm

from .config import MAX_WORKERS
from .dep_graph import DepGraph
from .instances import ExtractedInstance, ExtractedPattern, Instance
from .path_extractor import PathExtractor
from .path_pattern import PathPattern
from .sentence_source import SentenceSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ParallelExtractor(Generic[T]):
    """Fork-join runner over a fixed-size thread pool.

    Parameters
    ----------
    max_workers : int
        Number of worker threads
    progress : bool
        Show a tqdm bar while joining
    desc : str
        Label of the progress bar
    """

    def __init__(self, max_workers: int = MAX_WORKERS, progress: bool = True, desc: str = ""):
        self.max_workers = max_workers
        self.progress = progress
        self.desc = desc
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        self._tasks: List[Tuple[str, Future]] = []

    def submit(self, name: str, fn: Callable[..., List[T]], *args) -> None:
        self._tasks.append((name, self._executor.submit(fn, *args)))

    def join(self) -> List[T]:
        """Wait for every submitted task; results are merged in submission order.

        A task that raised is logged and contributes no results.
        """
        results: List[T] = []
        tasks, self._tasks = self._tasks, []

        for name, future in tqdm(tasks, desc=self.desc, disable=not self.progress or not tasks):
            try:
                found = future.result()
            except Exception:
                logger.exception("Extraction task failed: %s", name)
                continue
            if found:
                results.extend(found)

        return results

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    def __enter__(self) -> "ParallelExtractor[T]":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()


class PatternExtractionStep(ParallelExtractor[ExtractedPattern]):
    """Find generalized path patterns for seed instances.

    Parameters
    ----------
    source : SentenceSource
        Backend returning sentences for a cause/effect pair
    """

    def __init__(
        self,
        source: SentenceSource,
        max_workers: int = MAX_WORKERS,
        progress: bool = True,
    ):
        super().__init__(max_workers=max_workers, progress=progress, desc="Pattern extraction")
        self.source = source
        self.path_extractor = PathExtractor()

    def extract_for_instance(self, instance: Instance) -> List[ExtractedPattern]:
        """Task body: query sentences for one seed and extract its paths."""
        found = []
        for sentence in self.source.query_by_instance(instance.cause, instance.effect):
            graph = DepGraph(sentence.graph)
            pattern = self.path_extractor.extract(graph, instance)
            if pattern is None:
                continue
            found.append(ExtractedPattern(pattern, instance, sentence.text))
        return found

    def extract(
        self, seeds: Iterable[Instance], visited: Set[str]
    ) -> List[ExtractedPattern]:
        """Run one task per seed not yet in ``visited`` and join them.

        Parameters
        ----------
        seeds : Iterable[Instance]
            Current seed pool
        visited : Set[str]
            Seeds already queried in earlier rounds; updated before the
            tasks are started

        Returns
        -------
        List[ExtractedPattern]
            Patterns extracted in this stage
        """
        for instance in seeds:
            key = str(instance)
            if key in visited:
                continue
            visited.add(key)
            self.submit(key, self.extract_for_instance, instance)

        found = self.join()
        logger.info("Extracted %d pattern occurrences", len(found))
        return found


class InstanceExtractionStep(ParallelExtractor[ExtractedInstance]):
    """Find cause/effect instances matched by selected patterns."""

    def __init__(
        self,
        source: SentenceSource,
        max_workers: int = MAX_WORKERS,
        progress: bool = True,
    ):
        super().__init__(max_workers=max_workers, progress=progress, desc="Instance extraction")
        self.source = source

    def extract_for_pattern(self, pattern: PathPattern) -> List[ExtractedInstance]:
        """Task body: query candidate sentences for one pattern and match it."""
        found = []
        for sentence in self.source.query_by_pattern(pattern.edge_label_query()):
            graph = DepGraph(sentence.graph)
            for cause, effect in pattern.match(graph):
                found.append(ExtractedInstance.of(cause, effect, pattern, sentence.text))
        return found

    def extract(
        self, patterns: Iterable[PathPattern], visited: Set[str]
    ) -> List[ExtractedInstance]:
        """Run one task per pattern not yet in ``visited`` and join them."""
        for pattern in patterns:
            if pattern.pattern in visited:
                continue
            visited.add(pattern.pattern)
            self.submit(pattern.pattern, self.extract_for_pattern, pattern)

        found = self.join()
        logger.info("Extracted %d instance occurrences", len(found))
        return found
