import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Union

from PIL import Image

from pbs.config import PatternConfig
from pbs.errors import InvalidImageError, ProcessingBusyError
from pbs.progress import ProgressTracker
from pbs.quantize import QuantizeResult, quantize
from pbs.sampling import load_image


class PatternSession:
    """
    Owns one uploaded image and the pattern/palette last built from it.

    Only one processing run may be in flight; a second call while one is
    running raises ProcessingBusyError. A finished run replaces the published
    result (and resets progress) in one step; a failed run publishes nothing.
    """

    def __init__(self, config: Optional[PatternConfig] = None):
        self.config = config or PatternConfig()
        self.image: Optional[Image.Image] = None
        self.result: Optional[QuantizeResult] = None
        self.progress: Optional[ProgressTracker] = None
        self._lock = threading.Lock()
        self._executor: Optional[Executor] = None

    @property
    def is_processing(self) -> bool:
        return self._lock.locked()

    def upload(self, source: Union[str, Path, bytes, Image.Image]) -> Image.Image:
        """Set the image later runs sample from. Does not touch the published result."""
        if isinstance(source, Image.Image):
            image = source
        else:
            image = load_image(source)
        self.image = image
        return image

    def process(self, config: Optional[PatternConfig] = None) -> QuantizeResult:
        if self.image is None:
            raise InvalidImageError("Please upload an image first")
        if not self._lock.acquire(blocking=False):
            raise ProcessingBusyError("A pattern is already being processed")
        try:
            run_config = config or self.config
            result = quantize(self.image, run_config)
            # publish
            self.config = run_config
            self.result, self.progress = result, ProgressTracker(result.pattern)
            return result
        finally:
            self._lock.release()

    def process_async(self, config: Optional[PatternConfig] = None, executor: Optional[Executor] = None) -> Future:
        """Run process() on a worker thread; errors surface through the returned Future."""
        if executor is None:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pbs-process")
            executor = self._executor
        return executor.submit(self.process, config)

    def clear_progress(self):
        if self.progress is not None:
            self.progress.clear()

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
