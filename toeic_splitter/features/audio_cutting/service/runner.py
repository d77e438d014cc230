import logging
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from toeic_splitter.core.config.settings import settings
from toeic_splitter.core.errors import InvalidInputError, MediaCutFailure
from toeic_splitter.core.shared_types import MediaFile
from toeic_splitter.features.segmentation.domain.models import Segment
from ..domain.interfaces import IMediaCutter
from ..domain.models import CutRequest, CutResult, EncodingConfig

logger = logging.getLogger(__name__)


class ConcurrentCutRunner:
    """
    Cuts every segment of a part in parallel and treats the batch as one unit:
    either every output exists, or none of the outputs this batch produced do.
    """

    def __init__(self,
                 cutter: IMediaCutter,
                 config: Optional[EncodingConfig] = None,
                 max_workers: Optional[int] = None):
        self.cutter = cutter
        self.config = config or EncodingConfig()
        self.max_workers = max_workers or settings.MAX_CUT_WORKERS

    def run(self, source: Path, segments: Sequence[Segment], output_dir: Path, base_name: str) -> List[CutResult]:
        """
        Returns:
            One CutResult per segment, ordered by question / group number
            regardless of which cut finished first.

        Raises:
            InvalidInputError: If the source audio is missing.
            MediaCutFailure: On the first failed cut. Cuts not yet started are
                cancelled, running cuts are awaited, and every file produced by
                this batch is removed before raising.
        """
        if not segments:
            return []
        if not source.exists():
            raise InvalidInputError(f"Source audio missing: {source}")

        source_file = MediaFile(source)
        jobs: List[Tuple[Segment, Path]] = [
            (segment, output_dir / segment.output_filename(base_name, self.config.format))
            for segment in segments
        ]
        # A failed cut may leave a partial file, but never one an earlier run made
        preexisting = {output_path for _, output_path in jobs if output_path.exists()}
        workers = max(1, min(len(jobs), self.max_workers))
        logger.info(f"Cutting {len(jobs)} segments from {source.name} with {workers} workers")

        futures: Dict[Future, Tuple[Segment, Path]] = {}
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="cut") as pool:
            for segment, output_path in jobs:
                future = pool.submit(self._cut_one, source_file, segment, output_path)
                futures[future] = (segment, output_path)

            _, not_done = wait(futures, return_when=FIRST_EXCEPTION)
            for future in not_done:
                future.cancel()
        # Leaving the pool joins every cut that was already running.

        results: List[CutResult] = []
        failures: List[Tuple[Segment, BaseException]] = []
        produced: List[Path] = []
        for future, (segment, output_path) in futures.items():
            if future.cancelled():
                continue
            error = future.exception()
            if error is None:
                produced.append(output_path)
                results.append(CutResult(segment=segment, output_path=output_path))
            else:
                if output_path not in preexisting:
                    produced.append(output_path)
                failures.append((segment, error))

        if failures:
            self._remove(produced)
            segment, error = min(failures, key=lambda item: item[0].sort_key)
            logger.error(f"Cut failed for {segment.label}; removed {len(produced)} batch outputs")
            raise MediaCutFailure(f"Failed to cut {segment.label}: {error}", label=segment.label) from error

        results.sort(key=lambda r: r.segment.sort_key)
        return results

    def _cut_one(self, source: MediaFile, segment: Segment, output_path: Path) -> None:
        request = CutRequest(
            source_audio=source,
            output_audio=MediaFile(output_path),
            window=segment.window
        )
        self.cutter.cut(request, self.config)
        logger.info(
            f"{segment.label.capitalize()} saved: {output_path.name} "
            f"({segment.window.start:.2f}s - {segment.window.end:.2f}s)"
        )

    @staticmethod
    def _remove(paths: Sequence[Path]) -> None:
        for path in paths:
            path.unlink(missing_ok=True)
