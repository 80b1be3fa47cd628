"""High-level orchestrator for MediaStamp.

Lists the input directory and runs every file through
classify -> extract -> format -> resolve -> move on a thread pool.
Used by the CLI.
"""

import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from mediastamp.core.classifier import FileTypeClassifier
from mediastamp.core.config import SortConfig
from mediastamp.core.dates import format_capture_date
from mediastamp.core.errors import (
    ClassificationError, ConfigError, DirectoryReadError, MetadataExtractionError,
    MoveError, MoveVerificationError, TimestampAbsent, TimestampInvalid,
)
from mediastamp.core.exiftool import ExifToolManager
from mediastamp.core.ffprobe import FFProbe
from mediastamp.core.logger import RunLogger, format_outcome
from mediastamp.core.metadata import (
    ExifTimestampStrategy, MetadataExtractor, VideoTimestampStrategy,
)
from mediastamp.core.models import (
    BatchOutcome, MediaKind, OutcomeStatus, ProgressCallback, RunResult,
)
from mediastamp.core.mover import MediaMover
from mediastamp.core.resolver import DestinationResolver
from mediastamp.core.timestamps import NullTimestampUpdater, get_timestamp_updater
from mediastamp.core.utils import checkout_dir

logger = logging.getLogger(__name__)


def _adaptive_interval(total: int) -> int:
    """Calculate adaptive progress update interval based on total count.

    More frequent updates for smaller batches, less frequent for larger ones.

    Args:
        total: Total number of items to process.

    Returns:
        Update interval (report progress every N items).
    """
    if total < 50:
        return 1
    elif total < 200:
        return 10
    elif total < 1000:
        return 25
    elif total < 5000:
        return 50
    else:
        return 100


def build_extractor(exiftool: ExifToolManager, probe: FFProbe, config: SortConfig) -> MetadataExtractor:
    """Wire the default image and video strategies."""
    return MetadataExtractor({
        MediaKind.IMAGE: ExifTimestampStrategy(exiftool, default_tz=config.tzinfo),
        MediaKind.VIDEO: VideoTimestampStrategy(probe),
    })


@dataclass
class RunServices:
    """Pipeline stages for one run."""
    classifier: FileTypeClassifier
    extractor: MetadataExtractor
    mover: MediaMover


class BatchOrchestrator:
    """Coordinates one pass over the input directory.

    Every file is its own failure domain: whatever goes wrong while
    handling it becomes that file's Skipped or Failed outcome and never
    stops the other files. Only an unreadable input directory aborts the run.

    Usage:
        config = SortConfig.from_workdir("/photos", display_timezone="UTC")
        orchestrator = BatchOrchestrator(config)

        # Preview what would be moved
        preview = orchestrator.run(dry_run=True)

        # Move files
        result = orchestrator.run(on_progress=my_callback)
        print(f"Moved {result.moved}, skipped {result.skipped}, failed {result.failed}")
    """

    def __init__(
        self,
        config: SortConfig,
        classifier: Optional[FileTypeClassifier] = None,
        extractor: Optional[MetadataExtractor] = None,
        mover: Optional[MediaMover] = None,
        log_dir: Optional[str] = None,
        verbose: bool = False
    ):
        """Initialize orchestrator.

        Args:
            config: Run configuration.
            classifier: File type classifier. By default one is built per
                run around the run's ExifTool process.
            extractor: Timestamp extractor. By default one is built per run
                around the same ExifTool process and ffprobe.
            mover: File mover. By default one is built per run using the
                platform timestamp updater.
            log_dir: Directory for summary.txt / outcomes.json, or None.
            verbose: If True, also write verbose.txt with every operation.
        """
        self.config = config
        self.classifier = classifier
        self.extractor = extractor
        self.mover = mover
        self.log_dir = log_dir
        self.verbose = verbose
        self._tz = config.tzinfo

    def list_inputs(self) -> List[str]:
        """List input entries, skipping names with the hidden prefix.

        Returns:
            Sorted absolute paths.

        Raises:
            DirectoryReadError: If the input directory cannot be listed.
        """
        try:
            names = os.listdir(self.config.input_dir)
        except OSError as e:
            raise DirectoryReadError(f"Error reading directory {self.config.input_dir}: {e}") from e

        prefix = self.config.hidden_prefix
        return [
            os.path.join(self.config.input_dir, name)
            for name in sorted(names)
            if not (prefix and name.startswith(prefix))
        ]

    @contextmanager
    def open_services(self, run_logger: Optional[RunLogger] = None) -> Iterator[RunServices]:
        """Build the pipeline stages for one run.

        Injected stages are used as given. The default classifier and
        extractor share one ExifTool process, stopped when the block exits.
        """
        exiftool = None
        if self.classifier is None or self.extractor is None:
            exiftool = ExifToolManager()
            if not exiftool.start():
                logger.warning(f"File types and image dates unavailable: {exiftool.error}")

        try:
            mover = self.mover
            if mover is None:
                updater = get_timestamp_updater() if self.config.update_timestamps else NullTimestampUpdater()
                mover = MediaMover(timestamp_updater=updater, run_logger=run_logger)
            yield RunServices(
                classifier=self.classifier or FileTypeClassifier(exiftool),
                extractor=self.extractor or build_extractor(exiftool, FFProbe(), self.config),
                mover=mover,
            )
        finally:
            if exiftool:
                exiftool.stop()

    def process_file(
        self,
        path: str,
        services: RunServices,
        resolver: DestinationResolver,
        dry_run: bool = False
    ) -> BatchOutcome:
        """Run one file through the pipeline.

        Expected per-file errors are converted to outcomes here; anything
        unexpected propagates to run(), which records it as Failed.

        Args:
            path: Input file.
            services: Pipeline stages for this run.
            resolver: Destination resolver for this run.
            dry_run: If True, stop after resolving the destination.

        Returns:
            The file's outcome.
        """
        try:
            media = services.classifier.classify(path)
        except ClassificationError as e:
            logger.warning(str(e))
            return BatchOutcome.skipped(path, str(e), "ClassificationError")

        if not media.is_supported:
            logger.warning(f"Unsupported file type for file {path}")
            return BatchOutcome.skipped(path, "Unsupported file type", "UnsupportedType")

        try:
            timestamp = services.extractor.extract(media)
        except MetadataExtractionError as e:
            logger.warning(f"Error reading metadata from {path}: {e}")
            return BatchOutcome.skipped(path, f"Metadata unreadable: {e}", "MetadataExtractionError")
        except TimestampInvalid as e:
            logger.warning(f"Created date could not be parsed for {path}: {e}")
            return BatchOutcome.skipped(path, f"Invalid timestamp: {e}", "TimestampInvalid")
        except TimestampAbsent as e:
            logger.warning(f"No created date was found for {path}")
            return BatchOutcome.skipped(path, f"No timestamp: {e}", "TimestampAbsent")

        try:
            formatted = format_capture_date(timestamp.instant, self._tz)
        except (OverflowError, ValueError) as e:
            logger.warning(f"Created date out of range for {path}: {e}")
            return BatchOutcome.skipped(path, f"Invalid timestamp: {e}", "TimestampInvalid")

        try:
            destination = resolver.resolve(formatted, media.extension)
        except OSError as e:
            logger.error(f"Cannot claim a destination for {path}: {e}")
            return BatchOutcome.failed(path, f"Destination unavailable: {e}", "MoveError")

        if dry_run:
            return BatchOutcome.moved(path, destination, timestamp)

        try:
            services.mover.relocate(path, destination, timestamp.instant)
        except MoveVerificationError as e:
            logger.error(f"File move unsuccessful! {e}")
            return BatchOutcome.failed(path, str(e), "MoveVerificationError", destination)
        except MoveError as e:
            logger.error(str(e))
            return BatchOutcome.failed(path, str(e), "MoveError")

        return BatchOutcome.moved(path, destination, timestamp)

    def _prepare_output(self, dry_run: bool) -> None:
        if dry_run:
            return
        try:
            checkout_dir(self.config.output_dir)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Output directory is not usable: {e}") from e

    def run(
        self,
        on_progress: Optional[ProgressCallback] = None,
        dry_run: bool = False
    ) -> RunResult:
        """Process every file in the input directory.

        Args:
            on_progress: Optional callback for progress updates.
            dry_run: If True, report where files would go without creating,
                reserving or moving anything.

        Returns:
            RunResult with one outcome per input entry, in input order.

        Raises:
            DirectoryReadError: If the input directory cannot be listed.
            ConfigError: If the configuration is invalid or the output
                directory cannot be created.
        """
        self.config.validate()
        start_time = time.time()
        result = RunResult(
            input_dir=self.config.input_dir,
            output_dir=self.config.output_dir,
            start_time=time.strftime("%Y-%m-%d %H:%M:%S"),
            dry_run=dry_run,
        )

        paths = self.list_inputs()
        total = len(paths)
        logger.info(f"Found {total} files in {self.config.input_dir}")

        if paths:
            self._prepare_output(dry_run)

        with RunLogger(self.log_dir, verbose=self.verbose) as run_logger:
            run_logger.log(f"{'Preview' if dry_run else 'Run'} started: {self.config.input_dir}")
            if paths:
                with self.open_services(run_logger) as services:
                    result.outcomes = self._run_tasks(paths, services, run_logger, on_progress, dry_run)

            result.elapsed_time = round(time.time() - start_time, 3)
            result.end_time = time.strftime("%Y-%m-%d %H:%M:%S")
            run_logger.log(
                f"Finished: {result.moved} moved, {result.skipped} skipped, {result.failed} failed"
            )
            result.summary_file = run_logger.write_summary(result)
            result.report_file = run_logger.write_report(result)

        if on_progress:
            on_progress(total, total, "Preview complete" if dry_run else "Processing complete")

        return result

    def _run_tasks(
        self,
        paths: List[str],
        services: RunServices,
        run_logger: RunLogger,
        on_progress: Optional[ProgressCallback],
        dry_run: bool
    ) -> List[BatchOutcome]:
        """Fan the files out to the worker pool and gather outcomes."""
        resolver = DestinationResolver(self.config.output_dir, reserve=not dry_run)
        total = len(paths)
        interval = _adaptive_interval(total)
        outcomes: Dict[str, BatchOutcome] = {}

        with ThreadPoolExecutor(max_workers=min(self.config.workers, total)) as executor:
            future_to_path = {
                executor.submit(self.process_file, path, services, resolver, dry_run): path
                for path in paths
            }

            # Outcomes and run-log writes are handled here in the
            # coordinating thread; workers only return values.
            for future in as_completed(future_to_path):
                path = future_to_path[future]
                try:
                    outcome = future.result()
                except Exception as e:
                    logger.exception(f"Error processing file {path}")
                    outcome = BatchOutcome.failed(path, f"Unexpected error: {e}", type(e).__name__)

                outcomes[path] = outcome
                run_logger.record(outcome)
                if outcome.status is OutcomeStatus.MOVED:
                    logger.info(format_outcome(outcome))

                done = len(outcomes)
                if on_progress and (done % interval == 0 or done == total):
                    on_progress(done, total, f"Processed: {os.path.basename(path)}")

        return [outcomes[path] for path in paths]
