"""MediaStamp - Rename photos and videos by the date they were captured.

High-level API:
    from mediastamp import BatchOrchestrator, SortConfig

    config = SortConfig(
        input_dir="/path/to/drop",
        output_dir="/path/to/library",
        display_timezone="Europe/Amsterdam",
    )
    orchestrator = BatchOrchestrator(config)

    # Preview where files would go
    preview = orchestrator.run(dry_run=True)

    # Move files
    result = orchestrator.run()
    print(f"Moved {result.moved} files")
"""

__version__ = "1.0.0"

# Public API exports
from mediastamp.core.orchestrator import BatchOrchestrator
from mediastamp.core.config import SortConfig
from mediastamp.core.models import (
    RunResult,
    BatchOutcome,
    OutcomeStatus,
    MediaKind,
    CaptureTimestamp,
)

__all__ = [
    "BatchOrchestrator",
    "SortConfig",
    "RunResult",
    "BatchOutcome",
    "OutcomeStatus",
    "MediaKind",
    "CaptureTimestamp",
    "__version__",
]
