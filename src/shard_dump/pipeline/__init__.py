"""
Selection-and-correlation pipeline.

Stages, leaves first:

- :class:`OutputSink` - scoped artifact files under the output directory
- :class:`ShardCatalog` - daily shard listing and latest timestamps
- :class:`ShardRanker` - newest-first top-K selection
- :class:`DailyWindowExtractor` - capped window export plus group-hash set
- :class:`MetadataExporter` - ``<shard>.metadata.json``
- :class:`CorrelatedRecordFetcher` - per-key capped export of events/repetitions
- :class:`DumpRunner` - the run itself
"""

from .aggregate import AggregatedWindow, WindowAggregator, build_window_pipeline
from .catalog import NO_TIMESTAMP, ShardCatalog
from .extractor import DailyWindowExtractor, WindowExtraction
from .fetcher import CorrelatedRecordFetcher, FetchOutcome
from .metadata import MetadataExporter, render_metadata
from .orchestrator import DumpRunner, DumpSummary, ShardSummary
from .progress import NullProgress, ProgressReporter, RichProgress
from .ranker import RankedShard, ShardRanker
from .sink import OutputSink, bson_artifact, metadata_artifact

__all__ = [
    "AggregatedWindow",
    "WindowAggregator",
    "build_window_pipeline",
    "NO_TIMESTAMP",
    "ShardCatalog",
    "DailyWindowExtractor",
    "WindowExtraction",
    "CorrelatedRecordFetcher",
    "FetchOutcome",
    "MetadataExporter",
    "render_metadata",
    "DumpRunner",
    "DumpSummary",
    "ShardSummary",
    "NullProgress",
    "ProgressReporter",
    "RichProgress",
    "RankedShard",
    "ShardRanker",
    "OutputSink",
    "bson_artifact",
    "metadata_artifact",
]
