"""
Batch orchestration.

  - run_batch: Validate many articles (optionally in parallel) into a BatchSummary
  - Document sources: in-memory articles and JSON files on disk
"""
from .batch_runner import run_batch, run_batch_sync, summarize
from .sources import DocumentSource, InMemorySource, JsonFileSource, expand_paths
