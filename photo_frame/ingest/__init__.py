"""Photo ingestion pipeline."""

from .processor import PhotoProcessor, fetch_source, ingest_local_file

__all__ = ['PhotoProcessor', 'fetch_source', 'ingest_local_file']
