"""Ingestion package for offline pipelines.

Contains command-line ingestors that add chunked, embedded content to the
persisted similarity index. See ingest_file.py for local text files.
"""
