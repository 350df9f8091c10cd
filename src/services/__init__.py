"""Service layer for conversation ingestion, mention detection and citation metrics."""
