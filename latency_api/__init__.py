"""Order latency ingestion and time-windowed query service."""
