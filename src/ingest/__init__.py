"""Operation stream ingestion.

This module reads producer and consumer operations from JSONL files.
It replays them against a history index for inspection.
"""
