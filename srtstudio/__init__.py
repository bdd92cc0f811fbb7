"""SRT Studio - chunked, resumable LLM editing pipeline for subtitle files."""

__version__ = "0.1.0"
