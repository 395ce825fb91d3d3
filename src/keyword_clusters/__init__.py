"""Keyword clustering by shared SERP URLs and semantic similarity."""

__version__ = "0.1.0"
