"""Logseek: block-aware reading, searching and editing of Logseq graphs."""

__version__ = "0.1.0"
