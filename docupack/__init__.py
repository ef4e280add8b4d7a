"""Incremental Markdown-to-JSON packer.

Keeps a destination tree of JSON artifacts synchronized with a source tree of
Markdown documents carrying YAML frontmatter, plus an optional aggregate
index.json.
"""

__version__ = "0.1.0"
