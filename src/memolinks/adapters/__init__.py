"""Filesystem, frontmatter and output adapters."""
