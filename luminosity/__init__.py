"""
Lightroom Catalog Statistics and Preview Extraction Package

This package reads Adobe Lightroom Classic catalogs (.lrcat files) and their
preview caches, producing mergeable statistics about the photos they contain,
reporting on JPEG sidecar files, and extracting cached preview images.
"""

__version__ = "1.0.0"
