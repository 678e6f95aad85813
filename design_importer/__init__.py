"""
Design Import & Normalization Pipeline

Turns design screenshots with geometric metadata, or raw markup, into an
editable component tree over a fixed vocabulary of layout and content
primitives.
"""

__version__ = "0.1.0"
