"""
Seedgen: context-weighted n-gram text generation service.
"""

__version__ = "1.0.0"
