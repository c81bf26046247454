"""
bobble

Explore the module graph of a webpack build and find out what cutting a
module or a dependency would save.
"""

__version__ = "0.1.0"
