"""
Wikipedia Golf.

Navigate from one Wikipedia article to another by following in-article
links, in as few strokes as possible. Every day all players share the
same deterministic daily challenge.
"""

__version__ = "0.1.0"
