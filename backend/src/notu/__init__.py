"""
Notu Backend - Notes with friends

A notes-taking API with trash, image attachments, likes and a friends graph.

Version: 1.0.0
"""

__version__ = "1.0.0"
