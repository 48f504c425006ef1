# File: linguadeck_app/modules/media/__init__.py
"""
Media Module
============
Resolves the media package of a deck, rewrites embedded media references
into playable URLs, cleans imported captions and maintains extracted
package directories.
"""
