# File: linguadeck_app/modules/decks/__init__.py
"""
Decks Module
============
Global dialogue decks: reconciling them against the dialogue library,
composing card views (synthesized or persisted), materializing views into
card rows, and the JSON API over these operations.
"""
