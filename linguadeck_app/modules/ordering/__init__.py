# File: linguadeck_app/modules/ordering/__init__.py
"""
Ordering Module
===============
Derives a sortable key (season, episode, video timestamp, scene, line) from
noisy card metadata and media filenames, and arranges card lists with
per-episode display numbering.
"""
