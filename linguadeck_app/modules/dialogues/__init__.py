# File: linguadeck_app/modules/dialogues/__init__.py
"""
Dialogues Module
================
Read-only access to the dialogue script library: per-language line files,
labelled multi-language scripts and the per-line audio tree.
"""
