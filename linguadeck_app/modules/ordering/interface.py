# File: linguadeck_app/modules/ordering/interface.py
"""Public entry points of the ordering module for other modules."""

from .logics.ordering_key import (
    arrange_cards,
    compare_ordering_keys,
    extract_media_base,
    extract_ordering_key,
    extract_video_timestamp_key,
    ordering_sort_key,
)
from .schemas import OrderingKey

__all__ = [
    'OrderingKey',
    'arrange_cards',
    'compare_ordering_keys',
    'extract_media_base',
    'extract_ordering_key',
    'extract_video_timestamp_key',
    'ordering_sort_key',
]
