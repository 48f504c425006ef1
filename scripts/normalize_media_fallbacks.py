"""
Global media normalization for every card:

1. clear the front audio of cards that have a front video;
2. use the back audio as front audio when the front has neither;
3. backfill video_order_key from video filenames;
4. replace the legacy "Tradução indisponível" back text on dialogue decks.

Run from the project root: ``python scripts/normalize_media_fallbacks.py``
"""

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from linguadeck_app import create_app  # noqa: E402
from linguadeck_app.modules.media.interface import MediaInterface  # noqa: E402


def main() -> int:
    app = create_app()
    with app.app_context():
        try:
            report = MediaInterface.normalize_media_fallbacks()
        except Exception as exc:
            app.logger.exception("Media normalization failed")
            print(f"Media normalization failed: {exc}")
            return 1
    print(f"Front audio cleared on cards with a front video: {report.front_audio_cleared}")
    print(f"Front audio filled from back audio: {report.front_audio_filled}")
    print(f"Video order keys backfilled: {report.video_keys_backfilled}")
    print(f"Placeholder back texts replaced: {report.placeholders_replaced}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
