import re
from typing import List, Optional, Set


class DialogueScriptParser:
    """
    Parses dialogue script files. Two layouts exist in the library:

    Simple, one entry per line (blank lines and ``#`` comments ignored)::

        Hey, how are you?
        Fine, thanks.

    Labelled blocks, used by the multi-language source script::

        title: At the cafe
        speaker: Anna
        text: Hey, how are you?
        pt: Oi, tudo bem?
        es: Hola, ¿qué tal?

        speaker: Ben
        text: Fine, thanks.
        pt: Tudo ótimo.

    A ``speaker:`` or ``text:`` label opens a new block once the current one
    holds content. ``text`` carries the source-language line; two-letter
    labels carry translations.
    """

    # Group 1: label (two-letter language code, title, speaker, text)
    # Group 2: value
    LABEL_REGEX = re.compile(r'^([a-z]{2}|title|speaker|text)\s*:\s*(.*)$', re.IGNORECASE)
    HAS_LABELS_REGEX = re.compile(r'^([a-z]{2}|speaker|text)\s*:', re.IGNORECASE)
    LANGUAGE_LABEL_REGEX = re.compile(r'^([a-z]{2})\s*:\s*(.*)$', re.IGNORECASE)

    STRUCTURAL_LABELS = ('title', 'speaker')

    @staticmethod
    def _split_lines(content: str) -> List[str]:
        return [line.strip() for line in re.split(r'\r?\n', content or '')]

    @staticmethod
    def parse_simple(content: str, comment_prefix: str = '#') -> List[str]:
        """Return non-empty, non-comment lines. Labels such as ``TITLE:`` are kept as text."""
        return [
            line for line in DialogueScriptParser._split_lines(content)
            if line and not line.startswith(comment_prefix)
        ]

    @staticmethod
    def has_labels(content: str) -> bool:
        return any(
            DialogueScriptParser.HAS_LABELS_REGEX.match(line)
            for line in DialogueScriptParser._split_lines(content)
        )

    @staticmethod
    def _parse_blocks(content: str) -> List[dict]:
        blocks: List[dict] = []
        current: dict = {}

        def has_content(block: dict) -> bool:
            return any(
                value for key, value in block.items()
                if key not in DialogueScriptParser.STRUCTURAL_LABELS
            )

        for line in DialogueScriptParser._split_lines(content):
            if not line:
                continue
            match = DialogueScriptParser.LABEL_REGEX.match(line)
            if not match:
                continue
            label = match.group(1).lower()
            value = match.group(2)

            if label in ('speaker', 'text') and has_content(current):
                blocks.append(current)
                current = {}
            current[label] = value

        if has_content(current):
            blocks.append(current)
        return blocks

    @staticmethod
    def parse_labelled(content: str, language: str, source_language: str) -> Optional[List[str]]:
        """
        Extract the lines of ``language`` from a labelled script.

        Only blocks with a ``text`` entry count as dialogue lines, so every
        language yields the same number of slots; a block lacking the requested
        translation yields an empty string. Returns ``None`` when the script is
        not labelled or never mentions ``language``.
        """
        if not DialogueScriptParser.has_labels(content):
            return None

        language = (language or '').lower()
        entries = [block for block in DialogueScriptParser._parse_blocks(content) if block.get('text')]
        if not entries:
            return None

        if language == (source_language or '').lower():
            return [str(block['text']).strip() for block in entries]

        if not any(block.get(language) for block in entries):
            return None
        return [str(block.get(language) or '').strip() for block in entries]

    @staticmethod
    def labelled_languages(content: str) -> Set[str]:
        """Return every two-letter language label present in a script."""
        found: Set[str] = set()
        for line in DialogueScriptParser._split_lines(content):
            match = DialogueScriptParser.LANGUAGE_LABEL_REGEX.match(line)
            if match:
                found.add(match.group(1).lower())
        return found


def dialogue_key_to_title(key: str) -> str:
    """``at_the-cafe`` -> ``At The Cafe``."""
    return ' '.join(
        part[:1].upper() + part[1:]
        for part in re.split(r'[_-]', key or '')
    )
