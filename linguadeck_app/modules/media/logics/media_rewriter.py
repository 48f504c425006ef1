"""
Pure text transforms for media references and imported captions.
"""

import re
from typing import Optional

ABSOLUTE_URL_REGEX = re.compile(r'^https?://', re.I)
DATA_URL_REGEX = re.compile(r'^data:', re.I)
IMG_SRC_REGEX = re.compile(r'''(<img[^>]+src=["'])([^"']+)(["'][^>]*>)''', re.I)

# "sentence:123456 sentence" lines left behind by some package exporters
SENTENCE_NOISE_LINE_REGEX = re.compile(r'(^|\n)\s*sentence:\s*\d+\s*sentence\s*(?=\n|\Z)', re.I)
SENTENCE_NOISE_REGEX = re.compile(r'\bsentence:\s*\d+\s*sentence\b', re.I)

# <img src\n "..."> and <img src "..."> -> <img src="...">
IMG_SRC_LINEBREAK_REGEX = re.compile(r'''(<img[^>]*\bsrc)\s*[\r\n]+\s*(["'])''', re.I)
IMG_SRC_MISSING_EQUALS_REGEX = re.compile(r'''(<img[^>]*\bsrc)\s*(["'])''', re.I)

BR_REGEX = re.compile(r'<br\s*/?\s*>', re.I)
HTML_TAG_REGEX = re.compile(r'<[^>]+>')
DELIMITER_REGEXES = (
    re.compile(r'\s*=\s*'),
    re.compile(r'\s*-\s*'),
    re.compile(r'\s*→\s*'),
)

_HAN = '\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff\U00020000-\U0002a6df'
_HIRAGANA = '\u3040-\u309f'
_KATAKANA = '\u30a0-\u30ff\u31f0-\u31ff\uff66-\uff9f'
_CJK_CLASS = _HAN + _HIRAGANA + _KATAKANA
_LATIN_CLASS = 'A-Za-zÀ-ÖØ-öø-ÿ'

CJK_REGEX = re.compile(f'[{_CJK_CLASS}]')
LATIN_REGEX = re.compile(f'[{_LATIN_CLASS}]')
CJK_THEN_LATIN_REGEX = re.compile(
    f'^([{_CJK_CLASS}ー々ゝゞ〜、。！？・（）「」『』\\s]+)[\\s\\-–—=:→]*([{_LATIN_CLASS}].*)$'
)

EXCESS_NEWLINES_REGEX = re.compile(r'\n{3,}')


def _is_absolute(value: str) -> bool:
    return bool(ABSOLUTE_URL_REGEX.match(value) or DATA_URL_REGEX.match(value))


def prefix_media_url(url: Optional[str], request_host: str) -> Optional[str]:
    """Turn a stored audio/video URL into an absolute one; absolute and data URLs pass through."""
    if url is None:
        return None
    value = str(url).strip()
    if not value or _is_absolute(value):
        return value
    host = (request_host or '').rstrip('/')
    if value.startswith('/'):
        return f"{host}{value}"
    return f"{host}/{value}"


def rewrite_media_references(text: Optional[str], media_base: Optional[str], request_host: str) -> str:
    """
    Rewrite every ``<img src=...>`` in ``text``.

    - ``http(s)://`` and ``data:`` sources are left untouched.
    - Root-relative sources get the request host.
    - Bare or relative sources are resolved against ``media_base`` (leading
      ``./`` and ``../`` stripped); without a media base they are kept.
    """
    content = '' if text is None else str(text)
    host = (request_host or '').rstrip('/')
    base = (media_base or '').rstrip('/')

    def replace(match):
        prefix, src, suffix = match.group(1), match.group(2), match.group(3)
        value = src.strip()
        if not value:
            return match.group(0)
        if _is_absolute(value):
            return f"{prefix}{value}{suffix}"
        if value.startswith('/'):
            return f"{prefix}{host}{value}{suffix}"
        if not base:
            return match.group(0)
        clean = re.sub(r'^(\.\./)+', '', re.sub(r'^(\./)+', '', value))
        return f"{prefix}{host}{base}/{clean}{suffix}"

    return IMG_SRC_REGEX.sub(replace, content)


def _split_caption_line(line: str) -> str:
    if BR_REGEX.search(line):
        return line

    if not HTML_TAG_REGEX.search(line):
        for delimiter in DELIMITER_REGEXES:
            if delimiter.search(line):
                return delimiter.sub('\n', line, count=1)

    # Japanese/Chinese followed by its Latin-script translation on one line
    if CJK_REGEX.search(line) and LATIN_REGEX.search(line):
        match = CJK_THEN_LATIN_REGEX.match(line)
        if match:
            return f"{match.group(1).strip()}\n{match.group(2).strip()}"
    return line


def sanitize_caption(text: Optional[str]) -> str:
    """Clean an imported back-side caption for display."""
    content = '' if text is None else str(text)
    content = SENTENCE_NOISE_LINE_REGEX.sub(lambda m: m.group(1), content)
    content = SENTENCE_NOISE_REGEX.sub('', content)

    content = IMG_SRC_LINEBREAK_REGEX.sub(r'\1=\2', content)
    content = IMG_SRC_MISSING_EQUALS_REGEX.sub(r'\1=\2', content)

    content = content.replace('\r\n', '\n')
    content = '\n'.join(_split_caption_line(line) for line in content.split('\n'))
    return EXCESS_NEWLINES_REGEX.sub('\n\n', content).strip()
