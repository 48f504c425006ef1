import pytest

from linguadeck_app.modules.media.interface import MediaInterface
from linguadeck_app.modules.media.logics.media_rewriter import (
    prefix_media_url,
    rewrite_media_references,
    sanitize_caption,
)

HOST = 'http://localhost'
BASE = '/uploads/apkg/1/friends/extract/media'


class TestRewriteMediaReferences:
    @pytest.mark.parametrize('src', [
        'http://cdn.example.com/a.png',
        'https://cdn.example.com/a.png',
        'data:image/png;base64,AAAA',
    ])
    def test_absolute_sources_untouched(self, src):
        html = f'<img src="{src}">'
        assert rewrite_media_references(html, BASE, HOST) == html

    def test_bare_filename_uses_media_base(self):
        result = rewrite_media_references('<img src="cat.jpg">', BASE, HOST)
        assert result == f'<img src="{HOST}{BASE}/cat.jpg">'

    def test_dot_segments_are_stripped(self):
        result = rewrite_media_references("<img alt='x' src='../cat.jpg'>", BASE, HOST)
        assert result == f"<img alt='x' src='{HOST}{BASE}/cat.jpg'>"
        result = rewrite_media_references('<img src="./dog.jpg">', BASE, HOST)
        assert result == f'<img src="{HOST}{BASE}/dog.jpg">'

    def test_root_relative_gets_host_without_base(self):
        result = rewrite_media_references('<img src="/static/a.png">', '', HOST)
        assert result == f'<img src="{HOST}/static/a.png">'

    def test_relative_kept_without_base(self):
        assert rewrite_media_references('<img src="cat.jpg">', '', HOST) == '<img src="cat.jpg">'

    def test_text_without_images(self):
        assert rewrite_media_references('plain <b>text</b>', BASE, HOST) == 'plain <b>text</b>'
        assert rewrite_media_references(None, BASE, HOST) == ''


class TestPrefixMediaUrl:
    def test_values(self):
        assert prefix_media_url(None, HOST) is None
        assert prefix_media_url('', HOST) == ''
        assert prefix_media_url('https://cdn/a.mp3', HOST) == 'https://cdn/a.mp3'
        assert prefix_media_url('/uploads/a.mp3', HOST + '/') == f'{HOST}/uploads/a.mp3'
        assert prefix_media_url('media/a.mp3', HOST) == f'{HOST}/media/a.mp3'


class TestSanitizeCaption:
    def test_noise_lines_removed(self):
        assert sanitize_caption('sentence:123456 sentence\nHello there') == 'Hello there'

    def test_broken_img_src_repaired(self):
        assert sanitize_caption('<img src\n"a.jpg">') == '<img src="a.jpg">'
        assert sanitize_caption('<img src "a.jpg">') == '<img src="a.jpg">'

    @pytest.mark.parametrize('caption, expected', [
        ('gato = cat', 'gato\ncat'),
        ('dog - cão', 'dog\ncão'),
        ('obrigado → thank you', 'obrigado\nthank you'),
    ])
    def test_delimiters_split_once(self, caption, expected):
        assert sanitize_caption(caption) == expected

    def test_lines_with_markup_are_not_split(self):
        assert sanitize_caption('<b>gato</b> - cat') == '<b>gato</b> - cat'

    def test_cjk_followed_by_latin(self):
        assert sanitize_caption('猫です cat') == '猫です\ncat'

    def test_excess_blank_lines_collapsed(self):
        assert sanitize_caption('a\n\n\n\nb\n') == 'a\n\nb'
        assert sanitize_caption(None) == ''


def test_rewrite_card_texts_sanitizes_back_only():
    front, back = MediaInterface.rewrite_card_texts(
        'one - two <img src="f.jpg">',
        'sentence:1 sentence\n<img src="b.jpg">',
        BASE,
        HOST,
    )
    assert front == f'one - two <img src="{HOST}{BASE}/f.jpg">'
    assert back == f'<img src="{HOST}{BASE}/b.jpg">'
