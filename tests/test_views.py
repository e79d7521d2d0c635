"""Tests for viewslsp.views — the built-in Views parser."""
from __future__ import annotations

from viewslsp.views import parse

VALID_VIEW = """\
# Header of the app
Vertical
backgroundColor #fff
padding 10
Title Text
text <title Hello
Logo Image
source ./logo.png
"""


def _types(result):
    return [w.type for w in result.warnings]


class TestParse:
    def test_valid_view_has_no_warnings(self):
        result = parse(source=VALID_VIEW)
        assert result.warnings == []
        assert [b.type for b in result.blocks] == ['Vertical', 'Text', 'Image']
        assert result.blocks[1].name == 'Title'

    def test_comments_kept_unless_skipped(self):
        assert parse(source=VALID_VIEW, skip_comments=False).comments == ['Header of the app']
        assert parse(source=VALID_VIEW, skip_comments=True).comments == []

    def test_unknown_block_location(self):
        result = parse(source='Vertical\n  Card Panel\n')
        warning, = result.warnings
        assert warning.type == 'UnknownBlock'
        assert warning.loc.start.line == 2
        assert warning.loc.start.column == 7
        assert warning.loc.end.column == 12
        assert warning.line == '  Card Panel'

    def test_project_views_are_known_blocks(self):
        views = {'Panel': {'/p/src/Panel.view'}}
        assert parse(views=views, source='Card Panel\n').warnings == []

    def test_prop_without_block(self):
        assert _types(parse(source='padding 10\nVertical\n')) == ['PropWithoutBlock']

    def test_duplicate_prop(self):
        result = parse(source='Vertical\npadding 10\npadding 12\n')
        assert _types(result) == ['DuplicateProp']
        assert result.warnings[0].loc.start.line == 3
        assert result.blocks[0].props['padding'] == '12'

    def test_unknown_line(self):
        assert _types(parse(source='Vertical\nHello world\n')) == ['UnknownLine']

    def test_font_family_checked_against_custom_fonts(self):
        fonts = {'Roboto': set()}
        ok = parse(custom_fonts=fonts, source='Text\nfontFamily Roboto\n')
        assert ok.warnings == []
        generic = parse(custom_fonts=fonts, source='Text\nfontFamily sans-serif\n')
        assert generic.warnings == []
        bad = parse(custom_fonts=fonts, source='Text\nfontFamily Lato\n')
        warning, = bad.warnings
        assert warning.type == 'UnknownFont'
        assert warning.loc.start.column == len('fontFamily ')

    def test_font_family_unchecked_without_custom_fonts(self):
        assert parse(source='Text\nfontFamily Lato\n').warnings == []

    def test_slots(self):
        result = parse(source='Text\ntext <\ncolor <tint red\n', convert_slot_to_props=False)
        assert [(s.name, s.prop, s.default) for s in result.slots] == [
            ('text', 'text', None),
            ('tint', 'color', 'red'),
        ]
        converted = parse(source='Text\ntext <\n', convert_slot_to_props=True)
        assert converted.slots[0].name == 'props.text'
