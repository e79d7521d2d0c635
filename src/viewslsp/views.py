"""
Built-in Views parser.

A small line-oriented reader for ``.view`` sources that produces the warning
records the validation pipeline consumes.  It knows just enough of the
language to check cross-file references:

- a line starting with an upper-case word opens a block (``Name`` or
  ``Name Type``); the type must be a primitive or a view found in the project,
- any other non-comment line is a property (``name value``) of the current
  block,
- ``# ...`` lines are comments,
- a value starting with ``<`` marks a slot.

Warning lines are 1-based and columns 0-based, matching what the server
expects from any parser plugged into it.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

# Blocks that need no view definition in the project.
PRIMITIVES = frozenset({
    'Capture', 'CaptureTextArea', 'Column', 'Horizontal', 'Image', 'List',
    'Proxy', 'Svg', 'SvgCircle', 'SvgEllipse', 'SvgGroup', 'SvgLine',
    'SvgPath', 'SvgPolygon', 'SvgPolyline', 'SvgRect', 'SvgText', 'Table',
    'Text', 'Vertical',
})

# fontFamily values that never need a custom font file.
GENERIC_FONT_FAMILIES = frozenset({
    'cursive', 'fantasy', 'inherit', 'monospace', 'sans-serif', 'serif',
    'system-ui',
})

_BLOCK_RE = re.compile(r'^(?P<name>[A-Z][A-Za-z0-9]*)(?:\s+(?P<type>[A-Z][A-Za-z0-9]*))?\s*$')
_PROP_RE = re.compile(r'^(?P<name>[a-z][\w:.-]*)(?:\s+(?P<value>.*))?$')


@dataclass(frozen=True)
class LocPoint:
    line: int       # 1-based
    column: int     # 0-based


@dataclass(frozen=True)
class Loc:
    start: LocPoint
    end: LocPoint


@dataclass(frozen=True)
class WarningRecord:
    loc: Loc
    type: str
    line: str       # offending source line


@dataclass
class Slot:
    name: str
    prop: str
    default: str | None
    line: int


@dataclass
class Block:
    name: str
    type: str
    line: int
    props: dict[str, str] = field(default_factory=dict)


@dataclass
class ParsedView:
    blocks: list[Block] = field(default_factory=list)
    slots: list[Slot] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)
    warnings: list[WarningRecord] = field(default_factory=list)


def _warning(kind: str, line_no: int, start: int, end: int, text: str) -> WarningRecord:
    return WarningRecord(
        loc=Loc(start=LocPoint(line_no, start), end=LocPoint(line_no, end)),
        type=kind,
        line=text,
    )


def _parse_slot(prop: str, value: str, line_no: int, convert_slot_to_props: bool) -> Slot:
    head, _, default = value[1:].partition(' ')
    name = head or prop
    if convert_slot_to_props:
        name = f'props.{name}'
    return Slot(name=name, prop=prop, default=default.strip() or None, line=line_no)


def parse(
    custom_fonts=None,
    views=None,
    source: str = '',
    skip_comments: bool = True,
    convert_slot_to_props: bool = True,
) -> ParsedView:
    """Parse a Views *source* and collect warnings.

    *views* maps view ids to their defining files and *custom_fonts* maps font
    families to their faces; only the keys are consulted.
    """
    views = views or {}
    custom_fonts = custom_fonts or {}
    result = ParsedView()
    current: Block | None = None

    for line_no, raw in enumerate(source.splitlines(), start=1):
        text = raw.rstrip()
        stripped = text.lstrip()
        if not stripped:
            continue
        indent = len(text) - len(stripped)

        if stripped.startswith('#'):
            if not skip_comments:
                result.comments.append(stripped[1:].strip())
            continue

        m = _BLOCK_RE.match(stripped)
        if m:
            name = m.group('name')
            type_ = m.group('type') or name
            current = Block(name=name, type=type_, line=line_no)
            result.blocks.append(current)
            if type_ not in PRIMITIVES and type_ not in views:
                start = indent + (m.start('type') if m.group('type') else m.start('name'))
                result.warnings.append(
                    _warning('UnknownBlock', line_no, start, start + len(type_), raw))
            continue

        m = _PROP_RE.match(stripped)
        if m is None or current is None:
            result.warnings.append(
                _warning('PropWithoutBlock' if m else 'UnknownLine',
                         line_no, indent, len(text), raw))
            continue

        prop = m.group('name')
        value = (m.group('value') or '').strip()
        if prop in current.props:
            result.warnings.append(
                _warning('DuplicateProp', line_no, indent, indent + len(prop), raw))
        current.props[prop] = value

        if value.startswith('<'):
            result.slots.append(_parse_slot(prop, value, line_no, convert_slot_to_props))
        elif prop == 'fontFamily' and custom_fonts:
            family = value.split(',')[0].strip().strip('"\'')
            if family and family not in custom_fonts and family.lower() not in GENERIC_FONT_FAMILIES:
                start = indent + m.start('value')
                result.warnings.append(
                    _warning('UnknownFont', line_no, start, len(text), raw))

    return result
