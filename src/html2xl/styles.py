import re
import logging
from dataclasses import dataclass
from typing import Dict, NamedTuple, Optional

from .errors import StyleParseError

logger = logging.getLogger(__name__)

# Characters kept when reading a numeric length such as "120px"
_NON_NUMERIC = re.compile(r'[^0-9.+\-]')
_HEX_COLOR = re.compile(r'^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')
_RGB_COLOR = re.compile(r'^rgb\((\d{1,3}),(\d{1,3}),(\d{1,3})\)$', re.IGNORECASE)

# The sixteen basic CSS color keywords
NAMED_COLORS = {
    'black': '#000000',
    'silver': '#C0C0C0',
    'gray': '#808080',
    'white': '#FFFFFF',
    'maroon': '#800000',
    'red': '#FF0000',
    'purple': '#800080',
    'fuchsia': '#FF00FF',
    'green': '#008000',
    'lime': '#00FF00',
    'olive': '#808000',
    'yellow': '#FFFF00',
    'navy': '#000080',
    'blue': '#0000FF',
    'teal': '#008080',
    'aqua': '#00FFFF',
}


class RGB(NamedTuple):
    red: int
    green: int
    blue: int

    def to_hex(self) -> str:
        return f'#{self.red:02X}{self.green:02X}{self.blue:02X}'


@dataclass(frozen=True)
class Border:
    """Border applied identically to all four edges of a cell"""
    color: RGB
    weight: str = 'thin'


@dataclass(frozen=True)
class StyleRecord:
    """Parsed inline style of a row or cell. Unset properties stay None."""
    width: Optional[float] = None
    height: Optional[float] = None
    border: Optional[Border] = None

    def is_empty(self) -> bool:
        return self.width is None and self.height is None and self.border is None

    def merged_over(self, base: 'StyleRecord') -> 'StyleRecord':
        """Return a record where the properties set on self win over base"""
        return StyleRecord(
            width=self.width if self.width is not None else base.width,
            height=self.height if self.height is not None else base.height,
            border=self.border if self.border is not None else base.border
        )


def parse_color(color: str) -> RGB:
    """Convert an HTML color (#rgb, #rrggbb, rgb(r,g,b) or a keyword) to RGB"""
    value = color.strip()
    value = NAMED_COLORS.get(value.lower(), value)

    match = _HEX_COLOR.match(value)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = ''.join(c * 2 for c in digits)
        return RGB(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    match = _RGB_COLOR.match(value)
    if match:
        channels = [int(c) for c in match.groups()]
        if all(c <= 255 for c in channels):
            return RGB(*channels)

    raise StyleParseError(f"Invalid color value: '{color}'", property='color', value=color)


def _parse_length(name: str, value: str) -> Dict:
    number = _NON_NUMERIC.sub('', value)
    try:
        return {name: float(number)}
    except ValueError:
        raise StyleParseError(
            f"Invalid numeric value for '{name}': '{value.strip()}'",
            property=name,
            value=value
        ) from None


def _parse_border(name: str, value: str) -> Dict:
    tokens = value.split()
    if len(tokens) != 3:
        # Shorthands other than "<width> <style> <color>" are not supported
        logger.debug(f"Ignoring border declaration '{value.strip()}'")
        return {}
    try:
        color = parse_color(tokens[2])
    except StyleParseError as e:
        raise StyleParseError(str(e), property=name, value=value) from None
    return {'border': Border(color=color)}


_PROPERTY_PARSERS = {
    'width': _parse_length,
    'height': _parse_length,
    'border': _parse_border,
}


def parse_style(css_text: str) -> StyleRecord:
    """Parse an inline style attribute into a StyleRecord.

    Only width, height and border are recognized; other properties are
    ignored. A later declaration of the same property overwrites an earlier
    one. Raises StyleParseError for a declaration without a colon or a
    non-numeric width/height.
    """
    properties = {}
    for declaration in css_text.split(';'):
        if not declaration.strip():
            continue
        if ':' not in declaration:
            raise StyleParseError(
                f"Malformed CSS declaration (missing ':'): '{declaration.strip()}'",
                value=declaration
            )
        name, value = declaration.split(':', 1)
        name = name.strip().lower()

        parser = _PROPERTY_PARSERS.get(name)
        if parser is None:
            continue
        properties.update(parser(name, value))

    return StyleRecord(**properties)
