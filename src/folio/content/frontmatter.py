"""
Front matter parsing and serialization.

A content file may open with a fenced metadata block:

    ---                ```json
    title: Hello       {"title": "Hello"}
    ---                ```

The opening fence either implies YAML (``---``) or declares the format on the
same line (``---json``, ```` ```ini ````). Everything after the closing fence is
the markdown body.
"""

from __future__ import annotations

import configparser
import io
import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any

import yaml
from frontmatter import JSONHandler, YAMLHandler

from folio.core.config import ContentConfig
from folio.core.errors import MalformedFrontMatter

logger = logging.getLogger(__name__)

# Checked in order; the first one the file starts with wins
FENCES = ("```", "---")
DEFAULT_FENCE = "---"
DEFAULT_FORMAT = "yaml"
FORMAT_ALIASES = {"": "yaml", "yml": "yaml"}
SUPPORTED_FORMATS = ("yaml", "json", "ini")

DATE_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d", "%d.%m.%Y", "%Y/%m/%d")
TRUE_STRINGS = {"1", "true", "yes", "on", "y"}

_INI_SECTION = "meta"


@dataclass
class FrontMatterBlock:
    """Raw split of a file into its metadata block and body."""

    separator: str | None
    format: str
    block: str
    body: str
    closed: bool = True

    @property
    def has_meta(self) -> bool:
        return self.separator is not None


@dataclass
class FrontMatterDocument:
    """A parsed content file."""

    meta: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    separator: str | None = None
    format: str = DEFAULT_FORMAT


def split_front_matter(text: str) -> FrontMatterBlock:
    """Split file text into fence, format, metadata block and body.

    Args:
        text: Full file text

    Returns:
        FrontMatterBlock; ``separator`` is None when the file has no fence
    """
    lines = text.splitlines(keepends=True)
    first = lines[0] if lines else ""
    separator = next((fence for fence in FENCES if first.startswith(fence)), None)

    if separator is None:
        return FrontMatterBlock(None, DEFAULT_FORMAT, "", text.lstrip())

    token = first.strip().lstrip(separator[0]).strip().lower()
    fmt = FORMAT_ALIASES.get(token, token)

    for i, line in enumerate(lines[1:], start=1):
        if line.startswith(separator):
            return FrontMatterBlock(
                separator,
                fmt,
                "".join(lines[1:i]),
                "".join(lines[i + 1:]).lstrip(),
            )

    # Unterminated block: keep the whole file as body so nothing is lost
    return FrontMatterBlock(separator, fmt, "".join(lines[1:]), text.lstrip(), closed=False)


def _load_ini(block: str) -> dict[str, Any]:
    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    if not block.lstrip().startswith("["):
        block = f"[{_INI_SECTION}]\n{block}"
    parser.read_string(block)

    data: dict[str, Any] = {}
    for section in parser.sections():
        values = dict(parser.items(section))
        if section == _INI_SECTION:
            data.update(values)
        else:
            data[section] = values
    return data


def _dump_ini(meta: dict[str, Any]) -> str:
    def _value(val: Any) -> str:
        if isinstance(val, (list, tuple)):
            return ", ".join(str(v) for v in val)
        if isinstance(val, bool):
            return "true" if val else "false"
        if isinstance(val, datetime):
            return val.isoformat(sep=" ")
        return str(val)

    lines = [f"{k} = {_value(v)}" for k, v in meta.items() if not isinstance(v, dict)]
    for section, values in meta.items():
        if isinstance(values, dict):
            lines.append(f"\n[{section}]")
            lines.extend(f"{k} = {_value(v)}" for k, v in values.items())
    return "\n".join(lines)


def parse_block(block: str, fmt: str = DEFAULT_FORMAT) -> dict[str, Any]:
    """Parse a metadata block in the given serialization format.

    Raises:
        MalformedFrontMatter: If the block cannot be parsed or is not a mapping
    """
    if not block.strip():
        return {}

    try:
        if fmt == "yaml":
            data = YAMLHandler().load(block)
        elif fmt == "json":
            data = JSONHandler().load(block)
        elif fmt == "ini":
            data = _load_ini(block)
        else:
            raise MalformedFrontMatter(f"Unsupported front matter format: {fmt!r}")
    except (yaml.YAMLError, json.JSONDecodeError, configparser.Error) as e:
        raise MalformedFrontMatter(f"Invalid {fmt} front matter: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise MalformedFrontMatter(
            f"Front matter must be a mapping, got {type(data).__name__}"
        )
    return data


def dump_block(meta: dict[str, Any], fmt: str = DEFAULT_FORMAT) -> str:
    """Serialize metadata in the given format (without fences)."""
    if not meta:
        return ""
    if fmt == "json":
        return JSONHandler().export(meta, default=str, ensure_ascii=False)
    if fmt == "ini":
        return _dump_ini(meta)
    return YAMLHandler().export(meta, sort_keys=False, width=120)


def to_datetime(value: Any) -> datetime | None:
    """Coerce a date-like value to a datetime.

    Accepts datetimes, dates, unix timestamps and common date strings.

    Returns:
        datetime, or None if the value cannot be interpreted
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
    return None


def to_bool(value: Any) -> bool:
    """Coerce a loosely typed value to bool ("yes", "on", "1" are true)."""
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    return bool(value)


def to_int(value: Any) -> int:
    """Coerce a value to int, falling back to 0 when it is not numeric."""
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return 0


class FrontMatterParser:
    """Parses, normalizes and serializes front matter.

    Normalization lower-cases the first letter of every key and coerces the
    configured fields to lists, datetimes, ints and bools.
    """

    def __init__(
        self,
        comma_list_fields: tuple[str, ...] = ("keywords", "tags"),
        date_fields: tuple[str, ...] = ("published", "updated"),
        int_fields: tuple[str, ...] = (),
        bool_fields: tuple[str, ...] = (),
    ):
        self.comma_list_fields = tuple(comma_list_fields)
        self.date_fields = tuple(date_fields)
        self.int_fields = tuple(int_fields)
        self.bool_fields = tuple(bool_fields)

    @classmethod
    def from_config(cls, config: ContentConfig) -> FrontMatterParser:
        return cls(
            comma_list_fields=config.comma_list_fields,
            date_fields=config.date_fields,
            int_fields=config.int_fields,
            bool_fields=config.bool_fields,
        )

    def normalize(self, meta: dict[str, Any]) -> dict[str, Any]:
        """Return a normalized copy of a metadata mapping."""
        result: dict[str, Any] = {}
        for key, value in meta.items():
            key = str(key)
            result[key[:1].lower() + key[1:]] = value

        for key in self.comma_list_fields:
            if isinstance(result.get(key), str):
                result[key] = [part.strip() for part in result[key].split(",") if part.strip()]

        for key in self.date_fields:
            if result.get(key) is not None and not isinstance(result[key], datetime):
                parsed = to_datetime(result[key])
                if parsed is None:
                    logger.debug("Could not parse %s=%r as a date", key, result[key])
                else:
                    result[key] = parsed

        for key in self.int_fields:
            if result.get(key) is not None and not isinstance(result[key], int):
                result[key] = to_int(result[key])

        for key in self.bool_fields:
            if result.get(key) is not None and not isinstance(result[key], bool):
                result[key] = to_bool(result[key])

        return result

    def parse(self, text: str) -> FrontMatterDocument:
        """Parse full file text into normalized metadata and body.

        Raises:
            MalformedFrontMatter: If the metadata block is invalid
        """
        split = split_front_matter(text)
        if not split.has_meta:
            return FrontMatterDocument({}, split.body, None, DEFAULT_FORMAT)
        if not split.closed:
            raise MalformedFrontMatter(f"Unterminated front matter block (missing {split.separator})")

        meta = self.normalize(parse_block(split.block, split.format))
        return FrontMatterDocument(meta, split.body, split.separator, split.format)

    def dump(
        self,
        meta: dict[str, Any],
        body: str,
        separator: str | None = DEFAULT_FENCE,
        fmt: str = DEFAULT_FORMAT,
    ) -> str:
        """Serialize metadata and body into file text.

        Unsupported formats fall back to YAML. The closing fence is followed by
        a blank line and the body.
        """
        separator = separator or DEFAULT_FENCE
        fmt = FORMAT_ALIASES.get(fmt, fmt)
        if fmt not in SUPPORTED_FORMATS:
            fmt = DEFAULT_FORMAT

        # "---" implies YAML so the token is only written for other formats
        token = "" if (separator == "---" and fmt == "yaml") else fmt
        block = dump_block(self.normalize(meta), fmt)

        out = io.StringIO()
        out.write(f"{separator}{token}\n")
        if block:
            out.write(block.rstrip("\n") + "\n")
        out.write(f"{separator}\n\n")
        out.write(body)
        return out.getvalue()
