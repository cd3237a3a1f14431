"""
Reference file generation.

Writes a plain-text listing of every identifier in an enumeration so mod
authors can look up valid names while editing configuration files.
"""

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Union

from jinja2 import Environment, FileSystemLoader, TemplateError, TemplateNotFound

logger = logging.getLogger(__name__)

REFERENCE_TEMPLATE = "reference.txt.j2"


@dataclass
class ReferenceEntry:
    name: str
    value: Any = None


class ReferenceFileGenerator:
    """Renders identifier listings from the reference template."""

    def __init__(self, template_dir: Optional[Union[str, Path]] = None):
        """
        Initialize reference file generator.

        Args:
            template_dir: Directory containing Jinja2 templates
        """
        if template_dir is None:
            template_dir = Path(__file__).parent.parent / "templates"

        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            autoescape=False
        )

    @staticmethod
    def collect_entries(identifiers: Union[type, Mapping[str, Any], Iterable[Any]]) -> List[ReferenceEntry]:
        """Normalize an Enum class, a mapping or an iterable of names into entries."""
        if isinstance(identifiers, type) and issubclass(identifiers, enum.Enum):
            return [ReferenceEntry(member.name, member.value) for member in identifiers]

        if isinstance(identifiers, Mapping):
            return [ReferenceEntry(str(name), value) for name, value in identifiers.items()]

        return [ReferenceEntry(str(name)) for name in identifiers]

    def render(self, identifiers, title: str, source: Optional[str] = None) -> str:
        """Render the listing, falling back to plain formatting if the template is unusable."""
        entries = self.collect_entries(identifiers)

        try:
            template = self.env.get_template(REFERENCE_TEMPLATE)
            return template.render(title=title, source=source, entries=entries)
        except TemplateNotFound:
            logger.warning(f"Template {REFERENCE_TEMPLATE} not found in {self.template_dir}, using built-in format")
        except TemplateError as e:
            logger.warning(f"Reference template failed ({e}), using built-in format")

        return self._render_builtin(entries, title, source)

    @staticmethod
    def _render_builtin(entries: List[ReferenceEntry], title: str, source: Optional[str]) -> str:
        lines = [title, "=" * len(title), ""]
        if source:
            lines.append(f"Source: {source}")
        lines.append(f"Identifiers: {len(entries)}")
        lines.append("")

        for entry in entries:
            lines.append(entry.name if entry.value is None else f"{entry.name} = {entry.value}")

        return "\n".join(lines) + "\n"

    def write(self, identifiers, output_path: Union[str, Path], title: Optional[str] = None) -> Path:
        """
        Write the reference listing to disk.

        Args:
            identifiers: Enum class, mapping of name to value, or iterable of names
            output_path: File to write
            title: Heading; defaults to the enum's name

        Returns:
            Path to the written file
        """
        source = None
        if isinstance(identifiers, type):
            source = f"{identifiers.__module__}.{identifiers.__qualname__}"
            title = title or identifiers.__name__

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        content = self.render(identifiers, title or "Identifiers", source)
        output_path.write_text(content, encoding='utf-8')

        logger.info(f"Wrote reference file {output_path}")
        return output_path
