"""
Runtime snapshot providers.

A RuntimeSnapshot is built once, before any check runs, by one of these
providers and handed to the checker. Providers:

- MetadataInfoProvider: the running interpreter and its installed
  distributions
- DumpInfoProvider: a saved info dump (HTML with <h2> sections and
  <th>/<td> rows, as produced by phpinfo()-style status pages)
- StaticInfoProvider: a fixed mapping, for tests
"""

import logging
import platform
import re
from abc import ABC, abstractmethod
from importlib import metadata
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

from .models import RuntimeSnapshot, SnapshotValue

logger = logging.getLogger(__name__)

_KEEP_TAGS = re.compile(r'<(?!/?(?:h2|th|td)\b)[^>]*>', re.IGNORECASE)
_CELL = re.compile(r'<(th|td)[^>]*>([^<]+)</\1>', re.IGNORECASE)
_HEADING = re.compile(r'(<h2[^>]*>[^<]+</h2>)', re.IGNORECASE)
_HEADING_TEXT = re.compile(r'<h2[^>]*>([^<]+)</h2>', re.IGNORECASE)
_INFO = r'<info>([^<]+)</info>'
_THREE_COLUMNS = re.compile(rf'{_INFO}\s*{_INFO}\s*{_INFO}')
_TWO_COLUMNS = re.compile(rf'{_INFO}\s*{_INFO}')


def parse_info_dump(text: str) -> Dict[str, Dict[str, SnapshotValue]]:
    """
    Scrape an HTML info dump into section -> key -> value.

    Each <h2> starts a section. Rows with three cells become
    key -> (local, master); rows with two cells become key -> value.
    Everything else is ignored.
    """
    text = _KEEP_TAGS.sub('', text)
    text = _CELL.sub(lambda m: f"<info>{m.group(2)}</info>", text)
    chunks = _HEADING.split(text)

    data: Dict[str, Dict[str, SnapshotValue]] = {}
    # chunks alternate: preamble, heading, body, heading, body...
    for i in range(1, len(chunks) - 1, 2):
        match = _HEADING_TEXT.match(chunks[i])
        if not match:
            continue
        section = data.setdefault(match.group(1).strip(), {})
        for line in chunks[i + 1].split('\n'):
            three = _THREE_COLUMNS.search(line)
            if three:
                section[three.group(1).strip()] = (three.group(2).strip(), three.group(3).strip())
                continue
            two = _TWO_COLUMNS.search(line)
            if two:
                section[two.group(1).strip()] = two.group(2).strip()

    return data


class PlatformInfoProvider(ABC):
    """Builds the runtime snapshot."""

    @abstractmethod
    def snapshot(self) -> RuntimeSnapshot:
        """Return a freshly built snapshot."""


class StaticInfoProvider(PlatformInfoProvider):
    """Snapshot from a fixed mapping."""

    def __init__(self, sections: Optional[Mapping[str, Mapping[str, SnapshotValue]]] = None):
        self.sections = sections or {}

    def snapshot(self):
        return RuntimeSnapshot(self.sections)


class DumpInfoProvider(PlatformInfoProvider):
    """Snapshot scraped from a saved info dump (text or file path)."""

    def __init__(self, source: Union[str, Path]):
        self.source = source

    def snapshot(self):
        if isinstance(self.source, Path):
            text = self.source.read_text(errors='replace')
        else:
            text = self.source
        return RuntimeSnapshot(parse_info_dump(text))


class MetadataInfoProvider(PlatformInfoProvider):
    """
    Snapshot of the running interpreter.

    One "Python" section describing the interpreter, plus one section per
    installed distribution keyed by its project name.
    """

    def snapshot(self):
        sections: Dict[str, Dict[str, SnapshotValue]] = {
            'Python': {
                'Python Version': platform.python_version(),
                'Implementation': platform.python_implementation(),
                'Compiler': platform.python_compiler(),
                'Build Date': ' '.join(platform.python_build()[1:]),
            }
        }

        for dist in metadata.distributions():
            name = dist.metadata.get('Name')
            if not name or name in sections:
                continue
            sections[name] = {
                'Version': dist.version or '',
                'Summary': dist.metadata.get('Summary') or '',
            }

        logger.debug(f"Built runtime snapshot with {len(sections)} sections")
        return RuntimeSnapshot(sections)
