"""Payload formats for job-state snapshots.

Each format turns a JobState into bytes. Both work from the same plain-data
form (``JobState.to_wire()``), so absent fields are omitted everywhere.

JSON:
    UTF-8 object with camelCase keys, e.g.
    ``{"name": "app", "fullName": "team/app", "url": "job/app/",
    "build": {"number": 7, "phase": "STARTED", ...}}``

XML:
    UTF-8 document rooted at ``<jobState>``; each present field becomes a
    child element of the same name. Mappings (``parameters``, ``userData``)
    hold ``<entry key="...">value</entry>`` children, ``scm`` holds
    ``<change>`` elements, ``failedTests`` holds ``<test>`` elements and
    ``artifacts`` holds ``<artifact name="...">`` elements.
"""

import json
import re
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from typing import Any, Dict

from build_notifier.config.models import Format
from build_notifier.domain.models import JobState

from .models import NotificationConfigurationError, SerializationError

# Element names for list items; everything else is a plain element or entry map
_LIST_ITEM_TAGS = {"scm": "change", "failedTests": "test"}
_ENTRY_MAPS = {"parameters", "userData"}
# Characters outside the XML 1.0 Char production, e.g. ANSI escapes in console logs
_INVALID_XML_CHARS = re.compile("[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def xml_text(value: Any) -> str:
    """``value`` as text with characters XML 1.0 cannot carry removed."""
    return _INVALID_XML_CHARS.sub("", str(value))


class BaseFormat(ABC):
    """Serializer for one payload encoding."""

    name: str = ""
    content_type: str = "application/octet-stream"

    def serialize(self, job_state: JobState) -> bytes:
        """Encode ``job_state``.

        Raises:
            SerializationError: If the snapshot cannot be encoded
        """
        try:
            return self._encode(job_state.to_wire())
        except SerializationError:
            raise
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Failed to encode job state as {self.name}: {e}") from e

    @abstractmethod
    def _encode(self, data: Dict[str, Any]) -> bytes:
        pass


class JsonFormat(BaseFormat):
    name = "JSON"
    content_type = "application/json"

    def _encode(self, data: Dict[str, Any]) -> bytes:
        return json.dumps(data, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


class XmlFormat(BaseFormat):
    name = "XML"
    content_type = "application/xml"

    ROOT_TAG = "jobState"

    def _encode(self, data: Dict[str, Any]) -> bytes:
        root = ET.Element(self.ROOT_TAG)
        for key, value in data.items():
            self._append(root, key, value)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)

    def _append(self, parent: ET.Element, tag: str, value: Any) -> None:
        element = ET.SubElement(parent, tag)

        if tag in _ENTRY_MAPS:
            for key, item in value.items():
                entry = ET.SubElement(element, "entry", key=xml_text(key))
                entry.text = xml_text(item)
        elif tag == "artifacts":
            for file_name, links in value.items():
                artifact = ET.SubElement(element, "artifact", name=xml_text(file_name))
                for link_kind, link in links.items():
                    ET.SubElement(artifact, link_kind).text = xml_text(link)
        elif isinstance(value, dict):
            for key, item in value.items():
                self._append(element, key, item)
        elif isinstance(value, list):
            item_tag = _LIST_ITEM_TAGS.get(tag, "item")
            for item in value:
                self._append(element, item_tag, item)
        elif isinstance(value, bool):
            element.text = "true" if value else "false"
        else:
            element.text = xml_text(value)


_FORMATS = {
    Format.JSON: JsonFormat,
    Format.XML: XmlFormat,
}


def get_format(format_tag: Format) -> BaseFormat:
    """Return the serializer for ``format_tag``.

    Raises:
        NotificationConfigurationError: If the tag is not a supported format
    """
    try:
        format_class = _FORMATS[Format(format_tag)]
    except (KeyError, ValueError) as e:
        supported = ", ".join(f.value for f in _FORMATS)
        raise NotificationConfigurationError(
            f"Unknown format: {format_tag}. Supported formats: {supported}"
        ) from e
    return format_class()
