"""SSML payloads for text-to-speech."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING

from translator_service.speech.models import Gender

if TYPE_CHECKING:
    from translator_service.speech.models import TextToSpeechParameters

_XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"
_XML_GENDER = "{http://www.w3.org/XML/1998/namespace}gender"

SSML_VERSION = "1.0"
SSML_LANGUAGE = "en-US"


def build_ssml(params: TextToSpeechParameters) -> str:
    """Build the SSML document for a synthesis request.

    The text is XML-escaped; the result is a single <speak> element holding
    one <voice> element.

    Example:
        >>> ssml = build_ssml(TextToSpeechParameters("Fish & chips"))
        >>> "Fish &amp; chips</voice>" in ssml
        True
    """
    speak = ET.Element("speak", {"version": SSML_VERSION, _XML_LANG: SSML_LANGUAGE})
    voice = ET.SubElement(
        speak,
        "voice",
        {
            _XML_LANG: params.language,
            _XML_GENDER: Gender(params.voice_type).value,
            "name": params.voice_name,
        },
    )
    voice.text = params.text
    return ET.tostring(speak, encoding="unicode")
