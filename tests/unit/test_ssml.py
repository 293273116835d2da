"""Tests for SSML generation."""

import xml.etree.ElementTree as ET

from translator_service.speech import Gender, TextToSpeechParameters, build_ssml

XML_NS = "{http://www.w3.org/XML/1998/namespace}"


class TestBuildSsml:
    """Tests for build_ssml."""

    def test_document_shape(self) -> None:
        """Test the speak and voice elements and their attributes."""
        params = TextToSpeechParameters(
            "Hello world",
            language="en-gb",
            voice_type=Gender.MALE,
            voice_name="en-GB-RyanNeural",
        )

        ssml = build_ssml(params)

        assert ssml == (
            '<speak version="1.0" xml:lang="en-US">'
            '<voice xml:lang="en-gb" xml:gender="Male" name="en-GB-RyanNeural">'
            "Hello world</voice></speak>"
        )

    def test_text_is_escaped(self) -> None:
        """Test markup in the text cannot alter the document."""
        params = TextToSpeechParameters('Tom & Jerry <break time="3s"/>')

        ssml = build_ssml(params)
        voice = ET.fromstring(ssml).find("voice")

        assert "&amp;" in ssml
        assert "&lt;break" in ssml
        assert voice is not None
        assert voice.text == 'Tom & Jerry <break time="3s"/>'
        assert list(voice) == []

    def test_attributes_are_escaped(self) -> None:
        params = TextToSpeechParameters("Hi", voice_name='bad" name')
        voice = ET.fromstring(build_ssml(params)).find("voice")
        assert voice is not None
        assert voice.get("name") == 'bad" name'
        assert voice.get(f"{XML_NS}gender") == "Female"
