"""
TTML converter (Apple Music / AMLL flavour).

Document shape:

    <tt xmlns="http://www.w3.org/ns/ttml"
        xmlns:ttm="http://www.w3.org/ns/ttml#metadata"
        xmlns:amll="http://www.example.com/ns/amll">
      <head><metadata>
        <ttm:agent type="person" xml:id="v1"><ttm:name type="full">Alice</ttm:name></ttm:agent>
        <amll:meta key="musicName" value="Song"/>
      </metadata></head>
      <body dur="00:10.000"><div begin="00:01.000" end="00:10.000">
        <p begin="00:01.000" end="00:03.000" ttm:agent="v1">
          <span begin="00:01.000" end="00:01.500">Hel</span><span ...>lo</span> <span ...>world</span>
          <span ttm:role="x-bg"><span ...>(ooh)</span></span>
          <span ttm:role="x-translation" xml:lang="zh-CN">你好世界</span>
          <span ttm:role="x-roman">...</span>
        </p>
      </div></body>
    </tt>

Whitespace between syllable spans separates words. A <p> holding text
directly (no syllable spans) is a line-timed line.

Time expressions "hh:mm:ss.fff", "mm:ss.fff" and "ss.fff(s)" are read;
"mm:ss.fff" is written (with hours from one hour on).
"""

import xml.etree.ElementTree as ET

from lyrics_helper.converters.base import LyricConverter, LyricFormat
from lyrics_helper.converters.timestamps import format_ttml_time, parse_ttml_time
from lyrics_helper.core.logger import get_logger
from lyrics_helper.model.lyrics import ContentType, LyricLine, LyricSyllable, LyricTrack
from lyrics_helper.model.metadata import CanonicalMetadataKey, MetadataKey, parse_metadata_key
from lyrics_helper.model.result import ConversionWarning, ParsedLyrics

logger = get_logger(__name__)

TT_NS = "http://www.w3.org/ns/ttml"
TTM_NS = "http://www.w3.org/ns/ttml#metadata"
AMLL_NS = "http://www.example.com/ns/amll"
XML_NS = "http://www.w3.org/XML/1998/namespace"

_TTM_AGENT = f"{{{TTM_NS}}}agent"
_TTM_ROLE = f"{{{TTM_NS}}}role"
_XML_ID = f"{{{XML_NS}}}id"
_XML_LANG = f"{{{XML_NS}}}lang"

GROUP_AGENT_ID = "v1000"

_ROLE_TYPES = {
    "x-translation": ContentType.TRANSLATION,
    "x-roman": ContentType.ROMANIZATION,
}

_TTML_META_KEYS: dict[CanonicalMetadataKey, str] = {
    CanonicalMetadataKey.TITLE: "musicName",
    CanonicalMetadataKey.ARTIST: "artists",
    CanonicalMetadataKey.ALBUM: "album",
    CanonicalMetadataKey.ISRC: "isrc",
    CanonicalMetadataKey.NCM_MUSIC_ID: "ncmMusicId",
    CanonicalMetadataKey.QQ_MUSIC_ID: "qqMusicId",
    CanonicalMetadataKey.SPOTIFY_ID: "spotifyId",
    CanonicalMetadataKey.APPLE_MUSIC_ID: "appleMusicId",
    CanonicalMetadataKey.TTML_AUTHOR: "ttmlAuthorGithubLogin",
}

ET.register_namespace("", TT_NS)
ET.register_namespace("ttm", TTM_NS)
ET.register_namespace("amll", AMLL_NS)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def ttml_key_for(key: MetadataKey) -> str:
    if isinstance(key, CanonicalMetadataKey):
        return _TTML_META_KEYS.get(key, key.value)
    return key.name


class _SpanCollector:
    """
    Collects syllables and role spans from the children of a <p> or an
    x-bg <span>.
    """

    def __init__(self, converter: "TtmlConverter", warnings: list[ConversionWarning], line_number: int) -> None:
        self.converter = converter
        self.warnings = warnings
        self.line_number = line_number
        self.syllables: list[LyricSyllable] = []
        self.background: list[ET.Element] = []
        self.auxiliary: list[tuple[ContentType, str, str | None]] = []
        self._pending_space = False

    def _add_text(self, raw: str | None, start: int | None = None, end: int | None = None) -> None:
        if not raw:
            return
        content = raw.strip()
        if not content:
            self._pending_space = True
            return
        self.syllables.append(
            LyricSyllable(
                text=content,
                start_time=start,
                end_time=end,
                leading_space=bool(self.syllables) and (self._pending_space or raw[0].isspace()),
            )
        )
        self._pending_space = raw[-1].isspace()

    def collect(self, element: ET.Element, allow_roles: bool = True) -> None:
        self._add_text(element.text)
        for child in element:
            if _local_name(child.tag) == "span":
                role = child.get(_TTM_ROLE)
                if role is not None:
                    if allow_roles:
                        self._collect_role(child, role)
                    else:
                        self.warnings.append(
                            self.converter.parser_warning(
                                f"Nested '{role}' span inside background vocals ignored",
                                self.line_number,
                            )
                        )
                else:
                    self._collect_syllable(child)
            self._add_text(child.tail)

    def _collect_role(self, span: ET.Element, role: str) -> None:
        if role == "x-bg":
            self.background.append(span)
            return
        content_type = _ROLE_TYPES.get(role)
        if content_type is None:
            self.warnings.append(
                self.converter.parser_warning(f"Unknown span role '{role}' ignored", self.line_number)
            )
            return
        text = "".join(span.itertext()).strip()
        if text:
            self.auxiliary.append((content_type, text, span.get(_XML_LANG)))

    def _collect_syllable(self, span: ET.Element) -> None:
        begin = self.converter.read_time(span, "begin", self.warnings, self.line_number)
        end = self.converter.read_time(span, "end", self.warnings, self.line_number)
        if (begin is None) != (end is None):
            begin = end = None
        if begin is not None and end < begin:
            self.warnings.append(
                self.converter.parser_warning("Syllable ends before it begins, end clamped", self.line_number)
            )
            end = begin
        self._add_text("".join(span.itertext()), begin, end)


class TtmlConverter(LyricConverter):
    """Apple/AMLL style TTML."""

    format = LyricFormat.TTML

    def read_time(
        self,
        element: ET.Element,
        attribute: str,
        warnings: list[ConversionWarning],
        line_number: int | None = None,
    ) -> int | None:
        raw = element.get(attribute)
        if raw is None:
            return None
        value = parse_ttml_time(raw)
        if value is None:
            warnings.append(
                self.parser_warning(f"Invalid time expression {attribute}={raw!r}", line_number)
            )
        return value

    def parse(self, text: str) -> ParsedLyrics:
        lyrics = ParsedLyrics()
        try:
            root = ET.fromstring(text.lstrip("\ufeff"))
        except ET.ParseError as e:
            lyrics.warnings.append(self.parser_warning(f"Malformed XML: {e}"))
            return lyrics

        if _local_name(root.tag) != "tt":
            lyrics.warnings.append(
                self.parser_warning(f"Root element is <{_local_name(root.tag)}>, expected <tt>")
            )

        self._parse_head(root, lyrics)

        paragraphs = [el for el in root.iter() if _local_name(el.tag) == "p"]
        lines: list[LyricLine] = []
        for line_number, paragraph in enumerate(paragraphs, start=1):
            line = self._parse_paragraph(paragraph, line_number, lyrics)
            if line is not None:
                lines.append(line)

        lines.sort(key=lambda line: line.start_time)
        lyrics.lines = lines
        return lyrics

    def _parse_head(self, root: ET.Element, lyrics: ParsedLyrics) -> None:
        for element in root.iter():
            name = _local_name(element.tag)
            if element.tag == _TTM_AGENT:
                agent_id = element.get(_XML_ID)
                if not agent_id:
                    lyrics.warnings.append(self.parser_warning("Agent declaration without xml:id ignored"))
                    continue
                name_element = element.find(f"{{{TTM_NS}}}name")
                display = (name_element.text or "").strip() if name_element is not None else ""
                lyrics.agents[agent_id] = display or agent_id
            elif name == "meta" and element.tag.startswith(f"{{{AMLL_NS}}}"):
                key = (element.get("key") or "").strip()
                value = element.get("value")
                if not key or value is None:
                    lyrics.warnings.append(self.parser_warning("Incomplete amll:meta entry ignored"))
                    continue
                lyrics.add_metadata(parse_metadata_key(key), value)

        language = root.get(_XML_LANG)
        if language and CanonicalMetadataKey.LANGUAGE not in lyrics.metadata:
            lyrics.add_metadata(CanonicalMetadataKey.LANGUAGE, language)

    def _parse_paragraph(
        self,
        paragraph: ET.Element,
        line_number: int,
        lyrics: ParsedLyrics,
    ) -> LyricLine | None:
        warnings = lyrics.warnings
        begin = self.read_time(paragraph, "begin", warnings, line_number)
        end = self.read_time(paragraph, "end", warnings, line_number)

        collector = _SpanCollector(self, warnings, line_number)
        collector.collect(paragraph)

        main = LyricTrack.from_syllables(collector.syllables)
        background_tracks: list[LyricTrack] = []
        for span in collector.background:
            bg_collector = _SpanCollector(self, warnings, line_number)
            bg_collector.collect(span, allow_roles=False)
            bg_begin = self.read_time(span, "begin", warnings, line_number)
            bg_end = self.read_time(span, "end", warnings, line_number)
            background = self._track_from_syllables(bg_collector.syllables, bg_begin, bg_end)
            if background.words:
                background_tracks.append(background)

        timed = [
            t for t in [main] + background_tracks
            if t.start_time is not None and t.end_time is not None
        ]
        if begin is None and timed:
            begin = min(t.start_time for t in timed)
        if end is None and timed:
            end = max(t.end_time for t in timed)
        if begin is None or end is None:
            warnings.append(self.parser_warning("Line without usable timing skipped", line_number))
            return None
        if end < begin:
            warnings.append(self.parser_warning("Line ends before it begins, end clamped", line_number))
            end = begin

        if not main.words and not background_tracks and not collector.auxiliary:
            warnings.append(self.parser_warning("Empty line skipped", line_number))
            return None

        line = LyricLine(start_time=begin, end_time=end)
        if not any(s.is_timed for s in main.syllables()):
            main = LyricTrack.from_text(main.text, begin, end)
        line.add_track(ContentType.MAIN, main)
        for background in background_tracks:
            line.add_track(ContentType.BACKGROUND, background)
        for content_type, text, language in collector.auxiliary:
            line.add_track(content_type, LyricTrack.from_text(text, begin, end, language=language))

        agent = paragraph.get(_TTM_AGENT)
        if agent:
            line.agent = agent
            lyrics.agents.setdefault(agent, agent)
        return line

    @staticmethod
    def _track_from_syllables(
        syllables: list[LyricSyllable],
        begin: int | None,
        end: int | None,
    ) -> LyricTrack:
        if syllables and not any(s.is_timed for s in syllables):
            text = LyricTrack.from_syllables(syllables).text
            return LyricTrack.from_text(text, begin, end)
        return LyricTrack.from_syllables(syllables)

    def serialize(self, lyrics: ParsedLyrics) -> tuple[str, list[ConversionWarning]]:
        warnings: list[ConversionWarning] = []
        root = ET.Element(f"{{{TT_NS}}}tt")
        language = lyrics.first_metadata(CanonicalMetadataKey.LANGUAGE)
        if language:
            root.set(_XML_LANG, language)

        head = ET.SubElement(root, f"{{{TT_NS}}}head")
        metadata = ET.SubElement(head, f"{{{TT_NS}}}metadata")

        agents = dict(lyrics.agents)
        for line in lyrics.lines:
            if line.agent and line.agent not in agents:
                agents[line.agent] = line.agent
        for agent_id, name in agents.items():
            agent_element = ET.SubElement(
                metadata,
                _TTM_AGENT,
                {"type": "group" if agent_id == GROUP_AGENT_ID else "person", _XML_ID: agent_id},
            )
            if name and name != agent_id:
                name_element = ET.SubElement(agent_element, f"{{{TTM_NS}}}name", {"type": "full"})
                name_element.text = name

        for key, values in lyrics.metadata.items():
            for value in values:
                ET.SubElement(metadata, f"{{{AMLL_NS}}}meta", {"key": ttml_key_for(key), "value": value})

        body = ET.SubElement(root, f"{{{TT_NS}}}body")
        if lyrics.lines:
            first = min(line.start_time for line in lyrics.lines)
            last = max(line.end_time for line in lyrics.lines)
            body.set("dur", format_ttml_time(last))
            div = ET.SubElement(body, f"{{{TT_NS}}}div", {"begin": format_ttml_time(first), "end": format_ttml_time(last)})
        else:
            div = ET.SubElement(body, f"{{{TT_NS}}}div")

        skipped = 0
        for line in lyrics.lines:
            if line.is_empty():
                skipped += 1
                continue
            self._write_line(div, line)

        if skipped:
            warnings.append(self.serializer_warning(f"Dropped {skipped} empty lines"))
        extra_main = sum(1 for line in lyrics.lines if len(line.tracks_of(ContentType.MAIN)) > 1)
        if extra_main:
            warnings.append(
                self.serializer_warning(f"Dropped additional main tracks of {extra_main} lines")
            )

        return ET.tostring(root, encoding="unicode"), warnings

    def _write_line(self, div: ET.Element, line: LyricLine) -> None:
        paragraph = ET.SubElement(
            div,
            f"{{{TT_NS}}}p",
            {"begin": format_ttml_time(line.start_time), "end": format_ttml_time(line.end_time)},
        )
        if line.agent:
            paragraph.set(_TTM_AGENT, line.agent)

        main = line.main_track
        if main is not None:
            self._write_track(paragraph, main, line.start_time, line.end_time)

        for background in line.tracks_of(ContentType.BACKGROUND):
            if not background.text.strip():
                continue
            span = ET.SubElement(paragraph, f"{{{TT_NS}}}span", {_TTM_ROLE: "x-bg"})
            if background.start_time is not None and background.end_time is not None:
                span.set("begin", format_ttml_time(background.start_time))
                span.set("end", format_ttml_time(background.end_time))
            self._write_track(span, background, background.start_time, background.end_time)

        for content_type, role in ((ContentType.TRANSLATION, "x-translation"), (ContentType.ROMANIZATION, "x-roman")):
            for track in line.tracks_of(content_type):
                if not track.text.strip():
                    continue
                span = ET.SubElement(paragraph, f"{{{TT_NS}}}span", {_TTM_ROLE: role})
                if track.language:
                    span.set(_XML_LANG, track.language)
                span.text = track.text

    @staticmethod
    def _write_track(parent: ET.Element, track: LyricTrack, start: int | None, end: int | None) -> None:
        syllables = [s for s in track.syllables() if s.text]
        if not syllables:
            return

        if len(syllables) == 1:
            only = syllables[0]
            if not only.is_timed or (only.start_time, only.end_time) == (start, end):
                parent.text = only.text
                return

        previous: ET.Element | None = None
        for syllable in syllables:
            if previous is not None and syllable.leading_space:
                previous.tail = " "
            span = ET.SubElement(parent, f"{{{TT_NS}}}span")
            if syllable.is_timed:
                span.set("begin", format_ttml_time(syllable.start_time))
                span.set("end", format_ttml_time(syllable.end_time))
            span.text = syllable.text
            previous = span
