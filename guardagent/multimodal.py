"""Text extraction from uploaded files, images and audio."""

from __future__ import annotations

import re
import zlib
from pathlib import Path

IMAGE_PLACEHOLDER_TEXT = "模拟图片中的文字内容"
SPEECH_PLACEHOLDER_TEXT = "模拟语音转写内容"

_SIMULATED_FILE_TEXT = {
    ".txt": "模拟文件内容",
    ".md": "模拟文件内容",
    ".pdf": "模拟 PDF 内容",
    ".doc": "模拟 Word 内容",
    ".docx": "模拟 Word 内容",
}


class UnsupportedFormatError(ValueError):
    """Raised when a file's format cannot be handled."""


def check_filename(name, match_func):
    """Screen a file name using *match_func* with the ``filename`` rule type."""
    return match_func(name, "filename")


def ocr_image(file_path: str) -> str:
    """Recognise text in a PNG or JPG image; returns a fixed sample text."""
    if not file_path.endswith((".png", ".jpg")):
        raise UnsupportedFormatError("unsupported image format")
    return IMAGE_PLACEHOLDER_TEXT


def speech_to_text(file_path: str) -> str:
    """Transcribe a WAV or MP3 file; returns a fixed sample text."""
    if not file_path.endswith((".wav", ".mp3")):
        raise UnsupportedFormatError("unsupported audio format")
    return SPEECH_PLACEHOLDER_TEXT


def extract_text_from_file(file_path: str) -> str:
    """Return the sample text associated with a document's extension."""
    try:
        return _SIMULATED_FILE_TEXT[Path(file_path).suffix.lower()]
    except KeyError:
        raise UnsupportedFormatError("unsupported file type") from None


def parse_file(file_path) -> str:
    """Extract the text of a PDF, TXT or MD file; other files give ''."""
    path = Path(file_path)
    name = path.name.lower()
    if name.endswith(".pdf"):
        return _pdf_text(path.read_bytes())
    if name.endswith((".txt", ".md")):
        return path.read_bytes().decode("utf-8", errors="replace")
    return ""


_STREAM = re.compile(rb"(?<!end)stream(?:\r\n|\n|\r)(.*?)endstream", re.S)
_STR = rb"\((?:\\.|[^\\()]|\((?:\\.|[^\\()])*\))*\)"
_OPS = re.compile(
    rb"(?P<tj>" + _STR + rb")\s*Tj"
    rb"|(?P<quote>" + _STR + rb")\s*['\"]"
    rb"|\[(?P<arr>(?:" + _STR + rb"|[^\]()])*)\]\s*TJ"
    rb"|(?P<star>T\*)"
    rb"|[-+\d.]+\s+(?P<ty>[-+\d.]+)\s+T[dD]",
    re.S,
)
_ESCAPE = re.compile(rb"\\([0-7]{1,3}|\r\n|[\s\S])")
_ESCAPES = {b"n": b"\n", b"r": b"\r", b"t": b"\t", b"b": b"\b", b"f": b"\f"}


def _unescape(match: re.Match) -> bytes:
    seq = match.group(1)
    if seq[:1].isdigit():
        return bytes([int(seq, 8) & 0xFF])
    if seq in (b"\r\n", b"\n", b"\r"):
        return b""
    return _ESCAPES.get(seq, seq)


def _string(token: bytes) -> str:
    raw = _ESCAPE.sub(_unescape, token[1:-1])
    if raw.startswith(b"\xfe\xff"):
        return raw[2:].decode("utf-16-be", errors="replace")
    return raw.decode("latin-1")


def _content_text(content: bytes) -> str:
    out: list[str] = []
    for m in _OPS.finditer(content):
        if m["tj"]:
            out.append(_string(m["tj"]))
        elif m["quote"]:
            out += ["\n", _string(m["quote"])]
        elif m["arr"] is not None:
            out.extend(_string(s) for s in re.findall(_STR, m["arr"]))
        elif m["star"]:
            out.append("\n")
        else:
            try:
                if float(m["ty"]) != 0:
                    out.append("\n")
            except ValueError:
                pass
    return "".join(out)


def _pdf_text(data: bytes) -> str:
    if not data.startswith(b"%PDF-"):
        raise UnsupportedFormatError("not a PDF file")
    parts = []
    for m in _STREAM.finditer(data):
        header = data[max(data.rfind(b"obj", 0, m.start()), 0):m.start()]
        filters = re.findall(rb"/(\w+Decode)\b", header)
        if b"/Image" in header or b"/Length1" in header or filters not in ([], [b"FlateDecode"]):
            continue
        body = m.group(1)
        if filters:
            try:
                body = zlib.decompressobj().decompress(body)
            except zlib.error:
                continue
        parts.append(_content_text(body))
    return "".join(parts)