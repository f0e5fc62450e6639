import zlib

import pytest

from guardagent.multimodal import (
    UnsupportedFormatError,
    check_filename,
    extract_text_from_file,
    ocr_image,
    parse_file,
    speech_to_text,
)


def _pdf(content: bytes, compress: bool) -> bytes:
    body = zlib.compress(content) if compress else content
    filt = b" /Filter /FlateDecode" if compress else b""
    return (
        b"%PDF-1.4\n1 0 obj\n<< /Length "
        + str(len(body)).encode()
        + filt
        + b" >>\nstream\n"
        + body
        + b"\nendstream\nendobj\ntrailer\n<< >>\n%%EOF\n"
    )


def test_check_filename_passes_filename_type():
    calls = []

    def match(text, rule_type):
        calls.append((text, rule_type))
        return "hit"

    assert check_filename("report.exe", match) == "hit"
    assert calls == [("report.exe", "filename")]


@pytest.mark.parametrize("name", ["a.png", "dir/b.jpg"])
def test_ocr_image_supported(name):
    assert ocr_image(name) == "模拟图片中的文字内容"


@pytest.mark.parametrize("name", ["a.PNG", "a.jpeg", "a.gif"])
def test_ocr_image_unsupported(name):
    with pytest.raises(UnsupportedFormatError):
        ocr_image(name)


def test_speech_to_text():
    assert speech_to_text("clip.wav") == "模拟语音转写内容"
    assert speech_to_text("clip.mp3") == "模拟语音转写内容"
    with pytest.raises(UnsupportedFormatError):
        speech_to_text("clip.ogg")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a.txt", "模拟文件内容"),
        ("a.MD", "模拟文件内容"),
        ("a.pdf", "模拟 PDF 内容"),
        ("a.doc", "模拟 Word 内容"),
        ("a.DOCX", "模拟 Word 内容"),
    ],
)
def test_extract_text_from_file(name, expected):
    assert extract_text_from_file(name) == expected


def test_extract_text_from_file_unsupported():
    with pytest.raises(UnsupportedFormatError):
        extract_text_from_file("setup.exe")


@pytest.mark.parametrize("name", ["notes.txt", "README.MD", "LOG.TXT"])
def test_parse_text_files(tmp_path, name):
    text = "第一行\nsecond line"
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    assert parse_file(path) == text


def test_parse_unknown_extension_is_empty(tmp_path):
    path = tmp_path / "data.bin"
    path.write_bytes(b"anything")
    assert parse_file(path) == ""


def test_parse_missing_text_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_file(tmp_path / "gone.txt")


def test_parse_pdf_flate_stream(tmp_path):
    path = tmp_path / "doc.pdf"
    path.write_bytes(_pdf(b"BT /F1 12 Tf 72 720 Td (Hello) Tj ET", compress=True))
    assert parse_file(path) == "Hello"


def test_parse_pdf_uncompressed_tj_array_with_escapes(tmp_path):
    path = tmp_path / "doc.PDF"
    path.write_bytes(_pdf(b"BT [(Wor) -250 (ld\\051)] TJ ET", compress=False))
    assert parse_file(path) == "World)"


def test_parse_pdf_hex_string(tmp_path):
    path = tmp_path / "doc.pdf"
    path.write_bytes(_pdf(b"BT <48692E> Tj ET", compress=True))
    assert parse_file(path) == bytes.fromhex("48692E").decode("ascii")


def test_parse_pdf_rejects_non_pdf(tmp_path):
    path = tmp_path / "fake.pdf"
    path.write_bytes(b"plain text pretending")
    with pytest.raises(UnsupportedFormatError):
        parse_file(path)