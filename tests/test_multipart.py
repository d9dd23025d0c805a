"""Tests for the multipart/form-data body builder."""
from cloudscribe.services.speech.multipart import MultipartFormDataBuilder


def test_content_type_carries_boundary():
    form = MultipartFormDataBuilder(boundary="Boundary-abc")
    assert form.content_type == "multipart/form-data; boundary=Boundary-abc"


def test_default_boundary_is_unique_per_builder():
    a = MultipartFormDataBuilder()
    b = MultipartFormDataBuilder()
    assert a.boundary.startswith("Boundary-")
    assert a.boundary != b.boundary


def test_finalize_emits_parts_in_call_order_with_terminator():
    form = MultipartFormDataBuilder(boundary="B")
    form.add_field("model", "whisper")
    form.add_file("file", "clip.wav", b"\x00\x01", "audio/wav")
    form.add_field("temperature", "0")

    expected = (
        b"--B\r\n"
        b'Content-Disposition: form-data; name="model"\r\n\r\n'
        b"whisper\r\n"
        b"--B\r\n"
        b'Content-Disposition: form-data; name="file"; filename="clip.wav"\r\n'
        b"Content-Type: audio/wav\r\n\r\n"
        b"\x00\x01\r\n"
        b"--B\r\n"
        b'Content-Disposition: form-data; name="temperature"\r\n\r\n'
        b"0\r\n"
        b"--B--\r\n"
    )
    assert form.finalize() == expected


def test_empty_form_is_just_the_terminator():
    form = MultipartFormDataBuilder(boundary="X")
    assert form.finalize() == b"--X--\r\n"


def test_finalize_does_not_consume_parts():
    form = MultipartFormDataBuilder(boundary="B")
    form.add_field("a", "1")
    assert form.finalize() == form.finalize()
