"""
Tests for clip-order helpers and resolvers.
"""

import base64
import urllib.error
import urllib.request

import pytest

from clip_concat.errors import ResolveError
from clip_concat.sources import (
    DataUrlResolver,
    FileResolver,
    HttpResolver,
    SchemeResolver,
    build_clip_order,
    default_resolver,
    extract_audio_paths,
    has_audio_paths,
    prepare_clips,
)
from clip_concat.types import Clip


class FakeResponse:
    def __init__(self, body: bytes):
        self.body = body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def read(self):
        return self.body


@pytest.fixture
def fake_urlopen(monkeypatch):
    """Patch urlopen; returns the list of requests it received."""
    requests = []

    def urlopen(request, timeout=None):
        requests.append((request, timeout))
        if request.full_url.endswith("/missing.wav"):
            raise urllib.error.HTTPError(request.full_url, 404, "Not Found", None, None)
        if "unreachable" in request.full_url:
            raise urllib.error.URLError("Name or service not known")
        return FakeResponse(b"payload:" + request.full_url.encode())

    monkeypatch.setattr(urllib.request, "urlopen", urlopen)
    return requests


class TestExtractAudioPaths:
    """Tests for extract_audio_paths()."""

    def test_none(self):
        assert extract_audio_paths(None) == []

    def test_list(self):
        assert extract_audio_paths(["a.wav", "b.wav"]) == ["a.wav", "b.wav"]

    def test_list_drops_blanks_and_non_strings(self):
        assert extract_audio_paths([" a.wav ", "", None, 3, "  "]) == ["a.wav"]

    def test_bare_string(self):
        assert extract_audio_paths("  take-1.webm ") == ["take-1.webm"]

    def test_json_array_string(self):
        assert extract_audio_paths('["a.wav", "b.wav"]') == ["a.wav", "b.wav"]

    def test_malformed_json_is_a_path(self):
        assert extract_audio_paths("[draft] take.wav") == ["[draft] take.wav"]

    def test_blank_string(self):
        assert extract_audio_paths("   ") == []

    def test_other_types(self):
        assert extract_audio_paths(42) == []
        assert extract_audio_paths({"path": "a.wav"}) == []

    def test_has_audio_paths(self):
        assert has_audio_paths("a.wav")
        assert not has_audio_paths("[]")


class TestBuildClipOrder:
    """Tests for build_clip_order() and prepare_clips()."""

    def test_flattens_entries_in_order(self):
        rows = [
            {"audio": ["a.wav", "b.wav"]},
            {"audio": None},
            {"audio": "c.webm"},
            {"audio": '["d.m4a"]'},
        ]
        assert build_clip_order(rows) == ["a.wav", "b.wav", "c.webm", "d.m4a"]

    def test_custom_key_and_raw_values(self):
        assert build_clip_order([{"clip": "x"}, "y", ["z"]], key="clip") == ["x", "y", "z"]

    def test_prepare_clips_keeps_original_indices(self):
        clips = prepare_clips(["a", "", " b ", "   "])
        assert clips == [Clip(0, "a"), Clip(2, "b")]


class TestFileResolver:
    """Tests for FileResolver."""

    def test_reads_relative_to_base_dir(self, tmp_path):
        (tmp_path / "clips").mkdir()
        (tmp_path / "clips" / "a.wav").write_bytes(b"RIFF data")

        resolver = FileResolver(tmp_path)
        assert resolver("clips/a.wav") == b"RIFF data"

    def test_absolute_path(self, tmp_path):
        path = tmp_path / "b.wav"
        path.write_bytes(b"abc")

        assert FileResolver("/somewhere/else").resolve(str(path)) == b"abc"

    def test_file_url(self, tmp_path):
        path = tmp_path / "with space.wav"
        path.write_bytes(b"xyz")

        assert FileResolver()(path.as_uri()) == b"xyz"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ResolveError) as exc_info:
            FileResolver(tmp_path)("nope.wav")

        assert exc_info.value.reference == "nope.wav"
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_directory_is_an_error(self, tmp_path):
        with pytest.raises(ResolveError):
            FileResolver()(str(tmp_path))


class TestDataUrlResolver:
    """Tests for DataUrlResolver."""

    def test_base64(self):
        payload = b"RIFF\x00\x01\x02"
        url = "data:audio/wav;base64," + base64.b64encode(payload).decode()

        assert DataUrlResolver()(url) == payload

    def test_percent_encoded(self):
        assert DataUrlResolver()("data:,hello%20world") == b"hello world"

    def test_invalid_base64(self):
        with pytest.raises(ResolveError):
            DataUrlResolver()("data:audio/wav;base64,***")

    def test_missing_comma(self):
        with pytest.raises(ResolveError):
            DataUrlResolver()("data:audio/wav;base64")

    def test_not_a_data_url(self):
        with pytest.raises(ResolveError):
            DataUrlResolver()("a.wav")


class TestHttpResolver:
    """Tests for HttpResolver (urlopen is patched)."""

    def test_absolute_url(self, fake_urlopen):
        resolver = HttpResolver(timeout=5)

        data = resolver("https://cdn.example.org/a.wav")

        assert data == b"payload:https://cdn.example.org/a.wav"
        request, timeout = fake_urlopen[0]
        assert request.get_method() == "GET"
        assert timeout == 5

    def test_base_url_join(self):
        resolver = HttpResolver(base_url="https://cdn.example.org/storage/audio")

        assert resolver.url_for("project/42/take 1.webm") == (
            "https://cdn.example.org/storage/audio/project/42/take%201.webm"
        )
        assert resolver.url_for("/lead.wav") == "https://cdn.example.org/storage/audio/lead.wav"

    def test_base_url_join_keeps_encoded_path_and_query(self):
        resolver = HttpResolver(base_url="https://cdn.example.org/audio/")

        assert resolver.url_for("a/take%201.webm?token=abc&x=1") == (
            "https://cdn.example.org/audio/a/take%201.webm?token=abc&x=1"
        )
        assert resolver.url_for("b/take 2.webm?sig=a b") == (
            "https://cdn.example.org/audio/b/take%202.webm?sig=a%20b"
        )

    def test_bare_path_without_base_url(self):
        with pytest.raises(ResolveError):
            HttpResolver().url_for("a.wav")

    def test_headers_sent(self, fake_urlopen):
        HttpResolver(headers={"Authorization": "Bearer t0ken"})("https://cdn.example.org/a.wav")

        request, _ = fake_urlopen[0]
        assert request.get_header("Authorization") == "Bearer t0ken"

    def test_http_error_status(self, fake_urlopen):
        with pytest.raises(ResolveError) as exc_info:
            HttpResolver()("https://cdn.example.org/missing.wav")

        assert exc_info.value.status == 404
        assert "404" in exc_info.value.message

    def test_network_error(self, fake_urlopen):
        with pytest.raises(ResolveError) as exc_info:
            HttpResolver()("https://unreachable.invalid/a.wav")

        assert exc_info.value.status is None

    def test_invalid_timeout(self):
        with pytest.raises(ValueError):
            HttpResolver(timeout=0)


class TestSchemeResolver:
    """Tests for scheme dispatch."""

    def test_dispatch(self):
        resolver = SchemeResolver()

        assert resolver.resolver_for("data:,x") is resolver.data_urls
        assert resolver.resolver_for("https://cdn.example.org/a.wav") is resolver.http
        assert resolver.resolver_for("clips/a.wav") is resolver.files

    def test_bare_paths_use_base_url(self):
        resolver = SchemeResolver(base_url="https://cdn.example.org/audio/")

        assert resolver.resolver_for("clips/a.wav") is resolver.http

    def test_resolves_each_kind(self, tmp_path, fake_urlopen):
        (tmp_path / "a.wav").write_bytes(b"local")
        resolver = default_resolver(base_dir=tmp_path)

        assert resolver("a.wav") == b"local"
        assert resolver("data:,inline") == b"inline"
        assert resolver("http://cdn.example.org/b.wav") == b"payload:http://cdn.example.org/b.wav"
