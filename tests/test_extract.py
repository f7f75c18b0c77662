from __future__ import annotations

import socket

import httpx
import pytest
from ebooklib import epub

from swiftread.extract import (
    ExtractionError,
    allowed_file,
    clean_html,
    extract_text_from_file,
    fetch_text_from_url,
    check_public_host,
    is_url_like,
)

ARTICLE = """
<html>
  <head><title>t</title><style>body { color: red; }</style></head>
  <body>
    <nav>Home | About | Contact</nav>
    <header>Site header</header>
    <div class="ads">Buy now</div>
    <article>
      <h1>Reading faster</h1>
      <p>Rapid serial visual presentation shows one word at a time,
         so the eyes do not have to travel across the page.</p>
    </article>
    <script>window.tracking = true;</script>
    <footer>Copyright</footer>
  </body>
</html>
"""


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


PRIVATE_HOSTS = {"intranet.example.com": "10.0.0.7"}


@pytest.fixture(autouse=True)
def fake_dns(monkeypatch):
    def getaddrinfo(host, port, *args, **kwargs):
        addr = PRIVATE_HOSTS.get(host, "93.184.216.34")
        return [(socket.AF_INET, socket.SOCK_STREAM, 6, "", (addr, 0))]

    monkeypatch.setattr("swiftread.extract.socket.getaddrinfo", getaddrinfo)


class TestFiles:
    def test_allowed_file(self):
        assert allowed_file("Book.EPUB")
        assert allowed_file("paper.pdf")
        assert allowed_file("notes.txt")
        assert not allowed_file("image.png")
        assert not allowed_file("noext")

    def test_plain_text(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("First line.  \r\n\r\n\r\n\r\nSecond   line.", encoding="utf-8")
        assert extract_text_from_file(str(path)) == "First line.\n\nSecond line."

    def test_filename_overrides_path_suffix(self, tmp_path):
        path = tmp_path / "upload.tmp"
        path.write_text("hello there", encoding="utf-8")
        assert extract_text_from_file(str(path), "original.txt") == "hello there"

    def test_unsupported_type(self, tmp_path):
        path = tmp_path / "image.png"
        path.write_bytes(b"\x89PNG")
        with pytest.raises(ExtractionError, match="Unsupported file type"):
            extract_text_from_file(str(path))

    def test_broken_pdf(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf")
        with pytest.raises(ExtractionError, match="PDF"):
            extract_text_from_file(str(path))

    def test_broken_epub(self, tmp_path):
        path = tmp_path / "broken.epub"
        path.write_bytes(b"not a zip")
        with pytest.raises(ExtractionError, match="EPUB"):
            extract_text_from_file(str(path))

    def test_epub(self, tmp_path):
        book = epub.EpubBook()
        book.set_identifier("swiftread-test")
        book.set_title("Test Book")
        book.set_language("en")

        chapter = epub.EpubHtml(title="Chapter One", file_name="chap_01.xhtml", lang="en")
        chapter.content = (
            "<html><body><h1>Chapter One</h1>"
            "<p>It was a bright cold day in April.</p>"
            "</body></html>"
        )
        book.add_item(chapter)
        book.toc = (chapter,)
        book.add_item(epub.EpubNcx())
        book.add_item(epub.EpubNav())
        book.spine = ["nav", chapter]

        path = tmp_path / "book.epub"
        epub.write_epub(str(path), book)

        text = extract_text_from_file(str(path))
        assert "It was a bright cold day in April." in text


class TestUrl:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("https://example.com/a", True),
            ("http://example.com", True),
            ("example.com", False),
            ("ftp://example.com/file", False),
            ("https://", False),
        ],
    )
    def test_is_url_like(self, value, expected):
        assert is_url_like(value) is expected

    def test_clean_html_strips_clutter(self):
        text = clean_html(ARTICLE)
        assert text.startswith("Reading faster Rapid serial visual presentation")
        for junk in ("Home", "Site header", "Buy now", "tracking", "Copyright", "color"):
            assert junk not in text
        assert "  " not in text

    def test_fetch(self):
        def handler(request):
            assert request.url == "https://example.com/article"
            return httpx.Response(200, text=ARTICLE)

        text = fetch_text_from_url("https://example.com/article", client=_client(handler))
        assert "one word at a time" in text

    def test_invalid_url(self):
        with pytest.raises(ExtractionError, match="Invalid URL format"):
            fetch_text_from_url("not a url")

    def test_too_little_text(self):
        client = _client(lambda request: httpx.Response(200, text="<html><body><div id='root'></div></body></html>"))
        with pytest.raises(ExtractionError, match="JavaScript"):
            fetch_text_from_url("https://spa.example.com", client=client)

    def test_http_error_status(self):
        client = _client(lambda request: httpx.Response(404, text="missing"))
        with pytest.raises(ExtractionError, match="404"):
            fetch_text_from_url("https://example.com/gone", client=client)

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(ExtractionError, match="timed out"):
            fetch_text_from_url("https://slow.example.com", client=_client(handler))

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ExtractionError, match="Network error"):
            fetch_text_from_url("https://down.example.com", client=_client(handler))


class TestAddressPolicy:
    @pytest.mark.parametrize(
        "url",
        [
            "http://127.0.0.1:5000/admin/stats",
            "http://localhost/",
            "http://app.localhost/",
            "http://[::1]/",
            "http://169.254.169.254/latest/meta-data",
            "http://192.168.1.1/",
            "https://intranet.example.com/wiki",
        ],
    )
    def test_refuses_local_and_private_hosts(self, url):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, text=ARTICLE)

        with pytest.raises(ExtractionError, match="not allowed"):
            fetch_text_from_url(url, client=_client(handler))
        assert requests == []

    def test_public_host_passes(self):
        check_public_host("https://example.com/article")

    def test_refuses_redirect_into_private_network(self):
        requests = []

        def handler(request):
            requests.append(str(request.url))
            return httpx.Response(302, headers={"location": "http://127.0.0.1/secret"})

        with pytest.raises(ExtractionError, match="not allowed"):
            fetch_text_from_url("https://example.com/go", client=_client(handler))
        assert requests == ["https://example.com/go"]

    def test_follows_public_redirect(self):
        def handler(request):
            if request.url.path == "/old":
                return httpx.Response(301, headers={"location": "/new"})
            return httpx.Response(200, text=ARTICLE)

        text = fetch_text_from_url("https://example.com/old", client=_client(handler))
        assert "one word at a time" in text

    def test_redirect_loop(self):
        client = _client(lambda request: httpx.Response(302, headers={"location": "/again"}))
        with pytest.raises(ExtractionError, match="redirected too many times"):
            fetch_text_from_url("https://example.com/again", client=client)

    def test_private_allowed_when_asked(self):
        client = _client(lambda request: httpx.Response(200, text=ARTICLE))
        text = fetch_text_from_url("http://127.0.0.1:8000/", client=client, allow_private=True)
        assert "Reading faster" in text
