"""Text acquisition: documents on disk and web pages.

Every failure surfaces as :class:`ExtractionError` carrying a message meant
for the reader; callers pass it on without looking inside.
"""

from __future__ import annotations

import ipaddress
import logging
import re
import socket
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup
from ebooklib import ITEM_DOCUMENT, epub
from pypdf import PdfReader

from swiftread.config import ALLOWED_EXTENSIONS, FETCH_TIMEOUT
from swiftread.tokenizer import normalize_whitespace

logger = logging.getLogger(__name__)

MIN_PAGE_TEXT = 50
MAX_REDIRECTS = 5

BLOCKED_HOST_MESSAGE = "This address is not allowed. Only public websites can be fetched."
UNREACHABLE_MESSAGE = "Network error. Could not reach the website or the connection failed."

CLUTTER_SELECTORS = [
    "script", "style", "noscript", "iframe", "svg",
    "nav", "footer", "header", "aside", "form",
    ".nav", ".footer", ".header", ".menu", "#menu", ".sidebar",
    ".ad", ".ads", ".advertisement", ".popup", ".modal",
    '[role="alert"]', '[role="banner"]', '[role="navigation"]',
    "button", "input", "textarea",
]


class ExtractionError(RuntimeError):
    pass


def allowed_file(filename: str) -> bool:
    return Path(filename).suffix.lower() in ALLOWED_EXTENSIONS


def extract_text_from_pdf(path: str) -> str:
    try:
        reader = PdfReader(path)
    except Exception as e:
        raise ExtractionError(f"Could not read the PDF file. Details: {e}") from e
    if reader.is_encrypted:
        raise ExtractionError("The PDF is password protected.")

    pages_text: List[str] = []
    for i, page in enumerate(reader.pages):
        try:
            txt = page.extract_text() or ""
        except Exception:
            logger.warning("Skipping unreadable page %d of %s", i + 1, path, exc_info=True)
            txt = ""
        pages_text.append(txt)
    return normalize_whitespace("\n\n".join(pages_text))


def extract_text_from_epub(path: str) -> str:
    try:
        book = epub.read_epub(path)
    except Exception as e:
        raise ExtractionError(f"Could not read the EPUB file. Details: {e}") from e

    parts: List[str] = []
    for item in book.get_items_of_type(ITEM_DOCUMENT):
        soup = BeautifulSoup(item.get_content(), "html.parser")
        for tag in soup(["script", "style", "nav"]):
            tag.decompose()
        text = normalize_whitespace(soup.get_text(separator=" ", strip=True))
        if text:
            parts.append(text)
    return normalize_whitespace("\n\n".join(parts))


def extract_text_from_plain(path: str) -> str:
    return normalize_whitespace(Path(path).read_bytes().decode("utf-8", errors="ignore"))


def extract_text_from_file(path: str, filename: Optional[str] = None) -> str:
    ext = Path(filename or path).suffix.lower()
    if ext == ".pdf":
        return extract_text_from_pdf(path)
    if ext == ".epub":
        return extract_text_from_epub(path)
    if ext in {".txt", ".md"}:
        return extract_text_from_plain(path)
    raise ExtractionError(f"Unsupported file type: {ext or '(none)'} (expected .pdf, .epub or .txt)")


def is_url_like(text: str) -> bool:
    parsed = urlparse(text.strip())
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def clean_html(html_content: str) -> str:
    soup = BeautifulSoup(html_content, "html.parser")
    for selector in CLUTTER_SELECTORS:
        for el in soup.select(selector):
            el.decompose()
    root = soup.body or soup
    text = root.get_text(separator=" ")
    return re.sub(r"\s+", " ", text).strip()


def check_public_host(url: str) -> None:
    """Raise ExtractionError unless every address of the URL's host is public."""
    host = urlparse(url).hostname or ""
    if not host or host == "localhost" or host.endswith(".localhost"):
        raise ExtractionError(BLOCKED_HOST_MESSAGE)
    try:
        addresses = [ipaddress.ip_address(host)]
    except ValueError:
        try:
            infos = socket.getaddrinfo(host, None)
        except (socket.gaierror, UnicodeError) as e:
            raise ExtractionError(UNREACHABLE_MESSAGE) from e
        addresses = [ipaddress.ip_address(info[4][0].split("%")[0]) for info in infos]
    for addr in addresses:
        if not addr.is_global:
            logger.warning("Refused to fetch %s (%s is not public)", url, addr)
            raise ExtractionError(BLOCKED_HOST_MESSAGE)


def _get_following_redirects(client: httpx.Client, url: str, allow_private: bool) -> httpx.Response:
    # Redirects are followed by hand so every hop goes through the host check.
    for _ in range(MAX_REDIRECTS + 1):
        if not allow_private:
            check_public_host(url)
        response = client.get(url, follow_redirects=False)
        if not response.is_redirect:
            return response
        url = str(response.url.join(response.headers["location"]))
    raise ExtractionError("Network error. The website redirected too many times.")


def fetch_text_from_url(
    url: str,
    timeout: float = FETCH_TIMEOUT,
    client: Optional[httpx.Client] = None,
    allow_private: bool = False,
) -> str:
    if not is_url_like(url):
        raise ExtractionError("Invalid URL format. Please include https://")

    own_client = client is None
    if own_client:
        client = httpx.Client(timeout=timeout)
    try:
        response = _get_following_redirects(client, url.strip(), allow_private)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        raise ExtractionError("Request timed out. The website took too long to respond.") from e
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        raise ExtractionError(f"Network error: {status} {e.response.reason_phrase}") from e
    except httpx.HTTPError as e:
        raise ExtractionError(UNREACHABLE_MESSAGE) from e
    finally:
        if own_client:
            client.close()

    text = clean_html(response.text)
    if len(text) < MIN_PAGE_TEXT:
        raise ExtractionError(
            "Could not extract enough text. The site might block scrapers "
            "or requires JavaScript to load content."
        )
    logger.info("Fetched %d characters from %s", len(text), url)
    return text
