import re
from typing import Optional

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style\b[^<]*(?:(?!</style>)<[^<]*)*</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def extract_text(html: Optional[str]) -> str:
	"""Approximate the readable text of a Canvas page body.

	Not a parser: script and style blocks are dropped, every other tag becomes a
	space and whitespace is collapsed. Unbalanced markup just leaves its text behind.
	"""
	if not html:
		return ""
	cleaned = _SCRIPT_RE.sub("", html)
	cleaned = _STYLE_RE.sub("", cleaned)
	text = _TAG_RE.sub(" ", cleaned)
	return _WS_RE.sub(" ", text).strip()
