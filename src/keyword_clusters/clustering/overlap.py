"""SERP overlap scorer.

Two keywords are considered topically related when search engines rank
the same pages for both.  The score is the number of organic result URLs
the two SERP snapshots share, after normalising away cosmetic URL
differences (scheme, ``www.``, host case, trailing slash, fragment).
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from urllib.parse import urlsplit

from keyword_clusters.clustering.types import MAX_OVERLAP, Keyword

_HAS_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def normalize_url(url: str) -> str:
    """Normalise a SERP URL for comparison.

    ``https://WWW.Example.com/Shoes/`` and ``http://example.com/Shoes``
    normalise to the same string.  Path and query keep their case.
    """
    url = url.strip()
    if not url:
        return ""

    # urlsplit only recognises the host after a scheme or a leading "//"
    if not (_HAS_SCHEME.match(url) or url.startswith("//")):
        url = f"//{url}"
    parts = urlsplit(url)
    host = parts.netloc.lower()
    if host.startswith("www."):
        host = host[4:]

    path = parts.path.rstrip("/")
    normalized = host + path
    if parts.query:
        normalized += f"?{parts.query}"
    return normalized


def _url_set(urls: Sequence[str]) -> frozenset[str]:
    normalized = (normalize_url(u) for u in urls[:MAX_OVERLAP])
    return frozenset(u for u in normalized if u)


def overlap_score(keyword_a: Keyword, keyword_b: Keyword) -> int:
    """Count SERP URLs shared by two keywords.

    Only the first ten results of each snapshot are considered, so the
    score lies in ``0..10``.  Returns 0 when either snapshot is empty.
    """
    return len(_url_set(keyword_a.serp_urls) & _url_set(keyword_b.serp_urls))


def build_overlap_matrix(keywords: Sequence[Keyword]) -> list[list[int]]:
    """Compute the symmetric N x N overlap matrix.

    Each keyword's URLs are normalised once.  The diagonal is set to the
    maximum score and is never consulted by the clusterer.
    """
    url_sets = [_url_set(k.serp_urls) for k in keywords]
    n = len(url_sets)
    matrix = [[0] * n for _ in range(n)]

    for i in range(n):
        matrix[i][i] = MAX_OVERLAP
        for j in range(i + 1, n):
            score = len(url_sets[i] & url_sets[j])
            matrix[i][j] = score
            matrix[j][i] = score

    return matrix


def find_similar_keywords(
    index: int, overlap_matrix: Sequence[Sequence[int]], threshold: int
) -> list[int]:
    """Indices of keywords whose overlap with ``index`` meets ``threshold``."""
    return [
        j
        for j, score in enumerate(overlap_matrix[index])
        if j != index and score >= threshold
    ]
