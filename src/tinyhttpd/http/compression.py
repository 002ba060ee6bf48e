"""
=============================================================================
GZIP CONTENT ENCODING
=============================================================================

The only content negotiation tinyhttpd does: should the echo body be
gzip-compressed or sent as-is?

=============================================================================
THE NEGOTIATION RULE
=============================================================================

    Accept-Encoding: deflate, gzip, br
                     ───┬───  ──┬─  ─┬
                        │       │    │
                        └───────┴────┴── split on ",", strip spaces
                                │
                                ▼
                        exact token "gzip" present?  ──► compress

    ┌──────────────────────────────────────┬──────────────┐
    │ Accept-Encoding                      │ Compress?    │
    ├──────────────────────────────────────┼──────────────┤
    │ gzip                                 │ yes          │
    │ deflate, gzip, br                    │ yes          │
    │ deflate,gzip                         │ yes          │
    │ GZIP                                 │ no (exact)   │
    │ gzip;q=1.0                           │ no (exact)   │
    │ invalid-encoding                     │ no           │
    │ (header missing)                     │ no           │
    └──────────────────────────────────────┴──────────────┘

Only the FIRST Accept-Encoding header line is consulted. Quality values
are not interpreted.

=============================================================================
WIRE FORMAT
=============================================================================

gzip_encode() produces a standard RFC 1952 stream (10-byte header with
magic 1f 8b, DEFLATE payload, CRC32 + size trailer). The header embeds
the current time, so two encodings of the same bytes may differ. Compare
by decompressing, never byte-for-byte.

=============================================================================
"""

import gzip

from .headers import Headers


GZIP_TOKEN = "gzip"


def gzip_encode(data: bytes) -> bytes:
    """Compress `data` into a gzip stream at the default level."""
    return gzip.compress(data)


def accepted_encodings(headers: Headers) -> list[str]:
    """
    Tokens listed in the first Accept-Encoding header.

        "deflate, gzip ,br"  →  ["deflate", "gzip", "br"]
    """
    value = headers.get("Accept-Encoding")
    if value is None:
        return []
    return [token.strip() for token in value.split(",") if token.strip()]


def accepts_gzip(headers: Headers) -> bool:
    """True if the client's first Accept-Encoding header lists exactly "gzip"."""
    return GZIP_TOKEN in accepted_encodings(headers)
