"""Helpers for keeping secrets out of logs and responses."""


def mask_token(token: str | None) -> str:
    """Return a log-safe preview of ``token``.

    Only the first four characters survive, followed by the total length,
    e.g. ``ya29...(183)``.
    """
    if not token:
        return "<none>"
    if len(token) <= 8:
        return f"***({len(token)})"
    return f"{token[:4]}...({len(token)})"
