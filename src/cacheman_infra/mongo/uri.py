"""MongoDB connection URI building from discrete options."""

from __future__ import annotations

from urllib.parse import quote, quote_plus, urlencode

from cacheman_core.constants import DEFAULT_HOST, DEFAULT_PORT
from cacheman_core.models.options import HostAddress, StoreOptions


def format_uri(options: StoreOptions) -> str:
    """Synthesize ``mongodb://[user[:pass]@]h1[:p1][,h2...][/db][?opts]``.

    ``hosts`` wins over ``host``/``port``; with neither, the local default
    endpoint is used. Credentials are percent-encoded.
    """
    hosts = options.hosts or [
        HostAddress(host=options.host or DEFAULT_HOST, port=options.port or DEFAULT_PORT)
    ]
    uri = f"mongodb://{_format_auth(options)}{','.join(_format_host(h) for h in hosts)}"
    if options.database or options.uri_options:
        uri += "/"
    if options.database:
        uri += quote(options.database, safe="")
    if options.uri_options:
        uri += "?" + urlencode({k: _format_option(v) for k, v in options.uri_options.items()})
    return uri


def redact_uri(uri: str) -> str:
    """Replace the password of a URI with ``***`` for logging."""
    scheme, sep, rest = uri.partition("://")
    if not sep:
        return uri
    userinfo, at, hosts = rest.rpartition("@")
    if not at or ":" not in userinfo:
        return uri
    username = userinfo.split(":", 1)[0]
    return f"{scheme}://{username}:***@{hosts}"


def _format_auth(options: StoreOptions) -> str:
    """Build the ``user:pass@`` prefix, empty without a username."""
    if not options.username:
        return ""
    auth = quote_plus(options.username)
    if options.password is not None:
        auth += ":" + quote_plus(options.password.get_secret_value())
    return auth + "@"


def _format_host(address: HostAddress) -> str:
    """Format one seed; IPv6 literals are bracketed."""
    host = address.host
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    if address.port is None:
        return host
    return f"{host}:{address.port}"


def _format_option(value: object) -> str:
    """Render a query-string value the way MongoDB expects booleans."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
