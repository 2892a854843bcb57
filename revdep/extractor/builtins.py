"""Node.js platform builtin modules."""

from __future__ import annotations

NODE_BUILTINS: frozenset[str] = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console",
    "constants", "crypto", "dgram", "diagnostics_channel", "dns", "domain",
    "events", "fs", "http", "http2", "https", "inspector", "module", "net",
    "os", "path", "perf_hooks", "process", "punycode", "querystring",
    "readline", "repl", "stream", "string_decoder", "sys", "timers", "tls",
    "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
    "worker_threads", "zlib",
})


def is_builtin(request: str) -> bool:
    if request.startswith("node:"):
        return True
    # "fs/promises" -> "fs"
    return request.split("/", 1)[0] in NODE_BUILTINS


def package_name(request: str) -> str:
    """Package part of a bare specifier: ``lodash/fp`` -> ``lodash``, ``@a/b/c`` -> ``@a/b``."""
    parts = request.split("/")
    if request.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]
