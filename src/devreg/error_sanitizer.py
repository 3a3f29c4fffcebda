"""Redaction of internal details from 5xx error messages.

Storage failures carry file system paths, and an error raised while
encoding the registry can echo a user's password. The 5xx handler passes
such messages through sanitize_error_message() before they reach a client;
the raw message is still logged server-side.
"""

import re

# Applied in order; tracebacks go before bare paths since they contain paths
REDACTIONS: list[tuple[re.Pattern, str]] = [
    (re.compile(r'"password"\s*:\s*"[^"]*"', re.IGNORECASE), '"password": "[REDACTED]"'),
    (re.compile(r"password[=:\s]+[^\s,;]+", re.IGNORECASE), "password=[REDACTED]"),
    (re.compile(r"\bREGISTRY_(?:DATA_FILE|UPLOAD_DIR|STATIC_DIR)\b"), "[ENV_VAR]"),
    (
        re.compile(r"Traceback \(most recent call last\):[\s\S]*?(?=\n\n|\n[A-Z]|\Z)"),
        "[STACK_TRACE]",
    ),
    (re.compile(r"'(?:/|[A-Za-z]:\\|\./)[^']*'"), "'[FILE_PATH]'"),
    (re.compile(r"\./[^\s,;'\"]+"), "[FILE_PATH]"),
    (re.compile(r"[A-Za-z]:\\[^\s,;'\"]+"), "[FILE_PATH]"),
    (re.compile(r"(?:/[\w.-]+){2,}"), "[FILE_PATH]"),
]

MAX_MESSAGE_LENGTH = 500


def sanitize_error_message(message: str) -> str:
    """Return `message` with paths, credentials and tracebacks redacted."""
    if not message:
        return "An error occurred"

    for pattern, replacement in REDACTIONS:
        message = pattern.sub(replacement, message)

    if len(message) > MAX_MESSAGE_LENGTH:
        message = message[:MAX_MESSAGE_LENGTH] + "... [TRUNCATED]"
    return message
