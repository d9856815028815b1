"""HTML template for the OAuth popup window.

The page talks to the window that opened the popup:
- announces itself with "authorizing:github" (target origin "*")
- waits for the opener to echo "authorizing:github" back
- replies once with "authorization:github:<status>:<json>" to that origin
- closes itself a second later
"""

import json
from typing import Any

from fastapi.responses import HTMLResponse

from oauth.github import PROVIDER

HANDSHAKE_MESSAGE = f"authorizing:{PROVIDER}"
CLOSE_DELAY_MS = 1000

# json.dumps already escapes non-ASCII (U+2028/U+2029 included); these close
# or open markup inside an inline <script> block
_SCRIPT_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
}

POPUP_PAGE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>Authorizing with GitHub...</title>
    <style>
        body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
               background: #FAF9F7; color: #1A1915;
               min-height: 100vh; display: flex; align-items: center; justify-content: center; margin: 0; }}
        h1 {{ font-size: 20px; font-weight: 600; }}
    </style>
</head>
<body>
    <h1>Authorizing, please wait...</h1>
    <script>
        (function() {{
            var handshake = {handshake};
            var message = {message};
            var sent = false;

            window.addEventListener("message", function(event) {{
                if (sent || event.data !== handshake) {{
                    return;
                }}
                sent = true;
                window.opener.postMessage(message, event.origin);
                setTimeout(function() {{
                    window.close();
                }}, {close_delay});
            }});

            window.opener.postMessage(handshake, "*");
        }})();
    </script>
</body>
</html>
"""


def script_literal(value: str) -> str:
    """Encode `value` as a JavaScript string literal safe inside <script>.

    The literal is also valid JSON, so `json.loads` recovers `value`.
    """
    encoded = json.dumps(value)
    for char, escape in _SCRIPT_ESCAPES.items():
        encoded = encoded.replace(char, escape)
    return encoded


def build_message(status: str, content: Any) -> str:
    """Build the result message delivered to the opener window."""
    content_json = json.dumps(content, separators=(",", ":"), ensure_ascii=False)
    return f"authorization:{PROVIDER}:{status}:{content_json}"


def render_popup(status: str, content: Any) -> HTMLResponse:
    """Render the popup page relaying `status` and `content` to the opener."""
    html = POPUP_PAGE.format(
        handshake=script_literal(HANDSHAKE_MESSAGE),
        message=script_literal(build_message(status, content)),
        close_delay=CLOSE_DELAY_MS,
    )
    return HTMLResponse(
        html,
        status_code=200,
        headers={
            "Content-Type": "text/html;charset=UTF-8",
            "Access-Control-Allow-Origin": "*",
        },
    )
