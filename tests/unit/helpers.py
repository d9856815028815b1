import json
import re

MESSAGE_LINE = re.compile(r'var message = (.*);\n')
HANDSHAKE_LINE = re.compile(r'var handshake = (.*);\n')


def decode_popup(html):
    """Return (status, content) delivered to the opener by a popup page."""
    match = MESSAGE_LINE.search(html)
    assert match, "popup page has no message literal"
    message = json.loads(match.group(1))
    prefix, provider, status, content = message.split(":", 3)
    assert prefix == "authorization"
    assert provider == "github"
    return status, json.loads(content)
