"""Static HTML pages shown to the browser at the end of the callback leg."""

from __future__ import annotations

from enum import Enum
from html import escape


class ClientSource(str, Enum):
    """Kind of client that started the flow; selects the success copy."""

    CLI = "cli"
    AGENT = "agent"
    UNKNOWN = "unknown"

    @classmethod
    def from_tag(cls, tag: str | None) -> "ClientSource":
        try:
            return cls(tag or cls.UNKNOWN.value)
        except ValueError:
            return cls.UNKNOWN


PROJECT_URL = "https://github.com/BLANXLAIT/krocli"

_CLI_EXAMPLES = """
    <div style="text-align:left;background:#1e1e1e;color:#d4d4d4;padding:1rem 1.25rem;border-radius:8px;font-family:'SF Mono',Monaco,Consolas,monospace;font-size:0.85rem;line-height:1.6;overflow-x:auto">
      <div><span style="color:#6a9955">$</span> krocli products search --term <span style="color:#ce9178">"milk"</span></div>
      <div><span style="color:#6a9955">$</span> krocli cart add --upc 0011110838049 --qty 2</div>
      <div><span style="color:#6a9955">$</span> krocli identity profile</div>
    </div>"""

_AGENT_EXAMPLES = """
    <div style="text-align:left;background:#f0f4ff;padding:1rem 1.25rem;border-radius:8px;font-size:0.9rem;line-height:1.8;color:#333">
      <div>&ldquo;Search for organic milk at Ralphs&rdquo;</div>
      <div>&ldquo;Add eggs and bread to my Kroger cart&rdquo;</div>
      <div>&ldquo;Show my Kroger profile&rdquo;</div>
    </div>"""

_SUCCESS_COPY: dict[ClientSource, tuple[str, str]] = {
    ClientSource.CLI: (
        "Return to your terminal. You're all set.",
        _CLI_EXAMPLES,
    ),
    ClientSource.AGENT: (
        "Go back to your conversation. You're all set.",
        _AGENT_EXAMPLES,
    ),
    ClientSource.UNKNOWN: (
        "You can close this tab now.",
        _CLI_EXAMPLES
        + '\n    <p style="margin:0.75rem 0 0.5rem;font-size:0.85rem;color:#888">'
        "Or ask your AI agent:</p>\n"
        + _AGENT_EXAMPLES,
    ),
}


def render_error_page(title: str, message: str) -> str:
    title, message = escape(title), escape(message)
    return f"""<!DOCTYPE html>
<html><head><title>{title}</title>
<meta name="viewport" content="width=device-width,initial-scale=1">
</head>
<body style="font-family:system-ui,sans-serif;display:flex;justify-content:center;align-items:center;min-height:100vh;margin:0;background:#f5f5f5">
  <div style="text-align:center;background:white;padding:2rem 3rem;border-radius:12px;box-shadow:0 2px 8px rgba(0,0,0,0.1);max-width:480px">
    <h1 style="color:#dc2626">{title}</h1>
    <p style="color:#666">{message}</p>
  </div>
</body></html>"""


def render_success_page(source: ClientSource, session_ttl_minutes: int = 5) -> str:
    """Render the confirmation page; copy depends only on ``source``."""
    subtitle, examples = _SUCCESS_COPY[source]
    return f"""<!DOCTYPE html>
<html><head><title>Login Successful</title>
<meta name="viewport" content="width=device-width,initial-scale=1">
</head>
<body style="font-family:system-ui,-apple-system,sans-serif;display:flex;justify-content:center;align-items:center;min-height:100vh;margin:0;background:linear-gradient(135deg,#f5f7fa 0%,#c3cfe2 100%)">
  <div style="background:white;padding:2.5rem;border-radius:16px;box-shadow:0 4px 24px rgba(0,0,0,0.1);max-width:520px;width:90%">
    <div style="text-align:center;margin-bottom:1.5rem">
      <div style="font-size:3rem;margin-bottom:0.5rem">&#10003;</div>
      <h1 style="margin:0 0 0.25rem;font-size:1.5rem;color:#111">Login Successful</h1>
      <p style="margin:0;color:#666;font-size:0.95rem">{subtitle}</p>
    </div>

    <div style="background:#f0fdf4;border:1px solid #bbf7d0;border-radius:10px;padding:1rem 1.25rem;margin-bottom:1.5rem">
      <h2 style="margin:0 0 0.5rem;font-size:0.9rem;color:#15803d;font-weight:600">Your data is secure</h2>
      <ul style="margin:0;padding:0 0 0 1.1rem;font-size:0.85rem;color:#333;line-height:1.7">
        <li>Session deleted from server after token delivery</li>
        <li>No credentials or passwords stored on proxy</li>
        <li>Login sessions expire after {session_ttl_minutes} minutes</li>
        <li>Proxy is <a href="{PROJECT_URL}" style="color:#15803d">fully open source</a></li>
      </ul>
    </div>

    <div style="margin-bottom:1.5rem">
      <h2 style="margin:0 0 0.75rem;font-size:0.9rem;color:#333;font-weight:600">Try it out</h2>
      {examples}
    </div>
  </div>
</body></html>"""


__all__ = ["ClientSource", "render_error_page", "render_success_page"]
