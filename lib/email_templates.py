# =============================================================================
# lib/email_templates.py - Transactional Email Templates
# =============================================================================
# Renders subject + HTML + plain-text bodies for the emails the app sends.
# =============================================================================

from dataclasses import dataclass
from html import escape


@dataclass
class RenderedEmail:
    subject: str
    html_body: str
    text_body: str


_BASE_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body style="margin:0;padding:0;background-color:#f4f4f4;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;color:#333333;">
  <span style="display:none;">{preheader}</span>
  <div style="max-width:600px;margin:0 auto;background-color:#ffffff;border:1px solid #dddddd;">
    <div style="padding:32px 24px;line-height:1.6;">
{content}
    </div>
    <div style="background-color:#f8f8f8;padding:24px;text-align:center;border-top:1px solid #dddddd;">
      <p style="color:#666666;font-size:14px;margin:8px 0;">{footer}</p>
    </div>
  </div>
</body>
</html>
"""


def magic_link_email(
    email: str,
    url: str,
    app_name: str,
    app_description: str | None = None,
    max_age_hours: int = 24,
) -> RenderedEmail:
    """Build the sign-in email containing the magic link."""
    subject = f"Sign in to {app_name}"
    safe_url = escape(url, quote=True)
    tagline = f"<p><em>{escape(app_description)}</em></p>" if app_description else ""

    content = f"""      <h1 style="font-size:28px;margin:0 0 24px 0;">Welcome back to {escape(app_name)}</h1>
      {tagline}
      <p>We received a sign-in request for your account ({escape(email)}). Click the button below to complete your sign-in:</p>
      <div style="text-align:center;margin:32px 0;">
        <a href="{safe_url}" style="display:inline-block;background-color:#007cba;color:#ffffff;text-decoration:none;padding:14px 28px;border-radius:4px;font-weight:600;font-size:16px;">Sign in to {escape(app_name)}</a>
      </div>
      <p>If the button doesn't work, copy and paste this link into your browser:</p>
      <p><a href="{safe_url}">{safe_url}</a></p>
      <hr>
      <p><strong>Security notes:</strong></p>
      <ul>
        <li>This link will expire in {max_age_hours} hours</li>
        <li>If you didn't request this, you can safely ignore this email</li>
        <li>Never share this link with anyone</li>
      </ul>"""

    html_body = _BASE_HTML.format(
        title=escape(subject),
        preheader=escape(f"Sign in to {app_name} - Your secure login link"),
        content=content,
        footer=escape(app_name),
    )

    text_lines = [
        f"Welcome back to {app_name}",
        "",
    ]
    if app_description:
        text_lines += [app_description, ""]
    text_lines += [
        f"We received a sign-in request for your account ({email}).",
        "Open this link to complete your sign-in:",
        "",
        url,
        "",
        f"This link will expire in {max_age_hours} hours.",
        "If you didn't request this, you can safely ignore this email.",
    ]

    return RenderedEmail(subject=subject, html_body=html_body, text_body="\n".join(text_lines))
