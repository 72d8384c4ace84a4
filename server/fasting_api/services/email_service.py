# services/email_service.py
import logging
from html import escape
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To

from ..config import Settings, get_settings

logger = logging.getLogger(__name__)


def session_urls(session: dict[str, Any], base_url: str) -> dict[str, str]:
    """Editor and read-only URLs for one stored session record."""
    base = base_url.rstrip("/")
    session_id = session["id"]
    token = session.get("editToken")
    edit_url = f"{base}/session/{token}/{session_id}" if token else f"{base}/session/{session_id}"
    return {"edit": edit_url, "view": f"{base}/view/{session_id}"}


def _describe(session: dict[str, Any]) -> str:
    status = "Active" if session.get("isActive") else "Completed"
    target = session.get("targetDuration")
    started = str(session.get("startTime", ""))[:10]
    return f"{status} - {target}h target - started {started}"


def render_session_links_email(sessions: list[dict[str, Any]], base_url: str) -> tuple[str, str]:
    """
    Render the session links email.

    Returns:
        (html_content, plain_text_content)
    """
    html_cards = []
    text_blocks = []
    for session in sessions:
        urls = session_urls(session, base_url)
        name = session.get("name") or "Unnamed Session"
        border = "#10b981" if session.get("isActive") else "#e5e7eb"
        html_cards.append(
            f"""
                <div style="border: 2px solid {border}; border-radius: 12px; padding: 24px; margin-bottom: 20px;">
                    <h3 style="margin: 0 0 8px 0;">{escape(name)}</h3>
                    <p style="color: #6b7280; margin: 0 0 16px 0;">{escape(_describe(session))}</p>
                    <p><a href="{escape(urls['edit'])}">Open editor</a> (keep this link private)</p>
                    <p><a href="{escape(urls['view'])}">Read-only view</a> (safe to share)</p>
                </div>"""
        )
        text_blocks.append(
            f"{name}\n{_describe(session)}\nEdit: {urls['edit']}\nView: {urls['view']}\n"
        )

    count = len(sessions)
    html_content = f"""
        <html>
            <body style="font-family: Arial, sans-serif; padding: 20px;">
                <h2>Your Fast Track Session Links</h2>
                <p>Here are the {count} fasting session(s) linked to this email address.</p>
                {''.join(html_cards)}
                <p>Anyone with an edit link can change that session, so only share the read-only links.</p>
            </body>
        </html>
        """
    plain_content = (
        "Your Fast Track Session Links\n\n"
        f"Here are the {count} fasting session(s) linked to this email address.\n\n"
        + "\n".join(text_blocks)
        + "\nAnyone with an edit link can change that session, so only share the read-only links.\n"
    )
    return html_content, plain_content


class EmailService:
    """Sends transactional email through SendGrid."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def send_session_links(self, recipient_email: str, sessions: list[dict[str, Any]]) -> bool:
        """
        Send the session links email.

        Args:
            recipient_email: The email address to send to
            sessions: Stored session records owned by that address

        Returns:
            bool: True if email was sent successfully, False otherwise
        """
        try:
            if not self.settings.sendgrid_api_key:
                logger.error("[EMAIL] FASTING_SENDGRID_API_KEY is not configured")
                return False

            sg = SendGridAPIClient(self.settings.sendgrid_api_key)
            html_content, plain_content = render_session_links_email(
                sessions, self.settings.base_url
            )

            message = Mail(
                from_email=Email(self.settings.from_email, self.settings.from_name),
                to_emails=To(recipient_email),
                subject="Your Fast Track Session Links",
                plain_text_content=plain_content,
                html_content=html_content,
            )

            response = sg.send(message)

            logger.info(
                f"[EMAIL] Sent {len(sessions)} session link(s) to {recipient_email}. "
                f"Status code: {response.status_code}"
            )
            return True

        except Exception as e:
            logger.error(f"[EMAIL] Failed to send session links to {recipient_email}: {str(e)}")
            return False


def get_email_service() -> EmailService:
    """FastAPI dependency; tests override it with a stub."""
    return EmailService()
