import html
import logging
import requests
from iconnect_portal import config

_logger = logging.getLogger(__name__)


def build_reset_email(first_name, reset_url):
    name = html.escape(first_name or "there")
    url = html.escape(reset_url, quote=True)
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #333;">Password Reset Request</h2>
      <p>Hi {name},</p>
      <p>We received a request to reset your password. Click the button below to create a new password:</p>
      <p style="margin: 30px 0;">
        <a href="{url}" style="background-color: #4f46e5; color: white; padding: 12px 24px; text-decoration: none; border-radius: 6px; display: inline-block;">
          Reset Password
        </a>
      </p>
      <p>This link will expire in 1 hour.</p>
      <p>If you didn't request this reset, you can safely ignore this email.</p>
    </div>
    """


def send_password_reset_email(email, first_name, reset_url) -> bool:
    """
    Send the password reset link through Mailgun.

    Returns:
        bool: True if Mailgun accepted the message
    """
    if not (config.MAILGUN_API_KEY and config.MAILGUN_DOMAIN and config.MAILGUN_FROM_EMAIL):
        _logger.warning("Mailgun not configured, password reset email not sent")
        return False

    try:
        response = requests.post(
            f"{config.MAILGUN_API_BASE}/{config.MAILGUN_DOMAIN}/messages",
            auth=("api", config.MAILGUN_API_KEY),
            data={
                "from": f"Member Portal <{config.MAILGUN_FROM_EMAIL}>",
                "to": email,
                "subject": "Reset Your Password",
                "html": build_reset_email(first_name, reset_url),
            },
            timeout=10,
        )
    except requests.RequestException as e:
        _logger.error(f"Failed to send password reset email: {str(e)}", exc_info=True)
        return False

    if not response.ok:
        _logger.error(f"Mailgun error: {response.status_code} - {response.text}")
        return False

    _logger.info("Password reset email sent")
    return True
