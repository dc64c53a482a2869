from flask import current_app as app
import requests

from nextdoor.utils.logging_utils import get_logger

MAIL_TIMEOUT_SECONDS = 10


def _envelope(email: str, subject: str, body: str) -> dict:
    return {
        "to": email,
        "from": app.config.get("MAIL_DEFAULT_SENDER"),
        "subject": subject,
        "body": body,
    }


def send_mail(email: str, subject: str, body: str) -> int:
    """POST one plain-text message to the mail relay.

    Returns the relay's status code, or a local one: 400 for an incomplete
    message, 503 when the relay is not configured, 500 when the request
    itself fails. With ``MAIL_FLAG`` off nothing is sent and 200 is returned.
    """
    logger = get_logger("mail")
    if not (email and subject and body):
        logger.warning("Mail rejected: incomplete message to=%r", email)
        return 400

    if not app.config.get("MAIL_FLAG", True):
        logger.info("Mail suppressed to=%s subject=%r", email, subject)
        return 200

    relay = app.config.get("MAIL_API_URL")
    api_token = app.config.get("MAIL_API_TOKEN")
    if not (relay and api_token):
        logger.error("Mail relay not configured")
        return 503

    try:
        resp = requests.post(
            relay,
            json=_envelope(email, subject, body),
            headers={"Authorization": f"Bearer {api_token}"},
            timeout=MAIL_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        logger.error("Mail relay unreachable to=%s: %s", email, exc, exc_info=True)
        return 500

    if resp.status_code == 200:
        logger.info("Mail delivered to=%s", email)
    else:
        logger.warning("Mail relay answered %s to=%s body=%r",
                       resp.status_code, email, (resp.text or "")[:300])
    return resp.status_code


def send_magic_link(email: str, link: str) -> int:
    site = app.config.get('APP_NAME', 'NextDoor SG')
    ttl = app.config.get('MAGIC_LINK_TTL_MINUTES', 60)
    return send_mail(
        email,
        f"Your {site} sign-in link",
        f"Sign in to {site} with this one-time link (valid for {ttl} minutes):\n\n{link}\n\n"
        "Ignore this email if you did not ask for it.",
    )


def send_password_reset(email: str, link: str) -> int:
    site = app.config.get('APP_NAME', 'NextDoor SG')
    ttl = app.config.get('RESET_TOKEN_TTL_MINUTES', 30)
    return send_mail(
        email,
        f"Reset your {site} password",
        f"Choose a new password within {ttl} minutes:\n\n{link}\n\n"
        "Your current password stays unchanged if you ignore this email.",
    )
