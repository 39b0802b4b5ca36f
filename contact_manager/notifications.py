"""Email notifications sent as background tasks.

Delivery is best effort: failures are logged and never reach the request
that triggered them.
"""

import logging

from fastapi import BackgroundTasks
from fastapi_mail import FastMail, MessageSchema

from .core import get_mail_config, get_settings
from .models import Contact, User

logger = logging.getLogger(__name__)


def render_contact_created(contact: Contact, owner: User) -> str:
    created = contact.created_at.strftime("%Y-%m-%d %H:%M")
    return (
        f"Hello {owner.name},\n\n"
        "A new contact has been added to your contact list.\n\n"
        "Contact details:\n"
        f"- Name: {contact.name}\n"
        f"- Email: {contact.email or 'Not provided'}\n"
        f"- Phone: {contact.phone or 'Not provided'}\n"
        f"- Created: {created}\n"
    )


def notify_contact_created(
    background_tasks: BackgroundTasks, contact: Contact, owner: User
):
    """Schedule the "contact created" email to the contact's owner."""
    if not get_settings().NOTIFY_ON_CONTACT_CREATE:
        return
    background_tasks.add_task(
        send_contact_created_email_task,
        owner.email,
        render_contact_created(contact, owner),
    )


async def send_contact_created_email_task(email: str, body: str):
    """
    Send the contact creation email.

    Args:
        email (str): Recipient email address.
        body (str): Plain text message body.
    """
    message = MessageSchema(
        subject="New contact created",
        recipients=[email],
        body=body,
        subtype="plain",
    )
    try:
        fm = FastMail(get_mail_config())
        await fm.send_message(message)
    except Exception:
        logger.warning("Failed to send contact creation email to %s", email, exc_info=True)
