"""Work order notification emails using the Resend API.

Best-effort: a missing API key or a send failure is logged and never fails
the operation that triggered it.
"""

from __future__ import annotations

import logging
from html import escape

from sqlalchemy.ext.asyncio import AsyncSession

from workorders.config import get_settings
from workorders.db import crud
from workorders.models import WorkOrder, WorkOrderSignature, WorkOrderInvitation
from workorders.services.signatures import SIGNER_LABELS

logger = logging.getLogger(__name__)

_settings = get_settings()

_ACTION_LABELS = {
    "created": "New Work Order",
    "completed": "Work Order Completed",
    "status_changed": "Status Changed",
}


def _send(to: list[str], subject: str, html: str) -> bool:
    """Send an email via Resend. Returns True on success."""
    if not to:
        return True
    if not _settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set — email to %s not sent: %s", ", ".join(to), subject)
        return False

    import resend
    resend.api_key = _settings.resend_api_key

    try:
        resend.Emails.send({
            "from": _settings.email_from,
            "to": to,
            "subject": subject,
            "html": html,
        })
        return True
    except Exception:
        logger.exception("Failed to send email to %s", ", ".join(to))
        return False


def _work_order_url(wo: WorkOrder) -> str:
    return f"{_settings.app_url}/work-orders/{wo.id}"


def _where(wo: WorkOrder) -> str:
    parts = [escape(p) for p in (wo.company, wo.location) if p]
    return f"<p><strong>{' - '.join(parts)}</strong></p>" if parts else ""


async def notify_work_order_change(
    db: AsyncSession, wo: WorkOrder, action: str, performed_by: str,
) -> bool:
    """Tell every admin a work order was created, completed or changed status."""
    label = _ACTION_LABELS[action]
    if action == "status_changed":
        label = f"{label}: {wo.work_completed.replace('_', ' ').upper()}"
    html = f"""
    <h2>{label}</h2>
    <h3>Work Order #{wo.work_order_number}</h3>
    {_where(wo)}
    <p>{escape(wo.description)}</p>
    <p>By {escape(performed_by)}</p>
    <p><a href="{_work_order_url(wo)}">View work order</a></p>
    """
    admins = await crud.list_user_emails(db, role="admin")
    return _send(admins, f"{label} — {wo.work_order_number}", html)


async def notify_signature(db: AsyncSession, wo: WorkOrder, sig: WorkOrderSignature) -> bool:
    """Tell admins, the assignee and the creator that a work order was signed."""
    ids = [uid for uid in (wo.assigned_to, wo.created_by) if uid]
    recipients = set(await crud.list_user_emails(db, role="admin"))
    if ids:
        recipients.update(await crud.list_user_emails(db, user_ids=ids))

    title = f"<p>{escape(sig.signer_title)}</p>" if sig.signer_title else ""
    html = f"""
    <h2>New Signature Received</h2>
    <h3>Work Order #{wo.work_order_number} has been signed</h3>
    {_where(wo)}
    <p>Signed by <strong>{escape(sig.signer_name)}</strong></p>
    {title}
    <p>{SIGNER_LABELS[sig.signer_type]}</p>
    <p><a href="{_work_order_url(wo)}">View work order</a></p>
    """
    return _send(sorted(recipients), f"Work Order #{wo.work_order_number} signed", html)


def send_work_order_invitation(wo: WorkOrder, invitation: WorkOrderInvitation, inviter_name: str) -> bool:
    """Mail the invitee a link carrying their invitation token."""
    view_url = f"{_settings.app_url}/customer/work-orders?token={invitation.token}"
    description = wo.description if len(wo.description) <= 200 else f"{wo.description[:200]}..."
    html = f"""
    <h2>You've been added to a work order</h2>
    <p>Hi {escape(invitation.customer_name)}, <strong>{escape(inviter_name)}</strong>
    has added you as a customer contact for work order #{wo.work_order_number}.</p>
    {_where(wo)}
    <p>{escape(description)}</p>
    <p><a href="{view_url}">View work order</a></p>
    """
    return _send([invitation.email], f"You've been added to Work Order #{wo.work_order_number}", html)
