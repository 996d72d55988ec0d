"""
HTML bodies for customer emails.

Every customer-supplied value is escaped before it is interpolated.
"""

from html import escape

from .schemas import BookingOut

SERVICE_LABELS = {
    "plumbing": "Plumbing",
    "electrical": "Electrical Repair",
    "ac-repair": "AC Repair",
    "cleaning": "Cleaning Service",
    "painting": "Painting",
    "carpentry": "Carpentry",
}

TIME_SLOT_LABELS = {
    "morning": "Morning (9 AM - 12 PM)",
    "afternoon": "Afternoon (12 PM - 5 PM)",
    "evening": "Evening (5 PM - 8 PM)",
}

STATUS_MESSAGES = {
    "pending": "Your booking is pending review by our team.",
    "confirmed": "Your booking has been confirmed! Our technician will arrive as scheduled.",
    "in-progress": "Our technician is currently working on your service request.",
    "completed": "Your service has been completed successfully. Thank you for choosing QuickFix!",
    "cancelled": "Your booking has been cancelled. If you have any questions, please contact us.",
}

THEME = {
    "primary": "#2563eb",
    "badge": "#fbbf24",
    "muted": "#666",
    "panel": "#f3f4f6",
}


def _layout(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{title}</title>
</head>
<body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
  <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="background: {THEME['primary']}; color: white; padding: 20px; text-align: center;">
      <h1>QuickFix</h1>
      <h2>{title}</h2>
    </div>
    <div style="padding: 20px;">
{body}
    </div>
    <div style="text-align: center; padding: 20px; color: {THEME['muted']};">
      <p>Thank you for choosing QuickFix!</p>
    </div>
  </div>
</body>
</html>"""


def _row(label: str, value: str) -> str:
    return (
        f'<div style="margin: 10px 0;"><span style="font-weight: bold; '
        f'color: {THEME["primary"]};">{label}:</span> {value}</div>'
    )


def _contact(support_phone: str, support_email: str) -> str:
    return (
        "<p>If you have any questions or need to modify your booking, please contact us at:</p>"
        f"<p>Phone: {escape(support_phone)}<br>Email: {escape(support_email)}</p>"
    )


def booking_confirmation_template(
    booking: BookingOut, support_phone: str, support_email: str
) -> tuple[str, str]:
    addr = booking.address
    details = "\n".join(
        [
            _row("Booking ID", escape(booking.id)),
            _row("Service Type", SERVICE_LABELS.get(booking.service_type, escape(booking.service_type))),
            _row("Description", escape(booking.service_description)),
            _row("Preferred Date", booking.preferred_date.strftime("%B %d, %Y")),
            _row("Preferred Time", TIME_SLOT_LABELS.get(booking.preferred_time, escape(booking.preferred_time))),
            _row("Urgency", escape(booking.urgency.upper())),
            _row(
                "Status",
                f'<span style="padding: 4px 12px; background: {THEME["badge"]}; color: white; '
                f'border-radius: 20px; font-size: 12px;">{escape(booking.status.upper())}</span>',
            ),
            _row(
                "Service Address",
                f"<br>{escape(addr.street)}<br>{escape(addr.city)}, {escape(addr.state)} {escape(addr.zip_code)}",
            ),
        ]
    )
    body = f"""      <p>Dear {escape(booking.customer_name)},</p>
      <p>Thank you for choosing QuickFix! We have received your service booking.</p>
      <div style="background: {THEME['panel']}; padding: 20px; margin: 20px 0; border-radius: 8px;">
        <h3>Booking Details</h3>
{details}
      </div>
      <p><strong>What's Next?</strong></p>
      <ul>
        <li>Our team will review your request within 24 hours</li>
        <li>You'll receive a call to confirm the appointment details</li>
        <li>A qualified technician will arrive at your scheduled time</li>
      </ul>
      {_contact(support_phone, support_email)}"""
    return "QuickFix - Service Booking Confirmation", _layout("Booking Confirmation", body)


def status_update_template(
    booking: BookingOut, old_status: str, support_phone: str, support_email: str
) -> tuple[str, str]:
    message = STATUS_MESSAGES.get(booking.status, "Your booking status has been updated.")
    rows = [
        _row("Booking ID", escape(booking.id)),
        _row("Service", SERVICE_LABELS.get(booking.service_type, escape(booking.service_type))),
        _row("Previous Status", escape(old_status.upper())),
        _row("New Status", escape(booking.status.upper())),
    ]
    if booking.estimated_cost is not None:
        rows.append(_row("Estimated Cost", f"${booking.estimated_cost:,.2f}"))
    if booking.notes:
        rows.append(_row("Notes", escape(booking.notes)))

    rows_html = "\n".join(rows)
    body = f"""      <p>Dear {escape(booking.customer_name)},</p>
      <p>{message}</p>
      <div style="background: {THEME['panel']}; padding: 15px; margin: 20px 0; border-radius: 8px;">
{rows_html}
      </div>
      {_contact(support_phone, support_email)}"""
    subject = f"QuickFix - Booking Status Update: {booking.status.upper()}"
    return subject, _layout("Booking Status Update", body)
