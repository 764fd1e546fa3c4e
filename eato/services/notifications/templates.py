# eato/services/notifications/templates.py
"""
HTML email bodies.
Every interpolated value goes through html.escape.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import Optional

from eato.shared.models.booking_dto import BookingDTO
from eato.shared.models.event_dto import EventDTO
from eato.shared.models.truck_dto import TruckDTO
from eato.shared.models.user_dto import UserDTO

BRAND_COLOR = "#ff6b35"
SUCCESS_COLOR = "#6bcf7f"
MUTED_COLOR = "#6c757d"

_LAYOUT = """<!DOCTYPE html>
<html>
  <head>
    <style>
      body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
      .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
      .header {{ background-color: {color}; color: white; padding: 20px; border-radius: 8px 8px 0 0; }}
      .content {{ background-color: #f9f9f9; padding: 20px; border-radius: 0 0 8px 8px; }}
      .details {{ background-color: white; padding: 15px; margin: 15px 0; border-radius: 6px; }}
      .label {{ font-weight: bold; color: #666; }}
    </style>
  </head>
  <body>
    <div class="container">
      <div class="header"><h1>{title}</h1></div>
      <div class="content">
        {body}
        <p>Best regards,<br>The Eato Team</p>
      </div>
    </div>
  </body>
</html>
"""


@dataclass
class BookingContext:
    """Everything a booking email needs, fully loaded."""
    booking: BookingDTO
    truck: TruckDTO
    event: EventDTO
    truck_owner: Optional[UserDTO]
    organizer: Optional[UserDTO]


@dataclass
class Email:
    to: Optional[str]
    subject: str
    html: str


def _layout(title: str, body: str, color: str = BRAND_COLOR) -> str:
    return _LAYOUT.format(title=escape(title), body=body, color=color)


def _greeting(user: Optional[UserDTO]) -> str:
    name = user.first_name if user and user.first_name else "there"
    return f"<p>Hi {escape(name)},</p>"


def _row(label: str, value: object) -> str:
    return f'<p><span class="label">{escape(label)}:</span> {escape(str(value))}</p>'


def _event_details(event: EventDTO) -> str:
    return (
        '<div class="details"><h3>Event Details</h3>'
        + _row("Event", event.title)
        + _row("Date", event.date.strftime("%B %d, %Y"))
        + _row("Location", event.location)
        + _row("Expected Attendees", event.expected_headcount or "Not specified")
        + "</div>"
    )


def _contact(user: Optional[UserDTO], heading: str) -> str:
    if not user:
        return ""
    rows = _row("Name", user.display_name)
    if user.email:
        rows += _row("Email", user.email)
    if user.phone_number:
        rows += _row("Phone", user.phone_number)
    return f'<div class="details"><h3>{escape(heading)}</h3>{rows}</div>'


def _booking_terms(booking: BookingDTO) -> str:
    rows = ""
    if booking.proposed_price:
        rows += _row("Proposed Price", booking.proposed_price)
    if booking.message:
        rows += f"<p>{escape(booking.message)}</p>"
    if not rows:
        return ""
    return f'<div class="details"><h3>Request</h3>{rows}</div>'


def new_booking_emails(ctx: BookingContext) -> list[Email]:
    truck_name = ctx.truck.name
    owner_body = (
        _greeting(ctx.truck_owner)
        + f"<p>There is a new booking request for <strong>{escape(truck_name)}</strong>.</p>"
        + _event_details(ctx.event)
        + _contact(ctx.organizer, "Organizer")
        + _booking_terms(ctx.booking)
        + "<p>Log in to your Eato dashboard to follow this request.</p>"
    )
    organizer_body = (
        _greeting(ctx.organizer)
        + f"<p>A booking request between <strong>{escape(truck_name)}</strong> and your event is now pending review.</p>"
        + _event_details(ctx.event)
        + _contact(ctx.truck_owner, "Truck Owner")
        + _booking_terms(ctx.booking)
        + "<p>You can accept or decline it from your Eato dashboard.</p>"
    )
    return [
        Email(
            to=ctx.truck_owner.email if ctx.truck_owner else None,
            subject=f"New Booking Request for {truck_name}",
            html=_layout("New Booking Request", owner_body),
        ),
        Email(
            to=ctx.organizer.email if ctx.organizer else None,
            subject=f"Booking Request: {truck_name} for {ctx.event.title}",
            html=_layout("Booking Request Pending", organizer_body),
        ),
    ]


def booking_accepted_emails(ctx: BookingContext) -> list[Email]:
    owner_body = (
        _greeting(ctx.truck_owner)
        + f"<p>Great news! <strong>{escape(ctx.truck.name)}</strong> is confirmed for "
        + f"<strong>{escape(ctx.event.title)}</strong>.</p>"
        + _event_details(ctx.event)
        + _contact(ctx.organizer, "Organizer")
        + "<p>Coordinate setup time and menu details with the organizer.</p>"
    )
    organizer_body = (
        _greeting(ctx.organizer)
        + f"<p>Your booking with <strong>{escape(ctx.truck.name)}</strong> is confirmed.</p>"
        + _event_details(ctx.event)
        + _contact(ctx.truck_owner, "Truck Owner")
        + "<p>You can now pay the deposit from your Eato dashboard to secure the booking.</p>"
    )
    return [
        Email(
            to=ctx.truck_owner.email if ctx.truck_owner else None,
            subject=f"Booking Accepted: {ctx.event.title}",
            html=_layout("Booking Accepted!", owner_body, SUCCESS_COLOR),
        ),
        Email(
            to=ctx.organizer.email if ctx.organizer else None,
            subject=f"{ctx.truck.name} Is Booked for {ctx.event.title}",
            html=_layout("Booking Confirmed", organizer_body, SUCCESS_COLOR),
        ),
    ]


def booking_declined_emails(ctx: BookingContext) -> list[Email]:
    body = (
        _greeting(ctx.truck_owner)
        + f"<p>Unfortunately the booking request for <strong>{escape(ctx.truck.name)}</strong> "
        + "was declined for the following event:</p>"
        + _event_details(ctx.event)
        + "<p>There are plenty of other events on Eato looking for food trucks. Keep browsing!</p>"
    )
    return [
        Email(
            to=ctx.truck_owner.email if ctx.truck_owner else None,
            subject=f"Booking Update: {ctx.event.title}",
            html=_layout("Booking Status Update", body, MUTED_COLOR),
        ),
    ]


def truck_update_email(recipient: UserDTO, truck: TruckDTO, title: str, content: str) -> Email:
    body = (
        _greeting(recipient)
        + f"<p><strong>{escape(truck.name)}</strong> posted an update:</p>"
        + f'<div class="details"><h3>{escape(title)}</h3><p>{escape(content)}</p></div>'
        + "<p>You receive this because alerts are on for this truck.</p>"
    )
    return Email(
        to=recipient.email,
        subject=f"{truck.name}: {title}",
        html=_layout("Truck Update", body),
    )
