# ===== app/services/email/email_service.py =====
import smtplib
from datetime import date, datetime
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
import logging

from app.config.settings import settings

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending emails via SMTP"""

    @staticmethod
    def _get_smtp_connection():
        """Create and return SMTP connection"""
        try:
            if settings.EMAIL_USE_TLS:
                server = smtplib.SMTP(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=settings.EMAIL_TIMEOUT_SECONDS)
                server.starttls()
            else:
                server = smtplib.SMTP_SSL(settings.EMAIL_HOST, settings.EMAIL_PORT, timeout=settings.EMAIL_TIMEOUT_SECONDS)

            if settings.EMAIL_USERNAME and settings.EMAIL_PASSWORD:
                server.login(settings.EMAIL_USERNAME, settings.EMAIL_PASSWORD)

            return server
        except Exception as e:
            logger.error(f"Failed to connect to SMTP server: {e}")
            raise

    @staticmethod
    def send_email(
            to_email: str,
            subject: str,
            html_content: str,
            plain_text: Optional[str] = None
    ) -> bool:
        """
        Send an email using SMTP

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML content of the email
            plain_text: Plain text version (fallback for non-HTML clients)

        Returns:
            bool: True if email sent successfully; raises on failure so the
            calling task can retry
        """
        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM_ADDRESS}>"
            msg['To'] = to_email

            if plain_text:
                msg.attach(MIMEText(plain_text, 'plain'))
            msg.attach(MIMEText(html_content, 'html'))

            # QUIT (or close on a dropped link) runs even when sendmail raises
            with EmailService._get_smtp_connection() as server:
                server.sendmail(settings.EMAIL_FROM_ADDRESS, [to_email], msg.as_string())

            logger.info(f"Email sent successfully to {to_email}")
            return True

        except Exception as e:
            logger.error(f"Failed to send email to {to_email}: {e}")
            raise

    @staticmethod
    def _format_details(day: date, time_str: str):
        formatted_date = day.strftime("%A, %B %d %Y")
        formatted_time = datetime.strptime(time_str, "%H:%M").strftime("%I:%M %p").lstrip("0")
        return formatted_date, formatted_time

    @staticmethod
    def send_booking_confirmation_email(
            email: str,
            restaurant_name: str,
            day: date,
            time_str: str,
            party_size: int,
            first_name: Optional[str] = None
    ) -> bool:
        """Send booking confirmation"""
        formatted_date, formatted_time = EmailService._format_details(day, time_str)
        display_name = first_name or "there"

        html_content = f"""
        <p>Dear {display_name},</p>
        <p>Your booking at <strong>{restaurant_name}</strong> is confirmed!</p>
        <p><strong>Details:</strong></p>
        <ul>
            <li>Date: {formatted_date}</li>
            <li>Time: {formatted_time}</li>
            <li>Party Size: {party_size}</li>
        </ul>
        <p>We look forward to seeing you!</p>
        <p>Thanks,<br/>The BookTable Team</p>
        """

        plain_text = (
            f"Dear {display_name},\n\n"
            f"Your booking at {restaurant_name} is confirmed!\n"
            f"Date: {formatted_date}\n"
            f"Time: {formatted_time}\n"
            f"Party Size: {party_size}\n\n"
            f"Thanks,\nThe BookTable Team"
        )

        return EmailService.send_email(
            to_email=email,
            subject=f"Your Booking Confirmation at {restaurant_name}",
            html_content=html_content,
            plain_text=plain_text
        )

    @staticmethod
    def send_booking_cancellation_email(
            email: str,
            restaurant_name: str,
            day: date,
            time_str: str,
            party_size: int,
            first_name: Optional[str] = None
    ) -> bool:
        """Send booking cancellation notice"""
        formatted_date, formatted_time = EmailService._format_details(day, time_str)
        display_name = first_name or "there"

        html_content = f"""
        <p>Dear {display_name},</p>
        <p>Your booking at <strong>{restaurant_name}</strong> for {formatted_date} at {formatted_time}
        (party of {party_size}) has been cancelled.</p>
        <p>Thanks,<br/>The BookTable Team</p>
        """

        plain_text = (
            f"Dear {display_name},\n\n"
            f"Your booking at {restaurant_name} for {formatted_date} at {formatted_time} "
            f"(party of {party_size}) has been cancelled.\n\n"
            f"Thanks,\nThe BookTable Team"
        )

        return EmailService.send_email(
            to_email=email,
            subject=f"Your Booking at {restaurant_name} was Cancelled",
            html_content=html_content,
            plain_text=plain_text
        )
