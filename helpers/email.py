from typing import List, Optional
from html import escape
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
import os
import dotenv


dotenv.load_dotenv()

logger = logging.getLogger(__name__)


def clinic_name() -> str:
    return os.getenv("CLINIC_NAME", "Healthcare Clinic")


def send_email(to_address: str, subject: str, message_html: str) -> bool:
    user = os.getenv("SMTP_FROM_USER")
    smtp_server = os.getenv("SMTP_SERVER")
    smtp_port_str = os.getenv("SMTP_PORT")
    from_address = os.getenv("SMTP_FROM_ADDRESS")
    password = os.getenv('SMTP_PASSWORD')

    if not all([user, smtp_server, smtp_port_str, from_address, password]):
        logger.error("SMTP configuration is not set properly in environment variables, email to %s dropped", to_address)
        return False

    try:
        smtp_port = int(smtp_port_str)
    except ValueError:
        logger.error("SMTP_PORT %r is not a number, email to %s dropped", smtp_port_str, to_address)
        return False

    message = MIMEMultipart()
    message["From"] = f'"{user}" <{from_address}>'
    message["To"] = to_address
    message["Subject"] = subject
    message.attach(MIMEText(message_html, "html"))

    try:
        with smtplib.SMTP_SSL(smtp_server, smtp_port) as server:
            server.login(from_address, password)
            server.send_message(message)
            logger.info("Email '%s' sent to %s", subject, to_address)
            return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Failed to send email to %s: %s", to_address, e)
        return False


def wrap_html(title: str, body: str) -> str:
    name = escape(clinic_name())
    return f"""\
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>{escape(title)}</title>
        <style>
            body {{
                margin: 0;
                padding: 0;
                background-color: #f4f4f4;
                font-family: Arial, sans-serif;
            }}
            .email-container {{
                max-width: 600px;
                margin: 0 auto;
                background-color: #ffffff;
                border-radius: 8px;
                overflow: hidden;
            }}
            .header {{
                background-color: #2752D8;
                padding: 20px;
                text-align: center;
                color: #ffffff;
                font-weight: bold;
            }}
            .body {{
                padding: 30px;
                color: #333333;
                line-height: 1.6;
                font-size: 16px;
            }}
            .footer {{
                background-color: #f4f4f4;
                padding: 20px;
                text-align: center;
                font-size: 14px;
                color: #777777;
            }}
        </style>
    </head>
    <body>
        <div class="email-container">
            <div class="header">{name}</div>
            <div class="body">
                {body}
            </div>
            <div class="footer">
                <p>This is an automated email, please do not reply directly.</p>
                <p>&copy; {name}. All rights reserved.</p>
            </div>
        </div>
    </body>
    </html>
    """


STATUS_LINES = {
    "confirmed": "Your appointment has been confirmed by the doctor.",
    "cancelled": "Your appointment has been cancelled.",
    "completed": "Your appointment has been marked as completed. Thank you for visiting us.",
}


def send_status_update_email(to_email: str, patient_name: str, doctor_name: str, day: str, time: str, status: str) -> bool:
    body = f"""
        <p>Dear {escape(patient_name)},</p>
        <p>{STATUS_LINES.get(status, f"Your appointment status is now {escape(status)}.")}</p>
        <ul>
            <li><strong>Doctor:</strong> Dr. {escape(doctor_name)}</li>
            <li><strong>Date:</strong> {escape(day)}</li>
            <li><strong>Time:</strong> {escape(time)}</li>
        </ul>
    """
    subject = f"Appointment {status.capitalize()}"
    return send_email(to_email, subject, wrap_html(subject, body))


def medicine_lines(medicines: List[str], dosage: List[str]) -> List[str]:
    lines = []
    for i, medicine in enumerate(medicines):
        dose = dosage[i] if i < len(dosage) and dosage[i] else "As directed"
        lines.append(f"{medicine} - {dose}")
    return lines


def send_prescription_email(
    to_email: str,
    patient_name: str,
    doctor_name: str,
    specialization: Optional[str],
    diagnosis: str,
    medicines: List[str],
    dosage: List[str],
    instructions: Optional[str],
    follow_up_date: Optional[str],
) -> bool:
    items = "".join(f"<li>{escape(line)}</li>" for line in medicine_lines(medicines, dosage))
    body = f"""
        <p>Dear {escape(patient_name or 'Patient')},</p>
        <p>Here is your medical prescription from Dr. {escape(doctor_name)} ({escape(specialization or 'General Physician')}).</p>
        <p><strong>Diagnosis:</strong> {escape(diagnosis or 'N/A')}</p>
        <p><strong>Medicines:</strong></p>
        <ul>{items or '<li>No medicines prescribed.</li>'}</ul>
        <p><strong>Instructions:</strong> {escape(instructions or 'N/A')}</p>
        <p><strong>Follow-up Date:</strong> {escape(follow_up_date or 'Not specified')}</p>
        <p>Best regards,<br/>Dr. {escape(doctor_name)}</p>
    """
    subject = f"Medical Prescription from Dr. {doctor_name}"
    return send_email(to_email, subject, wrap_html(subject, body))
