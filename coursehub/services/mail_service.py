"""Outbound email for verification codes."""

from flask_mail import Message


def build_verify_code_message(*, sender, recipient, subject, code, ttl_minutes, name=''):
    greeting = name or 'there'
    return Message(
        subject,
        sender=sender,
        recipients=[recipient],
        body=(
            f"Hello {greeting},\n\n"
            f"Use the following verification code to confirm this action:\n\n"
            f"{code}\n\n"
            f"This code will expire in {ttl_minutes} minutes.\n"
            "If you did not request this, you can safely ignore this email."
        ),
    )


def send_verify_code_email(app_ctx, principal, subject, code):
    ttl_minutes = max(1, int(app_ctx.config.verify_code_ttl_seconds // 60))
    message = build_verify_code_message(
        sender=app_ctx.config.mail_default_sender,
        recipient=principal.email,
        subject=subject,
        code=code,
        ttl_minutes=ttl_minutes,
        name=principal.name,
    )
    app_ctx.mailer.send(message)
