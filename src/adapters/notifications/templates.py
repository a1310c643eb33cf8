"""
Email templates for membership notifications.

Each builder returns (subject, html). User-provided text is escaped
before it is placed in the markup.
"""

from html import escape

ORGANISATION = "Odisha Society of Oncology"

_LAYOUT = """
<!DOCTYPE html>
<html>
<head>
    <style>
        body {{ font-family: Arial, Helvetica, sans-serif; line-height: 1.5; color: #111; }}
        .container {{ max-width: 600px; margin: 0 auto; padding: 32px 20px; }}
        .code {{ font-size: 22px; font-weight: 700; letter-spacing: 2px; background: #f5f5f5;
                 display: inline-block; padding: 10px 14px; border-radius: 6px; }}
        .footer {{ margin-top: 32px; padding-top: 16px; border-top: 1px solid #e5e7eb;
                   color: #666; font-size: 13px; }}
    </style>
</head>
<body>
    <div class="container">
        {body}
        <div class="footer">
            <p>{organisation}</p>
        </div>
    </div>
</body>
</html>
"""


def _render(body: str) -> str:
    return _LAYOUT.format(body=body, organisation=ORGANISATION)


def otp_email(code: str, expires_in_minutes: int) -> tuple[str, str]:
    body = f"""
        <h3>Your One Time Password</h3>
        <p>Use the following code to continue. It will expire in {expires_in_minutes} minutes.</p>
        <div class="code">{escape(code)}</div>
        <p>If you did not request this, ignore this email.</p>
    """
    return f"Your {ORGANISATION} OTP", _render(body)


def review_pending_email(name: str) -> tuple[str, str]:
    body = f"""
        <h3>Application received</h3>
        <p>Hello {escape(name)},</p>
        <p>Your email address has been verified and your membership application
        has been submitted for review. You will receive another email once an
        administrator has reviewed it.</p>
    """
    return "Membership application submitted for review", _render(body)


def approval_email(name: str, unique_member_id: str, temporary_password: str) -> tuple[str, str]:
    body = f"""
        <h3>Welcome to the {ORGANISATION}</h3>
        <p>Hello {escape(name)},</p>
        <p>Your membership application has been approved. Your login credentials are:</p>
        <p><strong>Member ID:</strong> {escape(unique_member_id)}</p>
        <p><strong>Temporary password:</strong></p>
        <div class="code">{escape(temporary_password)}</div>
        <p>You will be asked to choose a new password the first time you log in.</p>
    """
    return "Your membership has been approved", _render(body)


def rejection_email(name: str, notes: str) -> tuple[str, str]:
    body = f"""
        <h3>Membership application update</h3>
        <p>Hello {escape(name)},</p>
        <p>We are unable to approve your membership application at this time.</p>
        <p><strong>Reason:</strong> {escape(notes)}</p>
        <p>You may submit a new application after addressing the points above.</p>
    """
    return "Membership application update", _render(body)


def password_changed_email(name: str) -> tuple[str, str]:
    body = f"""
        <h3>Password changed</h3>
        <p>Hello {escape(name)},</p>
        <p>The password for your member account was changed. If this was not you,
        contact the society office immediately.</p>
    """
    return "Your password was changed", _render(body)
