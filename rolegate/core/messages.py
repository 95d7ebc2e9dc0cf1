"""User-facing response messages, grouped by area."""


class AUTH:
    NO_TOKEN = "Not authenticated"
    INVALID_TOKEN = "Invalid or expired token"
    FORBIDDEN = "You do not have permission to access this resource"
    UNAUTHORIZED = "Access not allowed"
    INVALID_CREDENTIALS = "Invalid email or password"
    INVALID_EMAIL = "No account is registered with that email"
    BLOCKED = "Your account is blocked. Contact an administrator."
    RESET_INVALID = (
        "This password reset token has expired or was already used. Please request a new one."
    )
    SESSION_NOT_FOUND = "No active session found. You may already be logged out."
    LOGIN_SUCCESS = "Authenticated successfully"
    LOGOUT_SUCCESS = "Logged out successfully"


class USER:
    NOT_FOUND = "User not found"
    FOUND = "User data retrieved"
    CREATED = "User created successfully"
    UPDATED = "User updated successfully"
    EMAIL_EXIST = "Email already in use, please try another one"
    PASSWORD_CHANGED_SUCCESS = "Password changed successfully"
    PASSWORD_RESET_SUCCESS = "Password reset successfully"
    RESET_EMAIL_SENT = "Password reset email sent"
    RESET_EMAIL_NOT_SENT = "Password reset token issued, but the email could not be sent"


class GENERAL:
    FAILURE = "The operation could not be completed"
    SERVER_ERROR = "Internal server error"
    MAINTENANCE = "The system is currently under maintenance"
    NOT_FOUND = "Route not found"
