"""
Recovery Constants
User-visible texts and fixed values of the password recovery flow
"""

EMAIL_REGEX = r"[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,64}"

# Error messages
ERROR_MESSAGES = {
    "EMAIL_MISSING_AT": "Email must contain @",
    "EMAIL_MISSING_DOMAIN": "Email must contain a valid domain",
    "EMAIL_INVALID": "Invalid email format",
    "ENTER_VALID_EMAIL": "Please enter a valid email",
    "CODE_TOO_SHORT": "Code must have {length} digits",
    "CODE_TOO_LONG": "Code cannot have more than {length} digits",
    "CODE_NOT_NUMERIC": "Code can only contain numbers",
    "ENTER_VALID_CODE": "Please enter a valid {length}-digit code",
    "CODE_INCORRECT": "Incorrect code. Please check it and try again.",
    "CODE_EXPIRED": "The code has expired. Please request a new one.",
    "MAX_ATTEMPTS": "Maximum verification attempts exceeded. Please request a new code.",
    "PASSWORD_TOO_SHORT": "Password must be at least {min_length} characters",
    "PASSWORD_TOO_LONG": "Password cannot be longer than {max_length} characters",
    "PASSWORDS_DO_NOT_MATCH": "Passwords do not match",
    "COMPLETE_ALL_FIELDS": "Please fill in all fields correctly",
    "CANNOT_PROCEED": "Cannot proceed from the current state",
    "SESSION_ERROR": "Session error. Please restart the process.",
    "SESSION_EXPIRED": "Your session has expired. Please start again.",
    "INVALID_SESSION": "Invalid session. Restarting the process.",
    "RATE_LIMITED": "Too many requests. Please wait a few minutes and try again.",
    "CONNECTION_ERROR": "Connection error. Check your internet connection and try again.",
    "SERVER_ERROR": "Server error ({status}). Please try again later.",
    "SERVER_ERROR_WITH_MESSAGE": "Server error ({status}): {message}",
    "UNEXPECTED_ERROR": "An unexpected error occurred",
}

SUCCESS_MESSAGES = {
    "CODE_SENT": "If the email exists, you will receive a reset code.",
    "CODE_VERIFIED": "Code verified successfully!",
    "PASSWORD_RESET": "Password updated successfully",
}

# Keyed by RecoveryStep values
STEP_TITLES = {
    "request_code": "Recover Password",
    "verify_code": "Verify Code",
    "reset_password": "New Password",
    "completed": "Completed",
}

STEP_DESCRIPTIONS = {
    "request_code": "Enter your email to receive a recovery code",
    "verify_code": "Enter the 6-digit code we sent to your email",
    "reset_password": "Set your new password",
    "completed": "Your password has been updated successfully",
}

# Substrings the backend uses to signal specific 400 failures
EXPIRED_TOKEN = "expired"
ATTEMPTS_TOKEN = "attempts"
PASSWORD_TOKEN = "password"
