"""
Bot Constants
Common constants used across bot handlers
"""

# Button labels
BUTTON_LABELS = {
    "RECOVER": "🔑 Forgot password",
    "CANCEL": "❌ Cancel",
    "RETRY": "🔄 Retry",
    "RESTART": "↩️ Start over",
}

# Prompts shown when the flow waits for input
PROMPTS = {
    "EMAIL": "📧 Enter the email of your account:",
    "CODE": "🔢 Enter the code we sent to your email:",
    "PASSWORD": "🔒 Enter your new password:",
    "CONFIRMATION": "🔒 Repeat the new password:",
}

FLOW_CANCELLED = "❌ Password recovery cancelled."
CANCEL_REFUSED = "⏳ A request is in progress, please wait for it to finish."
NOTHING_TO_RETRY = "ℹ️ There is nothing to retry right now."
NO_ACTIVE_FLOW = "ℹ️ No password recovery in progress. Send /recover to start."
