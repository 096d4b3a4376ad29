"""
Services.

Password recovery flow logic.
"""

from app.services.code_verification_handler import CodeVerificationHandler
from app.services.email_recovery_handler import EmailRecoveryHandler
from app.services.error_classifier import ErrorClassifier, RecoveryAction
from app.services.flow_controller import FlowController
from app.services.password_reset_handler import PasswordResetHandler
from app.services.recovery_backend import RecoveryBackend, VerifyCodeResult
from app.services.step_handler import StepHandler
from app.services.validation_scheduler import ValidationScheduler

__all__ = [
    "CodeVerificationHandler",
    "EmailRecoveryHandler",
    "ErrorClassifier",
    "FlowController",
    "PasswordResetHandler",
    "RecoveryAction",
    "RecoveryBackend",
    "StepHandler",
    "ValidationScheduler",
    "VerifyCodeResult",
]
