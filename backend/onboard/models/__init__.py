"""Aggregate model imports for Alembic auto-detection."""

from onboard.models.client import Client, Role  # noqa: F401
from onboard.models.tokens import (  # noqa: F401
    EmailVerificationToken,
    PasswordResetToken,
    RefreshToken,
)
from onboard.models.onboarding import (  # noqa: F401
    OnboardingProgress,
    OnboardingStatus,
    OnboardingStep,
    StepProgress,
    StepStatus,
)
from onboard.models.document import (  # noqa: F401
    Document,
    DocumentCategory,
    VerificationStatus,
)
from onboard.models.activity_log import AdminActivityLog  # noqa: F401
