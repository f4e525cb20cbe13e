from typing import Dict, Any, Optional
from loguru import logger
import time
import uuid

from stylegenie.utils.errors import StyleGenieError, ValidationError


class ErrorHandler:
    """Turns workflow failures into user-visible messages"""

    ERROR_RESPONSES = {
        'validation_error': "Please fill in the required fields and try again.",
        'store_error': "We couldn't reach your client records. Please try again.",
        'external_service_error': "Could not start checkout. Check the server and try again.",
        'unsupported_capability': "Voice notes are not supported on this device.",
        'appointment_not_found': "That appointment no longer exists.",
    }

    @classmethod
    def handle_error(cls, error: Exception, context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Log the failure and build the payload shown to the user"""
        error_type = getattr(error, 'error_type', 'internal_error')
        error_id = cls._generate_error_id()

        logger.error(f"[{error_id}] {error_type}: {error}")
        if context:
            logger.error(f"[{error_id}] Context: {context}")
        if not isinstance(error, StyleGenieError):
            logger.opt(exception=error).error(f"[{error_id}] Unexpected failure")

        return {
            'response': cls.user_message(error),
            'error_type': error_type,
            'error_id': error_id,
            'timestamp': time.time()
        }

    @classmethod
    def user_message(cls, error: Exception) -> str:
        """Short message for inline display on a form"""
        if isinstance(error, ValidationError):
            return error.message
        error_type = getattr(error, 'error_type', None)
        if error_type in cls.ERROR_RESPONSES:
            return cls.ERROR_RESPONSES[error_type]
        return "Something went wrong. Please try again."

    @staticmethod
    def _generate_error_id() -> str:
        """Generate unique error ID for tracking"""
        return f"ERR-{uuid.uuid4().hex[:8].upper()}"
