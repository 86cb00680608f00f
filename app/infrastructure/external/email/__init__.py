"""Email integration: dispatch of templated transactional emails."""

from app.infrastructure.external.email.dispatcher import HttpEmailDispatcher

__all__ = ["HttpEmailDispatcher"]
