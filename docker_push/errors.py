"""Base exception for the push post-processor.

Every fatal condition raised by this package derives from DockerPushError so
callers (and the CLI) can catch one type and still print a helpful message.
"""


class DockerPushError(Exception):
    """Raised when the push workflow hits a known error condition."""

    def __init__(self, message: str, suggestion: str = "", details: str = ""):
        # Include all parts in the base exception message for better error reporting
        full_message = message
        if suggestion:
            full_message += f"\n\n{suggestion}"
        if details:
            full_message += f"\n\n{details}"
        super().__init__(full_message)
        self.message = message
        self.suggestion = suggestion
        self.details = details

    def format(self) -> str:
        """Format error for console output with suggestions."""
        output = f"❌ {self.message}"
        if self.suggestion:
            output += f"\n   💡 {self.suggestion}"
        if self.details:
            output += f"\n   ℹ️  {self.details}"
        return output
