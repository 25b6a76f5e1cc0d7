"""HR Leave — sandwich-leave deduction service."""
