class UnsafeOperationError(ValueError):
    """Raised when an operation would act on the filesystem root. Subclass of ValueError."""
    def __init__(self, operation: str, path: str) -> None:
        self.operation = operation
        self.path = path
        super().__init__(f"Refusing to {operation} the root directory: '{path}'")


class NativeWalkError(OSError):
    """Raised when the native tree enumeration fails or returns garbage. Subclass of OSError."""
    def __init__(self, root: str, reason: str, returncode: int | None = None) -> None:
        self.root = root
        self.reason = reason
        self.returncode = returncode
        super().__init__(f"Native walk of '{root}' failed: {reason}")
