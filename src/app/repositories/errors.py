class PersistenceError(Exception):
    """Raised by repository implementations when the backing store fails.

    Storage driver exceptions are translated into this type exactly once, at
    the adapter boundary, so use cases only ever catch one failure class.
    """

    def __init__(self, operation: str, message: str = "Persistence operation failed"):
        self.operation = operation
        super().__init__(f"{operation}: {message}")
