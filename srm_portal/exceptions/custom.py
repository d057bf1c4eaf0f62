class RemoteCallError(Exception):
    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(Exception):
    def __init__(self, service: str):
        self.service = service
        super().__init__(f"Rate limit exceeded for {service}")


class MissingContextError(Exception):
    def __init__(self, message: str = "Complete the customer step first"):
        self.message = message
        super().__init__(message)


class FlowStateError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
