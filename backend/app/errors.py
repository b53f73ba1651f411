class PreconditionFailed(Exception):
    """Actor may not create jobs until their account is complete."""

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class JobValidationError(Exception):
    """Field errors found after resolving the referenced category."""

    def __init__(self, errors: dict[str, list[str]]):
        self.errors = errors
        super().__init__(", ".join(f"{field}: {'; '.join(msgs)}" for field, msgs in errors.items()))

    def to_detail(self) -> list[dict]:
        return [
            {"loc": ["body", field], "msg": msg, "type": "value_error"}
            for field, msgs in self.errors.items()
            for msg in msgs
        ]
