from __future__ import annotations


class ConfigurationError(Exception):
    def __init__(self, code: str, message: str, *, field: str | None = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.field = field

    def to_dict(self) -> dict[str, str | None]:
        return {
            "code": self.code,
            "message": self.message,
            "field": self.field,
        }


class InvalidDayPlanError(ConfigurationError):
    def __init__(self, code: str, message: str, *, field: str | None = None, plan_code: str | None = None):
        super().__init__(code, message, field=field)
        self.plan_code = plan_code

    def to_dict(self) -> dict[str, str | None]:
        payload = super().to_dict()
        payload["plan_code"] = self.plan_code
        return payload
