"""
errors.py — Error Taxonomy
===========================
Client-input errors carry the HTTP status and the message returned to the
caller. DispatchFailure is the only server-side error; its detail is logged,
never returned.
"""


class ContactError(Exception):
    status_code = 400
    code = "invalid_request"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownSite(ContactError):
    code = "unknown_site"

    def __init__(self):
        super().__init__("unknown siteId")


class OriginRejected(ContactError):
    status_code = 403
    code = "origin_rejected"

    def __init__(self, origin: str):
        super().__init__("origin not allowed")
        self.origin = origin


class MissingField(ContactError):
    code = "missing_field"

    def __init__(self, field_name: str):
        super().__init__(f"missing required field: {field_name}")
        self.field_name = field_name


class InvalidEmail(ContactError):
    code = "invalid_email"

    def __init__(self):
        super().__init__("invalid email")


class DispatchFailure(ContactError):
    status_code = 500
    code = "dispatch_failed"

    def __init__(self, detail: str | None = None):
        super().__init__("Internal error")
        self.detail = detail
