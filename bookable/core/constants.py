"""Common application-wide constants."""

# Columns the range filters can be applied to
STARTS_AT = "starts_at"
ENDS_AT = "ends_at"
CANCELED_AT = "canceled_at"
BOUND_FIELDS = (STARTS_AT, ENDS_AT, CANCELED_AT)


__all__ = [
    "STARTS_AT",
    "ENDS_AT",
    "CANCELED_AT",
    "BOUND_FIELDS",
]
