"""Common constants."""

# Application statuses
APPLICATION_STATUSES = [
    "applied",
    "under_review",
    "approved",
    "rejected",
    "withdrawn",
]

# Allowed forward moves; statuses missing from the map are terminal
APPLICATION_STATUS_TRANSITIONS = {
    "applied": {"under_review", "withdrawn"},
    "under_review": {"approved", "rejected", "withdrawn"},
}

WITHDRAWABLE_STATUSES = {"applied", "under_review"}

# Status changes that notify the applicant
STATUS_NOTIFICATION_MESSAGES = {
    "under_review": "Your application for {title} is now under review.",
    "approved": "Congratulations! Your application for {title} has been approved.",
    "rejected": "Unfortunately, your application for {title} was not selected.",
}
