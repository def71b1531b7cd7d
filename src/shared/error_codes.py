# src/shared/error_codes.py
# Central mapping that aligns with the Error Contract.
# Clients match on these keys; do not rename them.
ERROR_CODES = {
    # ─── Validation & Requests ──────────────────────────────────────────────
    "validation_error": {
        "http": 422,
        "message": "Validation failed for one or more fields."
    },
    "invalid_request": {
        "http": 400,
        "message": "Invalid request payload."
    },

    # ─── Authentication & Authorization ────────────────────────────────────
    "unauthorized": {
        "http": 401,
        "message": "Authentication required."
    },
    "invalid_token": {
        "http": 401,
        "message": "Invalid or expired token."
    },
    "forbidden": {
        "http": 403,
        "message": "You are not allowed to perform this action."
    },

    # ─── Lookups ───────────────────────────────────────────────────────────
    "not_found": {
        "http": 404,
        "message": "Resource not found."
    },
    "appointment_not_found": {
        "http": 404,
        "message": "Appointment not found."
    },
    "slot_not_found": {
        "http": 404,
        "message": "Slot not found."
    },
    "notification_not_found": {
        "http": 404,
        "message": "Notification not found."
    },

    # ─── Scheduling conflicts ──────────────────────────────────────────────
    "conflict": {
        "http": 409,
        "message": "Conflict with existing resource."
    },
    "slot_unavailable": {
        "http": 409,
        "message": "No availability slot found for this date and time."
    },
    "already_cancelled": {
        "http": 409,
        "message": "Appointment is already cancelled."
    },
    "invalid_state": {
        "http": 409,
        "message": "Operation not allowed in the current appointment status."
    },
    "slot_booked": {
        "http": 409,
        "message": "Slot is booked by an appointment."
    },
    "duplicate_slot": {
        "http": 409,
        "message": "Slot already exists for this doctor, date and time."
    },

    # ─── Internal ──────────────────────────────────────────────────────────
    "internal_error": {
        "http": 500,
        "message": "An unexpected error occurred. Please try again later."
    },
    "service_unavailable": {
        "http": 503,
        "message": "Service temporarily unavailable."
    },
}
