"""
Application-wide constants.
Centralizes magic numbers and configuration values.
"""

# Wizard steps
STEP_GUEST_DETAILS = 0
STEP_STAY_DATES = 1
STEP_REVIEW_AND_PAY = 2
WIZARD_STEPS = ("Guest Details", "Stay Dates", "Review & Pay")

# Validation limits
MAX_NAME_LENGTH = 100
MAX_NOTES_LENGTH = 1000

# Display formatting
ROOM_TYPES_DISPLAY_LIMIT = 10

# Navigation
BOOKING_SUCCESS_PATH = "/booking/success"

# Booking API endpoints
PRICING_ENDPOINT = "/api/pricing/calculate"
CREATE_BOOKING_ENDPOINT = "/api/booking/create-with-payment"
PAYMENT_STATUS_ENDPOINT = "/api/booking/payment-status"
