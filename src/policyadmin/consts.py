"""Constants for the policy administration application"""

# ==================== Backend ====================
API_BASE_DEFAULT = "http://localhost:8080/api"
TIMEOUT_HTTP_REQUEST = 30  # seconds
RECORD_ID_FIELD = "id"

# ==================== Files ====================
LOG_FILE_DEFAULT = "data/policyadmin.log"

# ==================== Validation ====================
EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

# ==================== Messages ====================
MSG_REQUIRED = "{label} is required"
MSG_INVALID_EMAIL = "Invalid email"
MSG_INVALID_FORMAT = "Invalid format"
MSG_MIN_LENGTH = "Minimum {min_length} characters"
MSG_INVALID_NUMBER = "Must be a valid number"
MSG_MIN_VALUE = "Minimum value is {min}"
MSG_DATE_RANGE = "End date must be after start date"

MSG_FORM_INVALID = "Please correct the errors in the form"
MSG_LOAD_FAILED = "Could not connect to the backend"
MSG_CREATED = "Created successfully"
MSG_UPDATED = "Updated successfully"
MSG_DELETED = "Deleted successfully"
MSG_OPERATION_FAILED = "Operation failed"
MSG_CONNECTION_ERROR = "Connection error"
MSG_DELETE_FAILED = "Error deleting"
MSG_RECORD_NOT_FOUND = "Record not found"
