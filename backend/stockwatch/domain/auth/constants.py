ERROR_EMAIL_ALREADY_REGISTERED = "Email already registered"
ERROR_INVALID_EMAIL_OR_PASSWORD = "Invalid email or password"
ERROR_INVALID_TOKEN = "Invalid token"
ERROR_INVALID_USER_ID = "Invalid user id"
ERROR_USER_INACTIVE = "User is inactive"

ERROR_SIGN_UP_FAILED = "Sign up failed"
ERROR_SIGN_IN_FAILED = "Sign in failed"
ERROR_SIGN_OUT_FAILED = "Sign out failed"

EVENT_USER_CREATED = "app/user.created"
