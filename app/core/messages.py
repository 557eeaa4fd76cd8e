# app/core/messages.py
# User-facing copy returned in error bodies. Collaborative tone, next action first,
# never technical detail.

AUTH_MESSAGES = {
    "invalidCredentials": "We couldn't find that email and password combination. Let's try again.",
    "tokenInvalid": "To keep your account secure, please log in again",
    "emailExists": "That email is already registered. Ready to log in instead?",
    "emailInvalid": "That email format looks off. Double-check and try again.",
    "passwordWeak": "Let's make your password stronger. Use at least 8 characters.",
    "twoFactorInvalid": "That code didn't match. Let's try again.",
    "twoFactorDisabled": "2FA has been disabled for your account",
}

VALIDATION_MESSAGES = {
    "fieldRequired": "This field is needed to continue",
    "credentialsRequired": "Please provide both email and password",
    "refreshTokenRequired": "Please provide a refresh token",
    "verificationRequired": "Please provide both user ID and verification code",
}

SERVER_MESSAGES = {
    "internalError": "We're having technical difficulties. Let's try again in a few minutes.",
    "notFound": "We couldn't find what you're looking for",
}
