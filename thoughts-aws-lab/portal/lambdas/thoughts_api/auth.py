# portal/lambdas/thoughts_api/auth.py
import base64
import binascii
import hmac


def _header(event, name):
    headers = event.get("headers") or {}
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def decode_basic_credentials(auth_header):
    """
    Return (username, password) from a 'Basic <b64>' header, or None if the
    header is missing or malformed.
    """
    if not auth_header or not auth_header.startswith("Basic "):
        return None

    encoded = auth_header[len("Basic "):].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def verify_basic_auth(event, username, password):
    """True only when the request carries exactly the configured credentials."""
    if not username or not password:
        return False

    creds = decode_basic_credentials(_header(event, "authorization"))
    if creds is None:
        return False

    given_user, given_pass = creds
    user_ok = hmac.compare_digest(given_user.encode("utf-8"), username.encode("utf-8"))
    pass_ok = hmac.compare_digest(given_pass.encode("utf-8"), password.encode("utf-8"))
    return user_ok and pass_ok
