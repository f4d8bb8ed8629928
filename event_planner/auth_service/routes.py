"""
Authentication service route handlers.

Provides routes for:
- User registration
- User login

Passwords are hashed with Argon2 and never leave this module in any form.
"""

import logging
from typing import Tuple

from argon2 import PasswordHasher
from argon2.exceptions import VerifyMismatchError
from flask import Blueprint, request, jsonify, Response

from event_planner.database.stores import get_user_store
from event_planner.errors import AuthError, translate_errors
from event_planner.utils import read_json, require_fields, text_field

auth_bp = Blueprint("auth", __name__)
ph = PasswordHasher()

INVALID_CREDENTIALS = "Invalid credentials"


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log every incoming request method and path to the authentication service.
    Headers and bodies are left out since they carry credentials.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.

    Args:
        response (Response): The Flask response object.

    Returns:
        Response: The passed-through response object.
    """
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user.

    Expects a JSON body with:
    - name (str)
    - email (str): Unique email address.
    - password (str)

    Returns:
        201: JSON with id, name and email.
        400: Missing fields or email already exists.
        500: Server-side error (hashing or database).
    """
    data = read_json()
    require_fields(data, "name", "email", "password")

    name = text_field(data, "name")
    email = text_field(data, "email").lower()
    password = str(data["password"])

    with translate_errors("Password hashing failed"):
        pw_hash = ph.hash(password)

    with translate_errors("Registration failed"):
        user = get_user_store().create(name, email, pw_hash)

    logging.info(f"[Auth] Registered user id={user['id']}")
    return jsonify({"id": user["id"], "name": user["name"], "email": user["email"]}), 201


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Check a user's credentials.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: JSON with id, name and email.
        400: Missing credentials, or invalid credentials (wrong password
             and unknown email get the same message).
        500: Database error.
    """
    data = read_json()
    require_fields(data, "email", "password")

    email = text_field(data, "email").lower()
    password = str(data["password"])

    with translate_errors("Login failed"):
        user = get_user_store().find_by_email(email)

    if not user:
        raise AuthError(INVALID_CREDENTIALS)

    # Verify password against hash
    with translate_errors("Login failed"):
        try:
            ph.verify(user["password"], password)
        except VerifyMismatchError:
            raise AuthError(INVALID_CREDENTIALS)

    return jsonify({"id": user["id"], "name": user["name"], "email": user["email"]}), 200
