"""
Login and register routes backed by the auth collaborator.

Response bodies (and their Indonesian messages) are what the dashboard
front end expects, so failures are returned as JSON bodies rather than
FastAPI's default {"detail": ...} shape.
"""
from typing import Optional
import logging
import re

from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from feedback_analytics.data_access.auth_client import AuthClient
from feedback_analytics.exceptions import AuthError, AuthErrorKind

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6

SERVER_ERROR = "Terjadi kesalahan server"

LOGIN_ERRORS = {
    AuthErrorKind.INVALID_CREDENTIALS: "Email atau password salah",
    AuthErrorKind.EMAIL_NOT_CONFIRMED: "Email belum dikonfirmasi. Silakan cek email Anda.",
}

REGISTER_ERRORS = {
    AuthErrorKind.ALREADY_REGISTERED: "Email sudah terdaftar. Silakan gunakan email lain atau login",
    AuthErrorKind.WEAK_PASSWORD: "Password terlalu lemah. Gunakan minimal 6 karakter",
    AuthErrorKind.INVALID_EMAIL: "Format email tidak valid",
    AuthErrorKind.SIGNUP_DISABLED: "Registrasi sementara dinonaktifkan",
}

# route path suffix -> (body key, message) for request bodies that fail validation
INVALID_BODY_ERRORS = {
    "/login": ("error", "Email dan password harus diisi"),
    "/register": ("message", "Email, password, dan konfirmasi password harus diisi"),
}


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    confirmPassword: Optional[str] = None


def get_auth_client(request: Request) -> AuthClient:
    return request.app.state.auth_client


def _failure(status_code: int, key: str, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, key: message})


def validation_failure(request: Request, exc: RequestValidationError) -> Optional[JSONResponse]:
    """
    Shape a rejected login or register body like the routes' own failures.

    Unparseable JSON is a server error, wrong field types are a 400. Returns
    None for any other route.
    """
    for suffix, (key, message) in INVALID_BODY_ERRORS.items():
        if request.url.path.endswith(suffix):
            if any(error.get("type") == "json_invalid" for error in exc.errors()):
                logger.warning(f"Unparseable body on {request.url.path}")
                return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, key, SERVER_ERROR)
            return _failure(status.HTTP_400_BAD_REQUEST, key, message)
    return None


@router.post("/login", summary="Sign in with email and password")
def login(credentials: LoginRequest, auth_client: AuthClient = Depends(get_auth_client)):
    """
    Sign in

    - **email**: Account email (required)
    - **password**: Account password (required)
    """
    if not credentials.email or not credentials.password:
        return _failure(status.HTTP_400_BAD_REQUEST, "error", "Email dan password harus diisi")

    try:
        result = auth_client.sign_in(credentials.email, credentials.password)
    except AuthError as e:
        message = LOGIN_ERRORS.get(e.kind, e.message)
        return _failure(status.HTTP_401_UNAUTHORIZED, "error", message)
    except Exception as e:
        logger.error(f"Login failed with unexpected error: {e}", exc_info=True)
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "error", SERVER_ERROR)

    return {
        "success": True,
        "message": "Login berhasil",
        "user": result.user,
        "session": result.session,
    }


@router.get("/login")
def login_info():
    return {"message": "Login API endpoint", "methods": ["POST"]}


@router.post("/register", summary="Register a new account")
def register(payload: RegisterRequest, auth_client: AuthClient = Depends(get_auth_client)):
    """
    Register

    - **email**: Account email (required)
    - **password**: At least 6 characters (required)
    - **confirmPassword**: Must equal password (required)
    """
    if not payload.email or not payload.password or not payload.confirmPassword:
        return _failure(
            status.HTTP_400_BAD_REQUEST, "message",
            "Email, password, dan konfirmasi password harus diisi"
        )
    if not EMAIL_PATTERN.match(payload.email):
        return _failure(status.HTTP_400_BAD_REQUEST, "message", "Format email tidak valid")
    if payload.password != payload.confirmPassword:
        return _failure(status.HTTP_400_BAD_REQUEST, "message", "Password dan konfirmasi password tidak cocok")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        return _failure(status.HTTP_400_BAD_REQUEST, "message", "Password harus minimal 6 karakter")

    try:
        result = auth_client.sign_up(payload.email, payload.password)
    except AuthError as e:
        logger.warning(f"Register rejected: {e.message}")
        return _failure(status.HTTP_400_BAD_REQUEST, "message", REGISTER_ERRORS.get(e.kind, "Registrasi gagal"))
    except Exception as e:
        logger.error(f"Register failed with unexpected error: {e}", exc_info=True)
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "message", SERVER_ERROR)

    if result.email_confirmed:
        message = "Registrasi berhasil! Anda sudah bisa login"
    else:
        message = "Registrasi berhasil! Silakan cek email untuk konfirmasi akun"

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"success": True, "message": message, "user": result.user, "session": result.session},
    )


@router.get("/register")
def register_info():
    return {
        "message": "Register API endpoint",
        "method": "POST",
        "body": {
            "email": "string (required)",
            "password": "string (required)",
            "confirmPassword": "string (required)",
        },
        "responses": {
            "201": "Registrasi berhasil",
            "400": "Bad request - validasi gagal",
            "500": "Server error",
        },
    }
