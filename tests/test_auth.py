"""Credential check tests (no Streamlit runtime needed)."""
import tomllib

from core.constants import MENU_EMPLOYEES
from core.services import hash_password
from core.simple_auth import verify_login
from ui.sidebar import menu_for
from utils.generate_password_hash import secrets_entry


def test_employee_login(repos):
    repos.employees.create(username="ana", password="segredo", name="Ana", role="employee")
    assert verify_login(repos.employees, "ana", "segredo") == (True, "Ana", "employee")
    assert verify_login(repos.employees, "ANA", "segredo") == (True, "Ana", "employee")


def test_wrong_password(repos):
    repos.employees.create(username="ana", password="segredo", name="Ana", role="employee")
    assert verify_login(repos.employees, "ana", "errado") == (False, None, None)


def test_blank_credentials(repos):
    assert verify_login(repos.employees, "", "x") == (False, None, None)
    assert verify_login(repos.employees, "ana", "") == (False, None, None)


def test_bootstrap_user_from_secrets(repos):
    bootstrap = {"leo": {"password_hash": hash_password("admin123"), "name": "Léo"}}
    assert verify_login(repos.employees, "Leo", "admin123", bootstrap) == (True, "Léo", "admin")
    assert verify_login(repos.employees, "leo", "nope", bootstrap) == (False, None, None)


def test_hash_password_is_sha256_hex():
    digest = hash_password("abc")
    assert digest == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


def test_secrets_entry_logs_in_as_bootstrap_user(repos):
    secrets = tomllib.loads(secrets_entry("Leo", "Léo", "admin123"))
    assert verify_login(repos.employees, "leo", "admin123", secrets["users"]) == (True, "Léo", "admin")


def test_employee_menu_is_admin_only():
    assert MENU_EMPLOYEES in menu_for({"is_admin": True})
    assert MENU_EMPLOYEES not in menu_for({"is_admin": False})
