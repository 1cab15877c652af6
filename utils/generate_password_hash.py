"""
Helper script to create a bootstrap administrator entry for secrets.toml

⚠️ NOTE: This is ONLY needed for:
- Owner access before any employee exists in the database
- Recovering access when every administrator password is lost

Employees are normally created in the app (Funcionários page).

Usage:
    python -m utils.generate_password_hash
"""
import getpass

from core.services import hash_password


def secrets_entry(username: str, name: str, password: str, role: str = "admin") -> str:
    """TOML block for the ``[users]`` table read by the login form."""
    return (
        f"[users.{username.strip().lower()}]\n"
        f"name = \"{name.strip()}\"\n"
        f"role = \"{role}\"\n"
        f"password_hash = \"{hash_password(password)}\"\n"
    )


if __name__ == "__main__":
    print("=" * 60)
    print("Gerador de acesso inicial para secrets.toml")
    print("=" * 60)

    username = input("Usuário: ")
    name = input("Nome: ")
    password = getpass.getpass("Senha: ")

    print("\n✅ Copie o bloco abaixo para .streamlit/secrets.toml:\n")
    print(secrets_entry(username, name, password))
    print("=" * 60)
