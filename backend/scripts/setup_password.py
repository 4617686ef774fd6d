"""Génère le hash du mot de passe d'administration pour le fichier .env.

Usage:
  python -m backend.scripts.setup_password <mot_de_passe>
  python -m backend.scripts.setup_password --viewer <mot_de_passe>

Sans argument, le mot de passe est demandé de façon interactive (non affiché).
"""

from __future__ import annotations

import argparse
import getpass
import sys

from backend.domain.auth import hash_password, verify_password


def build_env_line(password: str, viewer: bool = False) -> str:
    key = "VIEWER_PASSWORD_HASH" if viewer else "ADMIN_PASSWORD_HASH"
    hashed = hash_password(password)
    if not verify_password(password, hashed):  # pragma: no cover - garde-fou
        raise RuntimeError("hash verification failed")
    return f"{key}={hashed}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("password", nargs="?", help="mot de passe en clair")
    parser.add_argument(
        "--viewer", action="store_true", help="génère le hash du compte lecture seule"
    )
    args = parser.parse_args(argv)

    password = args.password or getpass.getpass("Mot de passe: ")
    if not password:
        print("Usage: python -m backend.scripts.setup_password <mot_de_passe>", file=sys.stderr)
        return 1

    print("Copiez cette ligne dans votre fichier .env :")
    print(build_env_line(password, viewer=args.viewer))
    print("Définissez également JWT_SECRET (chaîne longue et aléatoire).")
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry
    sys.exit(main())
