# src/biblio_auth/cli.py

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Sequence

from .config.env import settings_from_env
from .integrations.common.auth_factory import create_token_codec


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="biblio-auth",
        description="Issue and inspect biblio_auth access tokens "
                    "(signing secret read from BIBLIO_AUTH_SECRET_KEY)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    issue = sub.add_parser("issue", help="Sign a token for a subject")
    issue.add_argument("--subject", "-s", required=True, help="Subject (user nick)")
    issue.add_argument("--role", "-r", help="Role claim to embed")

    inspect = sub.add_parser("inspect", help="Verify a token and print its claims")
    inspect.add_argument("token", help="Encoded token (without the 'Bearer ' prefix)")

    return parser.parse_args(args=argv)


def _run(args: argparse.Namespace) -> dict[str, Any]:
    codec = create_token_codec(settings_from_env())

    if args.command == "issue":
        claims = {"role": args.role} if args.role else {}
        token = codec.issue(args.subject, claims)
        decoded = codec.decode(token).unwrap()
        return {
            "token": token,
            "token_id": decoded.token_id,
            "expires_at": decoded.expires_at.isoformat() if decoded.expires_at else None,
        }

    result = codec.decode(args.token)
    if result.token is None:
        return {"valid": False, "failure": result.failure.value if result.failure else None,
                "message": result.message}
    token = result.token
    return {
        "valid": True,
        "subject": str(token.subject),
        "token_id": token.token_id,
        "issued_at": token.issued_at.isoformat() if token.issued_at else None,
        "expires_at": token.expires_at.isoformat() if token.expires_at else None,
        "claims": dict(token.claims),
    }


def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)

    try:
        summary = _run(args)
        json.dump({"ok": True, **summary}, sys.stdout, indent=2)
        sys.stdout.write("\n")
    except Exception as exc:  # noqa: BLE001
        json.dump({"ok": False, "error": str(exc)}, sys.stdout, indent=2)
        sys.stdout.write("\n")
        raise


if __name__ == "__main__":
    main()
