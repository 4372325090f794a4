#!/usr/bin/env python3
"""
Print a signed bearer token for manual API testing.

The token is signed with ``JWT_SECRET`` from the environment, exactly
as the server would sign it, so it is accepted by a server running
with the same secret.  The user does not have to exist for the token
to verify, but ``/users/me`` will answer 404 for an unknown id.

Usage:
    JWT_SECRET=... python create_token.py --user-id 3f2c... --email a@x.com
"""

import argparse
import sys
import uuid

from posts_api.app.core.config import Settings
from posts_api.app.core.errors import ConfigurationError
from posts_api.app.core.security import TokenService


def main() -> int:
    ap = argparse.ArgumentParser(description="Issue a Posts API bearer token.")
    ap.add_argument("--user-id", required=True, help="User id (UUID) to put in the token subject")
    ap.add_argument("--email", required=True, help="Email claim")
    ap.add_argument("--hours", type=int, default=24, help="Token lifetime in hours (default 24)")
    args = ap.parse_args()

    try:
        user_id = uuid.UUID(args.user_id)
    except ValueError:
        print(f"[!] Not a UUID: {args.user_id}", file=sys.stderr)
        return 1
    try:
        settings = Settings.from_env().validate()
    except ConfigurationError as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1

    tokens = TokenService(settings.jwt_secret, lifetime_seconds=args.hours * 3600)
    print(tokens.issue(user_id, args.email))
    return 0


if __name__ == "__main__":
    sys.exit(main())
