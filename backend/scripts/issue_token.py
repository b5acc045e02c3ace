from __future__ import annotations

import argparse
import os
import sys

sys.path.append(os.getcwd())

from privlearn.core.security import create_access_token, is_administrator


def main() -> None:
    parser = argparse.ArgumentParser(description="Mint a bearer token for an account (local development only)")
    parser.add_argument("account", help="Account identifier, e.g. a wallet address")
    parser.add_argument("--minutes", type=int, default=None, help="Token lifetime; defaults to JWT_ACCESS_TOKEN_MINUTES")
    args = parser.parse_args()

    token = create_access_token(account=args.account, minutes=args.minutes)
    print(token)
    if is_administrator(args.account):
        print("note: account is listed in ADMIN_ACCOUNTS", file=sys.stderr)


if __name__ == "__main__":
    main()
