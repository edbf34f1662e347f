#!/usr/bin/env python3
"""Print a signed access token for local development against the fieldops API."""

from __future__ import annotations

import argparse
from datetime import timedelta
import os
import sys

from fieldops.core.auth import UserRole
from fieldops.core.security import encode_access_token


def main() -> int:
    parser = argparse.ArgumentParser(description="Issue an HS256 access token for local development.")
    parser.add_argument("--user-id", required=True, help="users.id (UUID) placed in the userId claim")
    parser.add_argument("--company-id", required=True, help="companies.id (UUID) placed in the companyId claim")
    parser.add_argument(
        "--role",
        choices=[role.value for role in UserRole],
        default=UserRole.COMPANY_ADMIN.value,
        help="Role claim",
    )
    parser.add_argument("--email", help="Optional email claim")
    parser.add_argument(
        "--secret",
        default=os.getenv("FIELDOPS_JWT_SECRET"),
        help="Signing secret; defaults to FIELDOPS_JWT_SECRET",
    )
    parser.add_argument("--hours", type=float, default=12.0, help="Token lifetime in hours")
    args = parser.parse_args()

    if not args.secret:
        print("issue_dev_token: --secret or FIELDOPS_JWT_SECRET is required", file=sys.stderr)
        return 2

    print(
        encode_access_token(
            secret=args.secret,
            user_id=args.user_id,
            company_id=args.company_id,
            role=args.role,
            email=args.email,
            expires_in=timedelta(hours=args.hours),
        )
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
